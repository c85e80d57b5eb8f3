from __future__ import annotations

from pathlib import Path

import pytest

from fsgate.config.models import DEFAULT_FS_DENY, AccessPolicy
from fsgate.security.paths import normalize_path
from fsgate.security.policy import (
    Decision,
    check_loading_access,
    classify,
    is_file_loading_allowed,
    is_file_serving_allowed,
)


@pytest.fixture
def policy() -> AccessPolicy:
    return AccessPolicy.create(strict=True, allow=["/proj"], deny=["**/.env"])


@pytest.mark.parametrize(
    "path",
    ["/proj/src/app.ts", "/etc/passwd", "/proj/.env", "/home/user/.ssh/id_rsa"],
)
def test_non_strict_policy_allows_everything(path: str) -> None:
    policy = AccessPolicy.create(strict=False, allow=["/proj"], deny=["**/.env"])

    assert classify(policy, path) is Decision.ALLOWED


def test_allow_root_descendant_is_allowed(policy: AccessPolicy) -> None:
    assert classify(policy, "/proj/src/app.ts") is Decision.ALLOWED


def test_allow_root_itself_is_allowed(policy: AccessPolicy) -> None:
    assert classify(policy, "/proj") is Decision.ALLOWED


def test_deny_overrides_allow_root(policy: AccessPolicy) -> None:
    assert classify(policy, "/proj/.env") is Decision.DENIED


def test_outside_allow_roots_is_denied(policy: AccessPolicy) -> None:
    assert classify(policy, "/etc/passwd") is Decision.DENIED


def test_trusted_path_is_allowed_outside_allow_roots() -> None:
    policy = AccessPolicy.create(allow=["/proj"], trusted_paths=["/cache/deps/chunk.js"])

    assert classify(policy, "/cache/deps/chunk.js") is Decision.ALLOWED
    assert classify(policy, "/cache/deps/other.js") is Decision.DENIED


def test_deny_overrides_trusted_path() -> None:
    policy = AccessPolicy.create(
        allow=["/proj"], deny=["*.pem"], trusted_paths=["/cache/server.pem"]
    )

    assert classify(policy, "/cache/server.pem") is Decision.DENIED


def test_trusted_paths_are_normalized_on_create() -> None:
    policy = AccessPolicy.create(allow=[], trusted_paths=["/cache/deps/../deps/chunk.js"])

    assert is_file_loading_allowed(policy, "/cache/deps/chunk.js")


def test_empty_allow_list_denies_everything() -> None:
    policy = AccessPolicy.create(strict=True)

    assert not is_file_loading_allowed(policy, "/proj/src/app.ts")


@pytest.mark.parametrize(
    "path",
    [
        "/proj/.env",
        "/proj/.env.local",
        "/proj/packages/web/.env.production",
        "/proj/certs/server.crt",
        "/proj/certs/SERVER.PEM",
        "/proj/.git/config",
        "/proj/packages/web/.git/HEAD",
    ],
)
def test_default_deny_patterns(path: str) -> None:
    policy = AccessPolicy.create(allow=["/proj"], deny=DEFAULT_FS_DENY)

    assert classify(policy, path) is Decision.DENIED


@pytest.mark.parametrize(
    "path",
    ["/proj/src/env.ts", "/proj/src/environment.ts", "/proj/docs/pem.md", "/proj/.gitignore"],
)
def test_default_deny_patterns_leave_lookalikes_alone(path: str) -> None:
    policy = AccessPolicy.create(allow=["/proj"], deny=DEFAULT_FS_DENY)

    assert classify(policy, path) is Decision.ALLOWED


def test_check_loading_access_allowed(tmp_path: Path) -> None:
    root = normalize_path(str(tmp_path))
    policy = AccessPolicy.create(allow=[root])

    assert check_loading_access(policy, f"{root}/missing.ts") is Decision.ALLOWED


def test_check_loading_access_denies_existing_file(tmp_path: Path) -> None:
    outside = tmp_path / "outside"
    outside.mkdir()
    secret = outside / "secret.txt"
    secret.write_text("x", encoding="utf-8")
    policy = AccessPolicy.create(allow=[normalize_path(str(tmp_path / "proj"))])

    assert check_loading_access(policy, normalize_path(str(secret))) is Decision.DENIED


def test_check_loading_access_falls_back_for_missing_file(tmp_path: Path) -> None:
    policy = AccessPolicy.create(allow=[normalize_path(str(tmp_path / "proj"))])
    missing = normalize_path(str(tmp_path / "outside" / "nonexistent.js"))

    assert check_loading_access(policy, missing) is Decision.FALLBACK


def test_check_loading_access_denies_existing_denylisted_file(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("TOKEN=1", encoding="utf-8")
    root = normalize_path(str(tmp_path))
    policy = AccessPolicy.create(allow=[root], deny=["**/.env"])

    assert check_loading_access(policy, f"{root}/.env") is Decision.DENIED


def test_is_file_serving_allowed_accepts_urls(policy: AccessPolicy) -> None:
    assert is_file_serving_allowed(policy, "/@fs/proj/src/app.ts?v=123")
    assert is_file_serving_allowed(policy, "/proj/src/app.ts#top")
    assert not is_file_serving_allowed(policy, "/@fs/etc/passwd")
    assert not is_file_serving_allowed(policy, "/@fs/proj/.env")


def test_is_file_serving_allowed_decodes_traversal(policy: AccessPolicy) -> None:
    assert not is_file_serving_allowed(policy, "/@fs/proj/%2e%2e/etc/passwd")


def test_is_file_serving_allowed_without_strict() -> None:
    policy = AccessPolicy.create(strict=False)

    assert is_file_serving_allowed(policy, "/@fs/etc/passwd")


@pytest.mark.parametrize(
    ("deny", "path"),
    [
        (["secret*"], "/proj/secrets-docs/readme.md"),
        (DEFAULT_FS_DENY, "/proj/.env.d/schema.ts"),
        (["/proj/private/*"], "/proj/private/sub/notes.md"),
    ],
)
def test_single_star_deny_patterns_stay_in_one_directory(deny: list[str], path: str) -> None:
    policy = AccessPolicy.create(allow=["/proj"], deny=deny)

    assert classify(policy, path) is Decision.ALLOWED


def test_default_deny_covers_nested_git_objects() -> None:
    policy = AccessPolicy.create(allow=["/proj"], deny=DEFAULT_FS_DENY)

    assert classify(policy, "/proj/.git/objects/ab/cd") is Decision.DENIED
