from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from fsgate.cli.main import _parse_headers, app

runner = CliRunner()


def test_check_allowed_path(workspace: Path) -> None:
    project = workspace / "proj"

    result = runner.invoke(app, ["check", str(project), str(project / "src" / "app.ts")])

    assert result.exit_code == 0
    assert "allowed" in result.output


def test_check_denied_path_exits_non_zero(workspace: Path) -> None:
    project = workspace / "proj"

    result = runner.invoke(
        app, ["check", str(project), str(workspace / "outside" / "secret.txt")]
    )

    assert result.exit_code == 1
    assert "denied" in result.output


def test_check_missing_path_falls_back(workspace: Path) -> None:
    project = workspace / "proj"

    result = runner.invoke(
        app, ["check", str(project), str(workspace / "outside" / "nonexistent.js")]
    )

    assert result.exit_code == 0
    assert "fallback" in result.output


def test_check_with_extra_allow_root(workspace: Path) -> None:
    project = workspace / "proj"

    result = runner.invoke(
        app,
        [
            "check",
            str(project),
            str(workspace / "outside" / "secret.txt"),
            "--allow",
            str(workspace / "outside"),
        ],
    )

    assert result.exit_code == 0
    assert "allowed" in result.output


def test_check_without_strict(workspace: Path) -> None:
    project = workspace / "proj"

    result = runner.invoke(
        app, ["check", str(project), str(project / ".env"), "--no-strict"]
    )

    assert result.exit_code == 0
    assert "allowed" in result.output


def test_serve_rejects_bad_alias(workspace: Path) -> None:
    result = runner.invoke(app, ["serve", str(workspace / "proj"), "--alias", "missing-separator"])

    assert result.exit_code == 2
    assert "Configuration error" in result.output


def test_parse_headers() -> None:
    assert _parse_headers(["X-Frame-Options: DENY", "Cache-Control:no-store"]) == {
        "X-Frame-Options": "DENY",
        "Cache-Control": "no-store",
    }
