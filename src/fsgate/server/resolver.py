"""Request URL to filesystem path resolution."""

import logging
import posixpath
from dataclasses import dataclass
from typing import Sequence

from fsgate.config.models import AliasRule
from fsgate.config.settings import FS_PREFIX
from fsgate.security.paths import PosixPathFlavor, current_flavor, with_trailing_slash
from fsgate.server.urls import (
    clean_url,
    decode_uri,
    encode_uri,
    is_internal_request,
    remove_leading_slash,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedRequest:
    """Result of resolving a request against a served root.

    ``file_path`` is the path the collaborator will look up once the request
    carries ``rewritten_url``. It is used for logging only; the policy check
    runs on the path the collaborator itself builds.
    """

    file_path: str  # Absolute candidate path, trailing slash kept for directories
    rewritten_url: str | None = None  # Set when an alias rewrote the request


def _split_url(url: str) -> tuple[str, str]:
    """Split ``url`` into its path and the untouched ``?query#fragment`` suffix."""
    path = clean_url(url)
    return path, url[len(path) :]


def should_skip_static(url: str) -> bool:
    """Requests the root stage leaves to later handlers."""
    cleaned = clean_url(url)
    return (
        cleaned.endswith("/")
        or posixpath.splitext(cleaned)[1] == ".html"
        or is_internal_request(url)
        # would be read as a scheme-relative URL
        or url.startswith("//")
    )


def apply_aliases(pathname: str, root: str, aliases: Sequence[AliasRule]) -> str | None:
    """
    Rewrite ``pathname`` with the first matching alias.

    When the rewrite lands inside ``root`` the root prefix is dropped so the
    result stays root-relative.

    Returns:
        The rewritten path, or None when no alias matched
    """
    for rule in aliases:
        if rule.matches(pathname):
            redirected = rule.apply(pathname)
            break
    else:
        return None

    if redirected.startswith(with_trailing_slash(root)):
        redirected = redirected[len(root) :]
    return redirected


def resolve_request_path(
    url: str, root: str, aliases: Sequence[AliasRule] = ()
) -> ResolvedRequest | None:
    """
    Resolve a raw request URL against the served root.

    Args:
        url: Request URL as received (still percent-encoded)
        root: Normalized absolute served root
        aliases: Alias rules, first match wins

    Returns:
        The resolved request, or None when the URL is not a static-file request
    """
    if should_skip_static(url):
        return None

    raw_path, suffix = _split_url(url)
    pathname = decode_uri(raw_path)

    redirected = apply_aliases(pathname, root, aliases)
    resolved_pathname = redirected or pathname

    file_path = posixpath.normpath(
        posixpath.join(root, remove_leading_slash(resolved_pathname))
    )
    if resolved_pathname.endswith("/") and not file_path.endswith("/"):
        file_path = with_trailing_slash(file_path)

    rewritten_url = None
    if redirected:
        rewritten_url = f"{encode_uri(redirected)}{suffix}"
        logger.debug(f"Alias rewrote {pathname} -> {redirected}")

    return ResolvedRequest(file_path=file_path, rewritten_url=rewritten_url)


def resolve_fs_request(url: str, flavor: PosixPathFlavor | None = None) -> str | None:
    """
    Unwrap an escape-hatch URL into a filesystem-root-relative request URL.

    ``/@fs/home/user/pkg/index.js?v=1`` becomes ``/home/user/pkg/index.js?v=1``.
    On Windows a drive prefix is dropped, so ``/@fs/C:/src/x.js`` maps to
    ``/src/x.js``.

    Returns:
        The rewritten URL, or None when ``url`` has no escape-hatch prefix
    """
    if not url.startswith(FS_PREFIX):
        return None

    flavor = flavor or current_flavor()
    raw_path, suffix = _split_url(url)
    pathname = decode_uri(raw_path)
    # keep the slash that ends the prefix so the result stays absolute
    new_pathname = flavor.strip_drive(pathname[len(FS_PREFIX) - 1 :])
    return f"{encode_uri(new_pathname)}{suffix}"
