"""URL helpers shared by the serving stages."""

import re
from urllib.parse import quote, unquote

from starlette.types import Scope

from fsgate.config.settings import FS_PREFIX, INTERNAL_PREFIXES
from fsgate.security.paths import DRIVE_LETTER_PATTERN, normalize_path

POSTFIX_PATTERN = re.compile(r"[?#].*$", re.DOTALL)
IMPORT_QUERY_PATTERN = re.compile(r"[?&]import=?(?:&|$)")
URL_QUERY_PATTERN = re.compile(r"[?&]url(?:&|$)")

# Characters encodeURI leaves alone inside a path component
URI_PATH_SAFE = "/;,:@&=+$-_.!~*'()"


def clean_url(url: str) -> str:
    """Strip the query string and fragment."""
    return POSTFIX_PATTERN.sub("", url)


def decode_uri(value: str) -> str:
    """Percent-decode ``value``, returning it untouched when decoding fails."""
    if "%" not in value:
        return value
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        return value


def encode_uri(value: str) -> str:
    return quote(value, safe=URI_PATH_SAFE)


def remove_leading_slash(path: str) -> str:
    return path.lstrip("/")


def is_import_request(url: str) -> bool:
    return IMPORT_QUERY_PATTERN.search(url) is not None


def is_url_request(url: str) -> bool:
    """Return True for ``?url`` references that other stages must transform."""
    return URL_QUERY_PATTERN.search(url) is not None


def is_internal_request(url: str) -> bool:
    return url.startswith(INTERNAL_PREFIXES)


def fs_path_from_url(url: str) -> str:
    """Turn a served URL (optionally ``/@fs/``-prefixed) into a filesystem path."""
    path = decode_uri(clean_url(url))
    if path.startswith(FS_PREFIX):
        path = path[len(FS_PREFIX) :]
    fs_path = normalize_path(path)
    if fs_path.startswith("/") or DRIVE_LETTER_PATTERN.match(fs_path):
        return fs_path
    return f"/{fs_path}"


def raw_request_url(scope: Scope) -> str:
    """Rebuild the still-encoded request URL (path and query) from an ASGI scope."""
    raw_path = scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else encode_uri(scope["path"])
    query = scope.get("query_string", b"").decode("latin-1")
    if query:
        return f"{path}?{query}"
    return path


def replace_request_url(scope: Scope, url: str) -> None:
    """Point the request at ``url`` so downstream handlers see the rewrite."""
    without_fragment = url.split("#", 1)[0]
    path, _, query = without_fragment.partition("?")
    scope["raw_path"] = path.encode("latin-1")
    scope["path"] = decode_uri(path)
    scope["query_string"] = query.encode("latin-1")
