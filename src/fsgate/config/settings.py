"""Application settings and configuration."""

import os
from pathlib import Path

from fsgate.config.models import DEFAULT_FS_DENY, VALID_LOG_LEVELS, ServerConfig

# Default settings
DEFAULT_HOST = os.getenv("FSGATE_HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("FSGATE_PORT", "5173"))
DEFAULT_LOG_LEVEL = os.getenv("FSGATE_LOG_LEVEL", "INFO")
DEFAULT_STRICT = os.getenv("FSGATE_STRICT", "true").lower() not in ("0", "false", "no")

# Escape hatch: the rest of the URL is an absolute filesystem path
FS_PREFIX = "/@fs/"

# Virtual endpoints served by other infrastructure, never by the static stages
INTERNAL_PREFIXES = (FS_PREFIX, "/@id/", "/@client", "/@env")

# Operator diagnostics route
ACCESS_CHECK_PATH = "/@id/__fsgate/access"

# Documentation reference shown on the 403 page
FS_ALLOW_DOCS_HINT = "See `fsgate serve --help` (--allow, --deny, --no-strict) for configuration details."


def get_default_server_config(root: Path | None = None) -> ServerConfig:
    """Get default server configuration."""
    return ServerConfig(
        host=DEFAULT_HOST,
        port=DEFAULT_PORT,
        root=root or Path("."),
        strict=DEFAULT_STRICT,
        deny=list(DEFAULT_FS_DENY),
        log_level=DEFAULT_LOG_LEVEL,
    )


__all__ = [
    "DEFAULT_FS_DENY",
    "VALID_LOG_LEVELS",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_STRICT",
    "FS_PREFIX",
    "INTERNAL_PREFIXES",
    "ACCESS_CHECK_PATH",
    "FS_ALLOW_DOCS_HINT",
    "get_default_server_config",
]
