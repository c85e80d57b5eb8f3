"""Path containment and access-control primitives.

The decision engine lives in :mod:`fsgate.security.policy`.
"""

from .errors import AccessDeniedError, DenialKind, SecurityError
from .paths import (
    PosixPathFlavor,
    WindowsPathFlavor,
    current_flavor,
    is_file_readable,
    is_in_target_path,
    is_parent_directory,
    is_same_path,
    normalize_path,
)

__all__ = [
    "AccessDeniedError",
    "DenialKind",
    "SecurityError",
    "PosixPathFlavor",
    "WindowsPathFlavor",
    "current_flavor",
    "is_file_readable",
    "is_in_target_path",
    "is_parent_directory",
    "is_same_path",
    "normalize_path",
]
