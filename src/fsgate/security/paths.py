"""Path containment predicates.

Every path handled here is expected to be absolute and already normalized
with :func:`normalize_path` (forward slashes on every platform). The
predicates do no disk I/O and no further normalization; passing raw input
gives undefined results.
"""

import os
import posixpath
import re
import sys
from functools import lru_cache
from pathlib import Path

DRIVE_LETTER_PATTERN = re.compile(r"^[a-zA-Z]:")


def with_trailing_slash(path: str) -> str:
    """Append a trailing slash unless one is already present."""
    if path.endswith("/"):
        return path
    return f"{path}/"


class PosixPathFlavor:
    """Path semantics for POSIX hosts."""

    windows = False

    def __init__(self, case_insensitive: bool = False) -> None:
        self.case_insensitive = case_insensitive

    def __repr__(self) -> str:
        return f"{type(self).__name__}(case_insensitive={self.case_insensitive})"

    def normalize_path(self, path: str) -> str:
        return posixpath.normpath(path)

    def strip_drive(self, path: str) -> str:
        return path

    def paths_equal(self, target: str, candidate: str) -> bool:
        if self.case_insensitive:
            return target.lower() == candidate.lower()
        return target == candidate

    def is_parent_directory(self, target: str, candidate: str) -> bool:
        """Return True when ``candidate`` lies strictly below ``target``."""
        prefix = with_trailing_slash(target)
        if self.paths_equal(target, candidate):
            return False
        if candidate.startswith(prefix):
            return True
        return self.case_insensitive and candidate.lower().startswith(prefix.lower())

    def is_in_target_path(self, target: str, candidate: str) -> bool:
        return self.paths_equal(target, candidate) or self.is_parent_directory(target, candidate)


class WindowsPathFlavor(PosixPathFlavor):
    """Path semantics for Windows hosts: backslashes and drive letters."""

    windows = True

    def __init__(self, case_insensitive: bool = True) -> None:
        super().__init__(case_insensitive=case_insensitive)

    def normalize_path(self, path: str) -> str:
        return posixpath.normpath(path.replace("\\", "/"))

    def strip_drive(self, path: str) -> str:
        """Turn ``/C:/Users/x`` or ``C:/Users/x`` into ``/Users/x``."""
        stripped = path.lstrip("/")
        if DRIVE_LETTER_PATTERN.match(stripped):
            return stripped[2:] or "/"
        return path


def _detect_case_insensitive_fs() -> bool:
    # Probe this module's own file under a different casing.
    here = Path(__file__)
    probe = here.with_name(here.name.swapcase())
    return os.path.exists(probe)


@lru_cache(maxsize=1)
def current_flavor() -> PosixPathFlavor:
    """Return the path flavor for the running platform, detected once."""
    case_insensitive = _detect_case_insensitive_fs()
    if sys.platform == "win32":
        return WindowsPathFlavor(case_insensitive=case_insensitive)
    return PosixPathFlavor(case_insensitive=case_insensitive)


def normalize_path(path: str) -> str:
    return current_flavor().normalize_path(path)


def is_same_path(target: str, candidate: str) -> bool:
    return current_flavor().paths_equal(target, candidate)


def is_parent_directory(target: str, candidate: str) -> bool:
    return current_flavor().is_parent_directory(target, candidate)


def is_in_target_path(target: str, candidate: str) -> bool:
    """Return True when ``candidate`` is ``target`` itself or lies below it."""
    return current_flavor().is_in_target_path(target, candidate)


def is_file_readable(path: str) -> bool:
    """Check that ``path`` exists on disk and the process may read it."""
    try:
        os.stat(path)
    except (OSError, ValueError):
        return False
    return os.access(path, os.R_OK)
