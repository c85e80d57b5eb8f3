"""Known public files snapshot.

The public stage asks this snapshot before touching the disk so requests
for files that do not exist skip the static file server entirely. The set
is rebuilt only when the server (re)starts and is published by swapping a
reference, never mutated in place.
"""

import logging
import os
from pathlib import Path

from fsgate.security.paths import normalize_path

logger = logging.getLogger(__name__)


def collect_public_files(public_dir: Path) -> frozenset[str]:
    """Return ``/``-rooted URL paths for every file under ``public_dir``."""
    if not public_dir.is_dir():
        return frozenset()

    files = set()
    for dirpath, _dirnames, filenames in os.walk(public_dir):
        for name in filenames:
            relative = Path(dirpath, name).relative_to(public_dir).as_posix()
            files.add(normalize_path(f"/{relative}"))
    return frozenset(files)


class PublicFilesSnapshot:
    """Owns the current known-public-files set."""

    def __init__(self, files: frozenset[str] | None = None) -> None:
        self._files = files

    @property
    def files(self) -> frozenset[str] | None:
        return self._files

    def publish(self, files: frozenset[str] | None) -> None:
        """Replace the snapshot wholesale."""
        self._files = files

    def refresh(self, public_dir: Path) -> frozenset[str]:
        files = collect_public_files(public_dir)
        self.publish(files)
        logger.debug(f"Indexed {len(files)} public files under {public_dir}")
        return files

    def contains(self, path: str) -> bool:
        """Membership test; without a snapshot every path may exist."""
        files = self._files
        if files is None:
            return True
        return path in files
