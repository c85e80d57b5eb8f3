"""Core data models for fsgate."""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from fsgate.security.paths import normalize_path
from fsgate.security.patterns import compile_deny_patterns

# Files that must never be served, whatever the allow list says
DEFAULT_FS_DENY = [".env", ".env.*", "*.{crt,pem}", "**/.git/**"]

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Marks a regular-expression matcher in ``find=replacement`` alias strings
REGEX_ALIAS_PREFIX = "re:"


@dataclass(frozen=True)
class AliasRule:
    """Rewrites a request path before it is resolved against the served root."""

    find: str | re.Pattern[str]  # Literal prefix or compiled pattern
    replacement: str

    def matches(self, pathname: str) -> bool:
        if isinstance(self.find, str):
            return pathname.startswith(self.find)
        return self.find.search(pathname) is not None

    def apply(self, pathname: str) -> str:
        """Replace the first match only."""
        if isinstance(self.find, str):
            return pathname.replace(self.find, self.replacement, 1)
        return self.find.sub(self.replacement, pathname, count=1)

    @classmethod
    def parse(cls, value: str) -> "AliasRule":
        """Parse ``find=replacement``; a ``re:`` prefix marks a regex matcher."""
        find, sep, replacement = value.partition("=")
        if not sep or not find:
            raise ValueError(f"Invalid alias (expected find=replacement): {value}")
        if find.startswith(REGEX_ALIAS_PREFIX):
            return cls(find=re.compile(find[len(REGEX_ALIAS_PREFIX) :]), replacement=replacement)
        return cls(find=find, replacement=replacement)


@dataclass(frozen=True)
class AccessPolicy:
    """Path-based rules deciding which files may be served.

    Evaluation order is fixed: deny patterns veto, trusted paths pass, then
    allow-root containment, otherwise deny. With ``strict`` off everything
    is allowed.
    """

    strict: bool = True
    allow: tuple[str, ...] = ()  # Normalized absolute directories
    deny: tuple[str, ...] = ()  # Glob patterns
    trusted_paths: frozenset[str] = frozenset()  # Paths the server resolved itself
    _deny_regex: re.Pattern[str] | None = field(
        init=False, default=None, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "_deny_regex", compile_deny_patterns(self.deny))

    def deny_matches(self, path: str) -> bool:
        return self._deny_regex is not None and self._deny_regex.match(path) is not None

    @classmethod
    def create(
        cls,
        *,
        strict: bool = True,
        allow: Iterable[str] = (),
        deny: Iterable[str] = (),
        trusted_paths: Iterable[str] = (),
    ) -> "AccessPolicy":
        """Build a policy, normalizing allow roots and trusted paths."""
        return cls(
            strict=strict,
            allow=tuple(normalize_path(p) for p in allow),
            deny=tuple(deny),
            trusted_paths=frozenset(normalize_path(p) for p in trusted_paths),
        )


@dataclass
class ServerConfig:
    """Configuration for the development file server."""

    host: str = "127.0.0.1"  # Bind address
    port: int = 5173  # Port number
    root: Path = Path(".")  # Project root served by the root stage
    public_dir: Path | None = None  # Public assets served without policy checks
    strict: bool = True  # Enforce the access policy
    allow: list[str] = field(default_factory=list)  # Allow roots, root when empty
    deny: list[str] = field(default_factory=lambda: list(DEFAULT_FS_DENY))
    aliases: list[AliasRule] = field(default_factory=list)  # First match wins
    headers: dict[str, str] = field(default_factory=dict)  # Extra static response headers
    public_files_cache: bool = True  # Snapshot public files at startup
    log_level: str = "INFO"  # Logging level

    @property
    def served_root(self) -> str:
        """Project root as a normalized absolute path."""
        return normalize_path(os.path.abspath(self.root))

    @property
    def served_public_dir(self) -> str | None:
        if self.public_dir is None:
            return None
        return normalize_path(os.path.abspath(self.public_dir))

    def validate(self) -> None:
        """Validate configuration values."""
        if not (1024 <= self.port <= 65535):
            raise ValueError("Port must be 1024-65535")
        if not self.root.is_dir():
            raise ValueError(f"Root is not a directory: {self.root}")
        if self.public_dir is not None and not self.public_dir.is_dir():
            raise ValueError(f"Public directory does not exist: {self.public_dir}")
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")

    def resolve_allow(self) -> list[str]:
        """Allow roots as absolute paths, relative entries taken from root."""
        if not self.allow:
            return [self.served_root]
        return [
            normalize_path(os.path.join(self.served_root, entry)) for entry in self.allow
        ]

    def to_policy(self, trusted_paths: Iterable[str] = ()) -> AccessPolicy:
        return AccessPolicy.create(
            strict=self.strict,
            allow=self.resolve_allow(),
            deny=self.deny,
            trusted_paths=trusted_paths,
        )
