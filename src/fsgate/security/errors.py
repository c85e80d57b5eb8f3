"""Security exceptions."""

from enum import Enum


class SecurityError(Exception):
    """Raised when a security validation fails."""

    pass


class DenialKind(str, Enum):
    """Reason tag carried by :class:`AccessDeniedError`."""

    POLICY_DENIED = "policy_denied"


class AccessDeniedError(SecurityError):
    """Raised from inside the static file server when the policy forbids a path.

    The serving stages catch this exact type and answer with a 403; any other
    exception raised by the file server is propagated unchanged.
    """

    def __init__(self, path: str, kind: DenialKind = DenialKind.POLICY_DENIED) -> None:
        super().__init__(f"Access denied: {path}")
        self.path = path
        self.kind = kind
