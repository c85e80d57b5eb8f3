"""Access policy decisions for file serving."""

from enum import Enum

from fsgate.config.models import AccessPolicy
from fsgate.security.paths import current_flavor, is_file_readable


class Decision(str, Enum):
    """Outcome of an access check."""

    ALLOWED = "allowed"
    DENIED = "denied"
    FALLBACK = "fallback"  # Nothing on disk, let other handlers decide


def is_file_loading_allowed(policy: AccessPolicy, path: str) -> bool:
    """
    Decide whether ``path`` may be served under ``policy``.

    Pure and free of disk I/O. ``path`` must be a normalized absolute path.

    Args:
        policy: Active access policy
        path: Candidate file path

    Returns:
        True if the path may be served
    """
    if not policy.strict:
        return True

    if policy.deny_matches(path):
        return False

    if path in policy.trusted_paths:
        return True

    flavor = current_flavor()
    return any(flavor.is_in_target_path(root, path) for root in policy.allow)


def classify(policy: AccessPolicy, path: str) -> Decision:
    if is_file_loading_allowed(policy, path):
        return Decision.ALLOWED
    return Decision.DENIED


def check_loading_access(policy: AccessPolicy, path: str) -> Decision:
    """
    Classify ``path`` and, when not allowed, tell a real file from a miss.

    Readable files outside the policy are denied. Paths with nothing on disk
    fall back so the request can reach non-file routes.
    """
    if classify(policy, current_flavor().normalize_path(path)) is Decision.ALLOWED:
        return Decision.ALLOWED
    if is_file_readable(path):
        return Decision.DENIED
    return Decision.FALLBACK


def is_file_serving_allowed(policy: AccessPolicy, url: str) -> bool:
    """Check a served URL (plain or ``/@fs/``-prefixed) against the policy."""
    from fsgate.server.urls import fs_path_from_url

    if not policy.strict:
        return True
    return is_file_loading_allowed(policy, fs_path_from_url(url))
