"""fsgate: file-serving access control for development servers."""

__version__ = "0.1.0"
__author__ = "fsgate contributors"
__license__ = "MIT"

from fsgate.config.models import AccessPolicy, AliasRule, ServerConfig
from fsgate.security.policy import (
    Decision,
    check_loading_access,
    classify,
    is_file_loading_allowed,
    is_file_serving_allowed,
)

__all__ = [
    "AccessPolicy",
    "AliasRule",
    "ServerConfig",
    "Decision",
    "check_loading_access",
    "classify",
    "is_file_loading_allowed",
    "is_file_serving_allowed",
    "__version__",
]
