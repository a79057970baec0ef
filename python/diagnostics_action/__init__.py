"""Branch-to-branch tsc diagnostics comparison for pull requests."""

from .config import ActionConfig, GitHubContext, config_from_env, github_context_from_env
from .errors import (
    CommandFailed,
    ContractViolation,
    DiagnosticsActionError,
    MissingCredential,
    UnsupportedEnvironment,
)

__all__ = [
    "ActionConfig",
    "CommandFailed",
    "ContractViolation",
    "DiagnosticsActionError",
    "GitHubContext",
    "MissingCredential",
    "UnsupportedEnvironment",
    "config_from_env",
    "github_context_from_env",
]
