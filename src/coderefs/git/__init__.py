"""Git collaborators."""

from .branches import BranchRep, KnownBranch, calculate_stale_branches
from .client import GitClient, GitCommandError, parse_ls_remote_heads

__all__ = [
    "BranchRep",
    "GitClient",
    "GitCommandError",
    "KnownBranch",
    "calculate_stale_branches",
    "parse_ls_remote_heads",
]
