"""Git-related services for git-worktree-keeper."""

from .client import GitClient, GitPythonClient
from .worktrees import parse_worktree_porcelain

__all__ = [
    "GitClient",
    "GitPythonClient",
    "parse_worktree_porcelain",
]
