"""Formatting utilities for git-worktree-keeper.

- status: worktree status, commit and age formatting
- errors: error and warning rendering with hints
"""

from .status import format_status, format_commit, format_updated
from .errors import format_error

__all__ = [
    "format_status",
    "format_commit",
    "format_updated",
    "format_error",
]
