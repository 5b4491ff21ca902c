"""Data models for git-worktree-keeper."""

from .worktree import Worktree, WorktreeInfo, WorktreeStatus
from .project import Project, Workspace, WorktreeStatistics
from .context import (
    Context,
    ContextResolution,
    ContextType,
    ResolutionMethod,
    ResolutionSuggestion,
    TargetType,
)

__all__ = [
    "Worktree",
    "WorktreeInfo",
    "WorktreeStatus",
    "Project",
    "Workspace",
    "WorktreeStatistics",
    "Context",
    "ContextResolution",
    "ContextType",
    "ResolutionMethod",
    "ResolutionSuggestion",
    "TargetType",
]
