"""Context and resolution models"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ContextType(Enum):
    """Where the user currently is relative to the projects and worktrees roots."""
    UNKNOWN = "unknown"
    PROJECT = "project"
    WORKTREE = "worktree"
    OUTSIDE_GIT = "outside-git"


class TargetType(Enum):
    """Kind of directory a resolution points at."""
    PROJECT = "project"
    WORKTREE = "worktree"


class ResolutionMethod(Enum):
    """Which rule produced a resolution. Used for diagnostics and tests only."""
    CROSS_PROJECT = "cross-project"
    CURRENT_PROJECT = "current-project"  # project name or "main" from project context
    PROJECT_BRANCH = "project-branch"  # branch of the current project from project context
    WORKTREE_MAIN = "worktree-main"  # "main" from worktree context
    WORKTREE_PROJECT_NAME = "worktree-project-name"  # own project name from worktree context
    SIBLING_BRANCH = "sibling-branch"  # other branch of the same project from worktree context
    PROJECT_NAME = "project-name"  # bare name from outside any project


@dataclass(frozen=True)
class Context:
    """Classification of a directory. Recomputed on every invocation."""
    type: ContextType
    current_path: str
    project_name: Optional[str] = None
    branch_name: Optional[str] = None
    project_path: Optional[str] = None
    worktree_path: Optional[str] = None
    explanation: str = ""


@dataclass(frozen=True)
class ContextResolution:
    """Concrete navigation target computed from a context and a target string."""
    target_type: TargetType
    project_name: str
    target_path: str
    resolution_method: ResolutionMethod
    branch_name: Optional[str] = None
    explanation: str = ""


@dataclass(frozen=True)
class ResolutionSuggestion:
    """A completion candidate for a partially typed target."""
    text: str
    description: str
    target_type: TargetType
    project_name: Optional[str] = None
    branch_name: Optional[str] = None
