"""Shared constants for git-worktree-keeper."""

from dataclasses import dataclass
from typing import List


# Discovery worker pool
DEFAULT_CONCURRENCY = 4
MAX_CONCURRENCY = 16

# Cached worktree analysis results expire after this many seconds
CACHE_EXPIRY_SECONDS = 300

# Worktree status is considered stale after this many seconds
STALE_THRESHOLD_SECONDS = 300

# Discovery fails once this fraction of candidate paths could not be analyzed
FAILURE_THRESHOLD = 0.5

# Identifier that always means "the project root"
MAIN_IDENTIFIER = "main"

# Separator for cross-project targets (project/branch)
CROSS_PROJECT_SEPARATOR = "/"

DEFAULT_PROJECTS_DIR = "~/Projects"
DEFAULT_WORKTREES_DIR = "~/Worktrees"

ENV_PROJECTS_DIR = "GIT_WORKTREE_KEEPER_PROJECTS_DIR"
ENV_WORKTREES_DIR = "GIT_WORKTREE_KEEPER_WORKTREES_DIR"
ENV_WORKERS = "GIT_WORKTREE_KEEPER_WORKERS"

# Worktree table orders; "date" shows the most recently analyzed first
SORT_OPTIONS = ("path", "branch", "status", "date")
DEFAULT_SORT = "path"


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    key: str
    label: str
    width: int = 0  # 0 means auto-width


WORKTREE_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("branch", "Branch", 30),
    ColumnDefinition("status", "Status", 8),
    ColumnDefinition("commit", "Commit", 9),
    ColumnDefinition("updated", "Updated", 10),
    ColumnDefinition("path", "Path"),
]

PROJECT_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("project", "Project", 24),
    ColumnDefinition("worktrees", "Worktrees", 9),
    ColumnDefinition("clean", "Clean", 6),
    ColumnDefinition("dirty", "Dirty", 6),
    ColumnDefinition("branches", "Branches"),
    ColumnDefinition("path", "Path"),
]


# Status display names and colors (Rich color names)
STATUS_DISPLAY = {
    "unknown": "unknown",
    "clean": "clean",
    "dirty": "dirty",
}

STATUS_COLORS = {
    "unknown": "dim",
    "clean": "green",
    "dirty": "yellow",
}
