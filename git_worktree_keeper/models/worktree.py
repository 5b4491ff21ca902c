"""Worktree data models."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from git_worktree_keeper.constants import STALE_THRESHOLD_SECONDS
from git_worktree_keeper.exceptions import InvalidWorktreeError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WorktreeStatus(Enum):
    """Working tree status of a worktree."""
    UNKNOWN = "unknown"
    CLEAN = "clean"
    DIRTY = "dirty"


@dataclass
class WorktreeInfo:
    """Information about a git worktree as reported by git."""

    path: str
    branch_name: str
    commit_sha: str
    is_main: bool = False  # Is this the main working tree?
    is_orphaned: bool = False  # Directory missing?
    clean: Optional[bool] = None  # None = status not checked
    commit_time: Optional[datetime] = None

    def __str__(self) -> str:
        """String representation of worktree."""
        status = "orphaned" if self.is_orphaned else "active"
        main_marker = " (main)" if self.is_main else ""
        branch = self.branch_name or "(detached)"
        return f"{branch} @ {self.path}{main_marker} [{status}]"


@dataclass
class Worktree:
    """A worktree tracked by the workspace."""

    path: str
    branch: str
    commit: str = ""
    status: WorktreeStatus = WorktreeStatus.UNKNOWN
    last_updated: datetime = field(default_factory=_utcnow)

    def __post_init__(self):
        if not self.path:
            raise InvalidWorktreeError("path")
        if not self.branch:
            raise InvalidWorktreeError("branch")

    def update_status(self, status: WorktreeStatus, commit: Optional[str] = None) -> None:
        """Record a fresh status (and optionally commit) for this worktree."""
        self.status = status
        if commit is not None:
            self.commit = commit
        self.last_updated = _utcnow()

    def is_stale(self, threshold: Optional[timedelta] = None, now: Optional[datetime] = None) -> bool:
        """Check whether the recorded status is older than the threshold.

        Args:
            threshold: Maximum status age (defaults to STALE_THRESHOLD_SECONDS)
            now: Reference time (defaults to the current UTC time)

        Returns:
            True if the status should be refreshed
        """
        if threshold is None:
            threshold = timedelta(seconds=STALE_THRESHOLD_SECONDS)
        now = now or _utcnow()
        return now - self.last_updated > threshold

    @property
    def short_commit(self) -> str:
        return self.commit[:8]

    def __str__(self) -> str:
        return f"{self.branch} @ {self.path} [{self.status.value}]"
