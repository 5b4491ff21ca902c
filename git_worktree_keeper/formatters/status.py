"""Status and commit formatting utilities."""

from datetime import datetime, timezone
from typing import Optional

from git_worktree_keeper.constants import STATUS_COLORS, STATUS_DISPLAY
from git_worktree_keeper.models.worktree import Worktree, WorktreeStatus


def format_status(status: WorktreeStatus, stale: bool = False) -> str:
    """
    Format worktree status as Rich markup.

    Args:
        status: Worktree status enum value
        stale: Whether the status is older than the staleness threshold

    Returns:
        Display text for status
    """
    text = STATUS_DISPLAY.get(status.value, status.value)
    color = STATUS_COLORS.get(status.value)
    if color:
        text = f"[{color}]{text}[/{color}]"
    if stale:
        text += " [dim](stale)[/dim]"
    return text


def format_commit(commit: str, length: int = 8) -> str:
    return commit[:length] if commit else "-"


def format_updated(worktree: Worktree, now: Optional[datetime] = None) -> str:
    """
    Format how long ago a worktree's status was recorded.

    Args:
        worktree: Worktree to describe
        now: Reference time (defaults to the current UTC time)

    Returns:
        Compact age such as "12s", "4m" or "3h"
    """
    now = now or datetime.now(timezone.utc)
    seconds = max(0, int((now - worktree.last_updated).total_seconds()))
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    return f"{seconds // 86400}d"
