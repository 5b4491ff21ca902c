"""Display service for worktree, project and context information"""
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from git_worktree_keeper.constants import (
    DEFAULT_SORT,
    PROJECT_COLUMNS,
    SORT_OPTIONS,
    STALE_THRESHOLD_SECONDS,
    WORKTREE_COLUMNS,
)
from git_worktree_keeper.formatters import format_commit, format_status, format_updated
from git_worktree_keeper.models.context import Context, ContextResolution, ResolutionSuggestion
from git_worktree_keeper.models.project import Project
from git_worktree_keeper.models.worktree import Worktree
from git_worktree_keeper.logging_config import get_logger

console = Console()
logger = get_logger(__name__)


def sort_worktrees(worktrees: List[Worktree], sort_by: str = DEFAULT_SORT) -> List[Worktree]:
    """Order worktrees for display. Ties are broken by path."""
    if sort_by not in SORT_OPTIONS:
        raise ValueError(f"sort_by must be one of {SORT_OPTIONS}, got '{sort_by}'")

    by_path = sorted(worktrees, key=lambda wt: wt.path)
    if sort_by == "branch":
        return sorted(by_path, key=lambda wt: wt.branch)
    if sort_by == "status":
        return sorted(by_path, key=lambda wt: wt.status.value)
    if sort_by == "date":
        return sorted(by_path, key=lambda wt: wt.last_updated, reverse=True)
    return by_path


class DisplayService:
    def __init__(
        self,
        verbose: bool = False,
        debug: bool = False,
        output: Optional[Console] = None,
        stale_threshold_seconds: float = STALE_THRESHOLD_SECONDS,
    ):
        self.verbose = verbose
        self.debug_mode = debug
        self.console = output or console
        self.stale_threshold = timedelta(seconds=stale_threshold_seconds)

    def display_worktree_table(
        self,
        worktrees: List[Worktree],
        sort_by: str = DEFAULT_SORT,
        empty_message: str = "No worktrees found",
        now: Optional[datetime] = None,
    ) -> None:
        """Display worktrees in sort_by order, marking statuses past the staleness threshold."""
        if not worktrees:
            self.console.print(f"[dim]{escape(empty_message)}[/dim]")
            return

        now = now or datetime.now(timezone.utc)

        table = Table()
        for col in WORKTREE_COLUMNS:
            table.add_column(col.label, min_width=col.width or None)

        for worktree in sort_worktrees(worktrees, sort_by):
            table.add_row(
                escape(worktree.branch),
                format_status(worktree.status, stale=worktree.is_stale(self.stale_threshold, now=now)),
                format_commit(worktree.commit),
                format_updated(worktree, now=now),
                escape(worktree.path),
            )

        self.console.print(table)
        self.console.print(f"\n{len(worktrees)} worktree(s)")

    def display_project_table(self, projects: List[Project]) -> None:
        """Display projects sorted by name with worktree statistics."""
        if not projects:
            self.console.print("[dim]No projects found[/dim]")
            return

        table = Table()
        for col in PROJECT_COLUMNS:
            table.add_column(col.label, min_width=col.width or None)

        for project in sorted(projects, key=lambda p: p.name):
            stats = project.statistics()
            table.add_row(
                escape(project.name),
                str(stats.total_count),
                str(stats.clean_count),
                str(stats.dirty_count),
                escape(", ".join(sorted(stats.branches))),
                escape(project.git_repo_path),
            )

        self.console.print(table)

    def display_context(self, context: Context) -> None:
        self.console.print(f"[bold]{context.type.value}[/bold] {escape(context.explanation)}")
        fields = [
            ("Project", context.project_name),
            ("Branch", context.branch_name),
            ("Project path", context.project_path),
            ("Worktree path", context.worktree_path),
            ("Current path", context.current_path),
        ]
        for label, value in fields:
            if value:
                self.console.print(f"  {label}: {escape(value)}")

    def display_resolution(self, resolution: ContextResolution) -> None:
        """Print the target path alone so shell wrappers can cd to it."""
        self.console.print(resolution.target_path, markup=False, highlight=False, soft_wrap=True)
        # Details go to the log (stderr) to keep stdout usable by `cd "$(...)"`
        logger.info(
            f"{resolution.target_type.value} via {resolution.resolution_method.value}: "
            f"{resolution.explanation}"
        )

    def display_suggestions(self, suggestions: List[ResolutionSuggestion]) -> None:
        for suggestion in suggestions:
            self.console.print(suggestion.text, markup=False, highlight=False, soft_wrap=True)
