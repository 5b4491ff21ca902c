"""Error formatting for terminal output."""

from rich.markup import escape

from git_worktree_keeper.exceptions import DiscoveryError, GitWorktreeKeeperError


def format_error(error: Exception) -> str:
    """
    Format an error as Rich markup with any suggestions as hints.

    Discovery errors caused by failed worktrees are shown as warnings naming the
    failure count; everything else is shown as an error.

    Args:
        error: Exception to render

    Returns:
        Multi-line Rich markup string

    Example:
        "[red]Error: Invalid cross-project target 'a/b/c': expected project/branch[/red]\\n"
        "[dim]Hint: Use the form project/branch, e.g. 'myproject/feature-x'[/dim]"
    """
    if isinstance(error, DiscoveryError) and error.total_count:
        lines = [
            f"[yellow]Warning: {error.failed_count} of {error.total_count} worktrees "
            f"could not be analyzed[/yellow]"
        ]
        if error.cause is not None:
            lines.append(f"[dim]First failure: {escape(str(error.cause))}[/dim]")
    else:
        lines = [f"[red]Error: {escape(str(error))}[/red]"]

    if isinstance(error, GitWorktreeKeeperError):
        lines.extend(f"[dim]Hint: {escape(hint)}[/dim]" for hint in error.suggestions)

    return "\n".join(lines)
