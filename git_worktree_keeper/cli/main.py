"""Command-line interface for git-worktree-keeper"""

import argparse
import os
import sys
from typing import List, Optional, Tuple

from rich.console import Console

from git_worktree_keeper.cli.args import parse_args
from git_worktree_keeper.config import Config
from git_worktree_keeper.constants import CROSS_PROJECT_SEPARATOR
from git_worktree_keeper.exceptions import DiscoveryError, GitWorktreeKeeperError
from git_worktree_keeper.formatters import format_error
from git_worktree_keeper.models.context import Context, ContextType
from git_worktree_keeper.models.worktree import Worktree, WorktreeStatus
from git_worktree_keeper.services.context_detector import ContextDetector, relative_parts
from git_worktree_keeper.services.context_resolver import ContextResolver
from git_worktree_keeper.services.discovery_service import DiscoveryService
from git_worktree_keeper.services.display_service import DisplayService
from git_worktree_keeper.logging_config import get_logger, setup_logging
from git_worktree_keeper.utils.threading import get_threading_info

console = Console()
error_console = Console(stderr=True)
logger = get_logger(__name__)


def _in_project(worktree: Worktree, context: Context, config: Config) -> bool:
    """Whether worktree is the project checkout or sits under <worktrees>/<project>."""
    if worktree.path == context.project_path:
        return True
    return relative_parts(os.path.join(config.worktrees_dir, context.project_name), worktree.path) is not None


def cmd_list(args: argparse.Namespace, config: Config, display: DisplayService) -> int:
    discovery = DiscoveryService.from_config(config)
    worktrees = discovery.discover_worktrees(config.projects_dir, show_progress=sys.stdout.isatty())

    empty_message = "No worktrees found"
    if not args.all:
        context = ContextDetector.from_config(config).detect(os.getcwd())
        # Inside a project or worktree the listing is scoped to that project
        if context.type in (ContextType.PROJECT, ContextType.WORKTREE):
            worktrees = [wt for wt in worktrees if _in_project(wt, context, config)]
            empty_message = f"No worktrees found in project '{context.project_name}'"

    if args.status:
        wanted = WorktreeStatus(args.status)
        worktrees = [wt for wt in worktrees if wt.status == wanted]
    display.display_worktree_table(worktrees, sort_by=config.sort_by, empty_message=empty_message)
    return 0


def cmd_projects(args: argparse.Namespace, config: Config, display: DisplayService) -> int:
    discovery = DiscoveryService.from_config(config)
    exit_code = 0
    # Analyze first so projects pick up fresh statuses from the cache
    try:
        discovery.discover_worktrees(config.projects_dir)
    except DiscoveryError as e:
        error_console.print(format_error(e))
        exit_code = 1
    display.display_project_table(discovery.discover_projects(config.projects_dir))
    return exit_code


def cmd_context(args: argparse.Namespace, config: Config, display: DisplayService) -> int:
    detector = ContextDetector.from_config(config)
    display.display_context(detector.detect(args.path or os.getcwd()))
    return 0


def cmd_resolve(args: argparse.Namespace, config: Config, display: DisplayService) -> int:
    detector = ContextDetector.from_config(config)
    resolver = ContextResolver.from_config(config)
    context = detector.detect(args.from_path or os.getcwd())
    display.display_resolution(resolver.resolve(args.target, context))
    return 0


def _completion_inventory(
    config: Config, project_name: Optional[str]
) -> Tuple[List[str], List[str]]:
    """Branch names of project_name and all project names, empty when discovery fails."""
    discovery = DiscoveryService.from_config(config)
    try:
        projects = discovery.discover_projects(config.projects_dir)
    except GitWorktreeKeeperError as e:
        logger.debug(f"Completion without inventory: {e}")
        return [], []

    branches: List[str] = []
    for project in projects:
        if project.name == project_name:
            branches = project.list_branches()
    return branches, [project.name for project in projects]


def cmd_complete(args: argparse.Namespace, config: Config, display: DisplayService) -> int:
    detector = ContextDetector.from_config(config)
    resolver = ContextResolver.from_config(config)
    context = detector.detect(args.from_path or os.getcwd())

    if CROSS_PROJECT_SEPARATOR in args.partial:
        project_name = args.partial.split(CROSS_PROJECT_SEPARATOR, 1)[0]
    elif context.type in (ContextType.PROJECT, ContextType.WORKTREE):
        project_name = context.project_name
    else:
        project_name = None

    branches, projects = _completion_inventory(config, project_name)
    suggestions = resolver.suggest(
        context,
        args.partial,
        branches=branches,
        projects=projects,
        existing_only=args.existing_only,
    )
    display.display_suggestions(suggestions)
    return 0


COMMANDS = {
    "list": cmd_list,
    "projects": cmd_projects,
    "context": cmd_context,
    "resolve": cmd_resolve,
    "complete": cmd_complete,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    parsed_args = None
    try:
        parsed_args = parse_args(argv)

        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

        config = Config.from_env(
            projects_dir=parsed_args.projects_dir,
            worktrees_dir=parsed_args.worktrees_dir,
            workers=parsed_args.workers,
            sort_by=getattr(parsed_args, "sort_by", None),
            verbose=parsed_args.verbose,
            debug=parsed_args.debug,
        )

        if parsed_args.debug:
            threading_info = get_threading_info(config.workers)
            error_console.print("[yellow]Threading Information:[/yellow]")
            error_console.print(f"  Python version: {threading_info['python_version']}")
            error_console.print(f"  Threading mode: {threading_info['mode']}")
            error_console.print(f"  CPU count: {threading_info['cpu_count']}")
            error_console.print(f"  Discovery workers: {threading_info['workers']}")

            error_console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                error_console.print(f"  {key}: {value}")

        display = DisplayService(
            verbose=config.verbose,
            debug=config.debug,
            output=console,
            stale_threshold_seconds=config.stale_threshold_seconds,
        )
        return COMMANDS[parsed_args.command](parsed_args, config, display)
    except KeyboardInterrupt:
        error_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except GitWorktreeKeeperError as e:
        error_console.print(format_error(e))
        return 1
    except Exception as e:
        error_console.print(f"[red]Error: {e}[/red]")
        if parsed_args is not None and parsed_args.debug:
            error_console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
