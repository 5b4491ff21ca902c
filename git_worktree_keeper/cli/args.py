"""Command-line argument parsing for git-worktree-keeper."""

import argparse
from typing import List, Optional

from git_worktree_keeper.__version__ import __version__
from git_worktree_keeper.constants import (
    DEFAULT_SORT,
    ENV_PROJECTS_DIR,
    ENV_WORKTREES_DIR,
    MAX_CONCURRENCY,
    SORT_OPTIONS,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-worktree-keeper",
        description="Navigate and inspect projects and their git worktrees",
        epilog=f"Layout: projects live in ${ENV_PROJECTS_DIR}/<project>, worktrees in "
        f"${ENV_WORKTREES_DIR}/<project>/<branch>.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument("--version", action="version", version=f"git-worktree-keeper {__version__}")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--projects-dir", metavar="DIR", help="Root directory of the main repositories")
    parser.add_argument("--worktrees-dir", metavar="DIR", help="Root directory of the worktrees")
    parser.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help=f"Number of parallel discovery workers (1-{MAX_CONCURRENCY}, default: 4)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    list_parser = subparsers.add_parser("list", help="List worktrees with their status")
    list_parser.add_argument(
        "-a", "--all", action="store_true", help="Show worktrees from all projects, not just the current one"
    )
    list_parser.add_argument(
        "--sort",
        dest="sort_by",
        choices=SORT_OPTIONS,
        help=f"Sort order (default: {DEFAULT_SORT}; date shows the most recently analyzed first)",
    )
    list_parser.add_argument(
        "--status",
        choices=["clean", "dirty", "unknown"],
        help="Only show worktrees with this status",
    )

    subparsers.add_parser("projects", help="List projects with worktree statistics")

    context_parser = subparsers.add_parser("context", help="Show the context of a directory")
    context_parser.add_argument("path", nargs="?", help="Directory to classify (default: current)")

    resolve_parser = subparsers.add_parser(
        "resolve", help="Print the directory a target (branch, project, main, project/branch) names"
    )
    resolve_parser.add_argument("target", help="Target identifier")
    resolve_parser.add_argument(
        "--from", dest="from_path", metavar="PATH", help="Resolve as if run from PATH"
    )

    complete_parser = subparsers.add_parser("complete", help="Print completion candidates")
    complete_parser.add_argument("partial", nargs="?", default="", help="Partially typed target")
    complete_parser.add_argument(
        "--existing-only",
        action="store_true",
        help="Only offer existing worktrees",
    )
    complete_parser.add_argument(
        "--from", dest="from_path", metavar="PATH", help="Complete as if run from PATH"
    )

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
