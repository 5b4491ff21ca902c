"""Parsing of `git worktree list --porcelain` output."""

import os
from typing import Any, Dict, List

from git_worktree_keeper.models.worktree import WorktreeInfo
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)

BRANCH_REF_PREFIX = "refs/heads/"


def _build_worktree_info(entry: Dict[str, Any]) -> WorktreeInfo:
    path = entry.get("path", "")
    return WorktreeInfo(
        path=path,
        branch_name=entry.get("branch", ""),
        commit_sha=entry.get("HEAD", ""),
        is_main=entry.get("is_main", False),
        is_orphaned=not os.path.exists(path) if path else True,
    )


def parse_worktree_porcelain(output: str) -> List[WorktreeInfo]:
    """Parse porcelain worktree listing into WorktreeInfo objects.

    Format:
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name
        (blank line between worktrees)

    The first entry is always the main working tree. Bare repositories report
    a `bare` line instead of HEAD/branch and are skipped.

    Args:
        output: Raw stdout of `git worktree list --porcelain`

    Returns:
        List of WorktreeInfo in git's order
    """
    worktree_list: List[WorktreeInfo] = []
    current: Dict[str, Any] = {}
    seen_first = False

    def flush():
        nonlocal current
        if current.get("path") and not current.get("bare"):
            worktree_list.append(_build_worktree_info(current))
        current = {}

    for line in output.split("\n"):
        line = line.strip()

        if not line:
            # Empty line marks end of worktree entry
            flush()
            continue

        if line.startswith("worktree "):
            current["path"] = line.split(" ", 1)[1]
            current["is_main"] = not seen_first
            seen_first = True
        elif line.startswith("HEAD "):
            current["HEAD"] = line.split(" ", 1)[1]
        elif line.startswith("branch "):
            branch_ref = line.split(" ", 1)[1]
            if branch_ref.startswith(BRANCH_REF_PREFIX):
                current["branch"] = branch_ref[len(BRANCH_REF_PREFIX):]
            else:
                current["branch"] = ""
        elif line == "detached":
            current["branch"] = ""  # Detached HEAD
        elif line == "bare":
            current["bare"] = True

    # Handle last entry if no trailing blank line
    flush()

    logger.debug(f"Parsed {len(worktree_list)} worktrees")
    return worktree_list
