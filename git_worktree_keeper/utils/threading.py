"""Sizing and diagnostics for the discovery worker pool."""

import os
import sys
from typing import Dict, Any, Optional

from git_worktree_keeper.constants import DEFAULT_CONCURRENCY, MAX_CONCURRENCY


def is_free_threading_enabled() -> bool:
    """True on a free-threaded build (3.13+) running with the GIL disabled."""
    gil_check = getattr(sys, "_is_gil_enabled", None)
    return gil_check is not None and not gil_check()


def get_python_threading_mode() -> str:
    """Describe the interpreter's threading mode for --debug output."""
    if not hasattr(sys, "_is_gil_enabled"):
        return "GIL-enabled (Python < 3.13)"
    return "free-threading" if is_free_threading_enabled() else "GIL-enabled"


def clamp_worker_count(requested: Optional[int] = None) -> int:
    """Clamp a requested worker count to the supported pool size.

    Discovery workers spend their time waiting on git subprocesses, so the
    pool is not sized from the CPU count.

    Args:
        requested: Worker count asked for on the command line or in config

    Returns:
        DEFAULT_CONCURRENCY when nothing was requested, otherwise the request
        clamped to [1, MAX_CONCURRENCY]
    """
    if requested is None:
        return DEFAULT_CONCURRENCY
    return max(1, min(MAX_CONCURRENCY, requested))


def get_threading_info(workers: Optional[int] = None) -> Dict[str, Any]:
    """Collect interpreter and pool details shown by --debug.

    Args:
        workers: Requested discovery worker count

    Returns:
        Dictionary with the threading mode, effective worker count, CPU count
        and Python version
    """
    version = sys.version_info
    return {
        "mode": get_python_threading_mode(),
        "free_threading": is_free_threading_enabled(),
        "cpu_count": os.cpu_count() or 1,
        "workers": clamp_worker_count(workers),
        "python_version": f"{version.major}.{version.minor}.{version.micro}",
    }
