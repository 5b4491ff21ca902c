"""
git-worktree-keeper - Navigate projects and their git worktrees
"""

from .__version__ import __version__
from .services import ContextDetector, ContextResolver, DiscoveryService
from .cli.main import main

__all__ = ["ContextDetector", "ContextResolver", "DiscoveryService", "main", "__version__"]
