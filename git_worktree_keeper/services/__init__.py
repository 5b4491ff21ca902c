"""Services for git-worktree-keeper."""

from .cache_service import DiscoveryCache
from .context_detector import ContextDetector
from .context_resolver import ContextResolver
from .discovery_service import DiscoveryService
from .display_service import DisplayService

__all__ = [
    "DiscoveryCache",
    "ContextDetector",
    "ContextResolver",
    "DiscoveryService",
    "DisplayService",
]
