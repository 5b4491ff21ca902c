"""In-process cache for worktree analysis results."""
import dataclasses
import time
from collections import OrderedDict
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Optional

from git_worktree_keeper.constants import CACHE_EXPIRY_SECONDS
from git_worktree_keeper.models.worktree import Worktree
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A worktree snapshot and the clock reading it was computed at."""
    worktree: Worktree
    timestamp: float


class DiscoveryCache:
    """Caches analyzed worktrees by path with time-based expiry.

    Entries are copied on write and on read, so callers can mutate what they
    get back without affecting the cache or other threads. The cache is owned
    by a single DiscoveryService instance.
    """

    def __init__(
        self,
        expiry_seconds: float = CACHE_EXPIRY_SECONDS,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the cache.

        Args:
            expiry_seconds: Age after which an entry is treated as absent
            max_entries: Optional bound; least recently used entries are evicted
            clock: Monotonic time source (injectable for tests)
        """
        if expiry_seconds <= 0:
            raise ValueError(f"expiry_seconds must be positive, got {expiry_seconds}")
        if max_entries is not None and max_entries <= 0:
            raise ValueError(f"max_entries must be positive, got {max_entries}")

        self.expiry_seconds = expiry_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = Lock()

    def get(self, path: str) -> Optional[Worktree]:
        """Return a copy of the cached worktree for path, or None if absent or expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(path)
            if entry is None:
                return None
            if now - entry.timestamp > self.expiry_seconds:
                logger.debug(f"Cache entry for {path} expired")
                del self._entries[path]
                return None
            self._entries.move_to_end(path)
            return dataclasses.replace(entry.worktree)

    def put(self, path: str, worktree: Worktree) -> None:
        """Store a snapshot of worktree under path, replacing any previous entry."""
        entry = CacheEntry(worktree=dataclasses.replace(worktree), timestamp=self._clock())
        with self._lock:
            self._entries[path] = entry
            self._entries.move_to_end(path)
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    logger.debug(f"Evicted {evicted} from cache")

    def remove(self, path: str) -> None:
        with self._lock:
            self._entries.pop(path, None)

    def clear(self) -> None:
        """Drop every cached entry."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.debug(f"Cleared {count} cached worktrees")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, path: str) -> bool:
        return self.get(path) is not None
