"""Configuration handling for git-worktree-keeper"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from git_worktree_keeper.constants import (
    CACHE_EXPIRY_SECONDS,
    DEFAULT_CONCURRENCY,
    DEFAULT_PROJECTS_DIR,
    DEFAULT_SORT,
    DEFAULT_WORKTREES_DIR,
    ENV_PROJECTS_DIR,
    ENV_WORKERS,
    ENV_WORKTREES_DIR,
    MAX_CONCURRENCY,
    SORT_OPTIONS,
    STALE_THRESHOLD_SECONDS,
)


@dataclass
class Config:
    """Configuration for git-worktree-keeper with validation."""

    # Directory layout
    projects_dir: str = DEFAULT_PROJECTS_DIR
    worktrees_dir: str = DEFAULT_WORKTREES_DIR

    # Discovery
    workers: int = DEFAULT_CONCURRENCY
    cache_expiry_seconds: float = CACHE_EXPIRY_SECONDS
    stale_threshold_seconds: float = STALE_THRESHOLD_SECONDS

    # Output
    sort_by: str = DEFAULT_SORT  # path, branch, status, date
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_directories()
        self._validate_workers()
        self._validate_durations()
        self._validate_sort_by()

    def _validate_directories(self):
        """Validate and normalize the two root directories."""
        for name in ("projects_dir", "worktrees_dir"):
            value = getattr(self, name)
            if not value or not str(value).strip():
                raise ValueError(f"{name} cannot be empty")
            normalized = os.path.normpath(os.path.abspath(os.path.expanduser(str(value).strip())))
            setattr(self, name, normalized)

        if self.projects_dir == self.worktrees_dir:
            raise ValueError("projects_dir and worktrees_dir must be different directories")

    def _validate_workers(self):
        """Validate workers is within the supported pool size."""
        if not isinstance(self.workers, int) or not 1 <= self.workers <= MAX_CONCURRENCY:
            raise ValueError(f"workers must be between 1 and {MAX_CONCURRENCY}, got {self.workers}")

    def _validate_durations(self):
        """Validate expiry and staleness durations are positive."""
        if self.cache_expiry_seconds <= 0:
            raise ValueError(f"cache_expiry_seconds must be positive, got {self.cache_expiry_seconds}")
        if self.stale_threshold_seconds <= 0:
            raise ValueError(
                f"stale_threshold_seconds must be positive, got {self.stale_threshold_seconds}"
            )

    def _validate_sort_by(self):
        """Validate sort_by is one of the worktree table orders."""
        if self.sort_by not in SORT_OPTIONS:
            raise ValueError(f"sort_by must be one of {SORT_OPTIONS}, got '{self.sort_by}'")

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "projects_dir": self.projects_dir,
            "worktrees_dir": self.worktrees_dir,
            "workers": self.workers,
            "cache_expiry_seconds": self.cache_expiry_seconds,
            "stale_threshold_seconds": self.stale_threshold_seconds,
            "sort_by": self.sort_by,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary."""
        known_fields = {
            "projects_dir",
            "worktrees_dir",
            "workers",
            "cache_expiry_seconds",
            "stale_threshold_seconds",
            "sort_by",
            "verbose",
            "debug",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields and v is not None}
        return cls(**filtered)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "Config":
        """Create Config from environment variables, with explicit overrides on top.

        Args:
            environ: Mapping to read from (defaults to os.environ)
            **overrides: Field values that take precedence over the environment;
                None values are ignored

        Returns:
            Validated Config
        """
        if environ is None:
            environ = os.environ

        values: dict = {}
        if environ.get(ENV_PROJECTS_DIR):
            values["projects_dir"] = environ[ENV_PROJECTS_DIR]
        if environ.get(ENV_WORKTREES_DIR):
            values["worktrees_dir"] = environ[ENV_WORKTREES_DIR]
        if environ.get(ENV_WORKERS):
            try:
                values["workers"] = int(environ[ENV_WORKERS])
            except ValueError:
                raise ValueError(f"{ENV_WORKERS} must be an integer, got '{environ[ENV_WORKERS]}'") from None

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_dict(values)
