"""Discovery of projects and worktrees under a workspace directory."""

import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import nullcontext
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional, Tuple

from rich.progress import Progress

from git_worktree_keeper.constants import CACHE_EXPIRY_SECONDS, DEFAULT_CONCURRENCY, FAILURE_THRESHOLD
from git_worktree_keeper.exceptions import (
    DiscoveryCancelledError,
    DiscoveryError,
    DuplicateEntryError,
    GitOperationError,
    GitWorktreeKeeperError,
    InputValidationError,
)
from git_worktree_keeper.models.project import Project, Workspace
from git_worktree_keeper.models.worktree import Worktree, WorktreeInfo, WorktreeStatus
from git_worktree_keeper.services.cache_service import DiscoveryCache
from git_worktree_keeper.services.git import GitClient, GitPythonClient
from git_worktree_keeper.utils.threading import clamp_worker_count
from git_worktree_keeper.logging_config import get_logger

if TYPE_CHECKING:
    from git_worktree_keeper.config import Config

logger = get_logger(__name__)


class DiscoveryService:
    """Finds live worktrees and projects, analyzing worktrees on a bounded thread pool.

    Each instance owns its cache, so separate services never share results.
    """

    def __init__(
        self,
        git_client: Optional[GitClient] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        cache_expiry: float = CACHE_EXPIRY_SECONDS,
        max_cache_entries: Optional[int] = None,
    ):
        """Initialize the service.

        Args:
            git_client: Capability used to inspect paths (defaults to GitPythonClient)
            concurrency: Number of analysis workers, clamped to [1, 16]
            cache_expiry: Seconds a cached analysis result stays valid
            max_cache_entries: Optional LRU bound for the cache
        """
        self.git_client = git_client if git_client is not None else GitPythonClient()
        self.concurrency = DEFAULT_CONCURRENCY
        self.set_concurrency(concurrency)
        self.cache = DiscoveryCache(expiry_seconds=cache_expiry, max_entries=max_cache_entries)

    @classmethod
    def from_config(cls, config: "Config", git_client: Optional[GitClient] = None) -> "DiscoveryService":
        return cls(
            git_client=git_client,
            concurrency=config.workers,
            cache_expiry=config.cache_expiry_seconds,
        )

    def set_concurrency(self, workers: int) -> int:
        """Set the worker pool size, clamped to [1, 16]. Returns the effective value."""
        self.concurrency = clamp_worker_count(workers)
        logger.debug(f"Discovery concurrency set to {self.concurrency}")
        return self.concurrency

    def clear_cache(self) -> None:
        """Forget every cached worktree analysis."""
        self.cache.clear()

    def discover_worktrees(
        self,
        workspace_path: str,
        cancel_event: Optional[threading.Event] = None,
        show_progress: bool = False,
    ) -> List[Worktree]:
        """Discover and analyze every live worktree of the repositories in a workspace.

        Args:
            workspace_path: Directory whose immediate subdirectories are repositories
            cancel_event: Set it to abort outstanding work
            show_progress: Whether to show a Rich progress bar

        Returns:
            Analyzed worktrees in no particular order

        Raises:
            InputValidationError: If the workspace path is empty or not a directory
            DiscoveryError: If the workspace cannot be read or at least half of
                the candidate worktrees failed analysis
            DiscoveryCancelledError: If cancel_event was set
        """
        workspace = self._validate_workspace_path(workspace_path)
        paths = self._find_candidate_paths(workspace, cancel_event)
        logger.debug(f"Found {len(paths)} candidate worktrees in {workspace}")

        if not paths:
            return []

        return self._analyze_paths_concurrently(paths, cancel_event, show_progress)

    def analyze_worktree(self, path: str, cancel_event: Optional[threading.Event] = None) -> Worktree:
        """Analyze a single worktree, serving a fresh cached result when available.

        Args:
            path: Worktree directory
            cancel_event: Checked before any git call is made

        Returns:
            Worktree with commit and clean/dirty status
        """
        if not path:
            raise InputValidationError("Worktree path cannot be empty")

        key = os.path.normpath(path)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Using cached analysis for {key}")
            return cached

        if cancel_event is not None and cancel_event.is_set():
            raise DiscoveryCancelledError()

        try:
            info = self.git_client.get_worktree_status(key)
        except GitWorktreeKeeperError:
            raise
        except Exception as e:
            raise GitOperationError("get_worktree_status", key, str(e)) from e

        worktree = self._convert_to_worktree(info, key)
        self.cache.put(key, worktree)
        return worktree

    def discover_projects(
        self, workspace_path: str, cancel_event: Optional[threading.Event] = None
    ) -> List[Project]:
        """Find main repositories in a workspace and attach their linked worktrees.

        Worktrees are attached with a fresh cached status when one exists and
        with UNKNOWN status otherwise; worktrees that cannot be attached are
        skipped.

        Args:
            workspace_path: Directory whose immediate subdirectories are candidates
            cancel_event: Set it to abort the scan

        Returns:
            Projects in directory-name order
        """
        workspace = self._validate_workspace_path(workspace_path)

        projects = []
        for subdir in self._list_subdirectories(workspace):
            self._check_cancelled(cancel_event)
            try:
                is_main = self.git_client.is_main_repository(subdir)
            except Exception as e:
                logger.debug(f"Skipping {subdir}: {e}")
                continue
            if not is_main:
                continue

            project = Project(name=os.path.basename(subdir), git_repo_path=subdir)
            self._attach_worktrees(project)
            projects.append(project)

        logger.debug(f"Discovered {len(projects)} projects in {workspace}")
        return projects

    def discover_workspace(
        self, workspace_path: str, cancel_event: Optional[threading.Event] = None
    ) -> Workspace:
        """Build a Workspace aggregate from discover_projects."""
        workspace = Workspace(path=self._validate_workspace_path(workspace_path))
        for project in self.discover_projects(workspace.path, cancel_event):
            try:
                workspace.add_project(project)
            except DuplicateEntryError as e:
                logger.warning(f"Skipping project {project.name}: {e}")
        return workspace

    def _validate_workspace_path(self, workspace_path: str) -> str:
        if not workspace_path:
            raise InputValidationError(
                "Workspace path cannot be empty",
                suggestions=["Set --projects-dir or GIT_WORKTREE_KEEPER_PROJECTS_DIR"],
            )
        path = os.path.normpath(os.path.abspath(os.path.expanduser(workspace_path)))
        if not os.path.exists(path):
            raise InputValidationError(f"Workspace path does not exist: {path}")
        if not os.path.isdir(path):
            raise InputValidationError(f"Workspace path is not a directory: {path}")
        return path

    def _list_subdirectories(self, workspace: str) -> List[str]:
        try:
            with os.scandir(workspace) as entries:
                names = sorted(entry.name for entry in entries if self._is_dir(entry))
        except OSError as e:
            raise DiscoveryError(f"Failed to read workspace directory {workspace}: {e}", cause=e) from e
        return [os.path.join(workspace, name) for name in names]

    @staticmethod
    def _is_dir(entry: os.DirEntry) -> bool:
        try:
            return entry.is_dir()
        except OSError:
            return False

    @staticmethod
    def _check_cancelled(cancel_event: Optional[threading.Event], completed: int = 0, total: int = 0):
        if cancel_event is not None and cancel_event.is_set():
            raise DiscoveryCancelledError(completed, total)

    def _is_git_repository_safe(self, path: str) -> bool:
        try:
            return bool(self.git_client.is_git_repository(path))
        except Exception as e:
            logger.debug(f"Could not check {path}: {e}")
            return False

    def _find_candidate_paths(self, workspace: str, cancel_event: Optional[threading.Event]) -> List[str]:
        """Collect the worktree paths of every repository directly under workspace."""
        paths: List[str] = []
        seen = set()
        for subdir in self._list_subdirectories(workspace):
            self._check_cancelled(cancel_event)
            if not self._is_git_repository_safe(subdir):
                continue

            try:
                infos = self.git_client.list_worktrees(subdir)
            except Exception as e:
                logger.debug(f"Could not list worktrees of {subdir}: {e}")
                continue

            for info in infos:
                if not info.path:
                    continue
                if info.is_orphaned:
                    logger.debug(f"Skipping orphaned worktree {info.path}")
                    continue
                path = os.path.normpath(info.path)
                if path not in seen:
                    seen.add(path)
                    paths.append(path)
        return paths

    def _analyze_paths_concurrently(
        self,
        paths: List[str],
        cancel_event: Optional[threading.Event],
        show_progress: bool,
    ) -> List[Worktree]:
        worktrees: List[Worktree] = []
        errors: List[Tuple[str, Exception]] = []
        cancelled = False
        total = len(paths)

        logger.debug(f"Analyzing {total} worktrees with {self.concurrency} workers")
        progress_context = Progress() if show_progress else nullcontext()
        with progress_context as progress:
            task = None
            if progress is not None:
                task = progress.add_task(f"Analyzing worktrees ({self.concurrency} workers)...", total=total)

            with ThreadPoolExecutor(max_workers=self.concurrency, thread_name_prefix="discovery") as executor:
                future_to_path = {
                    executor.submit(self.analyze_worktree, path, cancel_event): path for path in paths
                }

                for future in as_completed(future_to_path):
                    path = future_to_path[future]
                    try:
                        worktrees.append(future.result())
                    except DiscoveryCancelledError:
                        cancelled = True
                    except Exception as e:
                        logger.debug(f"Failed to analyze {path}: {e}")
                        errors.append((path, e))
                    finally:
                        if progress is not None:
                            progress.update(task, advance=1)

                    if cancelled or (cancel_event is not None and cancel_event.is_set()):
                        cancelled = True
                        executor.shutdown(wait=False, cancel_futures=True)
                        break

        if cancelled:
            raise DiscoveryCancelledError(len(worktrees) + len(errors), total)

        failed = len(errors)
        if failed and failed / total >= FAILURE_THRESHOLD:
            errors.sort(key=lambda item: item[0])
            sample_path, sample_error = errors[0]
            raise DiscoveryError(
                f"Too many failures during discovery ({failed}/{total} failed): {sample_error}",
                failed_count=failed,
                total_count=total,
                cause=sample_error,
            ) from sample_error

        if failed:
            logger.info(f"Skipped {failed} of {total} worktrees that could not be analyzed")
        return worktrees

    def _attach_worktrees(self, project: Project) -> None:
        try:
            infos = self.git_client.list_worktrees(project.git_repo_path)
        except Exception as e:
            logger.debug(f"Could not list worktrees of {project.name}: {e}")
            return

        for info in infos:
            path = os.path.normpath(info.path) if info.path else ""
            if info.is_main or path == project.git_repo_path or info.is_orphaned:
                continue
            try:
                worktree = self.cache.get(path) or Worktree(
                    path=path, branch=info.branch_name, commit=info.commit_sha
                )
                project.add_worktree(worktree)
            except GitWorktreeKeeperError as e:
                logger.debug(f"Skipping worktree {info.path} of {project.name}: {e}")

    @staticmethod
    def _convert_to_worktree(info: WorktreeInfo, path: str) -> Worktree:
        if info.clean is None:
            status = WorktreeStatus.UNKNOWN
        elif info.clean:
            status = WorktreeStatus.CLEAN
        else:
            status = WorktreeStatus.DIRTY

        return Worktree(
            path=os.path.normpath(info.path) if info.path else path,
            branch=info.branch_name,
            commit=info.commit_sha,
            status=status,
            last_updated=datetime.now(timezone.utc),
        )
