"""Git client capability used by discovery."""

import os
from typing import List, Protocol

import git

from git_worktree_keeper.exceptions import GitOperationError
from git_worktree_keeper.models.worktree import WorktreeInfo
from git_worktree_keeper.services.git.worktrees import parse_worktree_porcelain
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


class GitClient(Protocol):
    """Questions discovery asks about a path.

    Implementations raise an exception (normally GitOperationError) when a
    path cannot be inspected; discovery treats that as "this path is unusable".
    """

    def is_git_repository(self, path: str) -> bool:
        ...

    def is_main_repository(self, path: str) -> bool:
        ...

    def list_worktrees(self, repo_path: str) -> List[WorktreeInfo]:
        ...

    def get_worktree_status(self, path: str) -> WorktreeInfo:
        ...


def _command_error_message(e: git.exc.GitCommandError) -> str:
    stderr = (e.stderr if hasattr(e, "stderr") and e.stderr else str(e)).strip()
    status = e.status if hasattr(e, "status") else "unknown"
    if stderr:
        return f"exit {status}: {stderr}"
    return f"exit code {status}"


class GitPythonClient:
    """GitClient backed by GitPython."""

    def _get_repo(self, path: str) -> git.Repo:
        """Open a fresh git.Repo for path.

        A new instance per call keeps the client safe to share between
        discovery worker threads.
        """
        return git.Repo(path)

    def is_git_repository(self, path: str) -> bool:
        """Check whether path is the top of a git working tree (main or linked)."""
        if not os.path.isdir(path):
            return False
        try:
            repo = self._get_repo(path)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
            return False
        except Exception as e:
            raise GitOperationError("is_git_repository", path, str(e)) from e
        try:
            return not repo.bare
        finally:
            repo.close()

    def is_main_repository(self, path: str) -> bool:
        """Check whether path is a main repository rather than a linked worktree."""
        if not os.path.isdir(path):
            return False
        try:
            repo = self._get_repo(path)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
            return False
        except Exception as e:
            raise GitOperationError("is_main_repository", path, str(e)) from e
        try:
            if repo.bare:
                return False
            # Linked worktrees keep their git dir under <common>/worktrees/<name>
            git_dir = os.path.realpath(repo.git_dir)
            common_dir = os.path.realpath(repo.common_dir)
            return git_dir == common_dir
        finally:
            repo.close()

    def list_worktrees(self, repo_path: str) -> List[WorktreeInfo]:
        """List all worktrees of the repository at repo_path, main first."""
        try:
            repo = self._get_repo(repo_path)
        except Exception as e:
            raise GitOperationError("list_worktrees", repo_path, str(e)) from e
        try:
            output = repo.git.worktree("list", "--porcelain")
        except git.exc.GitCommandError as e:
            raise GitOperationError("list_worktrees", repo_path, _command_error_message(e)) from e
        finally:
            repo.close()

        worktrees = parse_worktree_porcelain(output)
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    def get_worktree_status(self, path: str) -> WorktreeInfo:
        """Report branch, HEAD commit and clean/dirty state of the worktree at path."""
        if not os.path.isdir(path):
            raise GitOperationError("get_worktree_status", path, "directory does not exist")
        try:
            repo = self._get_repo(path)
        except Exception as e:
            raise GitOperationError("get_worktree_status", path, str(e)) from e

        try:
            try:
                branch_name = repo.active_branch.name
            except TypeError:
                branch_name = ""  # Detached HEAD

            commit = repo.head.commit
            clean = not repo.is_dirty(untracked_files=True)
            return WorktreeInfo(
                path=path,
                branch_name=branch_name,
                commit_sha=commit.hexsha,
                is_main=os.path.realpath(repo.git_dir) == os.path.realpath(repo.common_dir),
                is_orphaned=False,
                clean=clean,
                commit_time=commit.committed_datetime,
            )
        except git.exc.GitCommandError as e:
            raise GitOperationError("get_worktree_status", path, _command_error_message(e)) from e
        except ValueError as e:
            # Raised by GitPython for a repository without commits
            raise GitOperationError("get_worktree_status", path, str(e)) from e
        finally:
            repo.close()
