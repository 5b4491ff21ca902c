"""Classification of a directory relative to the projects and worktrees roots"""

import os
from typing import TYPE_CHECKING, Callable, List, Optional

from git_worktree_keeper.exceptions import InputValidationError
from git_worktree_keeper.models.context import Context, ContextType
from git_worktree_keeper.logging_config import get_logger

if TYPE_CHECKING:
    from git_worktree_keeper.config import Config

logger = get_logger(__name__)


def normalize_path(path: str) -> str:
    """Absolute, normalized form of path. Symlinks are left unresolved."""
    return os.path.normpath(os.path.abspath(os.path.expanduser(path)))


def relative_parts(root: str, path: str) -> Optional[List[str]]:
    """Components of path below root, or None if path is not strictly under root."""
    prefix = root if root.endswith(os.sep) else root + os.sep
    if not path.startswith(prefix):
        return None
    return [part for part in path[len(prefix):].split(os.sep) if part]


class ContextDetector:
    """Classifies a directory as project, worktree or outside-git.

    Rules are evaluated in priority order, first match wins:
    <worktrees>/<project>/<branch>[/...] with an existing <projects>/<project>
    is a worktree; exactly <projects>/<project> is a project; everything else
    is outside git.
    """

    def __init__(
        self,
        projects_dir: str,
        worktrees_dir: str,
        path_exists: Optional[Callable[[str], bool]] = None,
    ):
        self.projects_dir = normalize_path(projects_dir)
        self.worktrees_dir = normalize_path(worktrees_dir)
        self.path_exists = path_exists if path_exists is not None else os.path.isdir

    @classmethod
    def from_config(cls, config: "Config", path_exists: Optional[Callable[[str], bool]] = None):
        return cls(config.projects_dir, config.worktrees_dir, path_exists=path_exists)

    def detect(self, current_dir: str) -> Context:
        """Classify current_dir.

        Raises:
            InputValidationError: If current_dir is empty
        """
        if not current_dir:
            raise InputValidationError(
                "Current directory path cannot be empty",
                suggestions=["Provide a valid directory path"],
            )

        path = normalize_path(current_dir)
        context = self._detect_worktree(path) or self._detect_project(path)
        if context is None:
            context = Context(
                type=ContextType.OUTSIDE_GIT,
                current_path=path,
                explanation="Not in a project or worktree directory",
            )

        logger.debug(f"Detected {context.type.value} context for {path}")
        return context

    def _detect_worktree(self, path: str) -> Optional[Context]:
        parts = relative_parts(self.worktrees_dir, path)
        if parts is None or len(parts) < 2:
            return None

        project_name, branch_name = parts[0], parts[1]
        project_path = os.path.join(self.projects_dir, project_name)
        if not self.path_exists(project_path):
            logger.debug(f"No project directory {project_path} for worktree path {path}")
            return None

        return Context(
            type=ContextType.WORKTREE,
            current_path=path,
            project_name=project_name,
            branch_name=branch_name,
            project_path=project_path,
            worktree_path=path,
            explanation=f"In worktree for project '{project_name}' on branch '{branch_name}'",
        )

    def _detect_project(self, path: str) -> Optional[Context]:
        parts = relative_parts(self.projects_dir, path)
        # Subdirectories of a project are not the project itself
        if not parts or len(parts) != 1:
            return None

        project_name = parts[0]
        return Context(
            type=ContextType.PROJECT,
            current_path=path,
            project_name=project_name,
            project_path=path,
            explanation=f"In project directory '{project_name}'",
        )
