"""Resolution of short user-typed targets into project and worktree paths"""

import os
from typing import TYPE_CHECKING, Iterable, List

from git_worktree_keeper.constants import CROSS_PROJECT_SEPARATOR, MAIN_IDENTIFIER
from git_worktree_keeper.exceptions import (
    InputValidationError,
    InvalidTargetFormatError,
    UnknownContextError,
)
from git_worktree_keeper.models.context import (
    Context,
    ContextResolution,
    ContextType,
    ResolutionMethod,
    ResolutionSuggestion,
    TargetType,
)
from git_worktree_keeper.services.context_detector import normalize_path
from git_worktree_keeper.logging_config import get_logger

if TYPE_CHECKING:
    from git_worktree_keeper.config import Config

logger = get_logger(__name__)

RESERVED_NAMES = {".", ".."}


class ContextResolver:
    """Turns a target like 'feature', 'project/branch' or 'main' into a path.

    Resolution only builds paths; it never checks that the target exists.
    """

    def __init__(self, projects_dir: str, worktrees_dir: str):
        self.projects_dir = normalize_path(projects_dir)
        self.worktrees_dir = normalize_path(worktrees_dir)

    @classmethod
    def from_config(cls, config: "Config") -> "ContextResolver":
        return cls(config.projects_dir, config.worktrees_dir)

    def resolve(self, target: str, context: Context) -> ContextResolution:
        """Resolve target relative to context.

        Raises:
            InputValidationError: If target is empty or names '.'/'..'
            InvalidTargetFormatError: If a cross-project target is not project/branch
            UnknownContextError: If the context type cannot be resolved from
        """
        if not target:
            raise InputValidationError(
                "Target cannot be empty",
                suggestions=["Pass a branch name, a project name, 'main' or project/branch"],
            )

        if context.type == ContextType.PROJECT:
            resolution = self._resolve_from_project(target, context)
        elif context.type == ContextType.WORKTREE:
            resolution = self._resolve_from_worktree(target, context)
        elif context.type == ContextType.OUTSIDE_GIT:
            resolution = self._resolve_from_outside_git(target)
        else:
            raise UnknownContextError(target, context.type)

        logger.debug(
            f"Resolved '{target}' from {context.type.value} context to {resolution.target_path} "
            f"({resolution.resolution_method.value})"
        )
        return resolution

    def _resolve_from_project(self, target: str, context: Context) -> ContextResolution:
        if CROSS_PROJECT_SEPARATOR in target:
            return self._resolve_cross_project(target)

        if target == context.project_name or target == MAIN_IDENTIFIER:
            return ContextResolution(
                target_type=TargetType.PROJECT,
                project_name=context.project_name,
                target_path=self._project_path(context),
                resolution_method=ResolutionMethod.CURRENT_PROJECT,
                explanation=f"Resolved '{target}' to current project '{context.project_name}'",
            )

        return self._branch_of_current_project(target, context, ResolutionMethod.PROJECT_BRANCH)

    def _resolve_from_worktree(self, target: str, context: Context) -> ContextResolution:
        if CROSS_PROJECT_SEPARATOR in target:
            return self._resolve_cross_project(target)

        if target == MAIN_IDENTIFIER:
            method = ResolutionMethod.WORKTREE_MAIN
        elif target == context.project_name:
            method = ResolutionMethod.WORKTREE_PROJECT_NAME
        else:
            return self._branch_of_current_project(target, context, ResolutionMethod.SIBLING_BRANCH)

        return ContextResolution(
            target_type=TargetType.PROJECT,
            project_name=context.project_name,
            target_path=self._project_path(context),
            resolution_method=method,
            explanation=f"Resolved '{target}' to project root '{context.project_name}'",
        )

    def _resolve_from_outside_git(self, target: str) -> ContextResolution:
        if CROSS_PROJECT_SEPARATOR in target:
            return self._resolve_cross_project(target)

        # Bare names are taken as project names without checking they exist
        self._validate_name(target, target)
        return ContextResolution(
            target_type=TargetType.PROJECT,
            project_name=target,
            target_path=os.path.join(self.projects_dir, target),
            resolution_method=ResolutionMethod.PROJECT_NAME,
            explanation=f"Resolved '{target}' to project directory",
        )

    def _resolve_cross_project(self, target: str) -> ContextResolution:
        parts = target.split(CROSS_PROJECT_SEPARATOR)
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise InvalidTargetFormatError(target)

        project_name, branch_name = parts
        self._validate_name(project_name, target)
        self._validate_name(branch_name, target)
        return ContextResolution(
            target_type=TargetType.WORKTREE,
            project_name=project_name,
            branch_name=branch_name,
            target_path=os.path.join(self.worktrees_dir, project_name, branch_name),
            resolution_method=ResolutionMethod.CROSS_PROJECT,
            explanation=f"Resolved '{target}' to worktree of project '{project_name}'",
        )

    def _branch_of_current_project(
        self, branch_name: str, context: Context, method: ResolutionMethod
    ) -> ContextResolution:
        self._validate_name(branch_name, branch_name)
        return ContextResolution(
            target_type=TargetType.WORKTREE,
            project_name=context.project_name,
            branch_name=branch_name,
            target_path=os.path.join(self.worktrees_dir, context.project_name, branch_name),
            resolution_method=method,
            explanation=f"Resolved '{branch_name}' to worktree of project '{context.project_name}'",
        )

    def _project_path(self, context: Context) -> str:
        return context.project_path or os.path.join(self.projects_dir, context.project_name)

    @staticmethod
    def _validate_name(name: str, target: str) -> None:
        if name in RESERVED_NAMES or os.sep in name:
            raise InputValidationError(
                f"Invalid name '{name}' in target '{target}'",
                suggestions=["Use plain project and branch names without '.', '..' or path separators"],
            )

    def suggest(
        self,
        context: Context,
        partial: str = "",
        branches: Iterable[str] = (),
        projects: Iterable[str] = (),
        existing_only: bool = False,
    ) -> List[ResolutionSuggestion]:
        """Completion candidates for a partially typed target.

        The caller supplies the inventory: branches are the worktree branches of
        the relevant project (the current one, or the one named before '/'), and
        projects are the known project names.

        Args:
            context: Detected context
            partial: What the user has typed so far
            branches: Branch names with worktrees
            projects: Project names
            existing_only: Only offer targets that are existing worktrees

        Returns:
            Suggestions in a stable order without duplicates
        """
        suggestions: List[ResolutionSuggestion] = []
        seen = set()

        def add(suggestion: ResolutionSuggestion):
            if suggestion.text not in seen:
                seen.add(suggestion.text)
                suggestions.append(suggestion)

        if CROSS_PROJECT_SEPARATOR in partial:
            project_name, _, branch_partial = partial.partition(CROSS_PROJECT_SEPARATOR)
            for branch in branches:
                if branch.startswith(branch_partial):
                    add(ResolutionSuggestion(
                        text=f"{project_name}/{branch}",
                        description=f"Worktree for branch {branch} of {project_name}",
                        target_type=TargetType.WORKTREE,
                        project_name=project_name,
                        branch_name=branch,
                    ))
            return suggestions

        if context.type in (ContextType.PROJECT, ContextType.WORKTREE):
            if not existing_only and MAIN_IDENTIFIER.startswith(partial):
                add(ResolutionSuggestion(
                    text=MAIN_IDENTIFIER,
                    description="Project root directory",
                    target_type=TargetType.PROJECT,
                    project_name=context.project_name,
                ))
            for branch in branches:
                if branch == context.branch_name or not branch.startswith(partial):
                    continue
                add(ResolutionSuggestion(
                    text=branch,
                    description=f"Worktree for branch {branch}",
                    target_type=TargetType.WORKTREE,
                    project_name=context.project_name,
                    branch_name=branch,
                ))
        elif context.type == ContextType.OUTSIDE_GIT and not existing_only:
            for project in projects:
                if project.startswith(partial):
                    add(ResolutionSuggestion(
                        text=project,
                        description="Project directory",
                        target_type=TargetType.PROJECT,
                        project_name=project,
                    ))

        return suggestions
