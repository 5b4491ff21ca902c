"""Project and workspace aggregates."""

from dataclasses import dataclass, field
from fnmatch import fnmatch
from typing import Dict, List

from git_worktree_keeper.exceptions import (
    DuplicateEntryError,
    InputValidationError,
    ProjectNotFoundError,
    WorktreeNotFoundError,
)
from git_worktree_keeper.models.worktree import Worktree, WorktreeStatus


@dataclass
class WorktreeStatistics:
    """Worktree counts for a project or a whole workspace."""
    total_count: int = 0
    unknown_count: int = 0
    clean_count: int = 0
    dirty_count: int = 0
    branches: List[str] = field(default_factory=list)
    project_count: int = 0

    def add(self, worktree: Worktree) -> None:
        self.total_count += 1
        if worktree.status == WorktreeStatus.CLEAN:
            self.clean_count += 1
        elif worktree.status == WorktreeStatus.DIRTY:
            self.dirty_count += 1
        else:
            self.unknown_count += 1
        if worktree.branch not in self.branches:
            self.branches.append(worktree.branch)


@dataclass
class Project:
    """A main git repository and the worktrees checked out from it."""

    name: str
    git_repo_path: str
    worktrees: List[Worktree] = field(default_factory=list)

    def __post_init__(self):
        if not self.name:
            raise InputValidationError("Project name cannot be empty")
        if not self.git_repo_path:
            raise InputValidationError("Git repository path cannot be empty")

    def add_worktree(self, worktree: Worktree) -> None:
        """Add a worktree, rejecting a path that is already tracked."""
        if any(existing.path == worktree.path for existing in self.worktrees):
            raise DuplicateEntryError(f"Worktree already exists at path: {worktree.path}")
        self.worktrees.append(worktree)

    def remove_worktree(self, path: str) -> Worktree:
        """Remove and return the worktree at path."""
        worktree = self.get_worktree(path)
        self.worktrees.remove(worktree)
        return worktree

    def get_worktree(self, path: str) -> Worktree:
        for worktree in self.worktrees:
            if worktree.path == path:
                return worktree
        raise WorktreeNotFoundError(path)

    def has_worktree(self, path: str) -> bool:
        return any(worktree.path == path for worktree in self.worktrees)

    def list_branches(self) -> List[str]:
        """Unique branch names across this project's worktrees, in insertion order."""
        branches: List[str] = []
        for worktree in self.worktrees:
            if worktree.branch not in branches:
                branches.append(worktree.branch)
        return branches

    def worktrees_by_branch(self, branch: str) -> List[Worktree]:
        return [wt for wt in self.worktrees if wt.branch == branch]

    def worktrees_by_status(self, status: WorktreeStatus) -> List[Worktree]:
        return [wt for wt in self.worktrees if wt.status == status]

    def statistics(self) -> WorktreeStatistics:
        stats = WorktreeStatistics(project_count=1)
        for worktree in self.worktrees:
            stats.add(worktree)
        return stats


@dataclass
class Workspace:
    """Aggregate root holding every project found under a directory."""

    path: str
    projects: List[Project] = field(default_factory=list)

    def __post_init__(self):
        if not self.path:
            raise InputValidationError("Workspace path cannot be empty")

    def add_project(self, project: Project) -> None:
        """Add a project.

        Project names are unique within a workspace, and a worktree path may
        belong to only one project.
        """
        if any(existing.name == project.name for existing in self.projects):
            raise DuplicateEntryError(f"Project already exists: {project.name}")

        owned = self._worktree_owners()
        for worktree in project.worktrees:
            if worktree.path in owned:
                raise DuplicateEntryError(
                    f"Worktree {worktree.path} already belongs to project '{owned[worktree.path]}'"
                )
        self.projects.append(project)

    def remove_project(self, name: str) -> Project:
        project = self.get_project(name)
        self.projects.remove(project)
        return project

    def get_project(self, name: str) -> Project:
        for project in self.projects:
            if project.name == name:
                return project
        raise ProjectNotFoundError(name)

    def list_all_worktrees(self) -> List[Worktree]:
        return [wt for project in self.projects for wt in project.worktrees]

    def get_worktree_by_path(self, path: str) -> Worktree:
        for worktree in self.list_all_worktrees():
            if worktree.path == path:
                return worktree
        raise WorktreeNotFoundError(path)

    def find_worktrees_by_branch(self, branch: str) -> List[Worktree]:
        return [wt for wt in self.list_all_worktrees() if wt.branch == branch]

    def find_worktrees_by_branch_pattern(self, pattern: str) -> List[Worktree]:
        """Find worktrees whose branch matches a shell-style pattern like 'feature-*'."""
        return [wt for wt in self.list_all_worktrees() if fnmatch(wt.branch, pattern)]

    def find_worktrees_by_project(self, name: str) -> List[Worktree]:
        try:
            return list(self.get_project(name).worktrees)
        except ProjectNotFoundError:
            return []

    def find_worktrees_by_status(self, status: WorktreeStatus) -> List[Worktree]:
        return [wt for wt in self.list_all_worktrees() if wt.status == status]

    def statistics(self) -> WorktreeStatistics:
        stats = WorktreeStatistics(project_count=len(self.projects))
        for worktree in self.list_all_worktrees():
            stats.add(worktree)
        return stats

    def _worktree_owners(self) -> Dict[str, str]:
        return {wt.path: project.name for project in self.projects for wt in project.worktrees}
