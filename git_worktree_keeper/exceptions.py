"""Custom exceptions for git-worktree-keeper"""

from typing import Iterable, List, Optional


class GitWorktreeKeeperError(Exception):
    """Base exception for all git-worktree-keeper errors."""

    def __init__(self, message: str, suggestions: Optional[Iterable[str]] = None):
        self.message = message
        self.suggestions: List[str] = list(suggestions or [])
        super().__init__(message)


class InputValidationError(GitWorktreeKeeperError):
    """Exception raised when a path, target or model field is invalid."""
    pass


class InvalidTargetFormatError(InputValidationError):
    """Exception raised for a malformed cross-project target."""

    def __init__(self, target: str):
        self.target = target
        super().__init__(
            f"Invalid cross-project target '{target}': expected project/branch",
            suggestions=["Use the form project/branch, e.g. 'myproject/feature-x'"],
        )


class InvalidWorktreeError(InputValidationError):
    """Exception raised when a worktree is built without a path or branch."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Worktree {field_name} cannot be empty")


class NotFoundError(GitWorktreeKeeperError):
    """Exception raised when a lookup or resolution rule has no match."""
    pass


class UnknownContextError(NotFoundError):
    """Exception raised when resolving from a context of unknown type."""

    def __init__(self, target: str, context_type: object):
        self.target = target
        self.context_type = context_type
        super().__init__(
            f"Cannot resolve '{target}' from unknown context '{context_type}'",
            suggestions=[
                "Run from inside a project or worktree directory",
                "Use the form project/branch to name a worktree explicitly",
            ],
        )


class ProjectNotFoundError(NotFoundError):
    """Exception raised when a project name is not in the workspace."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Project not found: {name}")


class WorktreeNotFoundError(NotFoundError):
    """Exception raised when no worktree exists at a path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Worktree not found at path: {path}")


class DuplicateEntryError(GitWorktreeKeeperError):
    """Exception raised when adding a project or worktree that already exists."""
    pass


class GitOperationError(GitWorktreeKeeperError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, path: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.path = path
        self.detail = message

        error_msg = f"Git operation '{operation}' failed"
        if path:
            error_msg += f" for '{path}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class DiscoveryError(GitWorktreeKeeperError):
    """Exception raised when discovery cannot produce a usable result."""

    def __init__(
        self,
        message: str,
        failed_count: int = 0,
        total_count: int = 0,
        cause: Optional[BaseException] = None,
    ):
        self.failed_count = failed_count
        self.total_count = total_count
        self.cause = cause
        super().__init__(
            message,
            suggestions=["Run with --debug to see which worktrees could not be analyzed"],
        )


class DiscoveryCancelledError(GitWorktreeKeeperError):
    """Exception raised when an in-flight discovery is cancelled."""

    def __init__(self, completed: int = 0, total: int = 0):
        self.completed = completed
        self.total = total
        super().__init__(f"Discovery cancelled after {completed}/{total} paths")
