"""Custom exceptions for worktree-manager"""

from typing import List, Optional, Union


class WorktreeManagerError(Exception):
    """Base exception for all worktree-manager errors."""
    pass


class GitOperationError(WorktreeManagerError):
    """Exception raised when an underlying git command fails."""

    def __init__(
        self,
        operation: str,
        message: Optional[str] = None,
        status: Optional[Union[int, str]] = None,
    ):
        self.operation = operation
        self.message = message
        self.status = status

        error_msg = f"git {operation} failed"
        if status is not None:
            error_msg += f" (exit {status})"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class NotARepositoryError(GitOperationError):
    """Exception raised when a path is not the root of a git repository."""

    def __init__(self, path: str):
        self.path = path
        super().__init__("open", f"Not a git repository: {path}")


class RemoteFetchError(GitOperationError):
    """Exception raised when a remote branch cannot be fetched."""

    def __init__(self, remote_branch: str, message: Optional[str] = None, status=None):
        self.remote_branch = remote_branch
        detail = f"could not fetch '{remote_branch}'"
        if message:
            detail += f": {message}"
        super().__init__("fetch", detail, status)


class CommandError(WorktreeManagerError):
    """Exception raised by CLI commands to abort with exit code 1."""

    def __init__(self, message: str, hints: Optional[List[str]] = None):
        self.message = message
        self.hints = hints or []
        super().__init__(message)
