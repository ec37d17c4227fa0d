"""Git operations used by the CLI outside of worktree management."""

import os
from typing import List

import git

from worktree_manager.exceptions import GitOperationError
from worktree_manager.logging_config import get_logger
from worktree_manager.services.git.worktrees import to_operation_error

logger = get_logger(__name__)


class GitOperations:
    """Branch and working tree queries for a single working copy."""

    def __init__(self, repo_path: str):
        """Initialize the service.

        Args:
            repo_path: Path to a working copy (main repository or worktree)
        """
        self.repo_path = os.path.abspath(repo_path)

    def _get_repo(self) -> git.Repo:
        """Get a fresh git.Repo instance.

        Raises:
            GitOperationError: If repo_path is not inside a git working copy
        """
        try:
            return git.Repo(self.repo_path, search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise GitOperationError("open", f"Not a git repository: {self.repo_path}") from e

    def current_branch(self) -> str:
        """Name of the checked out branch.

        Raises:
            GitOperationError: In detached HEAD state
        """
        try:
            return self._get_repo().git.symbolic_ref("--short", "HEAD").strip()
        except git.exc.GitCommandError as e:
            raise to_operation_error("symbolic-ref", e) from e

    def has_uncommitted_changes(self) -> bool:
        return self._get_repo().is_dirty(untracked_files=True)

    def branch_exists(self, branch: str) -> bool:
        """Check whether a local branch exists."""
        try:
            output = self._get_repo().git.branch("--list", branch)
        except git.exc.GitCommandError as e:
            logger.debug(f"Could not list branch {branch}: {e}")
            return False
        return bool(output.strip())

    def remote_names(self) -> List[str]:
        return [remote.name for remote in self._get_repo().remotes]

    def fetch(self, remote: str, branch: str) -> None:
        try:
            self._get_repo().git.fetch(remote, branch)
        except git.exc.GitCommandError as e:
            raise to_operation_error("fetch", e) from e
        logger.debug(f"Fetched {remote}/{branch}")

    def reset_to(self, ref: str, hard: bool = False) -> None:
        """Reset the current branch to ref."""
        args = ["--hard", ref] if hard else [ref]
        try:
            self._get_repo().git.reset(*args)
        except git.exc.GitCommandError as e:
            raise to_operation_error("reset", e) from e
        logger.info(f"Reset {self.repo_path} to {ref}{' (hard)' if hard else ''}")
