"""Worktree operations service for worktree-manager."""

import os
from typing import List, Optional

import git

from worktree_manager.exceptions import GitOperationError, NotARepositoryError, RemoteFetchError
from worktree_manager.logging_config import get_logger
from worktree_manager.models.worktree import Worktree
from worktree_manager.services.git.porcelain import parse_worktree_list

logger = get_logger(__name__)


def to_operation_error(operation: str, error: git.exc.GitCommandError) -> GitOperationError:
    """Build a GitOperationError from GitPython's GitCommandError."""
    stderr = (error.stderr or "").strip() if isinstance(error.stderr, str) else ""
    if stderr.startswith("stderr:"):
        stderr = stderr[len("stderr:"):].strip().strip("'").strip()
    status = error.status if error.status is not None else "unknown"
    return GitOperationError(operation, stderr or None, status)


class WorktreeService:
    """Service for managing git worktrees of one main repository."""

    def __init__(self, repo_path: str):
        """Initialize the worktree service.

        Args:
            repo_path: Path to the main repository root

        Raises:
            NotARepositoryError: If repo_path is not the root of a main working copy
        """
        self.repo_path = os.path.abspath(repo_path)
        if not os.path.isdir(os.path.join(self.repo_path, ".git")):
            raise NotARepositoryError(self.repo_path)

    def _get_repo(self) -> git.Repo:
        """Get a fresh git.Repo instance for the main repository."""
        return git.Repo(self.repo_path)

    def _run_worktree(self, operation: str, *args: str) -> str:
        try:
            return self._get_repo().git.worktree(*args)
        except git.exc.GitCommandError as e:
            error = to_operation_error(operation, e)
            logger.debug(f"git worktree {' '.join(args)} failed: {error}")
            raise error from e

    def list_worktrees_output(self) -> str:
        """Raw porcelain output of `git worktree list`.

        Raises:
            GitOperationError: If git reports a failure
        """
        return self._run_worktree("worktree list", "list", "--porcelain")

    def list_worktrees(self) -> List[Worktree]:
        """Get all worktrees, main working copy first.

        Returns an empty list when git cannot list worktrees.
        """
        try:
            output = self.list_worktrees_output()
        except GitOperationError as e:
            logger.debug(f"Could not list worktrees: {e}")
            return []

        worktrees = parse_worktree_list(output)
        logger.debug(f"Found {len(worktrees)} worktrees")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    def add_worktree(self, path: str, branch: Optional[str] = None, force: bool = False) -> Worktree:
        """Create a worktree at path, checking out an existing branch if given."""
        args = ["add"]
        if force:
            args.append("--force")
        args.append(path)
        if branch:
            args.append(branch)

        self._run_worktree("worktree add", *args)
        logger.info(f"Created worktree at {path}")
        return Worktree(path=path, branch=branch)

    def add_worktree_with_new_branch(self, path: str, branch: str, force: bool = False) -> Worktree:
        """Create a worktree at path on a new branch."""
        args = ["add"]
        if force:
            args.append("--force")
        args.extend(["-b", branch, path])

        self._run_worktree("worktree add", *args)
        logger.info(f"Created worktree at {path} on new branch {branch}")
        return Worktree(path=path, branch=branch)

    def add_worktree_tracking_remote(
        self, path: str, local_branch: str, remote_branch: str, force: bool = False
    ) -> Worktree:
        """Create a worktree at path on a new branch tracking remote_branch.

        Args:
            path: Worktree location
            local_branch: Name of the local branch to create
            remote_branch: Remote branch in <remote>/<branch> form, e.g. origin/feature

        Raises:
            RemoteFetchError: If the remote branch cannot be fetched
            GitOperationError: If the worktree cannot be created
        """
        remote, _, branch = remote_branch.partition("/")
        if not remote or not branch:
            raise RemoteFetchError(remote_branch, "expected <remote>/<branch>")

        try:
            self._get_repo().git.fetch(remote, branch)
        except git.exc.GitCommandError as e:
            error = to_operation_error("fetch", e)
            raise RemoteFetchError(remote_branch, error.message, error.status) from e
        logger.debug(f"Fetched {remote_branch}")

        args = ["add"]
        if force:
            args.append("--force")
        args.extend(["--track", "-b", local_branch, path, remote_branch])

        self._run_worktree("worktree add", *args)
        logger.info(f"Created worktree at {path} tracking {remote_branch}")
        return Worktree(path=path, branch=local_branch)

    def remove_worktree(self, path: str, force: bool = False) -> bool:
        """Remove the worktree at path.

        Args:
            path: Path to the worktree directory
            force: Force removal even if working tree is dirty or locked
        """
        args = ["remove"]
        if force:
            args.append("--force")
        args.append(path)

        self._run_worktree("worktree remove", *args)
        logger.info(f"Removed worktree at {path}")
        return True

    def prune_worktrees(self) -> bool:
        """Prune metadata of worktrees whose directories are gone."""
        self._run_worktree("worktree prune", "prune")
        logger.info("Pruned orphaned worktree metadata")
        return True
