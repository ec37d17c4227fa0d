"""Helpers for locating the main repository."""

import os
from typing import Optional

import git

from worktree_manager.logging_config import get_logger
from worktree_manager.services.git.porcelain import parse_worktree_list

logger = get_logger(__name__)


def is_main_repository(path: str) -> bool:
    """Main repository has .git as a directory, worktrees have .git as a file."""
    return os.path.isdir(os.path.join(path, ".git"))


def is_main_working_copy(path: str) -> bool:
    """Check whether path is the root of a main (non-worktree) working copy."""
    git_path = os.path.join(path, ".git")
    if os.path.isdir(git_path):
        return True
    if os.path.isfile(git_path):
        with open(git_path, encoding="utf-8", errors="replace") as handle:
            return not handle.read().strip().startswith("gitdir:")
    return False


def find_working_copy_root(path: str) -> Optional[str]:
    """Top-level directory of the working copy (main or worktree) containing path."""
    try:
        repo = git.Repo(path, search_parent_directories=True)
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
        return None
    return repo.working_tree_dir


def find_main_repository_path(path: str) -> Optional[str]:
    """Find the main repository root from path, which may be inside a worktree.

    Returns:
        Absolute path of the main repository, or None outside of a repository
    """
    try:
        repo = git.Repo(path, search_parent_directories=True)
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
        return None

    try:
        common_dir = repo.git.rev_parse("--path-format=absolute", "--git-common-dir").strip()
    except git.exc.GitCommandError as e:
        logger.debug(f"rev-parse --git-common-dir failed: {e}")
        common_dir = ""

    if common_dir:
        common_dir = os.path.normpath(common_dir)
        candidate = os.path.dirname(common_dir) if common_dir.endswith(".git") else common_dir
        if is_main_repository(candidate):
            return candidate

    # First entry of the worktree list is the main working copy
    try:
        worktrees = parse_worktree_list(repo.git.worktree("list", "--porcelain"))
    except git.exc.GitCommandError as e:
        logger.debug(f"git worktree list failed: {e}")
        return None
    return worktrees[0].path if worktrees else None
