"""Git-related services for worktree-manager."""

from .porcelain import parse_worktree_list
from .worktrees import WorktreeService
from .operations import GitOperations

__all__ = [
    "parse_worktree_list",
    "WorktreeService",
    "GitOperations",
]
