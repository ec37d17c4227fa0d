"""Services for worktree-manager."""

from .hook_service import HookManager
from .display_service import DisplayService
from .git import GitOperations, WorktreeService, parse_worktree_list

__all__ = [
    "HookManager",
    "DisplayService",
    "GitOperations",
    "WorktreeService",
    "parse_worktree_list",
]
