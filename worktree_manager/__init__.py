"""
worktree-manager - Parallel git worktrees with lifecycle hooks
"""

from .__version__ import __version__
from .models.worktree import Worktree
from .config import ConfigManager
from .services.hook_service import HookManager
from .services.git import WorktreeService, parse_worktree_list

__all__ = [
    "Worktree",
    "ConfigManager",
    "HookManager",
    "WorktreeService",
    "parse_worktree_list",
    "__version__",
]
