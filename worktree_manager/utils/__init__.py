"""Utility functions for worktree-manager.

This package provides utility modules:
- repository: Locating the main repository from any working copy
- validation: Branch name checks
"""

from .repository import (
    find_main_repository_path,
    find_working_copy_root,
    is_main_repository,
    is_main_working_copy,
)
from .validation import is_valid_branch_name

__all__ = [
    # Repository
    "find_main_repository_path",
    "find_working_copy_root",
    "is_main_repository",
    "is_main_working_copy",
    # Validation
    "is_valid_branch_name",
]
