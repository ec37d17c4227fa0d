"""Data models for worktree-manager."""

from .worktree import Worktree
from .hook import HookDefinition, HookPolicy, normalize_hook_definition

__all__ = ["Worktree", "HookDefinition", "HookPolicy", "normalize_hook_definition"]
