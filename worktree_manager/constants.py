"""Shared constants for worktree-manager."""

from typing import Tuple

# Lifecycle hooks, in the order they fire around a worktree operation
HOOK_TYPES: Tuple[str, ...] = ("pre_add", "post_add", "pre_remove", "post_remove")

# Hooks whose default working directory is the worktree itself
WORKTREE_CWD_HOOKS: Tuple[str, ...] = ("post_add", "pre_remove")

# Candidate configuration files, relative to the main repository root
DEFAULT_CONFIG_FILES: Tuple[str, ...] = (".worktree.yml", ".git/.worktree.yml")
CONFIG_FILE_NAME = ".worktree.yml"
CONFIG_TEMPLATE_NAME = "worktree.yml.example"

DEFAULT_WORKTREES_DIR = "../"
DEFAULT_MAIN_BRANCH = "main"

# Environment handed to hook commands
ENV_PREFIX = "WORKTREE_"
ENV_MANAGER_ROOT = "WORKTREE_MANAGER_ROOT"
ENV_MAIN = "WORKTREE_MAIN"
ENV_ABSOLUTE_PATH = "WORKTREE_ABSOLUTE_PATH"

# Only these keys are copied from the parent environment into hook processes
SAFE_ENV_KEYS: Tuple[str, ...] = ("PATH", "HOME", "USER", "SHELL", "LANG", "TERM")

# git reports this when removing a worktree with local changes
DIRTY_WORKTREE_MESSAGE = "contains modified or untracked files"
