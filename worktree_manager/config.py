"""Configuration handling for worktree-manager"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from worktree_manager.constants import (
    DEFAULT_CONFIG_FILES,
    DEFAULT_MAIN_BRANCH,
    DEFAULT_WORKTREES_DIR,
    HOOK_TYPES,
)
from worktree_manager.logging_config import get_logger
from worktree_manager.models.hook import HookDefinition, normalize_hook_definition

logger = get_logger(__name__)


@dataclass
class Config:
    """Configuration loaded from .worktree.yml."""

    worktrees_dir: str = DEFAULT_WORKTREES_DIR
    main_branch_name: str = DEFAULT_MAIN_BRANCH
    hooks: Dict[str, HookDefinition] = field(default_factory=dict)

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_worktrees_dir()
        self._validate_main_branch_name()

    def _validate_worktrees_dir(self):
        """Fall back to the default when worktrees_dir is unusable."""
        if not isinstance(self.worktrees_dir, str) or not self.worktrees_dir.strip():
            logger.warning(
                f"Invalid worktrees_dir {self.worktrees_dir!r}, using {DEFAULT_WORKTREES_DIR!r}"
            )
            self.worktrees_dir = DEFAULT_WORKTREES_DIR

    def _validate_main_branch_name(self):
        """Fall back to the default when main_branch_name is unusable."""
        if not isinstance(self.main_branch_name, str) or not self.main_branch_name.strip():
            logger.warning(
                f"Invalid main_branch_name {self.main_branch_name!r}, using {DEFAULT_MAIN_BRANCH!r}"
            )
            self.main_branch_name = DEFAULT_MAIN_BRANCH
        self.main_branch_name = self.main_branch_name.strip()

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "Config":
        """Create Config from a parsed YAML document.

        Hooks are read from the ``hooks`` section when present, otherwise from
        hook names at the top level (older configuration files).
        """
        if "hooks" in config_dict:
            raw_hooks = config_dict.get("hooks") or {}
            if not isinstance(raw_hooks, dict):
                logger.warning(f"Ignoring 'hooks' section, expected a mapping: {raw_hooks!r}")
                raw_hooks = {}
        else:
            raw_hooks = config_dict

        hooks: Dict[str, HookDefinition] = {}
        for hook_name in HOOK_TYPES:
            definition = normalize_hook_definition(hook_name, raw_hooks.get(hook_name))
            if definition is not None:
                hooks[hook_name] = definition

        kwargs: Dict[str, Any] = {"hooks": hooks}
        if config_dict.get("worktrees_dir") is not None:
            kwargs["worktrees_dir"] = config_dict["worktrees_dir"]
        if config_dict.get("main_branch_name") is not None:
            kwargs["main_branch_name"] = config_dict["main_branch_name"]
        return cls(**kwargs)


class ConfigManager:
    """Locates, loads and queries the repository configuration file."""

    def __init__(self, repository_path: str = "."):
        """Initialize the config manager.

        Args:
            repository_path: Path to the main repository root
        """
        self.repository_path = os.path.abspath(repository_path)
        self.config_file = self._find_config_file()
        self.config = self._load_config()

    @property
    def worktrees_dir(self) -> str:
        return self.config.worktrees_dir

    @property
    def main_branch_name(self) -> str:
        return self.config.main_branch_name

    @property
    def hooks(self) -> Dict[str, HookDefinition]:
        return self.config.hooks

    def get_hook(self, hook_name: str) -> Optional[HookDefinition]:
        return self.config.hooks.get(hook_name)

    def resolve_worktree_path(self, name_or_path: str) -> str:
        """Turn a worktree name or path into an absolute path.

        Absolute paths are returned unchanged, paths containing a separator are
        resolved against the repository root, and bare names are placed in the
        configured worktrees directory.
        """
        if os.path.isabs(name_or_path):
            return name_or_path

        if "/" in name_or_path or os.sep in name_or_path:
            return os.path.normpath(os.path.join(self.repository_path, name_or_path))

        base_dir = os.path.normpath(os.path.join(self.repository_path, self.worktrees_dir))
        return os.path.normpath(os.path.join(base_dir, name_or_path))

    def _find_config_file(self) -> Optional[str]:
        for candidate in DEFAULT_CONFIG_FILES:
            path = os.path.join(self.repository_path, candidate)
            if os.path.isfile(path):
                return path
        return None

    def _load_config(self) -> Config:
        if not self.config_file:
            logger.debug(f"No configuration file found in {self.repository_path}")
            return Config()

        try:
            with open(self.config_file, encoding="utf-8") as handle:
                data = yaml.safe_load(handle)
        except (yaml.YAMLError, OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to load config file {self.config_file}: {e}")
            return Config()

        if data is None:
            return Config()
        if not isinstance(data, dict):
            logger.warning(
                f"Failed to load config file {self.config_file}: expected a mapping, "
                f"got {type(data).__name__}"
            )
            return Config()

        logger.debug(f"Loaded configuration from {self.config_file}")
        return Config.from_dict(data)
