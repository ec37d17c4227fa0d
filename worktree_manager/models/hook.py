"""Hook definition model.

Hooks may be written in three shapes in the configuration file::

    pre_add: "echo single command"

    post_add:
      - bundle install
      - yarn install

    pre_remove:
      commands: [make clean, ./scripts/backup.sh]
      pwd: $WORKTREE_ABSOLUTE_PATH
      stop_on_error: false

A legacy ``command`` key is accepted in place of ``commands``. Every shape is
translated once, by :func:`normalize_hook_definition`, into a
:class:`HookDefinition`; nothing downstream looks at the raw YAML again.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Tuple

from worktree_manager.logging_config import get_logger

logger = get_logger(__name__)


class HookPolicy(Enum):
    """How failures of individual commands affect the hook result."""
    STOP_ON_ERROR = "stop_on_error"  # Stop at the first failure, hook fails
    CONTINUE = "continue"  # Run everything, hook succeeds
    ALL_MUST_SUCCEED = "all_must_succeed"  # Run everything, hook fails if any command failed


@dataclass(frozen=True)
class HookDefinition:
    """Normalized hook definition."""

    commands: Tuple[str, ...]
    pwd: Optional[str] = None
    stop_on_error: bool = True
    policy: HookPolicy = HookPolicy.STOP_ON_ERROR

    @property
    def is_empty(self) -> bool:
        return not self.commands


def _clean_commands(raw: Iterable[Any]) -> Tuple[str, ...]:
    commands = []
    for item in raw:
        if item is None:
            continue
        command = str(item).strip()
        if command:
            commands.append(command)
    return tuple(commands)


def normalize_hook_definition(hook_name: str, raw: Any) -> Optional[HookDefinition]:
    """Translate a raw YAML hook value into a HookDefinition.

    Returns None when the value has no usable shape.
    """
    if raw is None:
        return None

    if isinstance(raw, str):
        return HookDefinition(commands=_clean_commands([raw]), policy=HookPolicy.ALL_MUST_SUCCEED)

    if isinstance(raw, (list, tuple)):
        return HookDefinition(commands=_clean_commands(raw), policy=HookPolicy.ALL_MUST_SUCCEED)

    if isinstance(raw, dict):
        commands = raw.get("commands")
        if commands is None:
            commands = raw.get("command")
        if isinstance(commands, str):
            commands = [commands]
        elif not isinstance(commands, (list, tuple)):
            if commands is not None:
                logger.warning(f"Ignoring invalid 'commands' for hook {hook_name}: {commands!r}")
            commands = []

        pwd = raw.get("pwd")
        if pwd is not None:
            pwd = str(pwd).strip() or None

        stop_on_error = raw.get("stop_on_error", True)
        if not isinstance(stop_on_error, bool):
            logger.warning(
                f"Hook {hook_name}: stop_on_error should be true or false, got {stop_on_error!r}"
            )
            stop_on_error = bool(stop_on_error)

        return HookDefinition(
            commands=_clean_commands(commands),
            pwd=pwd,
            stop_on_error=stop_on_error,
            policy=HookPolicy.STOP_ON_ERROR if stop_on_error else HookPolicy.CONTINUE,
        )

    logger.warning(f"Ignoring hook {hook_name} with unsupported definition: {raw!r}")
    return None
