"""Hook execution service.

Runs the commands configured for a lifecycle hook (``pre_add``, ``post_add``,
``pre_remove``, ``post_remove``) through the shell. Each command gets a
minimal environment plus ``WORKTREE_*`` variables built from the execution
context, and its stdout/stderr are streamed line by line while it runs.
"""

import os
import re
import subprocess
import sys
import threading
import time
from typing import IO, Any, Dict, List, Mapping, Optional, TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

from worktree_manager.constants import (
    ENV_ABSOLUTE_PATH,
    ENV_MAIN,
    ENV_MANAGER_ROOT,
    ENV_PREFIX,
    HOOK_TYPES,
    SAFE_ENV_KEYS,
    WORKTREE_CWD_HOOKS,
)
from worktree_manager.logging_config import get_logger
from worktree_manager.models.hook import HookDefinition, HookPolicy

if TYPE_CHECKING:
    from worktree_manager.config import ConfigManager

logger = get_logger(__name__)

# $NAME or ${NAME}
_VARIABLE_RE = re.compile(r"\$(?:\{([A-Za-z_][A-Za-z0-9_]*)\}|([A-Za-z_][A-Za-z0-9_]*))")


def format_env_value(value: Any) -> str:
    """Render a context value for use in an environment variable."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class HookManager:
    """Executes configured hooks for worktree lifecycle events."""

    def __init__(
        self,
        repository_path: str,
        hooks: Optional[Mapping[str, HookDefinition]] = None,
        env: Optional[Mapping[str, str]] = None,
        verbose: bool = False,
        stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None,
    ):
        """Initialize the hook manager.

        Args:
            repository_path: Main repository root, default working directory for hooks
            hooks: Normalized hook definitions by hook name
            env: Environment snapshot; defaults to a copy of os.environ taken now
            verbose: Log command output and timings at INFO level
            stdout: Stream for hook stdout (defaults to sys.stdout at execution time)
            stderr: Stream for hook stderr and failure reports (defaults to sys.stderr at
                execution time)
        """
        self.repository_path = os.path.abspath(repository_path)
        self.hooks: Dict[str, HookDefinition] = dict(hooks or {})
        self._environ: Dict[str, str] = dict(os.environ if env is None else env)
        self._base_env: Dict[str, str] = {
            key: self._environ[key] for key in SAFE_ENV_KEYS if key in self._environ
        }
        self.verbose = verbose
        self._stdout = stdout
        self._stderr = stderr
        self.console = Console(file=stderr, stderr=stderr is None, highlight=False)

    @classmethod
    def from_config(cls, config_manager: "ConfigManager", **kwargs) -> "HookManager":
        """Create a HookManager for the repository a ConfigManager was loaded from."""
        return cls(config_manager.repository_path, config_manager.hooks, **kwargs)

    def _trace(self, message: str) -> None:
        if self.verbose:
            logger.info(message)
        else:
            logger.debug(message)

    def has_hook(self, hook_name: str) -> bool:
        definition = self.hooks.get(hook_name)
        return hook_name in HOOK_TYPES and definition is not None and not definition.is_empty

    def list_hooks(self) -> Dict[str, HookDefinition]:
        """Recognized hooks that have at least one command."""
        return {name: self.hooks[name] for name in HOOK_TYPES if self.has_hook(name)}

    def execute(self, hook_name: str, context: Optional[Mapping[str, Any]] = None) -> bool:
        """Run a hook.

        Args:
            hook_name: One of pre_add, post_add, pre_remove, post_remove
            context: Runtime values exposed to commands as WORKTREE_<KEY>

        Returns:
            True if the hook succeeded or there was nothing to run, False otherwise
        """
        context = context or {}
        if hook_name not in HOOK_TYPES:
            logger.debug(f"Ignoring unknown hook {hook_name}")
            return True

        definition = self.hooks.get(hook_name)
        if definition is None or definition.is_empty:
            logger.debug(f"No commands configured for {hook_name}")
            return True

        self._trace(f"Running hook {hook_name} ({len(definition.commands)} command(s))")
        logger.debug(f"Hook definition: {definition}")
        logger.debug(f"Context: {dict(context)}")

        env = self.build_env(context)
        cwd = self.resolve_working_directory(hook_name, definition, context)

        result = True
        for command in definition.commands:
            succeeded = self._run_command(command, env, cwd)
            if succeeded:
                continue
            if definition.policy is HookPolicy.STOP_ON_ERROR:
                result = False
                break
            if definition.policy is HookPolicy.ALL_MUST_SUCCEED:
                result = False
            # HookPolicy.CONTINUE: keep going, hook still succeeds

        self._trace(f"Hook {hook_name} finished (result: {result})")
        return result

    def absolute_path(self, context: Mapping[str, Any]) -> Optional[str]:
        """Context path resolved against the repository root."""
        path = context.get("path")
        if path is None or path == "":
            return None
        path = str(path)
        if os.path.isabs(path):
            return path
        return os.path.normpath(os.path.join(self.repository_path, path))

    def build_env(self, context: Mapping[str, Any]) -> Dict[str, str]:
        """Build the environment for hook commands.

        Only a few safe variables are inherited from the parent environment.
        """
        env = dict(self._base_env)
        env[ENV_MANAGER_ROOT] = self.repository_path
        env[ENV_MAIN] = self.repository_path

        for key, value in context.items():
            env[f"{ENV_PREFIX}{str(key).upper()}"] = format_env_value(value)

        absolute_path = self.absolute_path(context)
        if absolute_path is not None:
            env[ENV_ABSOLUTE_PATH] = absolute_path

        worktree_vars = {k: v for k, v in env.items() if k.startswith(ENV_PREFIX)}
        logger.debug(f"Environment: {worktree_vars}")
        return env

    def substitute_variables(self, template: str, context: Mapping[str, Any]) -> str:
        """Expand $NAME and ${NAME} placeholders.

        WORKTREE_* names come from the context and repository root, other names
        from the environment snapshot. Unknown names are left as written.
        """
        lowered = {str(key).lower(): value for key, value in context.items()}

        def replace(match: "re.Match[str]") -> str:
            name = match.group(1) or match.group(2)
            if name == ENV_ABSOLUTE_PATH:
                absolute_path = self.absolute_path(context)
                return absolute_path if absolute_path is not None else match.group(0)
            if name in (ENV_MAIN, ENV_MANAGER_ROOT):
                return self.repository_path
            if name.startswith(ENV_PREFIX):
                key = name[len(ENV_PREFIX):].lower()
                if key in lowered:
                    return format_env_value(lowered[key])
                return match.group(0)
            return self._environ.get(name, match.group(0))

        return _VARIABLE_RE.sub(replace, template)

    def resolve_working_directory(
        self, hook_name: str, definition: HookDefinition, context: Mapping[str, Any]
    ) -> str:
        """Working directory for the commands of a hook."""
        if definition.pwd:
            pwd = self.substitute_variables(definition.pwd, context)
            if os.path.isabs(pwd):
                return pwd
            return os.path.normpath(os.path.join(self.repository_path, pwd))

        if hook_name in WORKTREE_CWD_HOOKS:
            absolute_path = self.absolute_path(context)
            if absolute_path is not None and os.path.isdir(absolute_path):
                return absolute_path

        return self.repository_path

    def _run_command(self, command: str, env: Dict[str, str], cwd: str) -> bool:
        """Run one command through the shell, streaming its output.

        Raises:
            OSError: If the process cannot be started
        """
        if not os.path.isdir(cwd):
            self.console.print(f"[red]Hook failed:[/red] {escape(command)}")
            self.console.print(f"[red]Working directory does not exist: {escape(cwd)}[/red]")
            return False

        self._trace(f"Executing: {command} (in {cwd})")
        start_time = time.monotonic()

        process = subprocess.Popen(
            command,
            shell=True,
            cwd=cwd,
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
            bufsize=1,
        )

        threads: List[threading.Thread] = [
            threading.Thread(
                target=self._pump, args=(process.stdout, self._stdout or sys.stdout), daemon=True
            ),
            threading.Thread(
                target=self._pump, args=(process.stderr, self._stderr or sys.stderr), daemon=True
            ),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        exit_code = process.wait()

        duration_ms = (time.monotonic() - start_time) * 1000
        self._trace(f"Command finished in {duration_ms:.2f}ms (exit {exit_code})")

        if exit_code != 0:
            self.console.print(f"[red]Hook failed:[/red] {escape(command)} (exit {exit_code})")
            return False
        return True

    @staticmethod
    def _pump(pipe: IO[str], target: IO[str]) -> None:
        with pipe:
            for line in iter(pipe.readline, ""):
                target.write(line)
                target.flush()
