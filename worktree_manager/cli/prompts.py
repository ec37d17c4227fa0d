"""Interactive prompts for the CLI."""

import sys
from typing import List, Optional

from rich.console import Console
from rich.prompt import Confirm, IntPrompt

from worktree_manager.exceptions import CommandError
from worktree_manager.models.worktree import Worktree
from worktree_manager.services.display_service import DisplayService

# Prompts go to stderr so `cd "$(wm jump)"` only captures the selected path
console = Console(stderr=True)


def interactive_mode_available() -> bool:
    return sys.stdin.isatty() and sys.stderr.isatty()


def select_worktree_interactive(worktrees: List[Worktree], current_path: Optional[str] = None) -> Worktree:
    """Ask the user to pick one of the worktrees.

    Raises:
        CommandError: Without a TTY
    """
    if not interactive_mode_available():
        raise CommandError("Interactive mode requires a TTY. Please specify a worktree name.")

    display = DisplayService(console)
    for index, worktree in enumerate(worktrees, start=1):
        label = display.worktree_label(worktree, current_path)
        console.print(f"  [cyan]{index}[/cyan]) {label} [dim]{worktree.path}[/dim]")

    choice = IntPrompt.ask(
        "Select a worktree",
        console=console,
        choices=[str(i) for i in range(1, len(worktrees) + 1)],
        show_choices=False,
    )
    return worktrees[choice - 1]


def confirm(question: str, default: bool = False) -> bool:
    return Confirm.ask(question, console=console, default=default)
