"""Display and formatting service for worktree information"""
import os
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from worktree_manager.logging_config import get_logger
from worktree_manager.models.worktree import Worktree

console = Console()
logger = get_logger(__name__)


class DisplayService:
    def __init__(self, output_console: Optional[Console] = None):
        self.console = output_console or console

    @staticmethod
    def is_current(worktree: Worktree, current_path: Optional[str]) -> bool:
        """Check whether current_path is inside the worktree."""
        if not current_path:
            return False
        worktree_path = os.path.realpath(worktree.path)
        current = os.path.realpath(current_path)
        return current == worktree_path or current.startswith(worktree_path + os.sep)

    def display_worktree_table(self, worktrees: List[Worktree], current_path: Optional[str] = None) -> None:
        """Display a table of worktrees, main working copy first."""
        table = Table()
        table.add_column("Name")
        table.add_column("Branch")
        table.add_column("HEAD")
        table.add_column("Path")

        for worktree in worktrees:
            name = worktree.name
            if worktree.is_main_repository():
                name += " (main)"
            if worktree.bare:
                name += " (bare)"

            row_style = None
            if self.is_current(worktree, current_path):
                name = f"* {name}"
                row_style = "green"
            elif not worktree.exists():
                row_style = "yellow"

            table.add_row(
                name,
                worktree.display_branch,
                (worktree.head or "")[:8],
                worktree.path,
                style=row_style,
            )

        self.console.print(table)
        logger.debug(f"Displayed {len(worktrees)} worktrees")

    def worktree_label(self, worktree: Worktree, current_path: Optional[str] = None) -> str:
        """One-line label used in selection prompts."""
        label = f"{worktree.name} - {worktree.display_branch}"
        if self.is_current(worktree, current_path):
            label += " (current)"
        return label
