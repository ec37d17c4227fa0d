"""Entry point for the worktree-manager CLI"""

import os
import sys
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from worktree_manager.cli.args import parse_args
from worktree_manager.cli.commands import COMMANDS
from worktree_manager.exceptions import CommandError, WorktreeManagerError
from worktree_manager.logging_config import setup_logging

console = Console(stderr=True, highlight=False, soft_wrap=True)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    parsed_args = None
    try:
        parsed_args = parse_args(argv)
        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

        command = COMMANDS[parsed_args.command]
        return command(parsed_args, os.getcwd())
    except CommandError as e:
        console.print(f"[red]Error: {escape(e.message)}[/red]")
        for hint in e.hints:
            console.print(escape(hint))
        return 1
    except WorktreeManagerError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if parsed_args is not None and parsed_args.debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
