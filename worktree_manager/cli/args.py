"""Command-line argument parsing for worktree-manager."""

import argparse
from typing import List, Optional

from worktree_manager.__version__ import __version__


def _add_hooks_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--no-hooks", dest="no_hooks", action="store_true", help="Skip hook execution"
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with one sub-command per operation."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v", "--verbose", action="store_true", default=argparse.SUPPRESS,
        help="Enable verbose output for debugging",
    )
    common.add_argument(
        "--debug", action="store_true", default=argparse.SUPPRESS,
        help="Show debug logging and write a log file to ~/.worktree-manager",
    )

    parser = argparse.ArgumentParser(
        prog="wm",
        description="Manage git worktrees with lifecycle hooks",
        epilog="Hooks and the worktrees directory are configured in .worktree.yml "
        "(run 'wm init' to create one).",
        parents=[common],
    )
    parser.add_argument("--version", action="version", version=f"worktree-manager {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    subparsers.add_parser("version", parents=[common], help="Show version")

    init = subparsers.add_parser(
        "init", parents=[common], help="Initialize worktree configuration file"
    )
    init.add_argument(
        "-f", "--force", action="store_true", help="Force overwrite existing .worktree.yml"
    )

    subparsers.add_parser("list", parents=[common], help="List all worktrees")

    add = subparsers.add_parser(
        "add",
        parents=[common],
        help="Create a new worktree",
        description="Create a new worktree. NAME_OR_PATH may be a simple name (created in "
        "the configured worktrees_dir), a relative path or an absolute path.",
    )
    add.add_argument("name_or_path", metavar="NAME_OR_PATH", help="Worktree name or path")
    add.add_argument(
        "branch_arg", metavar="BRANCH", nargs="?", default=None,
        help="Existing branch to check out (or <remote>/<branch> to track)",
    )
    add.add_argument("-b", "--branch", metavar="NEW_BRANCH", help="Create a new branch for the worktree")
    add.add_argument(
        "-t", "--track", metavar="REMOTE_BRANCH", nargs="?", const=True, default=None,
        help="Track a remote branch (e.g. origin/feature)",
    )
    add.add_argument(
        "-f", "--force", action="store_true", help="Force creation even if directory exists"
    )
    _add_hooks_flag(add)

    remove = subparsers.add_parser("remove", parents=[common], help="Remove an existing worktree")
    remove.add_argument(
        "name_or_path", metavar="NAME_OR_PATH", nargs="?", default=None,
        help="Worktree name or path (interactive selection if omitted)",
    )
    remove.add_argument(
        "-f", "--force", action="store_true", help="Force removal even if worktree has changes"
    )
    remove.add_argument("--all", action="store_true", help="Remove all worktrees at once")
    _add_hooks_flag(remove)

    jump = subparsers.add_parser(
        "jump", aliases=["move"], parents=[common],
        help="Print the path of a worktree (use with cd)",
    )
    jump.add_argument(
        "worktree_name", metavar="WORKTREE", nargs="?", default=None,
        help="Worktree name, branch or path fragment (interactive selection if omitted)",
    )

    reset = subparsers.add_parser(
        "reset", parents=[common], help="Reset current worktree branch to origin/<main branch>"
    )
    reset.add_argument(
        "-f", "--force", action="store_true",
        help="Force reset even if there are uncommitted changes",
    )

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    args = build_parser().parse_args(argv)
    # Global flags may appear before or after the sub-command
    args.verbose = getattr(args, "verbose", False)
    args.debug = getattr(args, "debug", False)
    if args.command == "move":
        args.command = "jump"
    return args
