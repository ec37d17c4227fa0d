"""CLI command implementations.

Each command takes the parsed arguments and the current working directory and
returns an exit code, or raises CommandError to exit with status 1.
"""

import os
import shutil
import sys
from argparse import Namespace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape

from worktree_manager.__version__ import __version__
from worktree_manager.config import ConfigManager
from worktree_manager.constants import CONFIG_FILE_NAME, CONFIG_TEMPLATE_NAME, DIRTY_WORKTREE_MESSAGE
from worktree_manager.exceptions import CommandError, GitOperationError
from worktree_manager.logging_config import get_logger
from worktree_manager.models.worktree import Worktree
from worktree_manager.services.display_service import DisplayService
from worktree_manager.services.git import GitOperations, WorktreeService
from worktree_manager.services.hook_service import HookManager
from worktree_manager.utils import (
    find_main_repository_path,
    find_working_copy_root,
    is_main_repository,
    is_main_working_copy,
    is_valid_branch_name,
)
from worktree_manager.cli.prompts import confirm, interactive_mode_available, select_worktree_interactive

console = Console(highlight=False, soft_wrap=True)
logger = get_logger(__name__)

TEMPLATE_PATH = Path(__file__).resolve().parent.parent / "templates" / CONFIG_TEMPLATE_NAME


def _same_path(first: str, second: str) -> bool:
    return os.path.realpath(first) == os.path.realpath(second)


def _find_worktree(worktrees: List[Worktree], path: str) -> Optional[Worktree]:
    return next((wt for wt in worktrees if _same_path(wt.path, path)), None)


def _require_main_repository(cwd: str) -> str:
    """Return cwd if it is the main repository root, otherwise abort."""
    if is_main_working_copy(cwd):
        return os.path.abspath(cwd)

    hints = []
    main_repo_path = find_main_repository_path(cwd)
    if main_repo_path:
        hints = ["To enter the main repository, run:", f"  cd {main_repo_path}"]
    raise CommandError(
        "This command can only be run from the main Git repository (not from a worktree).", hints
    )


def _resolve_main_repository(cwd: str) -> str:
    main_repo_path = find_main_repository_path(cwd)
    if main_repo_path is None:
        raise CommandError("Not in a Git repository.")
    return main_repo_path


def _run_hook(hooks: HookManager, args: Namespace, hook_name: str, context: Dict[str, Any]) -> bool:
    if getattr(args, "no_hooks", False):
        return True
    return hooks.execute(hook_name, context)


def _run_post_hook(hooks: HookManager, args: Namespace, hook_name: str, context: Dict[str, Any]) -> None:
    if not _run_hook(hooks, args, hook_name, context):
        console.print(f"[yellow]Warning: {hook_name} hook failed[/yellow]")


def cmd_version(args: Namespace, cwd: str) -> int:
    console.print(__version__)
    return 0


def cmd_init(args: Namespace, cwd: str) -> int:
    """Create .worktree.yml from the bundled example."""
    repo_path = _require_main_repository(cwd)
    config_file = os.path.join(repo_path, CONFIG_FILE_NAME)

    if os.path.exists(config_file) and not args.force:
        raise CommandError(f"{CONFIG_FILE_NAME} already exists. Use --force to overwrite.")
    if not TEMPLATE_PATH.is_file():
        raise CommandError(f"Could not find {CONFIG_TEMPLATE_NAME} file.")

    try:
        shutil.copyfile(TEMPLATE_PATH, config_file)
    except OSError as e:
        raise CommandError(f"Failed to create configuration file: {e}") from e

    console.print(f"Created {CONFIG_FILE_NAME} from example.")
    console.print("Edit this file to customize your worktree configuration.")
    return 0


def cmd_list(args: Namespace, cwd: str) -> int:
    """List worktrees; works from the main repository or any worktree."""
    main_repo_path = _resolve_main_repository(cwd)

    working_copy = find_working_copy_root(cwd)
    if working_copy and not _same_path(working_copy, main_repo_path):
        console.print(f"Running from worktree. Main repository: {main_repo_path}")
        console.print("To enter the main repository, run:")
        console.print(f"  cd {main_repo_path}")
        console.print()

    worktrees = WorktreeService(main_repo_path).list_worktrees()
    if not worktrees:
        console.print("No worktrees found.")
        return 0

    DisplayService(console).display_worktree_table(worktrees, cwd)
    return 0


def _resolve_add_branches(args: Namespace, git_ops: GitOperations) -> Tuple[Optional[str], Optional[str]]:
    """Work out the local branch and, when tracking, the remote branch.

    Returns:
        Tuple of (target_branch, remote_branch)
    """
    remote_branch = None
    target_branch = args.branch or args.branch_arg

    if args.track:
        if args.track is True:
            if not args.branch_arg:
                raise CommandError("--track requires a remote branch (e.g. origin/feature).")
            remote_branch = args.branch_arg
            target_branch = args.branch
        else:
            remote_branch = args.track
        if "/" not in remote_branch:
            raise CommandError(f"Remote branch '{remote_branch}' must look like <remote>/<branch>.")
        if not target_branch:
            target_branch = remote_branch.split("/", 1)[1]
    elif args.branch_arg and "/" in args.branch_arg:
        remote, _, branch = args.branch_arg.partition("/")
        if remote in git_ops.remote_names():
            remote_branch = args.branch_arg
            target_branch = args.branch or branch

    return target_branch, remote_branch


def _validate_no_conflicts(
    worktrees: List[Worktree],
    git_ops: GitOperations,
    path: str,
    branch: Optional[str],
    creates_branch: bool,
    force: bool,
) -> None:
    existing = _find_worktree(worktrees, path)
    if existing:
        raise CommandError(
            f"A worktree already exists at path '{path}'",
            [f"  Existing worktree: {existing}", "  Choose a different path"],
        )

    if branch and not creates_branch:
        checked_out = next((wt for wt in worktrees if wt.matches_branch(branch)), None)
        if checked_out:
            raise CommandError(
                f"Branch '{branch}' is already checked out in another worktree",
                [
                    f"  Existing worktree: {checked_out}",
                    "  Use a different branch name or -b option to create a new branch",
                ],
            )

    if branch and creates_branch and git_ops.branch_exists(branch):
        raise CommandError(
            f"Branch '{branch}' already exists",
            ["  Use a different branch name or checkout the existing branch"],
        )

    if not force and os.path.isdir(path) and os.listdir(path):
        raise CommandError(
            f"Directory '{path}' already exists and is not empty",
            ["  Use --force to override or choose a different path"],
        )


def cmd_add(args: Namespace, cwd: str) -> int:
    """Create a worktree, running pre_add and post_add hooks around it."""
    repo_path = _require_main_repository(cwd)

    if not args.name_or_path or not args.name_or_path.strip():
        raise CommandError("Name or path cannot be empty")

    config = ConfigManager(repo_path)
    path = config.resolve_worktree_path(args.name_or_path.strip())
    service = WorktreeService(repo_path)
    git_ops = GitOperations(repo_path)

    target_branch, remote_branch = _resolve_add_branches(args, git_ops)
    if target_branch and not is_valid_branch_name(target_branch):
        raise CommandError(
            f"Invalid branch name '{target_branch}'. "
            "Branch names cannot contain spaces or special characters."
        )

    creates_branch = bool(args.branch or remote_branch)
    _validate_no_conflicts(
        service.list_worktrees(), git_ops, path, target_branch, creates_branch, args.force
    )

    hooks = HookManager.from_config(config, verbose=args.verbose)
    context: Dict[str, Any] = {"path": path, "branch": target_branch, "force": args.force}

    if not _run_hook(hooks, args, "pre_add", context):
        _run_post_hook(
            hooks, args, "post_add", {**context, "success": False, "error": "pre_add hook failed"}
        )
        raise CommandError("pre_add hook failed. Aborting worktree creation.")

    try:
        if remote_branch:
            result = service.add_worktree_tracking_remote(
                path, target_branch, remote_branch, force=args.force
            )
        elif target_branch and args.branch:
            result = service.add_worktree_with_new_branch(path, target_branch, force=args.force)
        else:
            result = service.add_worktree(path, target_branch, force=args.force)
    except GitOperationError as e:
        _run_post_hook(hooks, args, "post_add", {**context, "success": False, "error": str(e)})
        raise CommandError(str(e)) from e

    # git picks the branch when none was given
    created = _find_worktree(service.list_worktrees(), result.path) or result
    console.print(f"Worktree created: {created.path} ({created.display_branch})")
    console.print("\nTo enter the worktree, run:")
    console.print(f"  cd {created.path}")

    _run_post_hook(
        hooks, args, "post_add", {**context, "success": True, "worktree_path": created.path}
    )
    return 0


def _remove_context(worktree: Worktree, force: bool) -> Dict[str, Any]:
    return {"path": worktree.path, "branch": worktree.branch_name, "force": force}


def _post_remove_failed(
    hooks: HookManager, args: Namespace, worktree: Worktree, error: GitOperationError
) -> None:
    _run_post_hook(
        hooks,
        args,
        "post_remove",
        {**_remove_context(worktree, args.force), "success": False, "error": str(error)},
    )


def _remove_with_hooks(
    service: WorktreeService,
    hooks: HookManager,
    args: Namespace,
    worktree: Worktree,
    indent: str = "",
) -> Optional[GitOperationError]:
    """Remove one worktree, running pre_remove and, on success, post_remove.

    When git refuses the removal the error is returned and post_remove is left
    to the caller, which may still retry with --force.

    Returns:
        None on success, the git error otherwise

    Raises:
        CommandError: If the pre_remove hook fails
    """
    context = _remove_context(worktree, args.force)

    if not _run_hook(hooks, args, "pre_remove", context):
        _run_post_hook(
            hooks, args, "post_remove", {**context, "success": False, "error": "pre_remove hook failed"}
        )
        raise CommandError("pre_remove hook failed. Aborting worktree removal.")

    try:
        service.remove_worktree(worktree.path, force=args.force)
    except GitOperationError as e:
        return e

    console.print(f"{indent}Worktree removed: {worktree.path}")
    _run_post_hook(hooks, args, "post_remove", {**context, "success": True})
    return None


def _force_remove(
    service: WorktreeService, hooks: HookManager, args: Namespace, worktree: Worktree, indent: str = ""
) -> bool:
    """Retry a removal with --force after the user agreed to lose local changes."""
    try:
        service.remove_worktree(worktree.path, force=True)
    except GitOperationError as e:
        console.print(f"{indent}[red]Error: {escape(str(e))}[/red]")
        _post_remove_failed(hooks, args, worktree, e)
        return False

    console.print(f"{indent}Worktree removed: {worktree.path}")
    _run_post_hook(
        hooks, args, "post_remove", {**_remove_context(worktree, True), "success": True}
    )
    return True


def _remove_all(service: WorktreeService, hooks: HookManager, args: Namespace, worktrees: List[Worktree]) -> int:
    removable = [wt for wt in worktrees if not wt.is_main_repository()]
    if not removable:
        console.print("No worktrees to remove (only main repository found).")
        return 0

    interactive = interactive_mode_available()
    if not args.force:
        if not interactive:
            raise CommandError(
                "Removing all worktrees requires confirmation.",
                ["Use --force to remove all worktrees without confirmation."],
            )
        console.print("The following worktrees will be removed:")
        for worktree in removable:
            console.print(f"  - {worktree.path} ({worktree.display_branch})")
        console.print()
        if not confirm(f"Are you sure you want to remove all {len(removable)} worktrees?"):
            console.print("Cancelled.")
            return 0

    can_retry = interactive and not args.force
    removed_count = 0
    failed_count = 0
    dirty: List[Tuple[Worktree, GitOperationError]] = []

    for worktree in removable:
        console.print(f"\nRemoving worktree: {worktree.path}")
        try:
            error = _remove_with_hooks(service, hooks, args, worktree, indent="  ")
        except CommandError as e:
            console.print(f"  [red]Error: {escape(e.message)} Skipping this worktree.[/red]")
            failed_count += 1
            continue

        if error is None:
            removed_count += 1
            continue

        console.print(f"  [red]Error: {escape(str(error))}[/red]")
        failed_count += 1
        if can_retry and DIRTY_WORKTREE_MESSAGE in str(error):
            dirty.append((worktree, error))
        else:
            _post_remove_failed(hooks, args, worktree, error)

    console.print("\nSummary:")
    console.print(f"  Removed: {removed_count} worktrees")
    if failed_count:
        console.print(f"  Failed: {failed_count} worktrees")

    if not dirty:
        return 1 if failed_count else 0

    console.print("\nThe following worktrees contain uncommitted changes:")
    for worktree, _ in dirty:
        console.print(f"  - {worktree.path} ({worktree.display_branch})")
    if not confirm(
        "\nWould you like to force remove these worktrees? "
        "This will delete all uncommitted changes."
    ):
        for worktree, error in dirty:
            _post_remove_failed(hooks, args, worktree, error)
        return 1

    for worktree, _ in dirty:
        console.print(f"\nRemoving worktree: {worktree.path}")
        if _force_remove(service, hooks, args, worktree, indent="  "):
            removed_count += 1
            failed_count -= 1

    console.print("\nUpdated Summary:")
    console.print(f"  Removed: {removed_count} worktrees")
    if failed_count:
        console.print(f"  Failed: {failed_count} worktrees")
    return 1 if failed_count else 0


def cmd_remove(args: Namespace, cwd: str) -> int:
    """Remove a worktree, running pre_remove and post_remove hooks around it."""
    repo_path = _require_main_repository(cwd)
    config = ConfigManager(repo_path)
    service = WorktreeService(repo_path)
    hooks = HookManager.from_config(config, verbose=args.verbose)

    if args.all:
        if args.name_or_path:
            raise CommandError("Cannot specify both --all and a specific worktree")
        worktrees = service.list_worktrees()
        if not worktrees:
            raise CommandError("No worktrees found.")
        return _remove_all(service, hooks, args, worktrees)

    if args.name_or_path is None:
        removable = [wt for wt in service.list_worktrees() if not wt.is_main_repository()]
        if not removable:
            raise CommandError("No removable worktrees found (only main repository exists).")
        target = select_worktree_interactive(removable, cwd)
    else:
        path = config.resolve_worktree_path(args.name_or_path)
        if is_main_repository(path):
            raise CommandError("Cannot remove the main repository")
        target = _find_worktree(service.list_worktrees(), path)
        if target is None:
            raise CommandError(f"Worktree not found at path: {path}")

    error = _remove_with_hooks(service, hooks, args, target)
    if error is None:
        return 0

    if DIRTY_WORKTREE_MESSAGE in str(error) and not args.force and interactive_mode_available():
        console.print(f"[red]Error: {escape(str(error))}[/red]")
        if confirm(
            "\nWould you like to force remove the worktree? "
            "This will delete all uncommitted changes."
        ):
            return 0 if _force_remove(service, hooks, args, target) else 1
        console.print("Removal cancelled.")
        _post_remove_failed(hooks, args, target, error)
        return 1

    _post_remove_failed(hooks, args, target, error)
    raise CommandError(str(error))


def _match_worktree(worktrees: List[Worktree], name: str) -> Optional[Worktree]:
    """Exact directory name first, then any path or branch containing name."""
    exact = next((wt for wt in worktrees if wt.name == name), None)
    if exact:
        return exact
    return next(
        (
            wt for wt in worktrees
            if name in wt.path or (wt.branch_name and name in wt.branch_name)
        ),
        None,
    )


def cmd_jump(args: Namespace, cwd: str) -> int:
    """Print a worktree path on stdout, for use as `cd "$(wm jump name)"`."""
    main_repo_path = _resolve_main_repository(cwd)
    worktrees = WorktreeService(main_repo_path).list_worktrees()
    if not worktrees:
        raise CommandError("No worktrees found.")

    if args.worktree_name is None:
        target = select_worktree_interactive(worktrees, cwd)
    else:
        target = _match_worktree(worktrees, args.worktree_name)
        if target is None:
            hints = ["", "Available worktrees:"]
            hints.extend(f"  - {wt.name} ({wt.display_branch})" for wt in worktrees)
            raise CommandError(f"Worktree '{args.worktree_name}' not found.", hints)

    sys.stdout.write(f"{target.path}\n")
    sys.stdout.flush()
    return 0


def cmd_reset(args: Namespace, cwd: str) -> int:
    """Reset the current worktree branch to origin/<main branch>."""
    working_copy = find_working_copy_root(cwd)
    if working_copy is None:
        raise CommandError("Not in a Git repository.")
    if is_main_working_copy(working_copy):
        raise CommandError(
            "Cannot run reset from the main repository. This command must be run from a worktree."
        )

    main_repo_path = _resolve_main_repository(cwd)
    main_branch = ConfigManager(main_repo_path).main_branch_name
    git_ops = GitOperations(working_copy)

    try:
        current_branch = git_ops.current_branch()
    except GitOperationError as e:
        raise CommandError("Could not determine current branch.") from e

    if current_branch == main_branch:
        raise CommandError(f"Cannot reset the main branch '{main_branch}'.")

    if not args.force and git_ops.has_uncommitted_changes():
        raise CommandError("You have uncommitted changes. Use --force to discard them.")

    console.print(f"Resetting branch '{current_branch}' to origin/{main_branch}...")

    try:
        git_ops.fetch("origin", main_branch)
    except GitOperationError as e:
        raise CommandError(f"Failed to fetch origin/{main_branch}: {e.message or e}") from e

    try:
        git_ops.reset_to(f"origin/{main_branch}", hard=args.force)
    except GitOperationError as e:
        raise CommandError(f"Failed to reset: {e.message or e}") from e

    console.print(f"Successfully reset '{current_branch}' to origin/{main_branch}")
    return 0


COMMANDS = {
    "version": cmd_version,
    "init": cmd_init,
    "list": cmd_list,
    "add": cmd_add,
    "remove": cmd_remove,
    "jump": cmd_jump,
    "reset": cmd_reset,
}
