"""Parser for `git worktree list --porcelain` output."""

import re
from typing import Any, Dict, List

from worktree_manager.models.worktree import Worktree

# Format:
# worktree /path/to/worktree
# HEAD commit_sha
# branch refs/heads/branch-name    (or a bare "detached" line)
# bare                             (main worktree of a bare repository)
# (blank line between worktrees)
_WORKTREE_RE = re.compile(r"^worktree (.+)$")
_HEAD_RE = re.compile(r"^HEAD (.+)$")
_BRANCH_RE = re.compile(r"^branch (.+)$")


def _emit(worktrees: List[Worktree], fields: Dict[str, Any]) -> None:
    # Only records that have a path are real worktrees
    if fields.get("path"):
        worktrees.append(Worktree(**fields))


def parse_worktree_list(output: str) -> List[Worktree]:
    """Parse porcelain worktree output into Worktree records, in input order.

    Unknown lines (locked, prunable, ...) are ignored.
    """
    worktrees: List[Worktree] = []
    current: Dict[str, Any] = {}

    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue

        match = _WORKTREE_RE.match(line)
        if match:
            _emit(worktrees, current)
            current = {"path": match.group(1)}
            continue

        if not current:
            # Fields before the first worktree line have nothing to attach to
            continue

        match = _HEAD_RE.match(line)
        if match:
            current["head"] = match.group(1)
            continue

        match = _BRANCH_RE.match(line)
        if match:
            current["branch"] = match.group(1)
            continue

        if line == "detached":
            current["detached"] = True
        elif line == "bare":
            current["bare"] = True

    _emit(worktrees, current)
    return worktrees
