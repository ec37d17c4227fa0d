"""Worktree data models."""

import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

BRANCH_REF_PREFIX = "refs/heads/"


@dataclass(frozen=True)
class Worktree:
    """A single working copy of the repository."""

    path: str
    branch: Optional[str] = None  # Full ref as reported by git, e.g. refs/heads/main
    head: Optional[str] = None
    detached: bool = False
    bare: bool = False

    @property
    def name(self) -> str:
        return os.path.basename(os.path.normpath(self.path))

    @property
    def branch_name(self) -> Optional[str]:
        """Branch name without the refs/heads/ prefix."""
        if self.branch and self.branch.startswith(BRANCH_REF_PREFIX):
            return self.branch[len(BRANCH_REF_PREFIX):]
        return self.branch

    @property
    def display_branch(self) -> str:
        return self.branch_name or "detached"

    def matches_branch(self, branch: str) -> bool:
        """Check whether this worktree has the given branch checked out."""
        if not self.branch:
            return False
        return branch in (self.branch, self.branch_name)

    def exists(self) -> bool:
        return os.path.isdir(self.path)

    def is_main_repository(self) -> bool:
        """Main working copy has .git as a directory, worktrees have a .git file."""
        return os.path.isdir(os.path.join(self.path, ".git"))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def __str__(self) -> str:
        if self.branch:
            return f"{self.path} ({self.branch_name})"
        return f"{self.path} ({self.head})"
