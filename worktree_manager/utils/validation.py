"""Branch name validation."""

import re
from typing import Optional

_INVALID_BRANCH_PATTERNS = [
    re.compile(r"\s"),  # whitespace
    re.compile(r"\.\."),  # consecutive dots
    re.compile(r"^[.\-]"),  # leading dot or dash
    re.compile(r"[.\-]$"),  # trailing dot or dash
    re.compile(r"[~^:?*\[\]\\]"),  # special characters
]


def is_valid_branch_name(branch_name: Optional[str]) -> bool:
    """Check a branch name against the basic git ref naming rules."""
    if branch_name is None or not branch_name.strip():
        return False
    return not any(pattern.search(branch_name) for pattern in _INVALID_BRANCH_PATTERNS)
