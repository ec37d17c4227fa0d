"""Tests for repository helpers, branch validation and table display"""
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from worktree_manager.models.worktree import Worktree
from worktree_manager.services.display_service import DisplayService
from worktree_manager.utils import (
    find_main_repository_path,
    find_working_copy_root,
    is_main_repository,
    is_main_working_copy,
    is_valid_branch_name,
)


@pytest.fixture
def linked_worktree(git_repo, temp_dir):
    path = temp_dir / "linked"
    git_repo.git.worktree("add", "-b", "linked", str(path))
    return path


class TestRepositoryHelpers:
    """Test main repository detection."""

    def test_main_repository(self, repo_path):
        assert is_main_repository(repo_path) is True
        assert is_main_working_copy(repo_path) is True

    def test_linked_worktree(self, linked_worktree):
        assert is_main_repository(str(linked_worktree)) is False
        assert is_main_working_copy(str(linked_worktree)) is False

    def test_plain_directory(self, temp_dir):
        assert is_main_repository(str(temp_dir)) is False
        assert is_main_working_copy(str(temp_dir)) is False

    def test_git_file_without_gitdir(self, temp_dir):
        """A .git file that is not a worktree pointer counts as a main working copy."""
        Path(temp_dir, ".git").write_text("something else\n")
        assert is_main_working_copy(str(temp_dir)) is True

    def test_working_copy_root_from_subdirectory(self, repo_path):
        subdir = Path(repo_path, "src", "pkg")
        subdir.mkdir(parents=True)
        assert find_working_copy_root(str(subdir)) == repo_path

    def test_working_copy_root_outside_repository(self, temp_dir):
        assert find_working_copy_root(str(temp_dir)) is None

    def test_main_repository_path_from_main(self, repo_path):
        assert find_main_repository_path(repo_path) == repo_path

    def test_main_repository_path_from_worktree(self, repo_path, linked_worktree):
        assert find_main_repository_path(str(linked_worktree)) == repo_path

    def test_main_repository_path_outside_repository(self, temp_dir):
        assert find_main_repository_path(str(temp_dir)) is None


class TestBranchNameValidation:
    """Test branch name validation."""

    @pytest.mark.parametrize("name", ["main", "feature/login", "fix-123", "release_1.2"])
    def test_valid_names(self, name):
        assert is_valid_branch_name(name) is True

    @pytest.mark.parametrize(
        "name",
        [None, "", "   ", "has space", "a..b", ".hidden", "-dash", "ends.", "ends-",
         "tilde~1", "caret^", "colon:x", "what?", "star*", "[x]", "back\\slash"],
    )
    def test_invalid_names(self, name):
        assert is_valid_branch_name(name) is False


class TestDisplayService:
    """Test the worktree table."""

    @pytest.fixture
    def output(self):
        return StringIO()

    @pytest.fixture
    def display(self, output):
        return DisplayService(Console(file=output, width=200, color_system=None))

    def test_table_rows(self, display, output, repo_path, linked_worktree):
        worktrees = [
            Worktree(path=repo_path, branch="refs/heads/main", head="a" * 40),
            Worktree(path=str(linked_worktree), branch="refs/heads/linked", head="b" * 40),
        ]
        display.display_worktree_table(worktrees, repo_path)
        text = output.getvalue()
        assert "* test_repo (main)" in text
        assert "linked" in text
        assert "aaaaaaaa" in text
        assert "a" * 9 not in text
        assert str(linked_worktree) in text

    def test_detached_and_bare(self, display, output):
        worktrees = [
            Worktree(path="/srv/project.git", bare=True),
            Worktree(path="/srv/detached", head="c" * 40, detached=True),
        ]
        display.display_worktree_table(worktrees)
        text = output.getvalue()
        assert "project.git (bare)" in text
        assert "cccccccc" in text

    def test_is_current(self, repo_path):
        worktree = Worktree(path=repo_path)
        assert DisplayService.is_current(worktree, repo_path) is True
        assert DisplayService.is_current(worktree, str(Path(repo_path, "sub"))) is True
        assert DisplayService.is_current(worktree, repo_path + "-other") is False
        assert DisplayService.is_current(worktree, None) is False

    def test_worktree_label(self, display, repo_path):
        worktree = Worktree(path=repo_path, branch="refs/heads/main")
        assert display.worktree_label(worktree) == "test_repo - main"
        assert display.worktree_label(worktree, repo_path) == "test_repo - main (current)"
