"""Tests for WorktreeService and GitOperations"""
import shutil
from pathlib import Path
from unittest.mock import patch

import git
import pytest

from worktree_manager.exceptions import GitOperationError, NotARepositoryError, RemoteFetchError
from worktree_manager.services.git import GitOperations, WorktreeService


class TestWorktreeServiceInit:
    """Test WorktreeService initialization."""

    def test_init_with_repo_path(self, repo_path):
        service = WorktreeService(repo_path)
        assert service.repo_path == repo_path

    def test_init_with_non_repository(self, temp_dir):
        with pytest.raises(NotARepositoryError) as exc_info:
            WorktreeService(str(temp_dir))
        assert str(temp_dir) in str(exc_info.value)

    def test_init_with_linked_worktree(self, git_repo, temp_dir):
        """Linked worktrees have a .git file, not the repository root."""
        worktree_path = temp_dir / "linked"
        git_repo.git.worktree("add", str(worktree_path))
        with pytest.raises(NotARepositoryError):
            WorktreeService(str(worktree_path))

    def test_not_a_repository_is_a_git_operation_error(self, temp_dir):
        with pytest.raises(GitOperationError):
            WorktreeService(str(temp_dir))


class TestListWorktrees:
    """Test listing worktrees."""

    def test_only_main_worktree(self, repo_path):
        worktrees = WorktreeService(repo_path).list_worktrees()
        assert len(worktrees) == 1
        assert worktrees[0].path == repo_path
        assert worktrees[0].branch_name == "main"
        assert worktrees[0].is_main_repository()

    def test_list_output_is_porcelain(self, repo_path):
        output = WorktreeService(repo_path).list_worktrees_output()
        assert output.startswith(f"worktree {repo_path}")

    def test_list_returns_empty_on_git_failure(self, repo_path):
        service = WorktreeService(repo_path)
        error = GitOperationError("worktree list", "fatal: broken", 128)
        with patch.object(service, "list_worktrees_output", side_effect=error):
            assert service.list_worktrees() == []


class TestAddWorktree:
    """Test creating worktrees."""

    def test_add_existing_branch(self, git_repo, repo_path, temp_dir):
        git_repo.git.branch("feature")
        path = str(temp_dir / "feature")
        service = WorktreeService(repo_path)

        worktree = service.add_worktree(path, "feature")

        assert worktree.path == path
        assert worktree.branch == "feature"
        assert Path(path, ".git").is_file()
        listed = service.list_worktrees()
        assert [wt.branch_name for wt in listed] == ["main", "feature"]

    def test_add_without_branch(self, repo_path, temp_dir):
        path = str(temp_dir / "auto")
        worktree = WorktreeService(repo_path).add_worktree(path)
        assert worktree.branch is None
        assert Path(path).is_dir()

    def test_add_with_new_branch(self, git_repo, repo_path, temp_dir):
        path = str(temp_dir / "new")
        worktree = WorktreeService(repo_path).add_worktree_with_new_branch(path, "brand-new")
        assert worktree.branch == "brand-new"
        assert "brand-new" in [head.name for head in git_repo.heads]

    def test_add_missing_branch_raises(self, repo_path, temp_dir):
        service = WorktreeService(repo_path)
        with pytest.raises(GitOperationError) as exc_info:
            service.add_worktree(str(temp_dir / "x"), "no-such-branch")
        assert exc_info.value.operation == "worktree add"
        assert exc_info.value.status not in (None, 0)
        assert exc_info.value.message

    def test_add_branch_already_checked_out_raises(self, repo_path, temp_dir):
        with pytest.raises(GitOperationError):
            WorktreeService(repo_path).add_worktree(str(temp_dir / "dup"), "main")


class TestTrackingWorktree:
    """Test creating worktrees that track a remote branch."""

    def test_add_tracking_remote(self, git_repo_with_remote, temp_dir):
        repo_path = str(Path(git_repo_with_remote.working_dir).resolve())
        path = str(temp_dir / "tracked")

        worktree = WorktreeService(repo_path).add_worktree_tracking_remote(
            path, "local-feature", "origin/feature/remote"
        )

        assert worktree.branch == "local-feature"
        assert (Path(path) / "remote.txt").exists()
        tracking = git_repo_with_remote.heads["local-feature"].tracking_branch()
        assert tracking is not None
        assert tracking.name == "origin/feature/remote"

    def test_fetch_failure_is_distinct(self, git_repo_with_remote, temp_dir):
        repo_path = str(Path(git_repo_with_remote.working_dir).resolve())
        service = WorktreeService(repo_path)
        with pytest.raises(RemoteFetchError) as exc_info:
            service.add_worktree_tracking_remote(str(temp_dir / "x"), "x", "origin/does-not-exist")
        assert exc_info.value.remote_branch == "origin/does-not-exist"
        assert not (temp_dir / "x").exists()

    def test_remote_branch_without_remote(self, repo_path, temp_dir):
        with pytest.raises(RemoteFetchError):
            WorktreeService(repo_path).add_worktree_tracking_remote(str(temp_dir / "x"), "x", "feature")


class TestRemoveAndPrune:
    """Test removing and pruning worktrees."""

    def test_remove_worktree(self, repo_path, temp_dir):
        service = WorktreeService(repo_path)
        path = str(temp_dir / "to-remove")
        service.add_worktree_with_new_branch(path, "to-remove")

        assert service.remove_worktree(path) is True
        assert not Path(path).exists()
        assert len(service.list_worktrees()) == 1

    def test_remove_dirty_worktree_requires_force(self, repo_path, temp_dir):
        service = WorktreeService(repo_path)
        path = temp_dir / "dirty"
        service.add_worktree_with_new_branch(str(path), "dirty")
        (path / "untracked.txt").write_text("local change\n")

        with pytest.raises(GitOperationError) as exc_info:
            service.remove_worktree(str(path))
        assert "contains modified or untracked files" in str(exc_info.value)

        assert service.remove_worktree(str(path), force=True) is True
        assert not path.exists()

    def test_remove_unknown_path_raises(self, repo_path, temp_dir):
        with pytest.raises(GitOperationError):
            WorktreeService(repo_path).remove_worktree(str(temp_dir / "nothing"))

    def test_prune(self, repo_path, temp_dir):
        service = WorktreeService(repo_path)
        path = str(temp_dir / "orphan")
        service.add_worktree_with_new_branch(path, "orphan")
        shutil.rmtree(path)
        assert len(service.list_worktrees()) == 2

        assert service.prune_worktrees() is True
        assert len(service.list_worktrees()) == 1

    def test_prune_failure_raises(self, repo_path):
        service = WorktreeService(repo_path)
        with patch.object(service, "_get_repo") as mock_get_repo:
            mock_get_repo.return_value.git.worktree.side_effect = git.exc.GitCommandError(
                "worktree", status=1, stderr="fatal: boom"
            )
            with pytest.raises(GitOperationError) as exc_info:
                service.prune_worktrees()
        assert "boom" in str(exc_info.value)
        assert exc_info.value.status == 1


class TestGitOperations:
    """Test branch queries used by the CLI."""

    def test_current_branch(self, repo_path):
        assert GitOperations(repo_path).current_branch() == "main"

    def test_current_branch_detached(self, git_repo, repo_path):
        git_repo.git.checkout(git_repo.head.commit.hexsha)
        with pytest.raises(GitOperationError):
            GitOperations(repo_path).current_branch()

    def test_branch_exists(self, git_repo, repo_path):
        git_repo.git.branch("feature/test")
        ops = GitOperations(repo_path)
        assert ops.branch_exists("feature/test") is True
        assert ops.branch_exists("nope") is False

    def test_uncommitted_changes(self, repo_path):
        ops = GitOperations(repo_path)
        assert ops.has_uncommitted_changes() is False
        Path(repo_path, "new.txt").write_text("x\n")
        assert ops.has_uncommitted_changes() is True

    def test_remote_names(self, git_repo_with_remote, repo_path):
        assert GitOperations(git_repo_with_remote.working_dir).remote_names() == ["origin"]
        assert GitOperations(repo_path).remote_names() == []

    def test_fetch_and_reset(self, git_repo_with_remote):
        clone = git_repo_with_remote
        ops = GitOperations(clone.working_dir)
        clone.git.checkout("-b", "work")
        Path(clone.working_dir, "work.txt").write_text("work\n")
        clone.index.add(["work.txt"])
        clone.index.commit("Work")

        ops.fetch("origin", "main")
        ops.reset_to("origin/main", hard=True)

        assert clone.head.commit == clone.commit("origin/main")
        assert not Path(clone.working_dir, "work.txt").exists()

    def test_fetch_failure(self, repo_path):
        with pytest.raises(GitOperationError):
            GitOperations(repo_path).fetch("origin", "main")

    def test_not_a_repository(self, temp_dir):
        with pytest.raises(GitOperationError):
            GitOperations(str(temp_dir)).current_branch()
