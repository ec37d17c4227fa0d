"""Pytest fixtures for worktree-manager tests"""
import tempfile
from pathlib import Path

import pytest
import git
import yaml


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


def _init_repo(repo_path: Path) -> git.Repo:
    repo_path.mkdir(parents=True)
    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    # Rename master to main if needed
    repo.git.branch('-M', 'main')
    return repo


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository for testing."""
    repo = _init_repo(temp_dir / "test_repo")

    yield repo

    repo.close()


@pytest.fixture
def repo_path(git_repo):
    """Path of the main repository as a string."""
    return str(Path(git_repo.working_dir).resolve())


@pytest.fixture
def git_repo_with_remote(temp_dir):
    """Create a clone of an upstream repository that has a feature branch."""
    upstream = _init_repo(temp_dir / "upstream")
    upstream.git.checkout('-b', 'feature/remote')
    (temp_dir / "upstream" / "remote.txt").write_text("Remote content\n")
    upstream.index.add(["remote.txt"])
    upstream.index.commit("Remote feature")
    upstream.git.checkout('main')

    clone = git.Repo.clone_from(str(temp_dir / "upstream"), str(temp_dir / "clone"))
    clone.config_writer().set_value("user", "name", "Test User").release()
    clone.config_writer().set_value("user", "email", "test@example.com").release()

    yield clone

    clone.close()
    upstream.close()


@pytest.fixture
def write_config():
    """Write a .worktree.yml into a repository."""
    def _write(repo_dir, data, filename=".worktree.yml"):
        config_path = Path(repo_dir) / filename
        config_path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            config_path.write_text(data)
        else:
            config_path.write_text(yaml.safe_dump(data))
        return config_path
    return _write


@pytest.fixture
def sample_porcelain():
    """Porcelain output with a main worktree, a branch worktree and a detached one."""
    return (
        "worktree /repos/project\n"
        "HEAD 1111111111111111111111111111111111111111\n"
        "branch refs/heads/main\n"
        "\n"
        "worktree /repos/feature\n"
        "HEAD 2222222222222222222222222222222222222222\n"
        "branch refs/heads/feature/login\n"
        "\n"
        "worktree /repos/detached\n"
        "HEAD 3333333333333333333333333333333333333333\n"
        "detached\n"
    )
