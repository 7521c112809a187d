"""Pytest fixtures for git-tree tests"""
import logging
import tempfile
from pathlib import Path
from unittest.mock import Mock
import pytest
import git

from git_tree.core import WorktreeManager
from git_tree.services.git import GitOperations, WorktreeService


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        # Resolve so paths compare equal on systems where /tmp is a symlink
        yield Path(tmpdir).resolve()


@pytest.fixture
def mock_config():
    """Create a mock configuration dictionary."""
    return {
        'verbose': False,
        'debug': False,
        'force': False,
        'remote_name': 'origin',
        'mainline_candidates': ['main', 'master', 'develop'],
        'worktrees_dir_name': 'worktrees',
        'metadata_filename': 'worktree-metadata.json',
    }


@pytest.fixture
def synthetic_repo(temp_dir):
    """A directory tree that looks like a primary repository (a .git directory)."""
    repo_path = temp_dir / "project"
    (repo_path / ".git").mkdir(parents=True)
    (repo_path / "src" / "pkg").mkdir(parents=True)
    return repo_path


@pytest.fixture
def synthetic_linked_worktree(synthetic_repo, temp_dir):
    """A linked worktree of synthetic_repo (a .git pointer file)."""
    admin_dir = synthetic_repo / ".git" / "worktrees" / "T1"
    admin_dir.mkdir(parents=True)

    worktree_path = temp_dir / "worktrees" / "project" / "T1"
    (worktree_path / "docs").mkdir(parents=True)
    (worktree_path / ".git").write_text(f"gitdir: {admin_dir}\n")
    return worktree_path


@pytest.fixture
def mock_git_ops():
    """Create a mock GitOperations backend."""
    ops = Mock(spec=GitOperations)
    ops.remote_ref.side_effect = lambda branch: f"origin/{branch}"
    ops.detect_default_branch.return_value = "main"
    ops.get_status.return_value = []
    ops.is_clean.return_value = True
    ops.get_current_branch.return_value = "T1"
    ops.get_commit_counts.return_value = (0, 0)
    return ops


@pytest.fixture
def mock_worktree_service():
    """Create a mock WorktreeService backend."""
    service = Mock(spec=WorktreeService)
    service.list_worktrees.return_value = []
    return service


@pytest.fixture
def manager(synthetic_repo, mock_config, mock_git_ops, mock_worktree_service):
    """A WorktreeManager over a synthetic repository with mocked git."""
    return WorktreeManager(
        synthetic_repo,
        mock_config,
        git_ops=mock_git_ops,
        worktree_service=mock_worktree_service,
    )


@pytest.fixture
def origin_repo(temp_dir):
    """Create a bare repository acting as the 'origin' remote."""
    origin_path = temp_dir / "origin.git"
    repo = git.Repo.init(origin_path, bare=True)
    yield repo
    repo.close()


@pytest.fixture
def git_repo(temp_dir, origin_repo):
    """Create a real Git repository with a pushed main branch on origin."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    # Initialize repository
    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    # Create initial commit on main branch
    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    # Rename master to main if needed
    repo.git.branch('-M', 'main')

    repo.create_remote('origin', str(origin_repo.git_dir))
    repo.git.push('origin', 'main')
    repo.git.fetch('origin')

    yield repo

    # Cleanup
    repo.close()


@pytest.fixture
def commit_file():
    """Return a helper that writes a file in a working tree and commits it."""
    def _commit(worktree_path, name: str, content: str, message: str) -> None:
        repo = git.Repo(worktree_path)
        (Path(worktree_path) / name).write_text(content)
        repo.git.add(name)
        repo.git.commit("-m", message)
        repo.close()

    return _commit


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo handler changes made by setup_logging (the CLI calls it)."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
