"""Pytest fixtures for git-worktree-keeper tests"""
import tempfile
from pathlib import Path
from unittest.mock import Mock
import pytest
import git

from git_worktree_keeper.config import Config
from git_worktree_keeper.models.worktree import WorktreeInfo


def init_repo(repo_path: Path) -> git.Repo:
    """Initialize a repository with one commit on main."""
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
    try:
        repo.git.branch('-M', 'main')
    except Exception:
        pass

    return repo


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        # Resolved so paths match what git reports
        yield Path(tmpdir).resolve()


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository for testing."""
    repo = init_repo(temp_dir / "test_repo")
    yield repo
    repo.close()


@pytest.fixture
def workspace(temp_dir):
    """Create a projects root and worktrees root on disk.

    Layout:
        Projects/proj1                 main repository (branch main)
        Projects/notes                 plain directory
        Worktrees/proj1/feature        linked worktree of proj1 (branch feature)
    """
    projects_dir = temp_dir / "Projects"
    worktrees_dir = temp_dir / "Worktrees"

    repo = init_repo(projects_dir / "proj1")
    (projects_dir / "notes").mkdir()

    feature_path = worktrees_dir / "proj1" / "feature"
    feature_path.parent.mkdir(parents=True)
    repo.git.worktree("add", str(feature_path), "-b", "feature")

    yield {
        "root": temp_dir,
        "projects_dir": projects_dir,
        "worktrees_dir": worktrees_dir,
        "repo": repo,
        "main_path": projects_dir / "proj1",
        "feature_path": feature_path,
    }

    repo.close()


@pytest.fixture
def second_project(workspace):
    """Add Projects/proj2 with a linked worktree Worktrees/proj2/bugfix."""
    repo = init_repo(workspace["projects_dir"] / "proj2")
    bugfix_path = workspace["worktrees_dir"] / "proj2" / "bugfix"
    bugfix_path.parent.mkdir(parents=True)
    repo.git.worktree("add", str(bugfix_path), "-b", "bugfix")

    yield {"main_path": workspace["projects_dir"] / "proj2", "bugfix_path": bugfix_path}

    repo.close()


@pytest.fixture
def config(temp_dir):
    """Create a configuration rooted in the temporary directory."""
    return Config(
        projects_dir=str(temp_dir / "Projects"),
        worktrees_dir=str(temp_dir / "Worktrees"),
    )


def make_info(path, branch="main", commit="abc123def456", clean=True, is_main=False, is_orphaned=False):
    """Build a WorktreeInfo as a git client would report it."""
    return WorktreeInfo(
        path=str(path),
        branch_name=branch,
        commit_sha=commit,
        is_main=is_main,
        is_orphaned=is_orphaned,
        clean=clean,
    )


@pytest.fixture
def mock_git_client():
    """Create a mock GitClient that treats every directory as a clean repository."""
    client = Mock()
    client.is_git_repository = Mock(return_value=True)
    client.is_main_repository = Mock(return_value=True)
    client.list_worktrees = Mock(
        side_effect=lambda repo_path: [make_info(repo_path, is_main=True)]
    )
    client.get_worktree_status = Mock(
        side_effect=lambda path: make_info(path, branch=Path(path).name)
    )
    return client


@pytest.fixture
def info_factory():
    """Expose make_info to tests."""
    return make_info
