"""Tests for project and worktree discovery"""
import os
import threading
from pathlib import Path

import pytest

from git_worktree_keeper.config import Config
from git_worktree_keeper.exceptions import (
    DiscoveryCancelledError,
    DiscoveryError,
    GitOperationError,
    InputValidationError,
    InvalidWorktreeError,
)
from git_worktree_keeper.models.worktree import WorktreeStatus
from git_worktree_keeper.services.discovery_service import DiscoveryService
from git_worktree_keeper.services.git import GitPythonClient


def make_subdirs(root: Path, count: int):
    """Create repo0..repo{count-1} under root."""
    paths = []
    for i in range(count):
        path = root / f"repo{i}"
        path.mkdir()
        paths.append(path)
    return paths


def failing_status(info_factory, failing_names):
    """Status side effect that fails for the given directory names."""
    def get_worktree_status(path):
        if os.path.basename(path) in failing_names:
            raise GitOperationError("get_worktree_status", path, "simulated failure")
        return info_factory(path, branch=os.path.basename(path))
    return get_worktree_status


class TestConcurrencySettings:
    """Test worker pool sizing."""

    def test_default(self, mock_git_client):
        assert DiscoveryService(git_client=mock_git_client).concurrency == 4

    @pytest.mark.parametrize("requested,expected", [(0, 1), (-5, 1), (1, 1), (8, 8), (16, 16), (17, 16), (100, 16)])
    def test_set_concurrency_clamps(self, mock_git_client, requested, expected):
        service = DiscoveryService(git_client=mock_git_client)
        assert service.set_concurrency(requested) == expected
        assert service.concurrency == expected

    def test_from_config(self, mock_git_client, config):
        config.workers = 7
        service = DiscoveryService.from_config(config, git_client=mock_git_client)
        assert service.concurrency == 7
        assert service.cache.expiry_seconds == config.cache_expiry_seconds


class TestAnalyzeWorktree:
    """Test single worktree analysis and caching."""

    def test_clean_and_dirty(self, mock_git_client, info_factory):
        mock_git_client.get_worktree_status.side_effect = lambda path: info_factory(
            path, branch="b", clean=path.endswith("clean")
        )
        service = DiscoveryService(git_client=mock_git_client)

        assert service.analyze_worktree("/w/p/clean").status == WorktreeStatus.CLEAN
        assert service.analyze_worktree("/w/p/dirty").status == WorktreeStatus.DIRTY

    def test_unchecked_status_is_unknown(self, mock_git_client, info_factory):
        mock_git_client.get_worktree_status.side_effect = lambda path: info_factory(path, clean=None)
        service = DiscoveryService(git_client=mock_git_client)

        assert service.analyze_worktree("/w/p/b").status == WorktreeStatus.UNKNOWN

    def test_cached_within_window(self, mock_git_client):
        """Two calls inside the expiry window make one git call and match exactly."""
        service = DiscoveryService(git_client=mock_git_client)

        first = service.analyze_worktree("/w/p/feature")
        second = service.analyze_worktree("/w/p/feature")

        assert first == second
        assert mock_git_client.get_worktree_status.call_count == 1

    def test_clear_cache_forces_reanalysis(self, mock_git_client):
        service = DiscoveryService(git_client=mock_git_client)

        service.analyze_worktree("/w/p/feature")
        service.clear_cache()
        service.analyze_worktree("/w/p/feature")

        assert mock_git_client.get_worktree_status.call_count == 2

    def test_services_do_not_share_cache(self, mock_git_client):
        DiscoveryService(git_client=mock_git_client).analyze_worktree("/w/p/feature")
        DiscoveryService(git_client=mock_git_client).analyze_worktree("/w/p/feature")

        assert mock_git_client.get_worktree_status.call_count == 2

    def test_empty_path(self, mock_git_client):
        with pytest.raises(InputValidationError):
            DiscoveryService(git_client=mock_git_client).analyze_worktree("")

    def test_detached_head_is_invalid(self, mock_git_client, info_factory):
        mock_git_client.get_worktree_status.side_effect = lambda path: info_factory(path, branch="")
        service = DiscoveryService(git_client=mock_git_client)

        with pytest.raises(InvalidWorktreeError):
            service.analyze_worktree("/w/p/detached")
        assert len(service.cache) == 0

    def test_unexpected_error_wrapped(self, mock_git_client):
        mock_git_client.get_worktree_status.side_effect = RuntimeError("boom")
        service = DiscoveryService(git_client=mock_git_client)

        with pytest.raises(GitOperationError) as exc_info:
            service.analyze_worktree("/w/p/b")
        assert "boom" in str(exc_info.value)

    def test_cancelled_before_git_call(self, mock_git_client):
        event = threading.Event()
        event.set()
        service = DiscoveryService(git_client=mock_git_client)

        with pytest.raises(DiscoveryCancelledError):
            service.analyze_worktree("/w/p/b", cancel_event=event)
        mock_git_client.get_worktree_status.assert_not_called()


class TestDiscoverWorktrees:
    """Test workspace-wide worktree discovery."""

    def test_discovers_main_worktrees(self, temp_dir, mock_git_client):
        make_subdirs(temp_dir, 3)
        service = DiscoveryService(git_client=mock_git_client)

        worktrees = service.discover_worktrees(str(temp_dir))

        assert sorted(wt.branch for wt in worktrees) == ["repo0", "repo1", "repo2"]
        assert all(wt.status == WorktreeStatus.CLEAN for wt in worktrees)

    def test_skips_non_repositories(self, temp_dir, mock_git_client):
        make_subdirs(temp_dir, 3)
        (temp_dir / "file.txt").write_text("not a directory")
        mock_git_client.is_git_repository.side_effect = lambda path: not path.endswith("repo1")
        service = DiscoveryService(git_client=mock_git_client)

        worktrees = service.discover_worktrees(str(temp_dir))

        assert sorted(wt.branch for wt in worktrees) == ["repo0", "repo2"]

    def test_repository_check_errors_are_skipped(self, temp_dir, mock_git_client):
        make_subdirs(temp_dir, 2)

        def is_git_repository(path):
            if path.endswith("repo0"):
                raise GitOperationError("is_git_repository", path, "permission denied")
            return True

        mock_git_client.is_git_repository.side_effect = is_git_repository
        service = DiscoveryService(git_client=mock_git_client)

        assert [wt.branch for wt in service.discover_worktrees(str(temp_dir))] == ["repo1"]

    def test_list_errors_are_skipped(self, temp_dir, mock_git_client, info_factory):
        make_subdirs(temp_dir, 2)

        def list_worktrees(repo_path):
            if repo_path.endswith("repo0"):
                raise GitOperationError("list_worktrees", repo_path, "corrupt")
            return [info_factory(repo_path, is_main=True)]

        mock_git_client.list_worktrees.side_effect = list_worktrees
        service = DiscoveryService(git_client=mock_git_client)

        assert [wt.branch for wt in service.discover_worktrees(str(temp_dir))] == ["repo1"]

    def test_linked_worktrees_included_and_orphans_skipped(self, temp_dir, mock_git_client, info_factory):
        (repo,) = make_subdirs(temp_dir, 1)
        mock_git_client.list_worktrees.side_effect = lambda repo_path: [
            info_factory(repo_path, is_main=True),
            info_factory("/w/repo0/feature", branch="feature"),
            info_factory("/w/repo0/gone", branch="gone", is_orphaned=True),
        ]
        service = DiscoveryService(git_client=mock_git_client)

        worktrees = service.discover_worktrees(str(temp_dir))

        assert sorted(wt.path for wt in worktrees) == sorted([str(repo), "/w/repo0/feature"])
        analyzed = [call.args[0] for call in mock_git_client.get_worktree_status.call_args_list]
        assert "/w/repo0/gone" not in analyzed

    def test_duplicate_paths_analyzed_once(self, temp_dir, mock_git_client, info_factory):
        make_subdirs(temp_dir, 2)
        mock_git_client.list_worktrees.side_effect = lambda repo_path: [
            info_factory(repo_path, is_main=True),
            info_factory("/w/shared/feature", branch="feature"),
        ]
        service = DiscoveryService(git_client=mock_git_client)

        worktrees = service.discover_worktrees(str(temp_dir))

        assert len(worktrees) == 3
        assert mock_git_client.get_worktree_status.call_count == 3

    def test_empty_workspace(self, temp_dir, mock_git_client):
        service = DiscoveryService(git_client=mock_git_client)
        assert service.discover_worktrees(str(temp_dir)) == []

    def test_half_failed_raises(self, temp_dir, mock_git_client, info_factory):
        """5 of 10 failed paths is too many."""
        make_subdirs(temp_dir, 10)
        mock_git_client.get_worktree_status.side_effect = failing_status(
            info_factory, {f"repo{i}" for i in range(5)}
        )
        service = DiscoveryService(git_client=mock_git_client)

        with pytest.raises(DiscoveryError) as exc_info:
            service.discover_worktrees(str(temp_dir))

        assert exc_info.value.failed_count == 5
        assert exc_info.value.total_count == 10
        assert isinstance(exc_info.value.cause, GitOperationError)
        assert "5/10" in str(exc_info.value)

    def test_minority_failed_returns_rest(self, temp_dir, mock_git_client, info_factory):
        """4 of 10 failed paths still yields the 6 good worktrees."""
        make_subdirs(temp_dir, 10)
        mock_git_client.get_worktree_status.side_effect = failing_status(
            info_factory, {f"repo{i}" for i in range(4)}
        )
        service = DiscoveryService(git_client=mock_git_client)

        worktrees = service.discover_worktrees(str(temp_dir))

        assert sorted(wt.branch for wt in worktrees) == [f"repo{i}" for i in range(4, 10)]

    @pytest.mark.parametrize("workers", [1, 3, 16])
    def test_failure_decision_independent_of_workers(self, temp_dir, mock_git_client, info_factory, workers):
        make_subdirs(temp_dir, 10)
        mock_git_client.get_worktree_status.side_effect = failing_status(
            info_factory, {"repo1", "repo3", "repo5", "repo7", "repo9"}
        )
        service = DiscoveryService(git_client=mock_git_client, concurrency=workers)

        with pytest.raises(DiscoveryError):
            service.discover_worktrees(str(temp_dir))

    def test_all_failed_raises(self, temp_dir, mock_git_client):
        make_subdirs(temp_dir, 2)
        mock_git_client.get_worktree_status.side_effect = RuntimeError("broken")
        service = DiscoveryService(git_client=mock_git_client)

        with pytest.raises(DiscoveryError) as exc_info:
            service.discover_worktrees(str(temp_dir))
        assert exc_info.value.failed_count == 2

    def test_second_discovery_uses_cache(self, temp_dir, mock_git_client):
        make_subdirs(temp_dir, 3)
        service = DiscoveryService(git_client=mock_git_client)

        service.discover_worktrees(str(temp_dir))
        service.discover_worktrees(str(temp_dir))

        assert mock_git_client.get_worktree_status.call_count == 3

    def test_show_progress(self, temp_dir, mock_git_client):
        make_subdirs(temp_dir, 2)
        service = DiscoveryService(git_client=mock_git_client)

        assert len(service.discover_worktrees(str(temp_dir), show_progress=True)) == 2


class TestDiscoveryCancellation:
    """Test cancelling discovery."""

    def test_cancelled_before_scan(self, temp_dir, mock_git_client):
        make_subdirs(temp_dir, 3)
        event = threading.Event()
        event.set()
        service = DiscoveryService(git_client=mock_git_client)

        with pytest.raises(DiscoveryCancelledError):
            service.discover_worktrees(str(temp_dir), cancel_event=event)
        mock_git_client.get_worktree_status.assert_not_called()

    def test_cancelled_mid_flight_keeps_cache(self, temp_dir, mock_git_client, info_factory):
        make_subdirs(temp_dir, 5)
        event = threading.Event()

        def get_worktree_status(path):
            event.set()
            return info_factory(path, branch=os.path.basename(path))

        mock_git_client.get_worktree_status.side_effect = get_worktree_status
        service = DiscoveryService(git_client=mock_git_client, concurrency=1)

        with pytest.raises(DiscoveryCancelledError) as exc_info:
            service.discover_worktrees(str(temp_dir), cancel_event=event)

        assert exc_info.value.total == 5
        assert mock_git_client.get_worktree_status.call_count == 1
        assert len(service.cache) == 1


class TestWorkspaceValidation:
    """Test workspace path validation."""

    def test_empty(self, mock_git_client):
        service = DiscoveryService(git_client=mock_git_client)
        with pytest.raises(InputValidationError):
            service.discover_worktrees("")
        with pytest.raises(InputValidationError):
            service.discover_projects("")

    def test_missing(self, temp_dir, mock_git_client):
        service = DiscoveryService(git_client=mock_git_client)
        with pytest.raises(InputValidationError):
            service.discover_worktrees(str(temp_dir / "missing"))

    def test_not_a_directory(self, temp_dir, mock_git_client):
        path = temp_dir / "file.txt"
        path.write_text("x")
        service = DiscoveryService(git_client=mock_git_client)
        with pytest.raises(InputValidationError):
            service.discover_projects(str(path))


class TestDiscoverProjects:
    """Test project discovery."""

    def test_projects_with_worktrees(self, temp_dir, mock_git_client, info_factory):
        make_subdirs(temp_dir, 3)
        mock_git_client.is_main_repository.side_effect = lambda path: not path.endswith("repo1")
        mock_git_client.list_worktrees.side_effect = lambda repo_path: [
            info_factory(repo_path, is_main=True),
            info_factory(f"/w/{os.path.basename(repo_path)}/feature", branch="feature"),
        ]
        service = DiscoveryService(git_client=mock_git_client)

        projects = service.discover_projects(str(temp_dir))

        assert [p.name for p in projects] == ["repo0", "repo2"]
        assert projects[0].git_repo_path == str(temp_dir / "repo0")
        # Main worktree is the project itself
        assert [wt.path for wt in projects[0].worktrees] == ["/w/repo0/feature"]
        assert projects[0].worktrees[0].status == WorktreeStatus.UNKNOWN
        mock_git_client.get_worktree_status.assert_not_called()

    def test_uses_cached_status(self, temp_dir, mock_git_client, info_factory):
        make_subdirs(temp_dir, 1)
        mock_git_client.list_worktrees.side_effect = lambda repo_path: [
            info_factory(repo_path, is_main=True),
            info_factory("/w/repo0/feature", branch="feature"),
        ]
        service = DiscoveryService(git_client=mock_git_client)
        service.analyze_worktree("/w/repo0/feature")

        (project,) = service.discover_projects(str(temp_dir))

        assert project.worktrees[0].status == WorktreeStatus.CLEAN

    def test_skips_unusable_entries(self, temp_dir, mock_git_client, info_factory):
        make_subdirs(temp_dir, 2)
        def is_main_repository(path):
            if path.endswith("repo1"):
                raise GitOperationError("is_main_repository", path, "unreadable")
            return True

        mock_git_client.is_main_repository.side_effect = is_main_repository
        mock_git_client.list_worktrees.side_effect = lambda repo_path: [
            info_factory(repo_path, is_main=True),
            info_factory("/w/repo0/detached", branch=""),
            info_factory("/w/repo0/gone", branch="gone", is_orphaned=True),
            info_factory("/w/repo0/ok", branch="ok"),
        ]
        service = DiscoveryService(git_client=mock_git_client)

        projects = service.discover_projects(str(temp_dir))

        assert [p.name for p in projects] == ["repo0"]
        assert [wt.branch for wt in projects[0].worktrees] == ["ok"]

    def test_list_failure_leaves_project_empty(self, temp_dir, mock_git_client):
        make_subdirs(temp_dir, 1)
        mock_git_client.list_worktrees.side_effect = GitOperationError("list_worktrees")
        service = DiscoveryService(git_client=mock_git_client)

        (project,) = service.discover_projects(str(temp_dir))

        assert project.worktrees == []

    def test_discover_workspace(self, temp_dir, mock_git_client):
        make_subdirs(temp_dir, 2)
        service = DiscoveryService(git_client=mock_git_client)

        workspace = service.discover_workspace(str(temp_dir))

        assert workspace.path == str(temp_dir)
        assert [p.name for p in workspace.projects] == ["repo0", "repo1"]
        assert workspace.statistics().project_count == 2


class TestRealRepositories:
    """Test discovery against real git repositories."""

    def test_discover_worktrees(self, workspace):
        service = DiscoveryService(git_client=GitPythonClient())

        worktrees = service.discover_worktrees(str(workspace["projects_dir"]))

        by_branch = {wt.branch: wt for wt in worktrees}
        assert set(by_branch) == {"main", "feature"}
        assert os.path.realpath(by_branch["feature"].path) == str(workspace["feature_path"])
        assert by_branch["feature"].status == WorktreeStatus.CLEAN
        assert by_branch["main"].commit == workspace["repo"].head.commit.hexsha

    def test_dirty_worktree(self, workspace):
        (workspace["feature_path"] / "scratch.txt").write_text("uncommitted\n")
        service = DiscoveryService(git_client=GitPythonClient())

        worktree = service.analyze_worktree(str(workspace["feature_path"]))

        assert worktree.status == WorktreeStatus.DIRTY

    def test_discover_projects(self, workspace):
        config = Config(
            projects_dir=str(workspace["projects_dir"]),
            worktrees_dir=str(workspace["worktrees_dir"]),
        )
        service = DiscoveryService.from_config(config)

        projects = service.discover_projects(config.projects_dir)

        assert [p.name for p in projects] == ["proj1"]
        assert projects[0].list_branches() == ["feature"]
