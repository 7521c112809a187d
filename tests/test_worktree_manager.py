"""Tests for WorktreeManager with a mocked git backend"""
import json
from unittest.mock import call, Mock

import pytest

from git_tree.core import WorktreeManager
from git_tree.exceptions import (
    AlreadyExistsError,
    ConfirmationRequiredError,
    DirtyWorktreeError,
    GitOperationError,
    InWorktreeError,
    MainlineDetectionError,
    MainlineUnsetError,
    NotFoundError,
    PathCollisionError,
    RebaseFailedError,
)
from git_tree.models.worktree import LiveWorktree


def seed(manager, mainline="main", **entries):
    """Write a registry with the given ticket -> path entries."""
    registry = manager.load_registry()
    registry.mainline = mainline
    for ticket, path in entries.items():
        registry.add_entry(ticket, str(path), ticket)
    manager.save_registry(registry)
    return registry


def live(path, branch):
    return LiveWorktree(path=str(path), branch=branch, head_commit="abc123", is_primary=False)


class TestCreate:
    """Test worktree creation."""

    def test_happy_path(self, manager, mock_git_ops, mock_worktree_service, temp_dir):
        entry = manager.create("T1")

        expected_path = temp_dir / "worktrees" / "project" / "T1"
        assert entry.ticket == "T1"
        assert entry.branch == "T1"
        assert entry.path == str(expected_path)
        mock_git_ops.detect_default_branch.assert_called_once()
        mock_git_ops.fetch.assert_called_once()
        mock_worktree_service.add_worktree.assert_called_once_with(expected_path, "T1", "origin/main")

        registry = manager.load_registry()
        assert registry.mainline == "main"
        assert registry.get_entry("T1").path == str(expected_path)

    def test_fetch_before_add(self, manager, mock_git_ops, mock_worktree_service):
        """Test that the remote is fetched before the worktree is branched."""
        parent = Mock()
        parent.attach_mock(mock_git_ops.fetch, "fetch")
        parent.attach_mock(mock_worktree_service.add_worktree, "add_worktree")

        manager.create("T1")

        names = [c[0] for c in parent.mock_calls]
        assert names.index("fetch") < names.index("add_worktree")

    def test_branch_override(self, manager, mock_worktree_service):
        entry = manager.create("PROJ-9", "feature/proj-9")

        assert entry.branch == "feature/proj-9"
        assert mock_worktree_service.add_worktree.call_args[0][1] == "feature/proj-9"

    def test_mainline_is_sticky(self, manager, mock_git_ops):
        """Test that a recorded mainline is never re-detected."""
        seed(manager, mainline="develop")

        manager.create("T1")

        mock_git_ops.detect_default_branch.assert_not_called()
        mock_git_ops.remote_ref.assert_called_with("develop")

    def test_mainline_detected_once(self, manager, mock_git_ops):
        manager.create("T1")
        manager.create("T2")

        assert mock_git_ops.detect_default_branch.call_count == 1

    def test_mainline_saved_even_if_fetch_fails(self, manager, mock_git_ops):
        mock_git_ops.fetch.side_effect = GitOperationError("fetch", message="offline")

        with pytest.raises(GitOperationError):
            manager.create("T1")

        registry = manager.load_registry()
        assert registry.mainline == "main"
        assert not registry.has_entry("T1")

    def test_detection_failure(self, manager, mock_git_ops, mock_worktree_service):
        mock_git_ops.detect_default_branch.side_effect = MainlineDetectionError("origin", ["main"])

        with pytest.raises(MainlineDetectionError):
            manager.create("T1")

        mock_worktree_service.add_worktree.assert_not_called()
        assert manager.load_registry().mainline == ""

    def test_in_linked_worktree(self, synthetic_linked_worktree, mock_config, mock_git_ops,
                                mock_worktree_service):
        """Test that create refuses to run from a linked worktree."""
        manager = WorktreeManager(
            synthetic_linked_worktree,
            mock_config,
            git_ops=mock_git_ops,
            worktree_service=mock_worktree_service,
        )

        with pytest.raises(InWorktreeError):
            manager.create("T2")

        assert mock_git_ops.mock_calls == []
        assert mock_worktree_service.mock_calls == []

    def test_already_exists(self, manager, mock_git_ops, mock_worktree_service):
        seed(manager, T1="/somewhere/T1")

        with pytest.raises(AlreadyExistsError, match="/somewhere/T1"):
            manager.create("T1")

        mock_git_ops.fetch.assert_not_called()
        mock_worktree_service.add_worktree.assert_not_called()

    def test_path_collision(self, manager, mock_git_ops, mock_worktree_service, temp_dir):
        (temp_dir / "worktrees" / "project" / "T1").mkdir(parents=True)

        with pytest.raises(PathCollisionError):
            manager.create("T1")

        mock_git_ops.detect_default_branch.assert_not_called()
        mock_worktree_service.add_worktree.assert_not_called()
        assert not manager.load_registry().has_entry("T1")

    def test_add_failure_records_nothing(self, manager, mock_worktree_service):
        mock_worktree_service.add_worktree.side_effect = GitOperationError(
            "worktree add", "T1", "branch exists"
        )

        with pytest.raises(GitOperationError, match="branch exists"):
            manager.create("T1")

        assert not manager.load_registry().has_entry("T1")


class TestUpdate:
    """Test rebasing a ticket onto the mainline."""

    def test_not_found(self, manager, mock_git_ops):
        with pytest.raises(NotFoundError, match="Worktree for T1 not found"):
            manager.update("T1")
        mock_git_ops.fetch.assert_not_called()

    def test_mainline_unset(self, manager, mock_git_ops):
        seed(manager, mainline="", T1="/w/T1")

        with pytest.raises(MainlineUnsetError):
            manager.update("T1")

        mock_git_ops.fetch.assert_not_called()
        mock_git_ops.rebase.assert_not_called()

    def test_dirty(self, manager, mock_git_ops):
        seed(manager, T1="/w/T1")
        mock_git_ops.is_clean.return_value = False

        with pytest.raises(DirtyWorktreeError):
            manager.update("T1")

        mock_git_ops.fetch.assert_not_called()
        mock_git_ops.rebase.assert_not_called()

    def test_success(self, manager, mock_git_ops):
        seed(manager, T1="/w/T1")

        entry = manager.update("T1")

        assert entry.ticket == "T1"
        mock_git_ops.fetch.assert_called_once()
        mock_git_ops.rebase.assert_called_once_with("/w/T1", "T1", "origin/main")

    def test_rebase_failure_leaves_registry(self, manager, mock_git_ops):
        registry = seed(manager, T1="/w/T1")
        mock_git_ops.rebase.side_effect = RebaseFailedError("T1", "origin/main", "/w/T1", "conflict")

        with pytest.raises(RebaseFailedError):
            manager.update("T1")

        assert manager.load_registry() == registry


class TestDelete:
    """Test deleting a ticket's worktree."""

    def test_clean(self, manager, mock_git_ops, mock_worktree_service):
        seed(manager, T1="/w/T1")

        result = manager.delete("T1")

        assert result.branch_deleted is True
        mock_worktree_service.remove_worktree.assert_called_once_with("/w/T1", force=False)
        mock_git_ops.delete_branch.assert_called_once_with("T1")
        assert not manager.load_registry().has_entry("T1")

    def test_not_found(self, manager, mock_worktree_service):
        with pytest.raises(NotFoundError):
            manager.delete("T1")
        mock_worktree_service.remove_worktree.assert_not_called()

    def test_branch_failure_still_succeeds(self, manager, mock_git_ops):
        seed(manager, T1="/w/T1")
        mock_git_ops.delete_branch.side_effect = GitOperationError("delete branch", "T1", "not found")

        result = manager.delete("T1")

        assert result.branch_deleted is False
        assert "not found" in result.branch_error
        assert not manager.load_registry().has_entry("T1")

    def test_dirty_requires_confirmation(self, manager, mock_git_ops, mock_worktree_service, temp_dir):
        path = temp_dir / "worktrees" / "project" / "T1"
        path.mkdir(parents=True)
        seed(manager, T1=path)
        mock_git_ops.is_clean.return_value = False

        with pytest.raises(ConfirmationRequiredError) as exc_info:
            manager.delete("T1")

        assert exc_info.value.entry.ticket == "T1"
        mock_worktree_service.remove_worktree.assert_not_called()
        mock_git_ops.delete_branch.assert_not_called()
        assert manager.load_registry().has_entry("T1")

    def test_dirty_with_force(self, manager, mock_git_ops, mock_worktree_service, temp_dir):
        path = temp_dir / "worktrees" / "project" / "T1"
        path.mkdir(parents=True)
        seed(manager, T1=path)
        mock_git_ops.is_clean.return_value = False

        manager.delete("T1", force=True)

        mock_worktree_service.remove_worktree.assert_called_once_with(str(path), force=True)
        assert not manager.load_registry().has_entry("T1")

    def test_force_from_config(self, synthetic_repo, mock_config, mock_git_ops,
                               mock_worktree_service, temp_dir):
        manager = WorktreeManager(
            synthetic_repo,
            {**mock_config, "force": True},
            git_ops=mock_git_ops,
            worktree_service=mock_worktree_service,
        )
        path = temp_dir / "worktrees" / "project" / "T1"
        path.mkdir(parents=True)
        seed(manager, T1=path)
        mock_git_ops.is_clean.return_value = False

        manager.delete("T1")

        assert not manager.load_registry().has_entry("T1")

    def test_missing_directory_skips_status(self, manager, mock_git_ops):
        seed(manager, T1="/w/gone")

        manager.delete("T1")

        mock_git_ops.is_clean.assert_not_called()

    def test_remove_failure_keeps_entry(self, manager, mock_git_ops, mock_worktree_service):
        seed(manager, T1="/w/T1")
        mock_worktree_service.remove_worktree.side_effect = GitOperationError(
            "worktree remove", message="locked"
        )

        with pytest.raises(GitOperationError):
            manager.delete("T1")

        mock_git_ops.delete_branch.assert_not_called()
        assert manager.load_registry().has_entry("T1")

    def test_force_reaches_git_when_status_fails(self, manager, mock_git_ops, mock_worktree_service,
                                                 temp_dir):
        """Test that an explicit force is passed on even if the dirty check errored."""
        path = temp_dir / "worktrees" / "project" / "T1"
        path.mkdir(parents=True)
        seed(manager, T1=path)
        mock_git_ops.is_clean.side_effect = GitOperationError("status", message="index locked")

        manager.delete("T1", force=True)

        mock_worktree_service.remove_worktree.assert_called_once_with(str(path), force=True)

    def test_status_failure_without_force(self, manager, mock_git_ops, mock_worktree_service, temp_dir):
        path = temp_dir / "worktrees" / "project" / "T1"
        path.mkdir(parents=True)
        seed(manager, T1=path)
        mock_git_ops.is_clean.side_effect = GitOperationError("status", message="index locked")

        manager.delete("T1")

        mock_worktree_service.remove_worktree.assert_called_once_with(str(path), force=False)


class TestPrune:
    """Test removing stale registry entries."""

    def test_removes_only_stale(self, manager, mock_worktree_service, temp_dir, synthetic_repo):
        a = temp_dir / "worktrees" / "project" / "A"
        a.mkdir(parents=True)
        b = temp_dir / "worktrees" / "project" / "B"
        seed(manager, A=a, B=b)
        mock_worktree_service.list_worktrees.return_value = [live(synthetic_repo, "main"), live(a, "A")]

        result = manager.prune()

        assert [e.ticket for e in result.removed] == ["B"]
        registry = manager.load_registry()
        assert registry.has_entry("A")
        assert not registry.has_entry("B")
        mock_worktree_service.prune_worktrees.assert_called_once()

    def test_idempotent(self, manager, mock_worktree_service, synthetic_repo):
        seed(manager, B="/w/B")
        mock_worktree_service.list_worktrees.return_value = [live(synthetic_repo, "main")]

        first = manager.prune()
        second = manager.prune()

        assert len(first.removed) == 1
        assert second.removed == []
        assert mock_worktree_service.prune_worktrees.call_args_list == [call(), call()]

    def test_entry_with_mismatched_ticket_field(self, manager, mock_worktree_service, synthetic_repo):
        """Test that an entry whose stored ticket differs from its key is still removed for good."""
        manager.metadata_service.metadata_file.write_text(json.dumps({
            "mainline": "main",
            "worktrees": {"T1": {"ticket": "OTHER", "path": "/w/gone", "branch": "T1"}},
        }))
        mock_worktree_service.list_worktrees.return_value = [live(synthetic_repo, "main")]

        first = manager.prune()
        second = manager.prune()

        assert [e.ticket for e in first.removed] == ["T1"]
        assert second.removed == []
        saved = json.loads(manager.metadata_service.metadata_file.read_text())
        assert saved["worktrees"] == {}

    def test_nothing_stale_does_not_rewrite(self, manager, mock_worktree_service, synthetic_repo):
        result = manager.prune()

        assert result.removed == []
        assert not manager.metadata_service.metadata_file.exists()
        mock_worktree_service.prune_worktrees.assert_called_once()


class TestQueries:
    """Test list, status and switch."""

    def test_list(self, manager, mock_worktree_service, synthetic_repo, temp_dir):
        a = temp_dir / "worktrees" / "project" / "A"
        a.mkdir(parents=True)
        seed(manager, A=a, B="/w/B")
        mock_worktree_service.list_worktrees.return_value = [live(synthetic_repo, "main"), live(a, "A")]

        view = manager.list_worktrees()

        assert view.entries["A"].label == "present-clean"
        assert view.entries["B"].label == "stale"

    def test_list_without_health(self, manager, mock_git_ops):
        seed(manager, B="/w/B")

        view = manager.list_worktrees(with_health=False)

        assert view.entries["B"].is_stale
        mock_git_ops.get_status.assert_not_called()

    def test_status_single(self, manager, mock_git_ops, mock_worktree_service, synthetic_repo, temp_dir):
        a = temp_dir / "worktrees" / "project" / "A"
        a.mkdir(parents=True)
        seed(manager, A=a, B="/w/B")
        mock_worktree_service.list_worktrees.return_value = [live(synthetic_repo, "main"), live(a, "A")]
        mock_git_ops.get_commit_counts.return_value = (1, 3)

        classified = manager.get_status("A")

        assert classified.ticket == "A"
        assert (classified.health.ahead, classified.health.behind) == (1, 3)
        assert mock_git_ops.get_status.call_count == 1

    def test_status_not_found(self, manager):
        with pytest.raises(NotFoundError):
            manager.get_status("nope")

    def test_switch(self, manager):
        seed(manager, T1="/w/T1")
        assert manager.switch("T1").path == "/w/T1"

    def test_switch_not_found(self, manager):
        with pytest.raises(NotFoundError):
            manager.switch("T1")

    def test_get_mainline(self, manager):
        assert manager.get_mainline() == ""
        seed(manager, mainline="master")
        assert manager.get_mainline() == "master"
