"""Reconciliation of the worktree registry against git's live worktree list."""
import os
from typing import Iterable, List, Optional

from git_tree.exceptions import GitOperationError
from git_tree.logging_config import get_logger
from git_tree.models.registry import Registry
from git_tree.models.worktree import (
    ClassifiedEntry,
    ClassifiedView,
    EntryState,
    HealthState,
    LiveWorktree,
    WorktreeEntry,
    WorktreeHealth,
)
from git_tree.services.git.operations import GitOperations

logger = get_logger(__name__)


def normalize_path(path: str) -> str:
    """Absolute, symlink-resolved form of a path.

    Raises:
        OSError, ValueError: If the path cannot be resolved
    """
    return os.path.normcase(os.path.realpath(os.path.abspath(path)))


def resolve_primary_worktree(live_worktrees: List[LiveWorktree]) -> Optional[LiveWorktree]:
    """Pick the primary worktree from git's list.

    git only flags a bare repository explicitly. Otherwise the first entry
    is taken as primary: `git worktree list` has always printed the main
    working tree first, but that is a convention of its output rather than
    a documented guarantee.
    """
    for wt in live_worktrees:
        if wt.is_primary:
            return wt
    return live_worktrees[0] if live_worktrees else None


class ReconciliationService:
    """Classifies registry entries and checks the health of present worktrees."""

    def __init__(self, git_ops: GitOperations):
        self.git_ops = git_ops

    def classify(self, registry: Registry, live_worktrees: Iterable[LiveWorktree]) -> ClassifiedView:
        """Cross-reference registry entries with live worktrees.

        An entry is present when a live worktree sits at its (normalized)
        path. Entries whose path cannot be normalized are stale, and live
        worktrees whose directory is gone do not count as live.
        """
        live_worktrees = list(live_worktrees)
        live_by_path = {}
        for wt in live_worktrees:
            if wt.is_orphaned:
                logger.debug(f"Ignoring orphaned worktree {wt.path}")
                continue
            try:
                live_by_path[normalize_path(wt.path)] = wt
            except (OSError, ValueError) as e:
                logger.debug(f"Could not normalize live worktree path {wt.path}: {e}")

        view = ClassifiedView(primary=resolve_primary_worktree(live_worktrees))
        tracked_paths = set()

        for ticket, entry in registry.entries.items():
            try:
                normalized = normalize_path(entry.path)
            except (OSError, ValueError) as e:
                logger.warning(f"Could not resolve path for {ticket} ({entry.path}): {e}")
                view.entries[ticket] = ClassifiedEntry(entry=entry, state=EntryState.STALE)
                continue

            live = live_by_path.get(normalized)
            if live is None:
                logger.debug(f"{ticket} is stale: no worktree at {entry.path}")
                view.entries[ticket] = ClassifiedEntry(entry=entry, state=EntryState.STALE)
            else:
                tracked_paths.add(normalized)
                view.entries[ticket] = ClassifiedEntry(entry=entry, state=EntryState.PRESENT, live=live)

        primary_path = None
        if view.primary is not None:
            try:
                primary_path = normalize_path(view.primary.path)
            except (OSError, ValueError) as e:
                logger.debug(f"Could not normalize primary worktree path {view.primary.path}: {e}")
        view.untracked = [
            wt for path, wt in live_by_path.items()
            if path not in tracked_paths and path != primary_path
        ]

        logger.debug(
            f"Classified {len(view.entries)} entries: {len(view.present)} present, "
            f"{len(view.stale)} stale, {len(view.untracked)} untracked worktrees"
        )
        return view

    def check_entry_health(self, entry: WorktreeEntry, mainline: str) -> WorktreeHealth:
        """Query dirty state, current branch and ahead/behind counts for one worktree.

        Never raises for git failures: a failed status query makes the
        health unknown, a failed count query leaves the counts empty.
        """
        try:
            changes = self.git_ops.get_status(entry.path)
        except GitOperationError as e:
            logger.warning(f"Could not check status of {entry.ticket}: {e}")
            return WorktreeHealth(state=HealthState.UNKNOWN, error=str(e))

        health = WorktreeHealth(
            state=HealthState.DIRTY if changes else HealthState.CLEAN,
            changes=changes,
        )

        try:
            health.current_branch = self.git_ops.get_current_branch(entry.path)
        except GitOperationError as e:
            logger.debug(f"Could not read current branch of {entry.ticket}: {e}")

        if mainline:
            target = self.git_ops.remote_ref(mainline)
            try:
                health.ahead, health.behind = self.git_ops.get_commit_counts(
                    entry.path, entry.branch, target
                )
            except GitOperationError as e:
                logger.warning(f"Could not compare {entry.branch} with {target}: {e}")
                health.error = str(e)

        return health

    def check_health(self, view: ClassifiedView, mainline: str) -> ClassifiedView:
        """Fill in health for every present entry of a classified view."""
        for classified in view.present:
            classified.health = self.check_entry_health(classified.entry, mainline)
        return view
