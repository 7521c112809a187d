"""Worktree data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional


@dataclass
class WorktreeEntry:
    """A worktree registered for a ticket."""

    ticket: str
    path: str
    branch: str
    created: Optional[datetime] = None

    def __str__(self) -> str:
        return f"{self.ticket}: {self.branch} @ {self.path}"


@dataclass
class LiveWorktree:
    """A worktree as reported by `git worktree list`."""

    path: str
    branch: str  # Empty for detached HEAD
    head_commit: str
    is_primary: bool  # Only set when git flags it explicitly (bare)
    is_orphaned: bool = False  # Directory missing?

    def __str__(self) -> str:
        """String representation of worktree."""
        status = "orphaned" if self.is_orphaned else "active"
        primary_marker = " (primary)" if self.is_primary else ""
        branch = self.branch or "(detached)"
        return f"{branch} @ {self.path}{primary_marker} [{status}]"


class EntryState(Enum):
    """Whether a registry entry still has a live worktree."""
    PRESENT = "present"
    STALE = "stale"


class HealthState(Enum):
    """Working tree state of a present worktree."""
    CLEAN = "clean"
    DIRTY = "dirty"
    UNKNOWN = "unknown"


@dataclass
class WorktreeHealth:
    """Result of the per-worktree health queries."""
    state: HealthState
    changes: List[str] = field(default_factory=list)  # Raw porcelain status lines
    current_branch: Optional[str] = None
    ahead: Optional[int] = None  # None = not queried or query failed
    behind: Optional[int] = None
    error: Optional[str] = None

    @property
    def has_counts(self) -> bool:
        return self.ahead is not None and self.behind is not None


@dataclass
class ClassifiedEntry:
    """A registry entry cross-referenced with git's live worktree list."""
    entry: WorktreeEntry
    state: EntryState
    live: Optional[LiveWorktree] = None
    health: Optional[WorktreeHealth] = None

    @property
    def ticket(self) -> str:
        return self.entry.ticket

    @property
    def is_stale(self) -> bool:
        return self.state == EntryState.STALE

    @property
    def label(self) -> str:
        """Combined classification, e.g. ``present-clean`` or ``stale``."""
        if self.is_stale:
            return EntryState.STALE.value
        health_state = self.health.state if self.health else HealthState.UNKNOWN
        return f"{EntryState.PRESENT.value}-{health_state.value}"


@dataclass
class ClassifiedView:
    """Registry entries and live worktrees after reconciliation."""
    entries: Dict[str, ClassifiedEntry] = field(default_factory=dict)
    primary: Optional[LiveWorktree] = None
    untracked: List[LiveWorktree] = field(default_factory=list)  # Live but not registered

    @property
    def present(self) -> List[ClassifiedEntry]:
        return [e for e in self.entries.values() if not e.is_stale]

    @property
    def stale(self) -> List[ClassifiedEntry]:
        return [e for e in self.entries.values() if e.is_stale]


@dataclass
class DeleteResult:
    """Outcome of deleting a ticket's worktree."""
    entry: WorktreeEntry
    branch_deleted: bool
    branch_error: Optional[str] = None


@dataclass
class PruneResult:
    """Outcome of a prune sweep."""
    removed: List[WorktreeEntry] = field(default_factory=list)
