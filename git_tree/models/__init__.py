"""Data models for git-tree."""

from .worktree import (
    WorktreeEntry,
    LiveWorktree,
    EntryState,
    HealthState,
    WorktreeHealth,
    ClassifiedEntry,
    ClassifiedView,
    DeleteResult,
    PruneResult,
)
from .registry import Registry

__all__ = [
    "WorktreeEntry",
    "LiveWorktree",
    "EntryState",
    "HealthState",
    "WorktreeHealth",
    "ClassifiedEntry",
    "ClassifiedView",
    "DeleteResult",
    "PruneResult",
    "Registry",
]
