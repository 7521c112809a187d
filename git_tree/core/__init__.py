"""Core worktree lifecycle management."""

from .worktree_manager import WorktreeManager

__all__ = ["WorktreeManager"]
