"""Git-related services for git-tree."""

from .operations import GitOperations
from .worktrees import WorktreeService

__all__ = [
    "GitOperations",
    "WorktreeService",
]
