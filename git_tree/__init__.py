"""
git-tree - One git worktree per ticket, with a registry that stays in sync
"""

from .__version__ import __version__
from .core import WorktreeManager
from .cli.main import main

__all__ = ["WorktreeManager", "main", "__version__"]
