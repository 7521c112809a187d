"""Utility functions for git-tree.

This package provides utility modules:
- paths: Repository location and worktree path derivation
"""

from .paths import (
    locate_primary_root,
    is_inside_linked_worktree,
    get_repo_name,
    get_worktree_base_path,
    derive_worktree_path,
)

__all__ = [
    "locate_primary_root",
    "is_inside_linked_worktree",
    "get_repo_name",
    "get_worktree_base_path",
    "derive_worktree_path",
]
