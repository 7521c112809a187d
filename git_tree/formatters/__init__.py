"""Formatting utilities for git-tree.

This package provides formatting functions for displaying worktree information:
- date: Timestamp formatting
- status: Classification, change count and ahead/behind formatting
"""

from .date import format_timestamp

from .status import (
    format_ahead_behind,
    format_status,
    format_list_status,
    format_changes,
    get_status_style,
)

__all__ = [
    # Date
    "format_timestamp",
    # Status
    "format_ahead_behind",
    "format_status",
    "format_list_status",
    "format_changes",
    "get_status_style",
]
