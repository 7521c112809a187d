"""Status formatting utilities."""

from typing import Optional

from git_tree.constants import CLI_COLORS, STATUS_DISPLAY, SYMBOL_AHEAD, SYMBOL_BEHIND, SYMBOL_UNKNOWN
from git_tree.models.worktree import ClassifiedEntry, HealthState, WorktreeHealth


def format_ahead_behind(health: Optional[WorktreeHealth]) -> str:
    """
    Format ahead/behind counts, e.g. ``↑2 ↓0``.

    Returns:
        "?" when the counts are not available
    """
    if health is None or not health.has_counts:
        return SYMBOL_UNKNOWN
    return f"{SYMBOL_AHEAD}{health.ahead} {SYMBOL_BEHIND}{health.behind}"


def format_status(classified: ClassifiedEntry) -> str:
    """Short status text for the status table (clean, dirty, ? or STALE)."""
    return STATUS_DISPLAY.get(classified.label, classified.label)


def format_list_status(classified: ClassifiedEntry) -> str:
    """
    Status text for the list table.

    Appends ahead/behind counts to the clean/dirty state when the branch
    has diverged from the mainline, e.g. ``dirty (↑1 ↓3)``.
    """
    text = format_status(classified)
    health = classified.health
    if health is not None and health.has_counts and (health.ahead or health.behind):
        text = f"{text} ({format_ahead_behind(health)})"
    return text


def format_changes(classified: ClassifiedEntry) -> str:
    """Number of changed files, or "?" when unknown."""
    health = classified.health
    if classified.is_stale or health is None or health.state == HealthState.UNKNOWN:
        return SYMBOL_UNKNOWN
    return str(len(health.changes))


def get_status_style(classified: ClassifiedEntry) -> Optional[str]:
    """Rich color for a row."""
    return CLI_COLORS.get(classified.label)
