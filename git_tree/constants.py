"""Shared constants for git-tree."""

from dataclasses import dataclass
from typing import List


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    label: str
    width: int = 0  # 0 means auto-width


LIST_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("Ticket", 20),
    ColumnDefinition("Branch", 30),
    ColumnDefinition("Status", 20),
    ColumnDefinition("Path"),
]

STATUS_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("Ticket", 20),
    ColumnDefinition("Branch", 30),
    ColumnDefinition("Status", 10),
    ColumnDefinition("Changes", 8),
    ColumnDefinition("Ahead/Behind", 12),
]


# Symbol constants
SYMBOL_AHEAD = "↑"
SYMBOL_BEHIND = "↓"
SYMBOL_UNKNOWN = "?"


# Display names for classification labels
STATUS_DISPLAY = {
    "present-clean": "clean",
    "present-dirty": "dirty",
    "present-unknown": "?",
    "stale": "STALE",
}


# CLI colors (Rich color names)
CLI_COLORS = {
    "present-clean": "green",
    "present-dirty": "yellow",
    "present-unknown": None,  # Default color
    "stale": "red",
}


USAGE_EXAMPLES = """
Examples:
  git tree create PROJ-123
  git tree create PROJ-123 feature/add-new-feature
  git tree list
  git tree status PROJ-123
  git tree update PROJ-123
  git tree delete PROJ-123
  git tree switch PROJ-123
  git tree prune
"""
