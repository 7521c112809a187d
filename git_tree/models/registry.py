"""Registry model: ticket to worktree mapping for one repository."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional

from git_tree.models.worktree import WorktreeEntry


@dataclass
class Registry:
    """In-memory worktree registry.

    Mutators never touch disk; callers save through MetadataService after
    each change. ``add_entry`` overwrites an existing ticket silently, so
    callers check ``has_entry`` first when duplicates must be rejected.
    """
    entries: Dict[str, WorktreeEntry] = field(default_factory=dict)
    mainline: str = ""  # Empty until detected

    def add_entry(self, ticket: str, path: str, branch: str) -> WorktreeEntry:
        entry = WorktreeEntry(
            ticket=ticket,
            path=path,
            branch=branch,
            created=datetime.now(timezone.utc),
        )
        self.entries[ticket] = entry
        return entry

    def remove_entry(self, ticket: str) -> Optional[WorktreeEntry]:
        return self.entries.pop(ticket, None)

    def get_entry(self, ticket: str) -> Optional[WorktreeEntry]:
        return self.entries.get(ticket)

    def has_entry(self, ticket: str) -> bool:
        return ticket in self.entries

    def __len__(self) -> int:
        return len(self.entries)
