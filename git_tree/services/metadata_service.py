"""Metadata service for persisting the worktree registry."""
import json
import re
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Union

from git_tree.exceptions import CorruptMetadataError, PersistenceError
from git_tree.logging_config import get_logger
from git_tree.models.registry import Registry
from git_tree.models.worktree import WorktreeEntry

logger = get_logger(__name__)

DEFAULT_METADATA_FILENAME = "worktree-metadata.json"

# Fractional seconds beyond microseconds (e.g. nanosecond timestamps)
_EXTRA_FRACTION = re.compile(r"(\.\d{6})\d+")


class MetadataService:
    """Loads and saves the worktree registry of one repository.

    The registry lives inside the repository's administrative directory at
    ``<root>/.git/worktree-metadata.json``.
    """

    def __init__(self, repo_root: Union[str, Path], filename: str = DEFAULT_METADATA_FILENAME):
        """Initialize metadata service for a repository.

        Args:
            repo_root: Path to the primary repository root
            filename: Name of the metadata file inside ``.git``
        """
        self.repo_root = Path(repo_root)
        self.metadata_file = self.repo_root / ".git" / filename

    def load(self) -> Registry:
        """Load the registry from disk.

        Returns:
            The persisted Registry, or an empty one if no file exists yet

        Raises:
            CorruptMetadataError: If the file exists but cannot be parsed
        """
        if not self.metadata_file.exists():
            logger.debug(f"No metadata file at {self.metadata_file}")
            return Registry()

        try:
            with open(self.metadata_file, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise CorruptMetadataError(str(self.metadata_file), f"invalid JSON: {e}")
        except (OSError, UnicodeDecodeError) as e:
            raise CorruptMetadataError(str(self.metadata_file), str(e))

        registry = self.deserialize_registry(data)
        logger.debug(
            f"Loaded {len(registry)} worktree entries (mainline: {registry.mainline or 'unset'})"
        )
        return registry

    def save(self, registry: Registry) -> None:
        """Save the registry using an atomic write.

        Raises:
            PersistenceError: If the file cannot be written
        """
        data = self.serialize_registry(registry)

        # Atomic write: write to temp file, then rename
        temp_file = self.metadata_file.with_suffix('.tmp')
        try:
            with open(temp_file, 'w') as f:
                json.dump(data, f, indent=2, sort_keys=True)
                f.write("\n")
                f.flush()

            # Atomic rename (POSIX systems guarantee atomicity)
            temp_file.replace(self.metadata_file)
            logger.debug(f"Saved {len(registry)} worktree entries to {self.metadata_file}")
        except OSError as e:
            raise PersistenceError(str(self.metadata_file), str(e))
        finally:
            if temp_file.exists():
                try:
                    temp_file.unlink()
                except OSError as e:
                    logger.debug(f"Could not remove temp file {temp_file}: {e}")

    def serialize_registry(self, registry: Registry) -> Dict:
        """Convert a Registry to its on-disk dictionary form."""
        return {
            "mainline": registry.mainline,
            "worktrees": {
                ticket: self._serialize_entry(entry)
                for ticket, entry in registry.entries.items()
            },
        }

    def deserialize_registry(self, data: Dict) -> Registry:
        """Build a Registry from its on-disk form.

        Unknown fields are ignored and a missing ``worktrees`` collection
        means no entries.
        """
        if not isinstance(data, dict):
            raise CorruptMetadataError(str(self.metadata_file), "top level is not an object")

        mainline = data.get("mainline") or ""
        if not isinstance(mainline, str):
            raise CorruptMetadataError(str(self.metadata_file), "'mainline' is not a string")

        worktrees = data.get("worktrees") or {}
        if not isinstance(worktrees, dict):
            raise CorruptMetadataError(str(self.metadata_file), "'worktrees' is not an object")

        entries = {}
        for ticket, entry_data in worktrees.items():
            entries[ticket] = self._deserialize_entry(ticket, entry_data)

        return Registry(entries=entries, mainline=mainline)

    def _serialize_entry(self, entry: WorktreeEntry) -> Dict:
        return {
            "ticket": entry.ticket,
            "path": entry.path,
            "branch": entry.branch,
            "created": entry.created.isoformat() if entry.created else None,
        }

    def _deserialize_entry(self, ticket: str, data: Dict) -> WorktreeEntry:
        if not isinstance(data, dict):
            raise CorruptMetadataError(
                str(self.metadata_file), f"entry '{ticket}' is not an object"
            )

        path = data.get("path")
        branch = data.get("branch")
        if not isinstance(path, str) or not path:
            raise CorruptMetadataError(str(self.metadata_file), f"entry '{ticket}' has no path")
        if not isinstance(branch, str):
            raise CorruptMetadataError(str(self.metadata_file), f"entry '{ticket}' has no branch")

        stored_ticket = data.get("ticket")
        if stored_ticket and stored_ticket != ticket:
            logger.warning(
                f"Entry '{ticket}' records ticket '{stored_ticket}'; using '{ticket}'"
            )

        # The map key is the ticket; the stored field is informational
        return WorktreeEntry(
            ticket=ticket,
            path=path,
            branch=branch,
            created=self._parse_timestamp(ticket, data.get("created")),
        )

    def _parse_timestamp(self, ticket: str, value: Optional[str]) -> Optional[datetime]:
        if not value:
            return None
        if not isinstance(value, str):
            raise CorruptMetadataError(
                str(self.metadata_file), f"entry '{ticket}' has an invalid created timestamp"
            )

        normalized = value.strip()
        if normalized.endswith("Z"):
            normalized = normalized[:-1] + "+00:00"
        normalized = _EXTRA_FRACTION.sub(r"\1", normalized)

        try:
            return datetime.fromisoformat(normalized)
        except ValueError:
            raise CorruptMetadataError(
                str(self.metadata_file),
                f"entry '{ticket}' has an invalid created timestamp '{value}'",
            )
