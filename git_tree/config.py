"""Configuration handling for git-tree"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class Config:
    """Configuration for git-tree with validation."""

    # Remote and mainline detection
    remote_name: str = "origin"
    mainline_candidates: List[str] = field(default_factory=lambda: ["main", "master", "develop"])

    # Layout on disk
    worktrees_dir_name: str = "worktrees"
    metadata_filename: str = "worktree-metadata.json"

    # Execution modes
    force: bool = False  # Skip the dirty-worktree confirmation on delete
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_remote_name()
        self._validate_mainline_candidates()
        self._validate_worktrees_dir_name()
        self._validate_metadata_filename()

    def _validate_remote_name(self):
        """Validate remote_name is not empty."""
        if not self.remote_name or not self.remote_name.strip():
            raise ValueError("remote_name cannot be empty")
        self.remote_name = self.remote_name.strip()

    def _validate_mainline_candidates(self):
        """Validate mainline_candidates is a non-empty list of names."""
        if not isinstance(self.mainline_candidates, list):
            raise ValueError("mainline_candidates must be a list")
        candidates = [c.strip() for c in self.mainline_candidates if c and c.strip()]
        if not candidates:
            raise ValueError("mainline_candidates cannot be empty")
        self.mainline_candidates = candidates

    def _validate_worktrees_dir_name(self):
        """Validate worktrees_dir_name is a single path segment."""
        name = (self.worktrees_dir_name or "").strip()
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise ValueError(
                f"worktrees_dir_name must be a single directory name, got '{self.worktrees_dir_name}'"
            )
        self.worktrees_dir_name = name

    def _validate_metadata_filename(self):
        """Validate metadata_filename is a plain file name."""
        name = (self.metadata_filename or "").strip()
        if not name or "/" in name or "\\" in name:
            raise ValueError(
                f"metadata_filename must be a plain file name, got '{self.metadata_filename}'"
            )
        self.metadata_filename = name

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "remote_name": self.remote_name,
            "mainline_candidates": self.mainline_candidates,
            "worktrees_dir_name": self.worktrees_dir_name,
            "metadata_filename": self.metadata_filename,
            "force": self.force,
            "verbose": self.verbose,
            "debug": self.debug,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary."""
        # Extract only known fields
        known_fields = {
            "remote_name",
            "mainline_candidates",
            "worktrees_dir_name",
            "metadata_filename",
            "force",
            "verbose",
            "debug",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
