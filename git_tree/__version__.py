"""Version information for git-tree."""

__version__ = "0.1.0"
