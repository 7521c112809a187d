"""Repository location and worktree path calculations.

The locator walks upward from a working directory looking for a ``.git``
marker. A ``.git`` directory marks the primary repository. A ``.git`` file
marks a linked worktree; it contains a pointer of the form::

    gitdir: /path/to/primary/.git/worktrees/<name>

from which the primary repository root is recovered. That pointer format is
git's on-disk convention, so parsing it stays private to this module.
"""

from pathlib import Path
from typing import Union

from git_tree.exceptions import NotARepositoryError
from git_tree.logging_config import get_logger

logger = get_logger(__name__)

GIT_MARKER = ".git"
GITDIR_PREFIX = "gitdir:"
DEFAULT_WORKTREES_DIR_NAME = "worktrees"

PathLike = Union[str, Path]


def _find_git_marker(cwd: PathLike) -> Path:
    """Walk upward from cwd and return the first ``.git`` entry found."""
    start = Path(cwd).resolve()
    directory = start
    while True:
        marker = directory / GIT_MARKER
        if marker.exists():
            logger.debug(f"Found {marker}")
            return marker

        parent = directory.parent
        if parent == directory:
            raise NotARepositoryError(str(start))
        directory = parent


def _primary_root_from_pointer(marker: Path) -> Path:
    """Derive the primary repository root from a linked worktree's .git file."""
    try:
        content = marker.read_text().strip()
    except OSError as e:
        raise NotARepositoryError(str(marker.parent), f"failed to read .git file: {e}")

    if not content.startswith(GITDIR_PREFIX):
        raise NotARepositoryError(str(marker.parent), "invalid .git file format")

    gitdir = Path(content[len(GITDIR_PREFIX):].strip())
    if not gitdir.parts:
        raise NotARepositoryError(str(marker.parent), "invalid .git file format")
    if not gitdir.is_absolute():
        gitdir = marker.parent / gitdir

    # <primary>/.git/worktrees/<name> -> <primary>/.git -> <primary>
    admin_dir = Path(*gitdir.parts[:-2]) if len(gitdir.parts) > 2 else gitdir
    return admin_dir.parent.resolve()


def locate_primary_root(cwd: PathLike) -> Path:
    """Find the primary repository root from any directory inside it.

    Works from the primary checkout itself or from inside one of its linked
    worktrees.

    Args:
        cwd: Directory to start searching from

    Returns:
        Absolute path to the primary repository root

    Raises:
        NotARepositoryError: If no repository encloses cwd
    """
    marker = _find_git_marker(cwd)
    if marker.is_dir():
        return marker.parent

    primary = _primary_root_from_pointer(marker)
    logger.debug(f"{marker.parent} is a linked worktree of {primary}")
    return primary


def is_inside_linked_worktree(cwd: PathLike) -> bool:
    """Check whether cwd is inside a linked worktree rather than the primary repository.

    Raises:
        NotARepositoryError: If no repository encloses cwd
    """
    return not _find_git_marker(cwd).is_dir()


def get_repo_name(repo_root: PathLike) -> str:
    """Return the basename of the repository."""
    return Path(repo_root).name


def get_worktree_base_path(
    repo_root: PathLike, worktrees_dir_name: str = DEFAULT_WORKTREES_DIR_NAME
) -> Path:
    """Directory holding every worktree of a repository.

    Format: ``<repo-parent>/worktrees/<repo-name>``
    """
    root = Path(repo_root)
    return root.parent / worktrees_dir_name / get_repo_name(root)


def derive_worktree_path(
    repo_root: PathLike, ticket: str, worktrees_dir_name: str = DEFAULT_WORKTREES_DIR_NAME
) -> Path:
    """Full path for a ticket's worktree. Pure: never touches the filesystem."""
    return get_worktree_base_path(repo_root, worktrees_dir_name) / ticket
