"""Custom exceptions for git-tree"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from git_tree.models.worktree import WorktreeEntry


class GitTreeError(Exception):
    """Base exception for all git-tree errors."""
    pass


class NotARepositoryError(GitTreeError):
    """Exception raised when no git repository encloses the working directory."""

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        self.reason = reason

        error_msg = f"Not in a git repository: {path}"
        if reason:
            error_msg += f" ({reason})"

        super().__init__(error_msg)


class InWorktreeError(GitTreeError):
    """Exception raised when an operation must run from the primary repository."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"Must be in the primary repository, not in an existing worktree ({path})"
        )


class AlreadyExistsError(GitTreeError):
    """Exception raised when a ticket already has a registered worktree."""

    def __init__(self, ticket: str, path: str):
        self.ticket = ticket
        self.path = path
        super().__init__(f"Worktree for {ticket} already exists at {path}")


class PathCollisionError(GitTreeError):
    """Exception raised when the target worktree directory already exists."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Path already exists: {path}")


class NotFoundError(GitTreeError):
    """Exception raised when a ticket has no registered worktree."""

    def __init__(self, ticket: str):
        self.ticket = ticket
        super().__init__(f"Worktree for {ticket} not found")


class MainlineUnsetError(GitTreeError):
    """Exception raised when no mainline branch has been recorded yet."""

    def __init__(self):
        super().__init__(
            "Mainline branch not set in metadata (create a worktree first to detect it)"
        )


class DirtyWorktreeError(GitTreeError):
    """Exception raised when a worktree has uncommitted changes."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"Worktree at {path} has uncommitted changes, please commit or stash them first"
        )


class ConfirmationRequiredError(GitTreeError):
    """Raised when a destructive operation needs the caller to confirm first."""

    def __init__(self, entry: "WorktreeEntry", reason: str):
        self.entry = entry
        self.reason = reason
        super().__init__(f"Confirmation required for {entry.ticket}: {reason}")


class CorruptMetadataError(GitTreeError):
    """Exception raised when the metadata file exists but cannot be parsed."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        self.message = message

        error_msg = f"Failed to parse metadata file {path}"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class PersistenceError(GitTreeError):
    """Exception raised when the metadata file cannot be written."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        self.message = message

        error_msg = f"Failed to write metadata file {path}"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class GitOperationError(GitTreeError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, branch: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.branch = branch
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if branch:
            error_msg += f" for branch '{branch}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class MainlineDetectionError(GitOperationError):
    """Exception raised when the remote's default branch cannot be determined."""

    def __init__(self, remote: str, candidates: list[str]):
        self.remote = remote
        self.candidates = candidates
        super().__init__(
            "detect_mainline",
            message=f"could not detect mainline branch on '{remote}' "
            f"(tried {remote}/HEAD and {', '.join(candidates)})",
        )


class RebaseFailedError(GitOperationError):
    """Exception raised when a rebase stops, usually because of conflicts."""

    def __init__(self, branch: str, onto: str, worktree_path: str, message: Optional[str] = None):
        self.onto = onto
        self.worktree_path = worktree_path
        super().__init__(f"rebase onto {onto}", branch, message)
