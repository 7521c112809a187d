"""Git operations service"""

import git
from pathlib import Path
from typing import Union, TYPE_CHECKING, Optional

from git_tree.exceptions import GitOperationError, MainlineDetectionError, RebaseFailedError
from git_tree.services.git.errors import describe_git_error, to_operation_error
from git_tree.logging_config import get_logger

if TYPE_CHECKING:
    from git_tree.config import Config

logger = get_logger(__name__)

PathLike = Union[str, Path]


class GitOperations:
    """Service for Git operations.

    Repository-wide calls (fetch, mainline detection, branch deletion) run in
    the primary repository. Calls that take a ``worktree_path`` run inside
    that worktree.
    """

    def __init__(self, repo_path: PathLike, config: Union["Config", dict]):
        """Initialize the service.

        Args:
            repo_path: Path to the primary git repository
            config: Configuration dictionary or Config object
        """
        self.repo_path = str(repo_path)
        self.config = config
        self.remote_name = config.get("remote_name", "origin")
        self.mainline_candidates = config.get("mainline_candidates", ["main", "master", "develop"])

        logger.debug("Git operations initialized")

    def _get_repo(self, path: Optional[PathLike] = None):
        """Get a git.Repo instance.

        Args:
            path: Worktree to open instead of the primary repository

        Returns:
            git.Repo: A fresh repository instance

        Raises:
            GitOperationError: If path is not a usable git working tree
        """
        target = str(path) if path is not None else self.repo_path
        try:
            return git.Repo(target)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise GitOperationError("open repository", message=f"{target}: {e}")

    def remote_ref(self, branch_name: str) -> str:
        """Name of the remote-tracking ref for a branch, e.g. ``origin/main``."""
        return f"{self.remote_name}/{branch_name}"

    def detect_default_branch(self) -> str:
        """Detect the remote's default branch.

        Reads the remote's HEAD pointer first, then probes the configured
        candidate names in order; the first one that exists on the remote wins.

        Raises:
            MainlineDetectionError: If nothing matches
        """
        repo = self._get_repo()
        head_ref = f"{self.remote_name}/HEAD"
        prefix = f"{self.remote_name}/"
        try:
            resolved = repo.git.rev_parse("--abbrev-ref", head_ref).strip()
            if resolved.startswith(prefix) and resolved != head_ref:
                branch = resolved[len(prefix):]
                logger.info(f"Detected mainline '{branch}' from {head_ref}")
                return branch
        except git.exc.GitCommandError as e:
            logger.debug(f"Could not resolve {head_ref}: {describe_git_error(e)}")

        for candidate in self.mainline_candidates:
            try:
                repo.git.rev_parse("--verify", "--quiet", self.remote_ref(candidate))
                logger.info(f"Detected mainline '{candidate}' by probing remote branches")
                return candidate
            except git.exc.GitCommandError:
                logger.debug(f"{self.remote_ref(candidate)} does not exist")

        raise MainlineDetectionError(self.remote_name, self.mainline_candidates)

    def fetch(self) -> None:
        """Fetch the latest state of the remote.

        Raises:
            GitOperationError: If the fetch fails
        """
        try:
            repo = self._get_repo()
            repo.git.fetch(self.remote_name)
            logger.info(f"Fetched {self.remote_name}")
        except git.exc.GitCommandError as e:
            raise to_operation_error("fetch", e)

    def get_status(self, worktree_path: PathLike) -> list[str]:
        """Get the porcelain status lines of a worktree. Empty means clean.

        Raises:
            GitOperationError: If the status cannot be read
        """
        try:
            repo = self._get_repo(worktree_path)
            output = repo.git.status("--porcelain")
        except git.exc.GitCommandError as e:
            raise to_operation_error("status", e)
        return [line for line in output.split("\n") if line.strip()]

    def is_clean(self, worktree_path: PathLike) -> bool:
        """Check whether a worktree has no uncommitted changes."""
        return not self.get_status(worktree_path)

    def get_current_branch(self, worktree_path: PathLike) -> str:
        """Name of the branch checked out in a worktree.

        Raises:
            GitOperationError: If HEAD cannot be resolved or is detached
        """
        try:
            repo = self._get_repo(worktree_path)
            branch = repo.git.rev_parse("--abbrev-ref", "HEAD").strip()
        except git.exc.GitCommandError as e:
            raise to_operation_error("current branch", e)
        if branch == "HEAD":
            raise GitOperationError("current branch", message=f"{worktree_path} is in detached HEAD state")
        return branch

    def get_commit_counts(self, worktree_path: PathLike, branch_name: str, target: str) -> tuple[int, int]:
        """Count commits on branch_name not in target and vice versa.

        Returns:
            Tuple of (ahead, behind)

        Raises:
            GitOperationError: If either ref is missing or the output is unexpected
        """
        try:
            repo = self._get_repo(worktree_path)
            output = repo.git.rev_list("--left-right", "--count", f"{branch_name}...{target}")
        except git.exc.GitCommandError as e:
            raise to_operation_error("commit count", e, branch_name)

        parts = output.split()
        if len(parts) != 2 or not all(part.isdigit() for part in parts):
            raise GitOperationError("commit count", branch_name, f"unexpected output: {output!r}")
        return int(parts[0]), int(parts[1])

    def delete_branch(self, branch_name: str) -> None:
        """Force-delete a local branch.

        Raises:
            GitOperationError: If git refuses, e.g. the branch no longer exists
        """
        try:
            repo = self._get_repo()
            repo.git.branch("-D", branch_name)
            logger.info(f"Deleted branch {branch_name}")
        except git.exc.GitCommandError as e:
            raise to_operation_error("delete branch", e, branch_name)

    def rebase(self, worktree_path: PathLike, branch_name: str, onto: str) -> None:
        """Rebase branch_name onto another ref inside its worktree.

        On failure git leaves the rebase in progress so the user can resolve
        conflicts and continue.

        Raises:
            RebaseFailedError: With git's output when the rebase stops
        """
        try:
            repo = self._get_repo(worktree_path)
            repo.git.rebase(onto, branch_name)
            logger.info(f"Rebased {branch_name} onto {onto}")
        except git.exc.GitCommandError as e:
            error_msg = describe_git_error(e)
            logger.error(f"Rebase of {branch_name} onto {onto} failed: {error_msg}")
            raise RebaseFailedError(branch_name, onto, str(worktree_path), error_msg)
