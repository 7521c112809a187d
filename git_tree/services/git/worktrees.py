"""Worktree operations service for git-tree."""

import git
import os
from pathlib import Path
from typing import Dict, Iterator, List, Union

from git_tree.exceptions import GitOperationError
from git_tree.models.worktree import LiveWorktree
from git_tree.services.git.errors import to_operation_error
from git_tree.logging_config import get_logger

logger = get_logger(__name__)

BRANCH_REF_PREFIX = "refs/heads/"


def _porcelain_records(output: str) -> Iterator[Dict[str, str]]:
    """Split porcelain output into one attribute dict per worktree.

    Records are separated by blank lines. Each line is ``<key> [<value>]``;
    valueless keys such as ``bare`` or ``detached`` map to an empty string.
    """
    record: Dict[str, str] = {}
    for raw in output.splitlines():
        line = raw.strip()
        if not line:
            if record:
                yield record
            record = {}
            continue
        key, _, value = line.partition(" ")
        record[key] = value
    if record:
        yield record


class WorktreeService:
    """Lists, adds, removes and prunes the linked worktrees of one repository.

    Failures surface as GitOperationError carrying git's own output.
    """

    def __init__(self, repo_path: Union[str, Path]):
        self.repo_path = str(repo_path)

    def _get_repo(self):
        return git.Repo(self.repo_path)

    def list_worktrees(self) -> List[LiveWorktree]:
        """All worktrees in git's listing order.

        Only a worktree git flags explicitly (a bare repository) is marked
        primary here; see resolve_primary_worktree for the fallback.

        Raises:
            GitOperationError: If git cannot list worktrees
        """
        try:
            output = self._get_repo().git.worktree("list", "--porcelain")
        except git.exc.GitCommandError as e:
            raise to_operation_error("worktree list", e)

        worktrees = self.parse_porcelain(output)
        logger.debug(f"Found {len(worktrees)} worktrees")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    @staticmethod
    def parse_porcelain(output: str) -> List[LiveWorktree]:
        """Build LiveWorktree objects from `git worktree list --porcelain`.

        A record looks like::

            worktree /path/to/worktree
            HEAD <sha>
            branch refs/heads/<name>     (or "detached", or "bare")

        Records without a ``worktree`` line are skipped. A worktree whose
        directory is missing is marked orphaned.
        """
        worktrees = []
        for record in _porcelain_records(output):
            path = record.get("worktree")
            if not path:
                continue
            branch = record.get("branch", "")
            if branch.startswith(BRANCH_REF_PREFIX):
                branch = branch[len(BRANCH_REF_PREFIX):]
            worktrees.append(
                LiveWorktree(
                    path=path,
                    branch=branch,
                    head_commit=record.get("HEAD", ""),
                    is_primary="bare" in record,
                    is_orphaned=not os.path.exists(path),
                )
            )
        return worktrees

    def add_worktree(self, path: Union[str, Path], branch: str, start_point: str) -> None:
        """Create a worktree at path on a new branch starting from start_point.

        Raises:
            GitOperationError: If the parent directory or the worktree cannot be created
        """
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise GitOperationError(
                "worktree add", branch, f"failed to create worktree parent directory: {e}"
            )

        try:
            self._get_repo().git.worktree("add", "-b", branch, str(path), start_point)
        except git.exc.GitCommandError as e:
            error = to_operation_error("worktree add", e, branch)
            logger.error(f"Failed to add worktree at {path}: {error.message}")
            raise error
        logger.info(f"Created worktree at {path} on new branch {branch} from {start_point}")

    def remove_worktree(self, path: Union[str, Path], force: bool = False) -> None:
        """Remove the worktree directory and git's record of it.

        ``force`` discards uncommitted changes; without it git refuses to
        remove a dirty or locked worktree.

        Raises:
            GitOperationError: If git refuses to remove the worktree
        """
        args = ["remove", str(path)]
        if force:
            args.append("--force")
        try:
            self._get_repo().git.worktree(*args)
        except git.exc.GitCommandError as e:
            error = to_operation_error("worktree remove", e)
            logger.error(f"Failed to remove worktree at {path}: {error.message}")
            raise error
        logger.info(f"Removed worktree at {path}")

    def prune_worktrees(self) -> None:
        """Let git drop its records of worktrees whose directories are gone.

        Raises:
            GitOperationError: If the prune fails
        """
        try:
            self._get_repo().git.worktree("prune")
        except git.exc.GitCommandError as e:
            raise to_operation_error("worktree prune", e)
        logger.info("Pruned orphaned worktree metadata")
