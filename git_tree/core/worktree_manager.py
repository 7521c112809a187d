"""Core functionality for git-tree"""

import os
from pathlib import Path
from typing import Optional, Union

from git_tree.config import Config
from git_tree.exceptions import (
    AlreadyExistsError,
    ConfirmationRequiredError,
    DirtyWorktreeError,
    GitOperationError,
    InWorktreeError,
    MainlineUnsetError,
    NotFoundError,
    PathCollisionError,
)
from git_tree.logging_config import get_logger
from git_tree.models.registry import Registry
from git_tree.models.worktree import (
    ClassifiedEntry,
    ClassifiedView,
    DeleteResult,
    PruneResult,
    WorktreeEntry,
)
from git_tree.services.git import GitOperations, WorktreeService
from git_tree.services.metadata_service import MetadataService
from git_tree.services.reconciliation_service import ReconciliationService
from git_tree.utils.paths import derive_worktree_path, is_inside_linked_worktree, locate_primary_root

logger = get_logger(__name__)


class WorktreeManager:
    """Creates, updates, deletes and prunes ticket worktrees of one repository.

    Every operation loads the registry fresh from disk and saves it right
    after each mutation. Preconditions are checked before any git call or
    registry change.
    """

    def __init__(
        self,
        cwd: Union[str, Path],
        config: Union[Config, dict, None] = None,
        git_ops: Optional[GitOperations] = None,
        worktree_service: Optional[WorktreeService] = None,
    ):
        """Initialize WorktreeManager.

        Args:
            cwd: Directory the command runs from (primary repo or any linked worktree)
            config: Configuration dict or Config object
            git_ops: Git operations backend (created for the repository if omitted)
            worktree_service: Worktree backend (created for the repository if omitted)

        Raises:
            NotARepositoryError: If cwd is not inside a git repository
        """
        if config is None:
            config = Config()
        elif isinstance(config, dict):
            config = Config.from_dict(config)
        self.config = config

        self.cwd = Path(cwd)
        self.repo_root = locate_primary_root(self.cwd)
        logger.debug(f"Primary repository: {self.repo_root}")

        self.git_ops = git_ops or GitOperations(self.repo_root, self.config)
        self.worktree_service = worktree_service or WorktreeService(self.repo_root)
        self.metadata_service = MetadataService(self.repo_root, self.config.metadata_filename)
        self.reconciliation_service = ReconciliationService(self.git_ops)

    def load_registry(self) -> Registry:
        return self.metadata_service.load()

    def save_registry(self, registry: Registry) -> None:
        self.metadata_service.save(registry)

    def worktree_path(self, ticket: str) -> Path:
        """Path a ticket's worktree gets when created."""
        return derive_worktree_path(self.repo_root, ticket, self.config.worktrees_dir_name)

    def _require_entry(self, registry: Registry, ticket: str) -> WorktreeEntry:
        entry = registry.get_entry(ticket)
        if entry is None:
            raise NotFoundError(ticket)
        return entry

    def ensure_mainline(self, registry: Registry) -> str:
        """Detect and persist the mainline branch if the registry has none.

        Once saved, the mainline is never re-detected.
        """
        if not registry.mainline:
            logger.info("Detecting mainline branch...")
            registry.mainline = self.git_ops.detect_default_branch()
            self.save_registry(registry)
            logger.info(f"Detected mainline: {registry.mainline}")
        return registry.mainline

    def create(self, ticket: str, branch_name: Optional[str] = None) -> WorktreeEntry:
        """Create a worktree and branch for a ticket from the latest mainline.

        If anything fails after git created the worktree but before the
        registry is saved, the worktree is left unregistered; prune and a
        manual `git worktree remove` clean that up.

        Raises:
            InWorktreeError: If run from inside a linked worktree
            AlreadyExistsError: If the ticket is already registered
            PathCollisionError: If the target directory exists
            MainlineDetectionError: If no mainline is set and none can be detected
            GitOperationError: If fetching or adding the worktree fails
        """
        branch_name = branch_name or ticket

        if is_inside_linked_worktree(self.cwd):
            raise InWorktreeError(str(self.cwd))

        registry = self.load_registry()
        existing = registry.get_entry(ticket)
        if existing is not None:
            raise AlreadyExistsError(ticket, existing.path)

        path = self.worktree_path(ticket)
        if path.exists():
            raise PathCollisionError(str(path))

        mainline = self.ensure_mainline(registry)

        # A stale base would silently branch from outdated history
        logger.info(f"Fetching latest from {self.config.remote_name}...")
        self.git_ops.fetch()

        start_point = self.git_ops.remote_ref(mainline)
        logger.info(f"Creating worktree at {path} from {start_point}...")
        self.worktree_service.add_worktree(path, branch_name, start_point)

        entry = registry.add_entry(ticket, str(path), branch_name)
        self.save_registry(registry)
        return entry

    def update(self, ticket: str) -> WorktreeEntry:
        """Rebase a ticket's branch onto the latest mainline.

        Raises:
            NotFoundError: If the ticket is not registered
            MainlineUnsetError: If no mainline was ever detected
            DirtyWorktreeError: If the worktree has uncommitted changes
            RebaseFailedError: If the rebase stops (left in progress for the user)
            GitOperationError: If the status check or fetch fails
        """
        registry = self.load_registry()
        entry = self._require_entry(registry, ticket)

        if not registry.mainline:
            raise MainlineUnsetError()

        if not self.git_ops.is_clean(entry.path):
            raise DirtyWorktreeError(entry.path)

        logger.info(f"Fetching latest from {self.config.remote_name}...")
        self.git_ops.fetch()

        target = self.git_ops.remote_ref(registry.mainline)
        logger.info(f"Rebasing {entry.branch} onto {target}...")
        self.git_ops.rebase(entry.path, entry.branch, target)
        return entry

    def delete(self, ticket: str, force: Optional[bool] = None) -> DeleteResult:
        """Remove a ticket's worktree, its branch and its registry entry.

        A dirty worktree is only removed when ``force`` is set (defaults to
        ``Config.force``); otherwise ConfirmationRequiredError is raised
        before anything changes, so the caller can ask and retry. Failing to
        delete the branch is only a warning: it may already be merged or
        deleted elsewhere.

        Raises:
            NotFoundError: If the ticket is not registered
            ConfirmationRequiredError: If the worktree is dirty and force is not set
            GitOperationError: If git cannot remove the worktree
        """
        if force is None:
            force = self.config.force

        registry = self.load_registry()
        entry = self._require_entry(registry, ticket)

        dirty = False
        if os.path.exists(entry.path):
            try:
                dirty = not self.git_ops.is_clean(entry.path)
            except GitOperationError as e:
                logger.debug(f"Could not check status of {entry.path}: {e}")

        if dirty and not force:
            raise ConfirmationRequiredError(entry, "worktree has uncommitted changes")

        logger.info(f"Removing worktree at {entry.path}...")
        self.worktree_service.remove_worktree(entry.path, force=force or dirty)

        result = DeleteResult(entry=entry, branch_deleted=True)
        logger.info(f"Deleting branch {entry.branch}...")
        try:
            self.git_ops.delete_branch(entry.branch)
        except GitOperationError as e:
            logger.warning(f"Failed to delete branch {entry.branch}: {e}")
            result.branch_deleted = False
            result.branch_error = str(e)

        registry.remove_entry(ticket)
        self.save_registry(registry)
        return result

    def prune(self) -> PruneResult:
        """Drop stale registry entries, then let git prune its own records.

        The two sweeps are independent; re-running is always safe.

        Raises:
            GitOperationError: If listing or pruning worktrees fails
        """
        registry = self.load_registry()
        view = self.reconciliation_service.classify(registry, self.worktree_service.list_worktrees())

        result = PruneResult()
        for ticket, classified in view.entries.items():
            if not classified.is_stale:
                continue
            logger.info(f"Removing stale entry {ticket} (path: {classified.entry.path})")
            registry.remove_entry(ticket)
            result.removed.append(classified.entry)

        if result.removed:
            self.save_registry(registry)

        self.worktree_service.prune_worktrees()
        return result

    def list_worktrees(self, with_health: bool = True) -> ClassifiedView:
        """Classify every registered worktree, optionally with health."""
        registry = self.load_registry()
        view = self.reconciliation_service.classify(registry, self.worktree_service.list_worktrees())
        if with_health:
            self.reconciliation_service.check_health(view, registry.mainline)
        return view

    def get_status(self, ticket: str) -> ClassifiedEntry:
        """Classified entry with health for a single ticket.

        Raises:
            NotFoundError: If the ticket is not registered
        """
        registry = self.load_registry()
        entry = self._require_entry(registry, ticket)

        single = Registry(entries={ticket: entry}, mainline=registry.mainline)
        view = self.reconciliation_service.classify(single, self.worktree_service.list_worktrees())
        self.reconciliation_service.check_health(view, registry.mainline)
        return view.entries[ticket]

    def get_mainline(self) -> str:
        """The recorded mainline branch, empty if never detected."""
        return self.load_registry().mainline

    def switch(self, ticket: str) -> WorktreeEntry:
        """Look up the worktree to switch to.

        Raises:
            NotFoundError: If the ticket is not registered
        """
        return self._require_entry(self.load_registry(), ticket)
