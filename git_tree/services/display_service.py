"""Display and formatting service for worktree information"""
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from git_tree.constants import LIST_COLUMNS, STATUS_COLUMNS
from git_tree.formatters import (
    format_ahead_behind,
    format_changes,
    format_list_status,
    format_status,
    format_timestamp,
    get_status_style,
)
from git_tree.logging_config import get_logger
from git_tree.models.worktree import (
    ClassifiedEntry,
    ClassifiedView,
    DeleteResult,
    HealthState,
    PruneResult,
    WorktreeEntry,
)

console = Console()
logger = get_logger(__name__)


class DisplayService:
    """Renders manager results for the terminal. Sorting happens here, not in the registry."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    @staticmethod
    def _sorted(view: ClassifiedView) -> List[ClassifiedEntry]:
        return [view.entries[ticket] for ticket in sorted(view.entries)]

    def display_list(self, view: ClassifiedView) -> None:
        """Display a table of registered worktrees."""
        if not view.entries:
            console.print("No worktrees found.")
            return

        table = Table()
        for col in LIST_COLUMNS:
            table.add_column(col.label, min_width=col.width or None)

        for classified in self._sorted(view):
            table.add_row(
                escape(classified.ticket),
                escape(classified.entry.branch),
                format_list_status(classified),
                escape(classified.entry.path),
                style=get_status_style(classified),
            )

        console.print(table)
        self._print_footer(view)

    def display_status_table(self, view: ClassifiedView) -> None:
        """Display a summary of changes and ahead/behind counts for every worktree."""
        if not view.entries:
            console.print("No worktrees found.")
            return

        table = Table()
        for col in STATUS_COLUMNS:
            table.add_column(col.label, min_width=col.width or None)

        for classified in self._sorted(view):
            table.add_row(
                escape(classified.ticket),
                escape(classified.entry.branch),
                format_status(classified),
                format_changes(classified),
                format_ahead_behind(classified.health),
                style=get_status_style(classified),
            )

        console.print(table)
        self._print_footer(view)

    def _print_footer(self, view: ClassifiedView) -> None:
        if view.stale:
            console.print(
                f"\n[red]{len(view.stale)} stale entr{'y' if len(view.stale) == 1 else 'ies'}[/red]"
                " - run [bold]git tree prune[/bold] to clean up"
            )
        if not view.untracked:
            return
        if self.verbose:
            console.print("\nWorktrees not managed by git-tree:")
            for wt in view.untracked:
                console.print(f"  {escape(str(wt))}")
        else:
            logger.debug(f"{len(view.untracked)} worktrees not managed by git-tree (use -v to show)")

    def display_status_detail(self, classified: ClassifiedEntry, target: Optional[str]) -> None:
        """Display detailed status for a single worktree."""
        entry = classified.entry
        console.print(f"Worktree: {escape(entry.ticket)}")
        console.print(f"Path:     {escape(entry.path)}")
        console.print(f"Branch:   {escape(entry.branch)}")
        console.print(f"Created:  {format_timestamp(entry.created)}\n")

        if classified.is_stale:
            console.print("[red]Status: STALE (worktree no longer exists)[/red]")
            return

        health = classified.health
        if health is None or health.state == HealthState.UNKNOWN:
            error = health.error if health else "not checked"
            console.print(f"[yellow]Status: unknown ({escape(error or '')})[/yellow]")
            return

        if health.current_branch and health.current_branch != entry.branch:
            console.print(f"[yellow]Checked out: {escape(health.current_branch)}[/yellow]")

        if health.state == HealthState.CLEAN:
            console.print("Status: [green]clean[/green] (no changes)")
        else:
            console.print("Status: [yellow]dirty[/yellow]")
            console.print("\nChanges:")
            for line in health.changes:
                console.print(escape(line), highlight=False)

        if target:
            if health.has_counts:
                console.print(f"\nCommits ahead of {target}: {health.ahead}")
                console.print(f"Commits behind {target}: {health.behind}")
            elif health.error:
                console.print(f"\n[yellow]Could not compare with {target}[/yellow]")

    def display_created(self, entry: WorktreeEntry) -> None:
        console.print("\n[green]Worktree created successfully![/green]")
        console.print(f"  Ticket:  {escape(entry.ticket)}")
        console.print(f"  Branch:  {escape(entry.branch)}")
        console.print(f"  Path:    {escape(entry.path)}")
        console.print("\nTo switch to this worktree:")
        console.print(f"  cd {escape(entry.path)}")

    def display_updated(self, entry: WorktreeEntry, target: str) -> None:
        console.print("\n[green]Worktree updated successfully![/green]")
        console.print(f"Branch {escape(entry.branch)} is now up to date with {target}.")

    def display_rebase_help(self, worktree_path: str) -> None:
        console.print("\n[yellow]Rebase failed. You may have conflicts to resolve.[/yellow]")
        console.print("To continue after resolving conflicts:")
        console.print(f"  cd {escape(worktree_path)}")
        console.print("  git rebase --continue")

    def display_deleted(self, result: DeleteResult) -> None:
        if not result.branch_deleted:
            console.print(
                f"[yellow]Warning: failed to delete branch {escape(result.entry.branch)}: "
                f"{escape(result.branch_error or '')}[/yellow]"
            )
        console.print(f"\nWorktree for {escape(result.entry.ticket)} deleted successfully.")

    def display_pruned(self, result: PruneResult) -> None:
        if not result.removed:
            console.print("No stale metadata entries found.")
        else:
            console.print(f"Found {len(result.removed)} stale metadata entries:")
            for entry in result.removed:
                console.print(f"  - {escape(entry.ticket)} (path: {escape(entry.path)})")
            console.print("\nStale metadata entries removed.")
        console.print("Git worktree pruning complete.")

    def display_switch(self, entry: WorktreeEntry, print_path: bool = False) -> None:
        if print_path:
            # Plain output for `cd "$(git tree switch -p T1)"`
            print(entry.path)
            return
        console.print(f"To switch to worktree {escape(entry.ticket)}:")
        console.print(f"  cd {escape(entry.path)}")

    def display_dirty_warning(self, entry: WorktreeEntry) -> None:
        console.print("[yellow]Warning: worktree has uncommitted changes[/yellow]")
        console.print(f"Path: {escape(entry.path)}")