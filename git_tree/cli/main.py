"""Command-line entry point for git-tree"""

import os
import sys

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm

from git_tree.cli.args import build_parser
from git_tree.config import Config
from git_tree.core import WorktreeManager
from git_tree.exceptions import ConfirmationRequiredError, GitTreeError, RebaseFailedError
from git_tree.logging_config import setup_logging
from git_tree.services.display_service import DisplayService

console = Console()
error_console = Console(stderr=True)

# Normalized command names
ALIASES = {"ls": "list", "rm": "delete"}


def _run_create(manager: WorktreeManager, args, display: DisplayService) -> int:
    entry = manager.create(args.ticket, args.branch)
    display.display_created(entry)
    return 0


def _run_list(manager: WorktreeManager, args, display: DisplayService) -> int:
    display.display_list(manager.list_worktrees())
    return 0


def _run_status(manager: WorktreeManager, args, display: DisplayService) -> int:
    if args.ticket:
        classified = manager.get_status(args.ticket)
        mainline = manager.get_mainline()
        target = manager.git_ops.remote_ref(mainline) if mainline else None
        display.display_status_detail(classified, target)
    else:
        display.display_status_table(manager.list_worktrees())
    return 0


def _run_update(manager: WorktreeManager, args, display: DisplayService) -> int:
    try:
        entry = manager.update(args.ticket)
    except RebaseFailedError as e:
        display.display_rebase_help(e.worktree_path)
        raise
    display.display_updated(entry, manager.git_ops.remote_ref(manager.get_mainline()))
    return 0


def _run_delete(manager: WorktreeManager, args, display: DisplayService) -> int:
    try:
        result = manager.delete(args.ticket)
    except ConfirmationRequiredError as e:
        display.display_dirty_warning(e.entry)
        if not Confirm.ask("Continue with deletion?", default=False):
            error_console.print("[yellow]Deletion cancelled[/yellow]")
            return 1
        result = manager.delete(args.ticket, force=True)
    display.display_deleted(result)
    return 0


def _run_switch(manager: WorktreeManager, args, display: DisplayService) -> int:
    display.display_switch(manager.switch(args.ticket), print_path=args.print_path)
    return 0


def _run_prune(manager: WorktreeManager, args, display: DisplayService) -> int:
    display.display_pruned(manager.prune())
    return 0


COMMANDS = {
    "create": _run_create,
    "list": _run_list,
    "status": _run_status,
    "update": _run_update,
    "delete": _run_delete,
    "switch": _run_switch,
    "prune": _run_prune,
}


def main(argv=None) -> int:
    """Main entry point for the application."""
    parser = build_parser()
    parsed_args = parser.parse_args(argv)
    debug = parsed_args.debug

    command = ALIASES.get(parsed_args.command, parsed_args.command)
    if command is None:
        parser.print_help()
        return 1
    if command == "help":
        parser.print_help()
        return 0

    try:
        setup_logging(verbose=parsed_args.verbose, debug=debug)

        config = Config(
            force=getattr(parsed_args, "force", False),
            verbose=parsed_args.verbose,
            debug=debug,
        )

        if debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            console.print("[yellow]Configuration:[/yellow]")
            for key, value in config.to_dict().items():
                console.print(f"  {key}: {value}")

        manager = WorktreeManager(os.getcwd(), config)
        display = DisplayService(verbose=parsed_args.verbose)
        return COMMANDS[command](manager, parsed_args, display)
    except KeyboardInterrupt:
        error_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 1
    except GitTreeError as e:
        error_console.print(f"[red]Error: {escape(str(e))}[/red]")
        if debug:
            error_console.print_exception()
        return 1
    except Exception as e:
        error_console.print(f"[red]Unexpected error: {escape(str(e))}[/red]")
        if debug:
            error_console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
