"""Command-line argument parsing for git-tree."""

import argparse
from git_tree.__version__ import __version__
from git_tree.constants import USAGE_EXAMPLES


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        prog="git tree",
        description="Git worktree management tool: one worktree per ticket",
        epilog=USAGE_EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--version", action="version", version=f"git-tree {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    create = subparsers.add_parser("create", help="Create a new worktree for a ticket")
    create.add_argument("ticket", help="Ticket identifier, e.g. PROJ-123")
    create.add_argument("branch", nargs="?", help="Branch name (defaults to the ticket)")

    subparsers.add_parser("list", aliases=["ls"], help="List all worktrees")

    delete = subparsers.add_parser(
        "delete", aliases=["rm"], help="Delete a worktree and its branch"
    )
    delete.add_argument("ticket", help="Ticket identifier")
    delete.add_argument(
        "-f", "--force", action="store_true", help="Delete even with uncommitted changes"
    )

    status = subparsers.add_parser("status", help="Show status of worktrees")
    status.add_argument("ticket", nargs="?", help="Show detailed status for one ticket")

    update = subparsers.add_parser("update", help="Rebase a worktree onto the latest mainline")
    update.add_argument("ticket", help="Ticket identifier")

    switch = subparsers.add_parser("switch", help="Show command to switch to a worktree")
    switch.add_argument("ticket", help="Ticket identifier")
    switch.add_argument(
        "-p", "--print-path", action="store_true", help="Print only the worktree path"
    )

    subparsers.add_parser("prune", help="Clean up stale metadata and worktrees")
    subparsers.add_parser("help", help="Show this help message")

    return parser


def parse_args(argv=None):
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
