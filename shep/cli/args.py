"""Command-line argument parsing for shep."""

import argparse
from typing import List, Optional

from shep.__version__ import __version__


class UsageError(Exception):
    """Raised instead of argparse's exit(2) so the dispatcher can report it."""
    pass


class ShepArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser.

    Help is handled by the dispatcher (`help`, `-h`, `--help` all print the
    same usage text), so argparse's own help action is disabled.
    """
    parser = ShepArgumentParser(
        prog="shep",
        description="Manage git worktrees for Laravel applications",
        add_help=False,
    )
    parser.add_argument("command", nargs="?", default="help", help="new, init, remove, list or help")
    parser.add_argument("branch", nargs="?", help="Branch the command applies to")
    parser.add_argument("-h", "--help", action="store_true", dest="show_help", help="Show usage")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument("--version", action="version", version=f"shep {__version__}")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument(
        "--no-interactive",
        action="store_true",
        help="Answer every prompt with its default (for scripts/automation)",
    )
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Raises:
        UsageError: the arguments could not be parsed
    """
    return build_parser().parse_args(argv)
