"""Entry point and verb dispatch for shep"""

import os
import sys
from typing import List, Optional

from shep.cli.args import UsageError, parse_args
from shep.config import load_config
from shep.constants import USAGE_TEXT
from shep.core import FAILURE, SUCCESS, Shep
from shep.exceptions import ShepError
from shep.logging_config import get_logger, setup_logging
from shep.services.display_service import DisplayService
from shep.services.git.repository import RepositoryInspector

logger = get_logger(__name__)

HELP_COMMANDS = {"help", "--help", "-h"}


def _find_config_root(cwd: str) -> Optional[str]:
    """Main repository root holding an optional shep.json, or None outside a repository."""
    try:
        return RepositoryInspector(cwd).main_repo_root()
    except ShepError as e:
        logger.debug(f"No repository configuration available: {e}")
        return None


def dispatch(shep: Shep, command: str, branch: Optional[str], display: DisplayService) -> int:
    """Run the handler for command and return its exit code."""
    if command == "new":
        return shep.new(branch)
    if command == "init":
        return shep.init(branch)
    if command == "remove":
        return shep.remove(branch)
    if command in ("list", "ls"):
        return shep.list()
    if command in HELP_COMMANDS:
        display.usage(USAGE_TEXT)
        return SUCCESS

    display.error(f"Unknown command: {command}")
    display.usage(USAGE_TEXT)
    return FAILURE


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    display = DisplayService()
    debug = False
    try:
        try:
            parsed_args = parse_args(argv)
        except UsageError as e:
            display.error(str(e))
            display.usage(USAGE_TEXT)
            return FAILURE

        debug = parsed_args.debug
        setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

        command = "help" if parsed_args.show_help else parsed_args.command
        if command in HELP_COMMANDS:
            display.usage(USAGE_TEXT)
            return SUCCESS

        cwd = os.getcwd()
        config = load_config(
            _find_config_root(cwd),
            overrides={
                "interactive": not parsed_args.no_interactive,
                "verbose": parsed_args.verbose,
                "debug": parsed_args.debug,
            },
        )
        if debug:
            for key, value in config.to_dict().items():
                logger.debug(f"config {key}: {value}")

        shep = Shep(cwd, config, display=display)
        return dispatch(shep, command, parsed_args.branch, display)
    except KeyboardInterrupt:
        display.plain("")
        display.error("Operation cancelled by user")
        return FAILURE
    except ShepError as e:
        display.error(str(e))
        if debug:
            logger.exception("Unhandled shep error")
        return FAILURE


if __name__ == "__main__":
    sys.exit(main())
