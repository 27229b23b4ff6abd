"""Shared constants for shep."""

from dataclasses import dataclass
from typing import List


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    key: str
    label: str
    width: int = 0  # 0 means auto-width


# Columns of the `shep list` table
WORKTREE_COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("branch", "Branch", 20),
    ColumnDefinition("path", "Path", 50),
    ColumnDefinition("head", "HEAD"),
]

DETACHED_BRANCH = "(detached)"

# Environment keys rewritten on every provision
APP_URL_KEY = "APP_URL"
DB_CONNECTION_KEY = "DB_CONNECTION"
DB_DATABASE_KEY = "DB_DATABASE"
DB_CONNECTION_DRIVER = "sqlite"

# Keys that only make sense for server databases; commented out, never removed
DISABLED_DB_KEYS: List[str] = ["DB_HOST", "DB_PORT", "DB_USERNAME", "DB_PASSWORD"]

USAGE_TEXT = """Shep - Laravel Worktree Manager

Usage: shep <command> [arguments]

Commands:
  new <branch>      Create a new worktree for a branch
  init [branch]     Provision an existing worktree (or current directory)
  remove <branch>   Remove a worktree
  list              List all worktrees
  help              Show this help message

Options:
  -v, --verbose     Show verbose output
  --debug           Show debug information and write ~/.shep/shep.log
  --no-interactive  Answer every prompt with its default
  --version         Show the version and exit

Examples:
  shep new feature-login    Create worktree for feature-login branch
  shep init                 Provision the current directory
  shep init feature-login   Provision existing worktree
  shep remove feature-login Remove the worktree
  shep list                 Show all worktrees
"""
