"""User-facing console output for shep commands"""
from typing import List

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich import box

from shep.constants import WORKTREE_COLUMNS
from shep.models.worktree import WorktreeInfo

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)


class DisplayService:
    """Colored status lines on stdout, errors on stderr, and the worktree table."""

    def error(self, message: str) -> None:
        err_console.print(f"[red]Error: {escape(message)}[/red]")

    def info(self, message: str) -> None:
        console.print(f"[cyan]{escape(message)}[/cyan]")

    def success(self, message: str) -> None:
        console.print(f"[green]{escape(message)}[/green]")

    def plain(self, message: str) -> None:
        console.print(escape(message))

    def usage(self, text: str) -> None:
        console.print(escape(text), end="")

    def path(self, path: str) -> None:
        """Print a path unwrapped and unstyled, for shell wrappers that cd into it."""
        console.out(path, highlight=False)

    def display_worktree_table(self, worktrees: List[WorktreeInfo]) -> None:
        """Display a table of worktrees."""
        table = Table(box=box.SIMPLE_HEAD, header_style="dim")

        for col in WORKTREE_COLUMNS:
            if col.width:
                table.add_column(col.label, min_width=col.width, overflow="fold")
            else:
                table.add_column(col.label, no_wrap=True)

        for wt in worktrees:
            # Match WORKTREE_COLUMNS order: Branch, Path, HEAD
            table.add_row(
                escape(wt.branch),
                escape(wt.path),
                wt.head,
                style="dim" if wt.is_detached else None,
            )

        console.print()
        console.print(table)
