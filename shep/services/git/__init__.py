"""Git-related services for shep."""

from .repository import RepositoryInspector
from .worktrees import WorktreeService, parse_worktree_list

__all__ = [
    "RepositoryInspector",
    "WorktreeService",
    "parse_worktree_list",
]
