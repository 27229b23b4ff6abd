"""Worktree data models."""

from dataclasses import dataclass

from shep.constants import DETACHED_BRANCH


@dataclass
class WorktreeInfo:
    """One row of `git worktree list`."""

    path: str
    head: str
    branch: str = DETACHED_BRANCH

    @property
    def is_detached(self) -> bool:
        return self.branch == DETACHED_BRANCH

    def __str__(self) -> str:
        return f"{self.branch} @ {self.path} ({self.head})"
