"""Data models for shep."""

from .worktree import WorktreeInfo

__all__ = ["WorktreeInfo"]
