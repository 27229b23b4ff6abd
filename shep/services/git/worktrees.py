"""Worktree operations service for shep."""

import re
from typing import List, Optional

import git

from shep.constants import DETACHED_BRANCH
from shep.exceptions import GitOperationError
from shep.logging_config import get_logger
from shep.models.worktree import WorktreeInfo
from shep.services.git.repository import RepositoryInspector

logger = get_logger(__name__)

# "<path> <head> [<branch>] ..." as printed by `git worktree list`. The path is
# greedy so that paths containing spaces still end at the last HEAD-like token.
_WORKTREE_LINE = re.compile(r"^(?P<path>.+)\s+(?P<head>[0-9a-fA-F]+|\(bare\))(?:\s+(?P<rest>.*))?$")
_BRANCH_TOKEN = re.compile(r"^\[(?P<branch>[^\]]+)\]")


def _describe_git_error(command: str, e: git.exc.GitCommandError) -> str:
    """Turn a GitCommandError into a one-line message."""
    stderr = (e.stderr if hasattr(e, "stderr") else str(e)).strip()
    status = e.status if hasattr(e, "status") else "unknown"

    if stderr:
        return f"git {command} failed (exit {status}): {stderr}"
    return f"git {command} failed with exit code {status}"


def parse_worktree_list(output: str) -> List[WorktreeInfo]:
    """Parse the human-readable `git worktree list` output.

    Lines without a bracketed branch (detached HEAD, bare repositories) get
    the "(detached)" sentinel. Lines that do not look like a worktree entry are skipped.
    """
    worktrees = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue

        match = _WORKTREE_LINE.match(line)
        if not match:
            logger.debug(f"Skipping unrecognised worktree line: {line!r}")
            continue

        branch = DETACHED_BRANCH
        rest = match.group("rest") or ""
        branch_match = _BRANCH_TOKEN.match(rest)
        if branch_match:
            branch = branch_match.group("branch")

        worktrees.append(WorktreeInfo(path=match.group("path").rstrip(), head=match.group("head"), branch=branch))
    return worktrees


class WorktreeService:
    """Service for creating, removing and listing git worktrees."""

    def __init__(self, inspector: RepositoryInspector):
        """Initialize the worktree service.

        Args:
            inspector: Inspector for the repository the worktrees belong to
        """
        self.inspector = inspector

    def create_branch(self, branch: str) -> tuple[bool, Optional[str]]:
        """Create a local branch at the current HEAD.

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        repo = self.inspector.open_repo()
        try:
            repo.git.branch(branch)
            logger.info(f"Created branch {branch}")
            return True, None
        except git.exc.GitCommandError as e:
            error_msg = _describe_git_error("branch", e)
            logger.debug(f"Failed to create branch {branch}: {error_msg}")
            return False, error_msg
        finally:
            repo.close()

    def add_worktree(self, path: str, branch: str) -> tuple[bool, Optional[str]]:
        """Check out an existing branch into a new worktree at path.

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        repo = self.inspector.open_repo()
        try:
            output = repo.git.worktree("add", path, branch)
            if output:
                logger.debug(output)
            logger.info(f"Added worktree for {branch} at {path}")
            return True, None
        except git.exc.GitCommandError as e:
            error_msg = _describe_git_error("worktree add", e)
            logger.debug(f"Failed to add worktree at {path}: {error_msg}")
            return False, error_msg
        finally:
            repo.close()

    def remove_worktree(self, path: str, force: bool = True) -> tuple[bool, Optional[str]]:
        """Remove a worktree at the specified path.

        Args:
            path: Path to the worktree directory
            force: Force removal even if working tree is dirty or locked

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        repo = self.inspector.open_repo()
        try:
            args = ["remove", path]
            if force:
                args.append("--force")

            repo.git.worktree(*args)
            logger.info(f"Removed worktree at {path}")
            return True, None
        except git.exc.GitCommandError as e:
            error_msg = _describe_git_error("worktree remove", e)
            logger.debug(f"Failed to remove worktree at {path}: {error_msg}")
            return False, error_msg
        finally:
            repo.close()

    def prune_worktrees(self) -> tuple[bool, Optional[str]]:
        """Prune stale worktree metadata.

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        repo = self.inspector.open_repo()
        try:
            repo.git.worktree("prune")
            logger.info("Pruned worktree metadata")
            return True, None
        except git.exc.GitCommandError as e:
            error_msg = _describe_git_error("worktree prune", e)
            logger.warning(f"Failed to prune worktrees: {error_msg}")
            return False, error_msg
        finally:
            repo.close()

    def list_worktrees(self) -> List[WorktreeInfo]:
        """All worktrees known to the repository, main working tree first.

        Raises:
            GitOperationError: `git worktree list` failed
        """
        repo = self.inspector.open_repo()
        try:
            output = repo.git.worktree("list")
        except git.exc.GitCommandError as e:
            raise GitOperationError("worktree list", message=_describe_git_error("worktree list", e))
        finally:
            repo.close()

        worktrees = parse_worktree_list(output)
        logger.debug(f"Found {len(worktrees)} worktrees")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

