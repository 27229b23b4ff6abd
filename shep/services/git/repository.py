"""Read-only repository queries for shep."""

import os
from pathlib import Path
from typing import Optional, Union, TYPE_CHECKING

import git

from shep.exceptions import GitOperationError, NotAGitRepositoryError
from shep.logging_config import get_logger

if TYPE_CHECKING:
    from shep.config import Config

logger = get_logger(__name__)


class RepositoryInspector:
    """Answers questions about the repository containing a directory."""

    def __init__(self, cwd: Optional[str] = None, config: Union['Config', dict, None] = None):
        """Initialize the inspector.

        Args:
            cwd: Directory the queries are made from (defaults to the process cwd)
            config: Configuration dictionary or Config object
        """
        self.cwd = cwd or os.getcwd()
        config = config or {}
        self.worktrees_dir = config.get('worktrees_dir', '.worktrees')

    def open_repo(self) -> git.Repo:
        """Open the repository that contains cwd.

        A new Repo object is created on every call; GitPython does not clone,
        it only reads the existing .git directory or file.

        Raises:
            NotAGitRepositoryError: cwd is not inside a git working tree
        """
        try:
            return git.Repo(self.cwd, search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            logger.debug(f"{self.cwd} is not in a git repository: {e}")
            raise NotAGitRepositoryError(self.cwd)

    def _rev_parse(self, *args: str) -> str:
        repo = self.open_repo()
        try:
            return repo.git.rev_parse(*args).strip()
        except git.exc.GitCommandError as e:
            stderr = (e.stderr or "").strip()
            raise GitOperationError("rev-parse", message=stderr or str(e))
        finally:
            repo.close()

    def repo_root(self) -> str:
        """Top-level directory of the current working tree."""
        try:
            return self._rev_parse("--show-toplevel")
        except GitOperationError:
            # Bare repositories and .git internals have no working tree
            raise NotAGitRepositoryError(self.cwd)

    def is_git_repo(self) -> bool:
        try:
            self.repo_root()
            return True
        except NotAGitRepositoryError:
            return False

    def main_repo_root(self) -> str:
        """Root of the primary repository, even when cwd is inside a linked worktree.

        `git rev-parse --git-common-dir` prints `.git` in the main working tree
        and the shared git directory (e.g. /repo/.git) inside linked worktrees.
        """
        root = self.repo_root()
        try:
            common_dir = self._rev_parse("--git-common-dir")
        except GitOperationError as e:
            logger.debug(f"Could not read git common dir, using {root}: {e}")
            return root

        if common_dir == ".git":
            return root

        common_path = Path(common_dir)
        if not common_path.is_absolute():
            common_path = Path(root) / common_path
        return str(common_path.resolve().parent)

    def worktree_path(self, branch: str) -> str:
        """Deterministic location of the worktree for branch."""
        return str(Path(self.repo_root()) / self.worktrees_dir / branch)

    def branch_exists(self, branch: str) -> bool:
        repo = self.open_repo()
        try:
            repo.git.show_ref("--verify", "--quiet", f"refs/heads/{branch}")
            return True
        except git.exc.GitCommandError:
            return False
        finally:
            repo.close()

    def worktree_exists(self, branch: str) -> bool:
        return os.path.isdir(self.worktree_path(branch))

    def current_branch(self) -> str:
        """Name of the checked-out branch, or `HEAD` when detached."""
        return self._rev_parse("--abbrev-ref", "HEAD")
