"""Core functionality for shep"""

import os
from typing import Optional, Union

from shep.config import Config
from shep.exceptions import GitOperationError, NotAGitRepositoryError
from shep.logging_config import get_logger
from shep.prompts import Confirmer, ConsoleConfirmer, DefaultConfirmer
from shep.services.display_service import DisplayService
from shep.services.git.repository import RepositoryInspector
from shep.services.git.worktrees import WorktreeService
from shep.services.herd_service import HerdService
from shep.services.process import ProcessRunner
from shep.services.provisioner import Provisioner

logger = get_logger(__name__)

SUCCESS = 0
FAILURE = 1


class Shep:
    """Command handlers for the shep CLI. Each returns a process exit code."""

    def __init__(
        self,
        cwd: Optional[str] = None,
        config: Union[Config, dict, None] = None,
        runner: Optional[ProcessRunner] = None,
        confirmer: Optional[Confirmer] = None,
        display: Optional[DisplayService] = None,
    ):
        """Initialize Shep.

        Args:
            cwd: Directory the command was run from
            config: Configuration dict or Config object
            runner: Runner for composer/php/npm/herd (replaced in tests)
            confirmer: Strategy for yes/no prompts
            display: Console output
        """
        self.cwd = cwd or os.getcwd()
        if config is None:
            config = Config()
        elif isinstance(config, dict):
            config = Config.from_dict(config)
        self.config = config

        if confirmer is None:
            confirmer = ConsoleConfirmer() if config.interactive else DefaultConfirmer()
        self.confirmer = confirmer
        self.runner = runner or ProcessRunner()
        self.display = display or DisplayService()

        self.inspector = RepositoryInspector(self.cwd, self.config)
        self.worktree_service = WorktreeService(self.inspector)
        self.herd_service = HerdService(self.runner, self.config)
        self.provisioner = Provisioner(
            self.inspector,
            self.runner,
            self.herd_service,
            self.confirmer,
            self.config,
            self.display,
        )

    def _check_git_repo(self) -> bool:
        if not self.inspector.is_git_repo():
            self.display.error("Not in a git repository.")
            return False
        return True

    def new(self, branch: Optional[str]) -> int:
        """Create a worktree for branch (creating the branch on request) and provision it."""
        if not branch:
            self.display.error("Branch name required.")
            self.display.plain("Usage: shep new <branch>")
            return FAILURE

        if not self._check_git_repo():
            return FAILURE

        if self.inspector.worktree_exists(branch):
            self.display.error(f"Worktree for branch '{branch}' already exists.")
            return FAILURE

        if not self.inspector.branch_exists(branch):
            if not self.confirmer.confirm(f"Branch '{branch}' does not exist. Create it?", True):
                self.display.plain("Aborted.")
                return SUCCESS

            self.display.info(f"Creating branch '{branch}'...")
            created, error = self.worktree_service.create_branch(branch)
            if not created:
                self.display.error(f"Failed to create branch: {error}")
                return FAILURE

        worktree_path = self.inspector.worktree_path(branch)

        self.display.info(f"Creating worktree for '{branch}'...")
        added, error = self.worktree_service.add_worktree(worktree_path, branch)
        if not added:
            self.display.error(f"Failed to create worktree: {error}")
            return FAILURE

        self.provisioner.provision(worktree_path, branch)

        self.display.success(f"Worktree created at: {worktree_path}")
        # Last line of output is the bare path so a shell wrapper can cd into it
        self.display.path(worktree_path)
        return SUCCESS

    def init(self, branch: Optional[str] = None) -> int:
        """Provision an existing worktree, or the current directory when branch is omitted."""
        if not self._check_git_repo():
            return FAILURE

        if not branch:
            worktree_path = self.cwd
            try:
                branch = self.inspector.current_branch()
            except (GitOperationError, NotAGitRepositoryError) as e:
                logger.debug(f"Could not read current branch: {e}")
                branch = None

            if not branch or branch == "HEAD":
                self.display.error("Could not determine branch name. Please specify a branch.")
                self.display.plain("Usage: shep init [branch]")
                return FAILURE

            self.display.info(f"Provisioning current directory as '{branch}'...")
        else:
            if not self.inspector.worktree_exists(branch):
                self.display.error(f"Worktree for branch '{branch}' does not exist.")
                self.display.plain(f"Use 'shep new {branch}' to create it.")
                return FAILURE

            worktree_path = self.inspector.worktree_path(branch)
            self.display.info(f"Provisioning worktree '{branch}'...")

        self.provisioner.provision(worktree_path, branch)

        self.display.success(f"Provisioning complete for '{branch}'")
        return SUCCESS

    def remove(self, branch: Optional[str]) -> int:
        """Unlink the site and remove the worktree for branch after confirmation."""
        if not branch:
            self.display.error("Branch name required.")
            self.display.plain("Usage: shep remove <branch>")
            return FAILURE

        if not self._check_git_repo():
            return FAILURE

        if not self.inspector.worktree_exists(branch):
            self.display.error(f"Worktree for branch '{branch}' does not exist.")
            return FAILURE

        worktree_path = self.inspector.worktree_path(branch)

        if not self.confirmer.confirm(f"Remove worktree at '{worktree_path}'?", False):
            self.display.plain("Aborted.")
            return SUCCESS

        self.display.info("Unlinking from Herd...")
        self.herd_service.unlink(self.provisioner.site_name_for(branch))

        self.display.info(f"Removing worktree '{branch}'...")
        removed, error = self.worktree_service.remove_worktree(worktree_path, force=True)
        if not removed:
            self.display.error(f"Failed to remove worktree: {error}")
            return FAILURE

        self.worktree_service.prune_worktrees()

        self.display.success(f"Worktree '{branch}' removed.")
        return SUCCESS

    def list(self) -> int:
        """Print all worktrees of the repository as a table."""
        if not self._check_git_repo():
            return FAILURE

        try:
            worktrees = self.worktree_service.list_worktrees()
        except GitOperationError as e:
            self.display.error(f"Failed to list worktrees: {e}")
            return FAILURE

        if not worktrees:
            self.display.info("No worktrees found.")
            return SUCCESS

        self.display.display_worktree_table(worktrees)
        return SUCCESS
