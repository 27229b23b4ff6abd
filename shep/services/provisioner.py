"""Provisioning of a worktree into a runnable Laravel application."""

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union, TYPE_CHECKING

from shep.logging_config import get_logger
from shep.prompts import Confirmer
from shep.services.display_service import DisplayService
from shep.services.env_file import patch_env_file
from shep.services.git.repository import RepositoryInspector
from shep.services.herd_service import HerdService, derive_site_name, site_url
from shep.services.process import ProcessRunner

if TYPE_CHECKING:
    from shep.config import Config

logger = get_logger(__name__)


@dataclass
class ProvisionReport:
    """What happened during one provision run."""

    site_name: str
    url: str
    completed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class Provisioner:
    """Runs the provisioning steps for a worktree in a fixed order.

    Every step is independent: a failure is reported and the next step still runs.
    """

    def __init__(
        self,
        inspector: RepositoryInspector,
        runner: ProcessRunner,
        herd: HerdService,
        confirmer: Confirmer,
        config: Union['Config', dict, None] = None,
        display: Optional[DisplayService] = None,
    ):
        self.inspector = inspector
        self.runner = runner
        self.herd = herd
        self.confirmer = confirmer
        self.config = config or {}
        self.display = display or DisplayService()

    def site_name_for(self, branch: str) -> str:
        repo_name = Path(self.inspector.main_repo_root()).name
        return derive_site_name(repo_name, branch)

    def setup_environment(self, worktree_path: str, url: str) -> None:
        """Create .env from its template, create the SQLite file and patch .env.

        Raises:
            OSError: a file could not be copied, created or written
            ValueError: the .env contents could not be decoded
        """
        root = Path(worktree_path)
        env_path = root / self.config.get('env_file', '.env')
        template_path = root / self.config.get('env_template', '.env.example')

        if not env_path.exists() and template_path.exists():
            shutil.copyfile(template_path, env_path)
            logger.info(f"Copied {template_path.name} to {env_path.name}")

        database_path = root / self.config.get('database_path', 'database/database.sqlite')
        database_path.parent.mkdir(parents=True, exist_ok=True)
        database_path.touch(exist_ok=True)

        patch_env_file(env_path, url, database_path)

    def provision(self, worktree_path: str, branch: str) -> ProvisionReport:
        """Set up the worktree at worktree_path for branch."""
        site_name = self.site_name_for(branch)
        url = site_url(site_name, self.config.get('site_tld', 'test'))
        report = ProvisionReport(site_name=site_name, url=url)
        logger.debug(f"Provisioning {worktree_path} as {site_name}")

        self.display.info("Setting up environment...")
        try:
            self.setup_environment(worktree_path, url)
            report.completed.append("environment")
        except (OSError, ValueError) as e:
            logger.debug(f"Environment setup failed: {e}")
            self.display.error(f"Failed to setup environment: {e}")
            report.failed.append("environment")

        composer = self.config.get('composer_executable', 'composer')
        self.display.info(f"Running {composer} install...")
        result = self.runner.run([composer, "install", "--quiet"], cwd=worktree_path, stream=True)
        if result.ok:
            report.completed.append("dependencies")
        else:
            self.display.error(f"Composer install failed: {result.describe_failure()}")
            report.failed.append("dependencies")

        php = self.config.get('php_executable', 'php')
        if self.confirmer.confirm("Generate application key?", True):
            self.display.info("Generating application key...")
            result = self.runner.run([php, "artisan", "key:generate", "--quiet"], cwd=worktree_path)
            if result.ok:
                report.completed.append("key")
            else:
                logger.warning(f"Key generation failed: {result.describe_failure()}")
                report.failed.append("key")
        else:
            report.skipped.append("key")

        if self.confirmer.confirm("Run migrations with seeding?", False):
            self.display.info("Running migrations with seeding...")
            result = self.runner.run(
                [php, "artisan", "migrate", "--seed", "--quiet"], cwd=worktree_path, stream=True
            )
            if result.ok:
                report.completed.append("migrations")
            else:
                logger.warning(f"Migrations failed: {result.describe_failure()}")
                report.failed.append("migrations")
        else:
            report.skipped.append("migrations")

        self.display.info(f"Linking to Herd as '{site_name}'...")
        linked, error = self.herd.link(worktree_path, site_name)
        if linked:
            self.display.success(f"Site available at: {url}")
            report.completed.append("site")
        else:
            self.display.error(error)
            report.failed.append("site")

        manifest = Path(worktree_path) / self.config.get('frontend_manifest', 'package.json')
        if manifest.exists():
            npm = self.config.get('npm_executable', 'npm')
            if self.confirmer.confirm(f"Run '{npm} run dev'?", False):
                self.display.info(f"Starting {npm} run dev...")
                result = self.runner.run([npm, "run", "dev"], cwd=worktree_path, interactive=True)
                if result.ok:
                    report.completed.append("frontend")
                else:
                    logger.warning(f"{npm} run dev exited with {result.describe_failure()}")
                    report.failed.append("frontend")
            else:
                report.skipped.append("frontend")

        if report.failed:
            logger.info(f"Provisioning finished with failed steps: {', '.join(report.failed)}")
        return report
