"""Laravel Herd site registration."""

from typing import Optional, Union, TYPE_CHECKING

from shep.logging_config import get_logger
from shep.services.process import ProcessRunner

if TYPE_CHECKING:
    from shep.config import Config

logger = get_logger(__name__)


def derive_site_name(repo_name: str, branch: str) -> str:
    """Herd site name for a branch of the repository folder repo_name.

    Only the first dot splits off a suffix:
    "pushsilver.dev" + "feature-x" -> "pushsilver-feature-x.dev",
    "a.b.c" + "x" -> "a-x.b.c", "myapp" + "feature-x" -> "myapp-feature-x".
    """
    base, dot, suffix = repo_name.partition(".")
    if dot:
        return f"{base}-{branch}.{suffix}"
    return f"{repo_name}-{branch}"


def site_url(site_name: str, tld: str = "test") -> str:
    return f"https://{site_name}.{tld}"


class HerdService:
    """Links and unlinks worktrees as Herd sites. Herd itself is optional."""

    def __init__(self, runner: ProcessRunner, config: Union['Config', dict, None] = None):
        self.runner = runner
        config = config or {}
        self.executable = config.get('herd_executable', 'herd')

    def is_available(self) -> bool:
        return self.runner.which(self.executable) is not None

    def link(self, worktree_path: str, site_name: str) -> tuple[bool, Optional[str]]:
        """Link worktree_path as site_name, then secure it and refresh Herd.

        Securing and restarting are best effort; only the link itself decides success.

        Returns:
            Tuple of (success, error_message). error_message is None on success.
        """
        if not self.is_available():
            return False, "Herd CLI not found. Skipping Herd setup."

        result = self.runner.run([self.executable, "link", site_name], cwd=worktree_path)
        if not result.ok:
            error_msg = f"herd link failed ({result.describe_failure()})"
            logger.debug(error_msg)
            return False, error_msg
        logger.info(f"Linked {worktree_path} as {site_name}")

        secured = self.runner.run([self.executable, "secure", site_name])
        if not secured.ok:
            logger.debug(f"herd secure {site_name} failed, continuing: {secured.describe_failure()}")

        # Restart so the Herd UI picks up the new site
        restarted = self.runner.run([self.executable, "restart"])
        if not restarted.ok:
            logger.debug(f"herd restart failed, continuing: {restarted.describe_failure()}")

        return True, None

    def unlink(self, site_name: str) -> None:
        """Remove the Herd site if Herd is installed. Failures are ignored."""
        if not self.is_available():
            logger.debug("Herd CLI not found, nothing to unlink")
            return

        result = self.runner.run([self.executable, "unlink", site_name])
        if result.ok:
            logger.info(f"Unlinked {site_name}")
        else:
            logger.debug(f"herd unlink {site_name} failed, ignoring: {result.describe_failure()}")
