"""Running external tools (composer, php, npm, herd)."""

import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

from shep.logging_config import get_logger

logger = get_logger(__name__)

# Exit status used when an executable could not be started at all
COMMAND_NOT_FOUND = 127


@dataclass
class ProcessResult:
    """Outcome of a single external command."""

    command: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def describe_failure(self) -> str:
        """Short human-readable reason for a failed command."""
        detail = self.stderr.strip() or self.stdout.strip()
        if detail:
            return f"exit status {self.returncode}: {detail}"
        return f"exit status {self.returncode}"


class ProcessRunner:
    """Blocking runner for external executables."""

    def run(
        self,
        cmd: Sequence[str],
        cwd: Optional[str] = None,
        stream: bool = False,
        interactive: bool = False,
    ) -> ProcessResult:
        """Run cmd and wait for it to exit.

        Args:
            cmd: Executable and arguments (list form, never a shell string)
            cwd: Working directory for the command
            stream: Let the command write straight to our stdout/stderr instead of capturing
            interactive: Like stream, and also forward our stdin

        Returns:
            ProcessResult. Output fields are empty when streaming.
        """
        command = list(cmd)
        logger.debug(f"Running {' '.join(command)} (cwd={cwd or '.'})")

        capture = not (stream or interactive)
        try:
            completed = subprocess.run(
                command,
                cwd=cwd,
                check=False,
                text=True,
                capture_output=capture,
                stdin=None if interactive else subprocess.DEVNULL,
            )
        except OSError as e:
            logger.debug(f"Could not start {command[0]}: {e}")
            return ProcessResult(command, COMMAND_NOT_FOUND, "", str(e))

        result = ProcessResult(
            command,
            completed.returncode,
            completed.stdout or "",
            completed.stderr or "",
        )
        if not result.ok:
            logger.debug(f"{command[0]} failed with {result.describe_failure()}")
        return result

    @staticmethod
    def which(name: str) -> Optional[str]:
        """Return the full path of an executable on PATH, or None."""
        return shutil.which(name)
