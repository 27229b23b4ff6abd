"""Line-preserving editor for .env files."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Union

from shep.constants import (
    APP_URL_KEY,
    DB_CONNECTION_DRIVER,
    DB_CONNECTION_KEY,
    DB_DATABASE_KEY,
    DISABLED_DB_KEYS,
)
from shep.logging_config import get_logger

logger = get_logger(__name__)

COMMENT_PREFIX = "#"


@dataclass
class EnvLine:
    """A raw line of an env file and the line terminator that followed it."""

    text: str
    ending: str = ""

    @property
    def key(self) -> Optional[str]:
        """Everything before the first '=' (so '#KEY=x' has key '#KEY'), or None."""
        if "=" not in self.text:
            return None
        return self.text.split("=", 1)[0]


class EnvFile:
    """Ordered sequence of env lines supporting replace-or-append edits."""

    def __init__(self, lines: Optional[List[EnvLine]] = None):
        self.lines: List[EnvLine] = lines or []

    @classmethod
    def parse(cls, text: str) -> "EnvFile":
        # Only "\n" ends a line; other Unicode line breaks stay inside the value
        lines = []
        pieces = text.split("\n")
        for raw in pieces[:-1]:
            if raw.endswith("\r"):
                lines.append(EnvLine(raw[:-1], "\r\n"))
            else:
                lines.append(EnvLine(raw, "\n"))
        if pieces[-1]:
            lines.append(EnvLine(pieces[-1]))
        return cls(lines)

    def render(self) -> str:
        return "".join(line.text + line.ending for line in self.lines)

    def _newline(self) -> str:
        for line in self.lines:
            if line.ending:
                return line.ending
        return "\n"

    def get(self, key: str) -> Optional[str]:
        """Value of the first line for key, or None if the key is absent."""
        for line in self.lines:
            if line.key == key:
                return line.text.split("=", 1)[1]
        return None

    def set(self, key: str, value: str) -> None:
        """Replace the first `key=` line, or append one at the end."""
        new_text = f"{key}={value}"
        for line in self.lines:
            if line.key == key:
                line.text = new_text
                return

        # Keep the file's trailing-newline convention for the appended line
        ending = self.lines[-1].ending if self.lines else ""
        if self.lines and not ending:
            self.lines[-1].ending = self._newline()
        self.lines.append(EnvLine(new_text, ending))

    def comment_out(self, key: str) -> int:
        """Prefix every `key=` line with '#'. Returns how many lines changed."""
        changed = 0
        for line in self.lines:
            if line.key == key:
                line.text = COMMENT_PREFIX + line.text
                changed += 1
        return changed


def apply_env_rules(text: str, values: Mapping[str, str], commented: Iterable[str] = ()) -> str:
    """Apply replace-or-append rules in order, then the comment-out rules."""
    env = EnvFile.parse(text)
    for key, value in values.items():
        env.set(key, value)
    for key in commented:
        env.comment_out(key)
    return env.render()


def patch_env_file(env_path: Union[str, Path], app_url: str, database_path: Union[str, Path]) -> bool:
    """Point an existing .env at the worktree's site URL and SQLite database.

    Returns:
        False if env_path does not exist (nothing is created), True otherwise.
    """
    env_path = Path(env_path)
    if not env_path.exists():
        logger.debug(f"{env_path} does not exist, nothing to patch")
        return False

    # Bytes that are not UTF-8 (e.g. Latin-1 values) are carried through unchanged
    with open(env_path, encoding="utf-8", errors="surrogateescape", newline="") as fh:
        content = fh.read()
    patched = apply_env_rules(
        content,
        {
            APP_URL_KEY: app_url,
            DB_CONNECTION_KEY: DB_CONNECTION_DRIVER,
            DB_DATABASE_KEY: str(database_path),
        },
        DISABLED_DB_KEYS,
    )
    if patched != content:
        with open(env_path, "w", encoding="utf-8", errors="surrogateescape", newline="") as fh:
            fh.write(patched)
        logger.info(f"Updated {env_path}")
    return True
