"""Configuration handling for shep"""

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Union

from shep.exceptions import ConfigError
from shep.logging_config import get_logger

logger = get_logger(__name__)

CONFIG_FILENAME = "shep.json"


@dataclass
class Config:
    """Configuration for shep with validation."""

    # Layout inside the repository and the worktree
    worktrees_dir: str = ".worktrees"
    env_file: str = ".env"
    env_template: str = ".env.example"
    database_path: str = "database/database.sqlite"
    frontend_manifest: str = "package.json"

    # Local site registration
    site_tld: str = "test"

    # External executables
    herd_executable: str = "herd"
    composer_executable: str = "composer"
    php_executable: str = "php"
    npm_executable: str = "npm"

    # Execution modes
    interactive: bool = True
    verbose: bool = False
    debug: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_worktrees_dir()
        self._validate_relative_paths()
        self._validate_site_tld()
        self._validate_executables()

    def _validate_worktrees_dir(self):
        """Validate worktrees_dir is a non-empty relative path."""
        if not self.worktrees_dir or not self.worktrees_dir.strip():
            raise ValueError("worktrees_dir cannot be empty")
        self.worktrees_dir = self.worktrees_dir.strip().rstrip("/")
        if Path(self.worktrees_dir).is_absolute():
            raise ValueError(f"worktrees_dir must be relative to the repository root, got '{self.worktrees_dir}'")

    def _validate_relative_paths(self):
        for name in ("env_file", "env_template", "database_path", "frontend_manifest"):
            value = getattr(self, name)
            if not value or Path(value).is_absolute():
                raise ValueError(f"{name} must be a non-empty relative path, got '{value}'")

    def _validate_site_tld(self):
        """Validate site_tld has no leading dot."""
        self.site_tld = self.site_tld.strip().lstrip(".")
        if not self.site_tld:
            raise ValueError("site_tld cannot be empty")

    def _validate_executables(self):
        for name in ("herd_executable", "composer_executable", "php_executable", "npm_executable"):
            if not getattr(self, name):
                raise ValueError(f"{name} cannot be empty")

    def to_dict(self) -> dict:
        """Convert config to a plain dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)


def load_config(repo_root: Optional[Union[str, Path]] = None, overrides: Optional[dict] = None) -> Config:
    """Build a Config from an optional shep.json in repo_root plus CLI overrides.

    Overrides win over the file. Keys in the file that shep does not know are ignored.
    """
    values: dict = {}

    if repo_root is not None:
        config_path = Path(repo_root) / CONFIG_FILENAME
        if config_path.is_file():
            try:
                loaded = json.loads(config_path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                raise ConfigError(f"Could not read {config_path}: {e}")
            if not isinstance(loaded, dict):
                raise ConfigError(f"{config_path} must contain a JSON object")
            logger.debug(f"Loaded configuration from {config_path}")
            values.update(loaded)

    if overrides:
        values.update(overrides)

    try:
        return Config.from_dict(values)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}")
