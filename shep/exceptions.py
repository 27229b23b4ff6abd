"""Custom exceptions for shep"""

from typing import Optional


class ShepError(Exception):
    """Base exception for all shep errors."""
    pass


class NotAGitRepositoryError(ShepError):
    """Raised when a command runs outside of a git repository."""

    def __init__(self, path: Optional[str] = None):
        self.path = path
        super().__init__("Not in a git repository.")


class GitOperationError(ShepError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, branch: Optional[str] = None, message: Optional[str] = None):
        self.operation = operation
        self.branch = branch
        self.message = message

        error_msg = f"Git operation '{operation}' failed"
        if branch:
            error_msg += f" for branch '{branch}'"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class ConfigError(ShepError):
    """Raised when the shep.json configuration file cannot be used."""
    pass
