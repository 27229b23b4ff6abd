"""Pytest fixtures for shep tests"""
import logging
import tempfile
from pathlib import Path
from unittest.mock import Mock
import pytest
import git

from shep.config import Config
from shep.core import Shep
from shep.services.process import ProcessResult, ProcessRunner

ENV_EXAMPLE = """APP_NAME=Laravel
APP_ENV=local
APP_URL=http://localhost

DB_CONNECTION=mysql
DB_HOST=127.0.0.1
DB_PORT=3306
DB_DATABASE=laravel
DB_USERNAME=root
DB_PASSWORD=
"""


class ScriptedConfirmer:
    """Confirmer that answers by prompt prefix and falls back to the default."""

    def __init__(self, answers=None):
        self.answers = answers or {}
        self.prompts = []

    def confirm(self, prompt, default):
        self.prompts.append(prompt)
        for prefix, answer in self.answers.items():
            if prompt.startswith(prefix):
                return answer
        return default


def _init_repo(repo_path: Path) -> git.Repo:
    repo_path.mkdir()
    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    (repo_path / "README.md").write_text("# Test Application\n")
    (repo_path / ".env.example").write_text(ENV_EXAMPLE)
    repo.index.add(["README.md", ".env.example"])
    repo.index.commit("Initial commit")

    # Rename master to main if needed
    try:
        repo.git.branch('-M', 'main')
    except Exception:
        pass
    return repo


@pytest.fixture(autouse=True)
def restore_logging():
    """main() reconfigures the root logger; put it back after each test."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    for handler in root_logger.handlers:
        if handler not in handlers:
            handler.close()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository named 'myapp' with a committed .env.example."""
    repo = _init_repo(temp_dir / "myapp")
    yield repo
    repo.close()


@pytest.fixture
def dotted_git_repo(temp_dir):
    """Repository whose folder name carries a domain suffix."""
    repo = _init_repo(temp_dir / "pushsilver.dev")
    yield repo
    repo.close()


@pytest.fixture
def repo_root(git_repo):
    return Path(git_repo.working_dir)


@pytest.fixture
def linked_worktree(git_repo, repo_root):
    """A worktree for branch 'feature-a' at the location shep uses."""
    path = repo_root / ".worktrees" / "feature-a"
    git_repo.git.worktree("add", "-b", "feature-a", str(path))
    return path


@pytest.fixture
def mock_runner():
    """ProcessRunner whose commands all succeed and where Herd is not installed."""
    runner = Mock(spec=ProcessRunner)
    runner.run.side_effect = lambda cmd, *args, **kwargs: ProcessResult(list(cmd), 0)
    runner.which.return_value = None
    return runner


@pytest.fixture
def confirmer():
    return ScriptedConfirmer()


@pytest.fixture
def make_shep(mock_runner, confirmer):
    """Factory for a Shep instance rooted at a directory, with fake tools and prompts."""

    def _make(cwd, config=None, runner=None, answers=None):
        if answers is not None:
            confirmer.answers = answers
        return Shep(
            cwd=str(cwd),
            config=config or Config(interactive=False),
            runner=runner or mock_runner,
            confirmer=confirmer,
        )

    return _make


@pytest.fixture
def ran_commands(mock_runner):
    """Callable returning the argv lists passed to mock_runner.run, in call order."""
    return lambda: [call.args[0] for call in mock_runner.run.call_args_list]
