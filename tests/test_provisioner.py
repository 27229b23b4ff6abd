"""Tests for the provisioning sequence"""
import pytest

from shep.config import Config
from shep.services.git.repository import RepositoryInspector
from shep.services.herd_service import HerdService
from shep.services.process import ProcessResult
from shep.services.provisioner import Provisioner

COMPOSER = ["composer", "install", "--quiet"]
KEYGEN = ["php", "artisan", "key:generate", "--quiet"]
MIGRATE = ["php", "artisan", "migrate", "--seed", "--quiet"]
NPM_DEV = ["npm", "run", "dev"]


@pytest.fixture
def make_provisioner(mock_runner, confirmer):
    def _make(repo_root, answers=None, config=None):
        if answers is not None:
            confirmer.answers = answers
        config = config or Config(interactive=False)
        return Provisioner(
            RepositoryInspector(str(repo_root), config),
            mock_runner,
            HerdService(mock_runner, config),
            confirmer,
            config,
        )

    return _make


class TestEnvironmentSetup:
    """Test .env and database preparation."""

    def test_env_created_from_template_and_patched(self, make_provisioner, repo_root, linked_worktree):
        provisioner = make_provisioner(repo_root)

        provisioner.provision(str(linked_worktree), "feature-a")

        env = (linked_worktree / ".env").read_text()
        database = linked_worktree / "database" / "database.sqlite"
        assert "APP_URL=https://myapp-feature-a.test\n" in env
        assert "DB_CONNECTION=sqlite\n" in env
        assert f"DB_DATABASE={database}\n" in env
        assert "#DB_HOST=127.0.0.1\n" in env
        assert database.exists()
        assert database.stat().st_size == 0

    def test_existing_env_is_not_overwritten(self, make_provisioner, repo_root, linked_worktree):
        (linked_worktree / ".env").write_text("APP_NAME=Custom\n")

        make_provisioner(repo_root).provision(str(linked_worktree), "feature-a")

        env = (linked_worktree / ".env").read_text()
        assert env.startswith("APP_NAME=Custom\nAPP_URL=https://myapp-feature-a.test\n")
        assert "APP_ENV" not in env

    def test_no_template_means_no_env(self, make_provisioner, repo_root, linked_worktree):
        (linked_worktree / ".env.example").unlink()

        report = make_provisioner(repo_root).provision(str(linked_worktree), "feature-a")

        assert not (linked_worktree / ".env").exists()
        assert (linked_worktree / "database" / "database.sqlite").exists()
        assert "environment" in report.completed

    def test_existing_database_is_kept(self, make_provisioner, repo_root, linked_worktree):
        database = linked_worktree / "database" / "database.sqlite"
        database.parent.mkdir()
        database.write_bytes(b"SQLite format 3\x00")

        make_provisioner(repo_root).provision(str(linked_worktree), "feature-a")

        assert database.read_bytes() == b"SQLite format 3\x00"

    def test_reprovisioning_is_stable(self, make_provisioner, repo_root, linked_worktree):
        provisioner = make_provisioner(repo_root)
        provisioner.provision(str(linked_worktree), "feature-a")
        first = (linked_worktree / ".env").read_text()

        provisioner.provision(str(linked_worktree), "feature-a")

        assert (linked_worktree / ".env").read_text() == first

    def test_site_name_keeps_domain_suffix(self, make_provisioner, dotted_git_repo, mock_runner):
        root = dotted_git_repo.working_dir
        mock_runner.which.return_value = "/usr/local/bin/herd"

        report = make_provisioner(root).provision(root, "feature-x")

        assert report.site_name == "pushsilver-feature-x.dev"
        assert report.url == "https://pushsilver-feature-x.dev.test"
        mock_runner.run.assert_any_call(["herd", "link", "pushsilver-feature-x.dev"], cwd=root)

    def test_environment_failure_does_not_stop_provisioning(
        self, make_provisioner, repo_root, linked_worktree, ran_commands, capsys
    ):
        # A file where the database directory should be
        (linked_worktree / "database").write_text("")

        report = make_provisioner(repo_root).provision(str(linked_worktree), "feature-a")

        assert "environment" in report.failed
        assert COMPOSER in ran_commands()
        assert "Error: Failed to setup environment" in capsys.readouterr().err

    def test_non_utf8_env_is_patched_and_provisioning_continues(
        self, make_provisioner, repo_root, linked_worktree, ran_commands
    ):
        env_path = linked_worktree / ".env"
        env_path.write_bytes(b"APP_NAME=Caf\xe9\nAPP_URL=http://localhost\n")

        report = make_provisioner(repo_root).provision(str(linked_worktree), "feature-a")

        assert "environment" in report.completed
        assert env_path.read_bytes().startswith(b"APP_NAME=Caf\xe9\nAPP_URL=https://myapp-feature-a.test\n")
        assert ran_commands() == [COMPOSER, KEYGEN]


class TestSteps:
    """Test the external tool steps and their prompts."""

    def test_default_answers(self, make_provisioner, repo_root, linked_worktree, ran_commands, confirmer):
        report = make_provisioner(repo_root).provision(str(linked_worktree), "feature-a")

        assert ran_commands() == [COMPOSER, KEYGEN]
        assert confirmer.prompts == ["Generate application key?", "Run migrations with seeding?"]
        assert report.skipped == ["migrations"]

    def test_tools_run_in_worktree(self, make_provisioner, repo_root, linked_worktree, mock_runner):
        make_provisioner(repo_root).provision(str(linked_worktree), "feature-a")

        mock_runner.run.assert_any_call(COMPOSER, cwd=str(linked_worktree), stream=True)
        mock_runner.run.assert_any_call(KEYGEN, cwd=str(linked_worktree))

    def test_migrations_when_confirmed(self, make_provisioner, repo_root, linked_worktree, ran_commands, mock_runner):
        provisioner = make_provisioner(
            repo_root,
            answers={"Generate application key?": False, "Run migrations with seeding?": True},
        )

        report = provisioner.provision(str(linked_worktree), "feature-a")

        assert ran_commands() == [COMPOSER, MIGRATE]
        mock_runner.run.assert_any_call(MIGRATE, cwd=str(linked_worktree), stream=True)
        assert "key" in report.skipped
        assert "migrations" in report.completed

    def test_composer_failure_is_not_fatal(
        self, make_provisioner, repo_root, linked_worktree, mock_runner, ran_commands, capsys
    ):
        def run(cmd, *args, **kwargs):
            returncode = 1 if cmd[0] == "composer" else 0
            return ProcessResult(list(cmd), returncode, "", "")

        mock_runner.run.side_effect = run

        report = make_provisioner(repo_root).provision(str(linked_worktree), "feature-a")

        assert "dependencies" in report.failed
        assert ran_commands()[-1] == KEYGEN
        assert "Error: Composer install failed" in capsys.readouterr().err

    def test_missing_herd_is_reported(self, make_provisioner, repo_root, linked_worktree, capsys):
        report = make_provisioner(repo_root).provision(str(linked_worktree), "feature-a")

        assert "site" in report.failed
        captured = capsys.readouterr()
        assert "Herd CLI not found" in captured.err
        assert "Site available at" not in captured.out

    def test_site_link(self, make_provisioner, repo_root, linked_worktree, mock_runner, ran_commands, capsys):
        mock_runner.which.return_value = "/usr/local/bin/herd"

        report = make_provisioner(repo_root).provision(str(linked_worktree), "feature-a")

        assert ["herd", "link", "myapp-feature-a"] in ran_commands()
        assert "site" in report.completed
        assert "Site available at: https://myapp-feature-a.test" in capsys.readouterr().out

    def test_no_frontend_prompt_without_package_json(self, make_provisioner, repo_root, linked_worktree, confirmer):
        make_provisioner(repo_root).provision(str(linked_worktree), "feature-a")
        assert not any("npm" in prompt for prompt in confirmer.prompts)

    def test_frontend_declined_by_default(self, make_provisioner, repo_root, linked_worktree, confirmer, ran_commands):
        (linked_worktree / "package.json").write_text("{}")

        report = make_provisioner(repo_root).provision(str(linked_worktree), "feature-a")

        assert confirmer.prompts[-1] == "Run 'npm run dev'?"
        assert NPM_DEV not in ran_commands()
        assert "frontend" in report.skipped

    def test_frontend_dev_server(self, make_provisioner, repo_root, linked_worktree, mock_runner, ran_commands):
        (linked_worktree / "package.json").write_text("{}")
        provisioner = make_provisioner(repo_root, answers={"Run 'npm run dev'?": True})

        provisioner.provision(str(linked_worktree), "feature-a")

        assert ran_commands()[-1] == NPM_DEV
        mock_runner.run.assert_called_with(NPM_DEV, cwd=str(linked_worktree), interactive=True)

    def test_configured_executables(self, make_provisioner, repo_root, linked_worktree, ran_commands):
        config = Config(interactive=False, composer_executable="composer2", php_executable="php8.3")

        make_provisioner(repo_root, config=config).provision(str(linked_worktree), "feature-a")

        assert ran_commands() == [
            ["composer2", "install", "--quiet"],
            ["php8.3", "artisan", "key:generate", "--quiet"],
        ]
