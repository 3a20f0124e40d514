"""Tests for the command line entry point."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from cistats import cli
from cistats.cli import MigrationCommand, MigrationDisabledError, build_parser, main
from cistats.projects import ProjectRef, ProjectStore
from cistats.sync.store import StatsStore


class TestMigrationCommand:
    """Tests for the disabled migration command."""

    def test_defaults(self):
        args = build_parser().parse_args(["migrate"])

        assert args.conf == "/etc/mci_settings.yml"
        assert args.mongodburi == ""
        assert args.dry_run is False

    def test_flags(self):
        args = build_parser().parse_args(
            ["migrate", "--conf", "/tmp/s.yml", "--mongodburi", "mongodb://x", "-n"]
        )

        assert args.conf == "/tmp/s.yml"
        assert args.mongodburi == "mongodb://x"
        assert args.dry_run is True

    def test_execute_is_disabled(self):
        with pytest.raises(MigrationDisabledError, match="migrations are not enabled in this build"):
            MigrationCommand(dry_run=True).execute()

    def test_main_reports_error(self, capsys):
        code = main(["migrate", "--dry-run"])

        assert code == 1
        assert "migrations are not enabled in this build" in capsys.readouterr().err


def record_tasks(db_path, project_id):
    store = StatsStore(db_path)
    try:
        store.set_checkpoint(project_id, datetime.now(timezone.utc), datetime.now(timezone.utc) - timedelta(hours=3))
        store.record_task(project_id, "patch", "compile", datetime.now(timezone.utc) - timedelta(hours=2))
    finally:
        store.close()


calls = []


def fake_generator(project_id, requester, period, tasks, run_timestamp):
    calls.append((project_id, requester, list(tasks)))


class TestSyncCommand:
    """Tests for `cistats sync`."""

    def setup_method(self):
        calls.clear()

    def write_config(self, tmp_path, generators):
        config_file = tmp_path / "config.json"
        config_file.write_text(
            json.dumps(
                {
                    "database_path": str(tmp_path / "cistats.db"),
                    "generators": generators,
                }
            )
        )
        return config_file

    @pytest.fixture(autouse=True)
    def no_logging_setup(self, monkeypatch):
        monkeypatch.setattr(cli, "setup_logging", lambda debug=False: None)

    def test_sync_runs_configured_generators(self, tmp_path, capsys):
        path = f"{__name__}:fake_generator"
        config_file = self.write_config(tmp_path, {"hourly": {"test": path}, "daily": {"test": path}})
        record_tasks(tmp_path / "cistats.db", "server")

        projects = ProjectStore(tmp_path / "cistats.db")
        projects.save(ProjectRef(identifier="server"))
        projects.close()

        code = main(["--config", str(config_file), "sync", "server"])

        assert code == 0
        assert calls == [("server", "patch", ["compile"]), ("server", "patch", ["compile"])]
        assert "synced server" in capsys.readouterr().out

    def test_sync_unknown_project_fails(self, tmp_path, capsys):
        config_file = self.write_config(tmp_path, {})

        code = main(["--config", str(config_file), "sync", "nope"])

        assert code == 1
        assert "error" in capsys.readouterr().err

    def test_bad_generator_path_fails(self, tmp_path, capsys):
        config_file = self.write_config(tmp_path, {"hourly": {"test": "no_such_module_xyz:fn"}})

        code = main(["--config", str(config_file), "sync", "server"])

        assert code == 1
        assert "no_such_module_xyz" in capsys.readouterr().err
