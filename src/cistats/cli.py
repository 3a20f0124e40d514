"""Command line entry point."""

import argparse
import getpass
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import __version__
from .config import Config, setup_logging
from .credentials import TokenStore
from .main import StatsSyncApp
from .manifest import TaskRef
from .sync import SyncError

__all__ = ["main", "MigrationCommand", "MigrationDisabledError"]

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = "/etc/mci_settings.yml"

MIGRATIONS_ENABLED = False


class MigrationDisabledError(Exception):
    """Migrations cannot run in this build."""

    pass


@dataclass
class MigrationCommand:
    """Database migration command. Disabled in this build."""

    config_path: str = DEFAULT_SETTINGS_PATH
    mongodb_uri: str = ""
    dry_run: bool = False

    def execute(self) -> None:
        if not MIGRATIONS_ENABLED:
            raise MigrationDisabledError("migrations are not enabled in this build")
        raise NotImplementedError("migration runner is not available")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cistats",
        description="Incremental historical test statistics for CI projects",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=None, help="path to config.json")
    parser.add_argument("--debug", action="store_true", help="verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sync_cmd = sub.add_parser("sync", help="run one stats sync for a project")
    sync_cmd.add_argument("project", help="project identifier")

    sub.add_parser("run", help="sync all configured projects periodically")

    manifest_cmd = sub.add_parser("manifest", help="fetch or create a version manifest")
    manifest_cmd.add_argument("--project", required=True)
    manifest_cmd.add_argument("--version", dest="build_version", required=True)
    manifest_cmd.add_argument("--revision", default="")
    manifest_cmd.add_argument("--task-id", default="")

    sub.add_parser("set-github-token", help="store the GitHub OAuth token in the keyring")

    migrate_cmd = sub.add_parser("migrate", help="run database migrations")
    migrate_cmd.add_argument(
        "--conf",
        default=DEFAULT_SETTINGS_PATH,
        help="path to the service configuration file",
    )
    migrate_cmd.add_argument(
        "--mongodburi",
        default="",
        help="alternate mongodb uri, override config file",
    )
    migrate_cmd.add_argument(
        "-n", "--dry-run", action="store_true", help="run migration in a dry-run mode"
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "migrate":
        command = MigrationCommand(
            config_path=args.conf, mongodb_uri=args.mongodburi, dry_run=args.dry_run
        )
        try:
            command.execute()
        except MigrationDisabledError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
        return 0

    config = Config.load(args.config)
    setup_logging(args.debug or config.debug_mode)

    if args.command == "set-github-token":
        token = getpass.getpass("GitHub OAuth token: ").strip()
        if not token:
            print("error: empty token", file=sys.stderr)
            return 1
        return 0 if TokenStore().store(token) else 1

    try:
        app = StatsSyncApp(config)
    except SyncError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    try:
        if args.command == "sync":
            stats = app.sync_once(args.project)
            if not stats.success:
                print(f"error: {stats.error}", file=sys.stderr)
                return 1
            print(
                f"synced {args.project}: "
                f"{stats.units_fetched} units, {stats.hourly_calls} hourly and "
                f"{stats.daily_calls} daily generator calls"
            )
            return 0

        if args.command == "run":
            app.run()
            return 0

        if args.command == "manifest":
            task = TaskRef(
                id=args.task_id,
                project=args.project,
                version=args.build_version,
                revision=args.revision,
            )
            response = app.manifest_handler().load(task)
            print(json.dumps(response.body, indent=2))
            return 0 if response.status_code == 200 else 1
    finally:
        app.close()

    return 2
