"""CI Stats Sync - application wiring."""

import logging
import signal
import threading
from datetime import timedelta
from typing import Mapping, Optional

from .config import Config
from .credentials import TokenStore
from .generators import load_generators
from .manifest import GitHubClient, ManifestLoadHandler, ManifestStore
from .projects import ProjectStore
from .scheduler import SyncCoordinator
from .sync import GeneratorFn, StatsStore, SyncOrchestrator, SyncStats

logger = logging.getLogger(__name__)


class StatsSyncApp:
    """Builds the stores, the orchestrator and the scheduler from a Config."""

    def __init__(
        self,
        config: Config,
        hourly_generators: Optional[Mapping[str, GeneratorFn]] = None,
        daily_generators: Optional[Mapping[str, GeneratorFn]] = None,
    ):
        """Initialize the application.

        Generator tables default to the dotted paths in ``config.generators``.

        Raises:
            ConfigError: If a configured generator cannot be imported
        """
        self.config = config
        if hourly_generators is None:
            hourly_generators = load_generators(config.generators.hourly)
        if daily_generators is None:
            daily_generators = load_generators(config.generators.daily)
        self.hourly_generators = dict(hourly_generators)
        self.daily_generators = dict(daily_generators)

        db_path = config.db_path
        self.stats_store = StatsStore(
            db_path, initial_backfill=timedelta(days=config.sync.initial_backfill_days)
        )
        self.projects = ProjectStore(db_path)
        self.manifests = ManifestStore(db_path)
        self._github: Optional[GitHubClient] = None
        self._stop_event = threading.Event()

    def make_orchestrator(self) -> SyncOrchestrator:
        return SyncOrchestrator(
            checkpoints=self.stats_store,
            source=self.stats_store,
            projects=self.projects,
            hourly_generators=self.hourly_generators,
            daily_generators=self.daily_generators,
            max_window=timedelta(hours=self.config.sync.max_window_hours),
        )

    def sync_once(self, project_id: str) -> SyncStats:
        """Run a single sync pass for one project."""
        return self.make_orchestrator().sync(project_id)

    def manifest_handler(self) -> ManifestLoadHandler:
        if self._github is None:
            self._github = GitHubClient(
                api_url=self.config.github.api_url,
                timeout=self.config.github.timeout,
            )
        return ManifestLoadHandler(
            projects=self.projects,
            manifests=self.manifests,
            github=self._github,
            tokens=TokenStore(self.config.github.oauth_token),
        )

    def scheduled_projects(self) -> list[str]:
        """Projects from config, or every known project ref."""
        return list(self.config.sync.projects) or self.projects.list_identifiers()

    def run(self) -> None:
        """Run the periodic sync until SIGINT/SIGTERM."""
        projects = self.scheduled_projects()
        if not projects:
            logger.warning("No projects to sync")
            return

        coordinator = SyncCoordinator(
            self.make_orchestrator, interval_seconds=self.config.sync.interval_seconds
        )

        def handle_signal(signum, frame):
            logger.info(f"Received signal {signum}, shutting down")
            self._stop_event.set()

        signal.signal(signal.SIGINT, handle_signal)
        signal.signal(signal.SIGTERM, handle_signal)

        coordinator.start(projects)
        logger.info(f"Syncing {len(projects)} project(s): {', '.join(projects)}")
        try:
            self._stop_event.wait()
        finally:
            coordinator.stop()
            self.close()

    def close(self) -> None:
        self.stats_store.close()
        self.projects.close()
        self.manifests.close()
        if self._github is not None:
            self._github.close()
