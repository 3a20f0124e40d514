"""Project references: per-project settings used by the sync and manifests."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .db import SQLiteStore

__all__ = ["ProjectModule", "ProjectRef", "ProjectStore", "ProjectNotFoundError"]

logger = logging.getLogger(__name__)


class ProjectNotFoundError(Exception):
    """No project ref exists for the identifier."""

    pass


@dataclass
class ProjectModule:
    """A module repository checked out alongside the project."""

    name: str
    repo: str  # e.g. git@github.com:owner/name.git
    branch: str

    def get_repo_owner_and_name(self) -> tuple[str, str]:
        """Split the repo reference into (owner, name).

        Accepts both ``git@github.com:owner/name.git`` and
        ``https://github.com/owner/name`` forms.
        """
        repo = self.repo.strip()
        if repo.endswith(".git"):
            repo = repo[: -len(".git")]
        if ":" in repo and not repo.startswith(("http://", "https://")):
            path = repo.split(":", 1)[1]
        else:
            path = repo.split("://", 1)[-1].split("/", 1)[-1]
        parts = [p for p in path.split("/") if p]
        if len(parts) < 2:
            return "", ""
        return parts[-2], parts[-1]

    def to_dict(self) -> dict:
        return {"name": self.name, "repo": self.repo, "branch": self.branch}

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectModule":
        return cls(name=data["name"], repo=data["repo"], branch=data["branch"])


@dataclass
class ProjectRef:
    """Settings for one project."""

    identifier: str
    branch: str = "main"
    files_ignored_from_cache: list[str] = field(default_factory=list)
    modules: list[ProjectModule] = field(default_factory=list)


class ProjectStore(SQLiteStore):
    """SQLite store of project refs. Implements ProjectConfigProtocol."""

    def _init_db(self) -> None:
        with self._cursor() as cursor:
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS project_refs (
                    identifier TEXT PRIMARY KEY,
                    branch TEXT NOT NULL,
                    files_ignored_from_cache TEXT NOT NULL,
                    modules TEXT NOT NULL
                )
                """
            )

    def save(self, ref: ProjectRef) -> None:
        """Insert or replace a project ref."""
        with self._cursor() as cursor:
            cursor.execute(
                """
                INSERT INTO project_refs (identifier, branch, files_ignored_from_cache, modules)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(identifier) DO UPDATE SET
                    branch = excluded.branch,
                    files_ignored_from_cache = excluded.files_ignored_from_cache,
                    modules = excluded.modules
                """,
                (
                    ref.identifier,
                    ref.branch,
                    json.dumps(ref.files_ignored_from_cache),
                    json.dumps([m.to_dict() for m in ref.modules]),
                ),
            )

    def find_one(self, identifier: str) -> Optional[ProjectRef]:
        """Get a project ref, or None if it does not exist."""
        with self._cursor() as cursor:
            cursor.execute(
                """
                SELECT identifier, branch, files_ignored_from_cache, modules
                FROM project_refs WHERE identifier = ?
                """,
                (identifier,),
            )
            row = cursor.fetchone()
        if row is None:
            return None
        return ProjectRef(
            identifier=row["identifier"],
            branch=row["branch"],
            files_ignored_from_cache=json.loads(row["files_ignored_from_cache"]),
            modules=[ProjectModule.from_dict(m) for m in json.loads(row["modules"])],
        )

    def list_identifiers(self) -> list[str]:
        with self._cursor() as cursor:
            cursor.execute("SELECT identifier FROM project_refs ORDER BY identifier")
            return [row["identifier"] for row in cursor.fetchall()]

    def get_ignore_patterns(self, project_id: str) -> list[str]:
        """Get the task-name patterns a project excludes from stats.

        Raises:
            ProjectNotFoundError: If the project does not exist
        """
        ref = self.find_one(project_id)
        if ref is None:
            raise ProjectNotFoundError(f"Could not get project ref for {project_id}")
        return list(ref.files_ignored_from_cache)
