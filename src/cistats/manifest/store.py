"""SQLite manifest collection."""

import json
import logging
import sqlite3
from typing import Optional

from ..db import SQLiteStore
from .models import Manifest

__all__ = ["ManifestStore"]

logger = logging.getLogger(__name__)


class ManifestStore(SQLiteStore):
    """Manifests keyed by version id. At most one manifest per version."""

    def _init_db(self) -> None:
        with self._cursor() as cursor:
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS manifests (
                    id TEXT PRIMARY KEY,
                    document TEXT NOT NULL
                )
                """
            )

    def find_one(self, version_id: str) -> Optional[Manifest]:
        """Get the manifest for a version, or None."""
        with self._cursor() as cursor:
            cursor.execute("SELECT document FROM manifests WHERE id = ?", (version_id,))
            row = cursor.fetchone()
        if row is None:
            return None
        return Manifest.from_dict(json.loads(row["document"]))

    def try_insert(self, manifest: Manifest) -> bool:
        """Insert a manifest unless one already exists for its version.

        Returns:
            True if a manifest with the same id was already stored
        """
        try:
            with self._cursor() as cursor:
                cursor.execute(
                    "INSERT INTO manifests (id, document) VALUES (?, ?)",
                    (manifest.id, json.dumps(manifest.to_dict())),
                )
        except sqlite3.IntegrityError:
            logger.info(f"Manifest for version {manifest.id} already exists")
            return True
        return False
