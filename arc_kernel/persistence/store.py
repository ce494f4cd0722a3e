"""
Configuration Repository — revisioned storage for the KernelConfiguration.

Behavioral Contract:
- Every save appends a revision; nothing is updated in place
- Each revision carries a SHA-256 digest of its document; saving a
  document identical to the latest revision is a no-op
- load() returns the latest revision, or a fresh configuration

The stored document is KernelConfiguration.model_dump(mode="json"), so
legacy worker records round-trip unchanged.
"""

import hashlib
import json
import logging
import sqlite3
from typing import Optional

from arc_kernel.models.configuration import KernelConfiguration

logger = logging.getLogger(__name__)


def _digest(document: dict) -> str:
    return hashlib.sha256(json.dumps(document, sort_keys=True).encode()).hexdigest()


class ConfigurationRepository:
    """
    Append-only configuration revisions.
    Backed by SQLite; ":memory:" for tests.
    """

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self) -> None:
        """Create the configuration table if it doesn't exist."""
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS configuration (
                revision INTEGER PRIMARY KEY AUTOINCREMENT,
                version INTEGER NOT NULL,
                digest TEXT NOT NULL,
                document_json TEXT NOT NULL,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """)
        self._conn.commit()

    def save(self, configuration: KernelConfiguration) -> bool:
        """Store a new revision. Returns False if nothing changed."""
        document = configuration.model_dump(mode="json")
        digest = _digest(document)

        latest = self._conn.execute(
            "SELECT digest FROM configuration ORDER BY revision DESC LIMIT 1"
        ).fetchone()
        if latest is not None and latest["digest"] == digest:
            return False

        self._conn.execute(
            "INSERT INTO configuration (version, digest, document_json) VALUES (?, ?, ?)",
            (configuration.version, digest, json.dumps(document)),
        )
        self._conn.commit()
        logger.debug("Saved configuration revision %s", digest[:12])
        return True

    def load(self) -> KernelConfiguration:
        """The latest revision, or a fresh configuration if none exists."""
        row = self._conn.execute(
            "SELECT document_json FROM configuration ORDER BY revision DESC LIMIT 1"
        ).fetchone()
        if row is None:
            return KernelConfiguration()
        return KernelConfiguration.model_validate_json(row["document_json"])

    def load_revision(self, revision: int) -> Optional[KernelConfiguration]:
        row = self._conn.execute(
            "SELECT document_json FROM configuration WHERE revision = ?", (revision,)
        ).fetchone()
        return KernelConfiguration.model_validate_json(row["document_json"]) if row else None

    def revision_count(self) -> int:
        """Total number of stored revisions."""
        row = self._conn.execute("SELECT COUNT(*) as cnt FROM configuration").fetchone()
        return row["cnt"]

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
