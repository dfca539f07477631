"""
Copyright 2024, Zep Software, Inc.

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from vaultsync_core.helpers import utc_now

from .store import EntryRecord, EntryStore

logger = logging.getLogger(__name__)


class SqliteEntryStore(EntryStore):
    """Durable store backed by SQLite.

    Schema:
      entries(id TEXT PRIMARY KEY, digest TEXT, record TEXT, updated_at TEXT)
      module_imports(file_path TEXT PRIMARY KEY, updated_at TEXT)

    Each record is stored as its JSON dump. Every write commits on its own.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS entries (
                  id TEXT PRIMARY KEY,
                  digest TEXT NOT NULL,
                  record TEXT NOT NULL,
                  updated_at TEXT NOT NULL
                );
                CREATE TABLE IF NOT EXISTS module_imports (
                  file_path TEXT PRIMARY KEY,
                  updated_at TEXT NOT NULL
                );
                """
            )

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def get(self, entry_id: str) -> EntryRecord | None:
        with self._conn() as conn:
            row = conn.execute('SELECT record FROM entries WHERE id=?', (entry_id,)).fetchone()
        if row is None:
            return None
        return EntryRecord.model_validate_json(row['record'])

    def set(self, record: EntryRecord) -> bool:
        with self._conn() as conn:
            row = conn.execute('SELECT digest FROM entries WHERE id=?', (record.id,)).fetchone()
            conn.execute(
                """
                INSERT INTO entries(id, digest, record, updated_at)
                VALUES(?,?,?,?)
                ON CONFLICT(id) DO UPDATE SET
                  digest=excluded.digest,
                  record=excluded.record,
                  updated_at=excluded.updated_at
                """,
                (record.id, record.digest, record.model_dump_json(), utc_now().isoformat()),
            )
        logger.debug(f'Stored entry {record.id}')
        return row is None or row['digest'] != record.digest

    def delete(self, entry_id: str) -> None:
        with self._conn() as conn:
            conn.execute('DELETE FROM entries WHERE id=?', (entry_id,))
        logger.debug(f'Deleted entry {entry_id}')

    def keys(self) -> list[str]:
        with self._conn() as conn:
            rows = conn.execute('SELECT id FROM entries ORDER BY id').fetchall()
        return [str(row['id']) for row in rows]

    def clear(self) -> None:
        with self._conn() as conn:
            conn.execute('DELETE FROM entries')
            conn.execute('DELETE FROM module_imports')

    def add_module_import(self, file_path: str) -> None:
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO module_imports(file_path, updated_at)
                VALUES(?,?)
                ON CONFLICT(file_path) DO UPDATE SET updated_at=excluded.updated_at
                """,
                (file_path, utc_now().isoformat()),
            )

    def module_imports(self) -> list[str]:
        with self._conn() as conn:
            rows = conn.execute(
                'SELECT file_path FROM module_imports ORDER BY file_path'
            ).fetchall()
        return [str(row['file_path']) for row in rows]
