"""
callbridge/stores/sqlite_store.py
Call log backed by a SQLite database with a `calls` table.

SCHEMA (shared with the SMS Backup & Restore import layer):
    calls(id, timestamp_ms INTEGER, date_str TEXT, call_type INTEGER,
          contact_name TEXT, phone_number TEXT, duration_sec INTEGER, ...)

Only the four columns the bridge exposes are read. Queries are
parameterized; no string interpolation.
"""

import logging
import sqlite3
from pathlib import Path
from typing import List

from callbridge.models.record import CallRecord
from callbridge.stores.base import CallLogStore

logger = logging.getLogger(__name__)

QUERY_SINCE = """
    SELECT phone_number, timestamp_ms, call_type, duration_sec
    FROM calls
    WHERE timestamp_ms >= ?
    ORDER BY timestamp_ms DESC
"""


class SqliteCallLogStore(CallLogStore):

    name = 'sqlite'

    def __init__(self, db_path: Path = Path('callbridge.db')):
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        # mode=ro: never create an empty database on a missing path
        uri = f"{self.db_path.resolve().as_uri()}?mode=ro"
        conn = sqlite3.connect(uri, uri=True)
        conn.row_factory = sqlite3.Row
        return conn

    def query_since(self, timestamp_ms: int) -> List[CallRecord]:
        if not self.db_path.exists():
            raise FileNotFoundError(f"Call log database not found: {self.db_path}")

        conn = self._connect()
        try:
            rows = conn.execute(QUERY_SINCE, (int(timestamp_ms),)).fetchall()
        finally:
            conn.close()

        logger.debug(f"{len(rows)} call rows since {timestamp_ms} from {self.db_path.name}")
        return [
            CallRecord(
                number       = row['phone_number'] or '',
                timestamp_ms = int(row['timestamp_ms']),
                call_type    = int(row['call_type']),
                duration_sec = int(row['duration_sec'] or 0),
            )
            for row in rows
        ]
