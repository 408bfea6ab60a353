from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Iterable, Protocol

from dnsids.data.records import RECORD_FIELDS, DnsQueryRecord

logger = logging.getLogger(__name__)


class RecordSource(Protocol):
    def fetch_all(self) -> list[DnsQueryRecord]: ...


class InMemoryRecordStore:
    """Record store backed by a plain list. Used by tests and the CLI for CSV input."""

    def __init__(self, records: Iterable[DnsQueryRecord] | None = None) -> None:
        self._records: list[DnsQueryRecord] = list(records or [])

    def fetch_all(self) -> list[DnsQueryRecord]:
        return list(self._records)

    def save_all(self, records: Iterable[DnsQueryRecord]) -> list[DnsQueryRecord]:
        saved = list(records)
        self._records.extend(saved)
        return saved

    def clear(self) -> None:
        self._records.clear()


_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS dns_queries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp INTEGER NOT NULL,
    client_ip TEXT NOT NULL,
    client_port INTEGER NOT NULL,
    query_name TEXT,
    query_type TEXT NOT NULL,
    response_code INTEGER NOT NULL,
    answer_count INTEGER NOT NULL,
    raw_length INTEGER NOT NULL,
    query_size INTEGER NOT NULL,
    protocol TEXT NOT NULL,
    truncated INTEGER NOT NULL,
    ttl INTEGER NOT NULL
);
"""

_COLUMNS = ", ".join(RECORD_FIELDS)
_PLACEHOLDERS = ", ".join("?" for _ in RECORD_FIELDS)


class SqliteRecordStore:
    """Persists records in the ``dns_queries`` table of a SQLite file.

    A connection is opened per operation, so one store instance can be shared
    between request handlers.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with closing(self._connect()) as conn:
            conn.execute(_CREATE_TABLE)
            conn.commit()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.path)

    def fetch_all(self) -> list[DnsQueryRecord]:
        with closing(self._connect()) as conn:
            rows = conn.execute(f"SELECT {_COLUMNS} FROM dns_queries ORDER BY id").fetchall()
        records = [DnsQueryRecord(*row[:-2], truncated=bool(row[-2]), ttl=row[-1]) for row in rows]
        logger.debug("Fetched %d records from %s", len(records), self.path)
        return records

    def save_all(self, records: Iterable[DnsQueryRecord]) -> list[DnsQueryRecord]:
        saved = list(records)
        with closing(self._connect()) as conn:
            conn.executemany(
                f"INSERT INTO dns_queries({_COLUMNS}) VALUES ({_PLACEHOLDERS})",
                [
                    (
                        r.timestamp,
                        r.client_ip,
                        r.client_port,
                        r.query_name,
                        r.query_type,
                        r.response_code,
                        r.answer_count,
                        r.raw_length,
                        r.query_size,
                        r.protocol,
                        int(r.truncated),
                        r.ttl,
                    )
                    for r in saved
                ],
            )
            conn.commit()
        logger.info("Stored %d records in %s", len(saved), self.path)
        return saved

    def clear(self) -> None:
        with closing(self._connect()) as conn:
            conn.execute("DELETE FROM dns_queries")
            conn.commit()
