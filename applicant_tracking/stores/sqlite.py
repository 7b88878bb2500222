"""SQLite-backed record store."""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from applicant_tracking.core import db
from applicant_tracking.core.config import DatabaseConfig
from applicant_tracking.core.errors import StorageError
from applicant_tracking.core.schemas import Application, Opportunity
from applicant_tracking.stores.base import RecordStore

logger = logging.getLogger(__name__)


@contextmanager
def _storage_errors(
    operation: str,
    conn: sqlite3.Connection | None = None,
) -> Iterator[None]:
    """Translate sqlite errors (locks, timeouts, constraint failures) to StorageError.

    A failed write leaves the implicit transaction open and later reads on
    the connection stuck on its snapshot; it is rolled back before re-raising.
    """
    try:
        yield
    except sqlite3.Error as e:
        logger.debug("SQLite %s failed: %s", operation, e)
        if conn is not None:
            _rollback(conn, operation)
        msg = f"{operation} failed: {e}"
        raise StorageError(msg) from e


def _rollback(conn: sqlite3.Connection, operation: str) -> None:
    try:
        if conn.in_transaction:
            conn.rollback()
    except sqlite3.ProgrammingError:
        # Closed connection; there is no transaction left to end.
        logger.debug("Rollback after failed %s skipped: connection closed", operation)


class SQLiteRecordStore(RecordStore):
    """RecordStore over a single SQLite connection.

    Usage::

        store = SQLiteRecordStore.open(settings.database)
        try:
            ...
        finally:
            store.close()
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @classmethod
    def open(cls, config: DatabaseConfig) -> "SQLiteRecordStore":
        return cls.from_path(config.path, timeout=config.timeout_seconds)

    @classmethod
    def from_path(cls, path: str | Path, timeout: float = 5.0) -> "SQLiteRecordStore":
        with _storage_errors("open database"):
            conn = db.init_db(path, timeout=timeout)
        return cls(conn)

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def insert_opportunity(self, opportunity: Opportunity) -> None:
        with _storage_errors("insert opportunity", self._conn):
            db.insert_opportunity(self._conn, opportunity)

    def get_opportunity(self, opportunity_id: str) -> Opportunity | None:
        with _storage_errors("get opportunity", self._conn):
            return db.get_opportunity(self._conn, opportunity_id)

    def list_opportunities(self, active_only: bool = True) -> list[Opportunity]:
        with _storage_errors("list opportunities", self._conn):
            return db.list_opportunities(self._conn, active_only=active_only)

    def update_applicant_count(self, opportunity_id: str, count: int) -> bool:
        with _storage_errors("update applicant count", self._conn):
            return db.set_applicant_count(self._conn, opportunity_id, count)

    def set_active(self, opportunity_id: str, active: bool) -> bool:
        with _storage_errors("set active flag", self._conn):
            return db.set_active(self._conn, opportunity_id, active)

    def insert_application(self, application: Application) -> None:
        with _storage_errors("insert application", self._conn):
            db.insert_application(self._conn, application)

    def count_applications(self, opportunity_id: str) -> int:
        with _storage_errors("count applications", self._conn):
            return db.count_applications(self._conn, opportunity_id)

    def list_applications(self, opportunity_id: str) -> list[Application]:
        with _storage_errors("list applications", self._conn):
            return db.list_applications(self._conn, opportunity_id)

    def latest_application_at(self, opportunity_id: str) -> datetime | None:
        with _storage_errors("latest application", self._conn):
            return db.latest_application_at(self._conn, opportunity_id)

    def close(self) -> None:
        self._conn.close()
