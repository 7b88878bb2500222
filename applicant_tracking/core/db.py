"""SQLite database layer for opportunities and applications."""

import sqlite3
from datetime import datetime
from pathlib import Path

from applicant_tracking.core.schemas import Application, Opportunity

_OPPORTUNITIES_TABLE = """
CREATE TABLE IF NOT EXISTS opportunities (
    id                  TEXT    PRIMARY KEY,
    title               TEXT    NOT NULL,
    description         TEXT    NOT NULL DEFAULT '',
    opportunity_type    TEXT,
    location            TEXT,
    compensation_type   TEXT,
    compensation_amount REAL,
    applicant_count     INTEGER NOT NULL DEFAULT 0,
    created_by          TEXT,
    is_active           INTEGER NOT NULL DEFAULT 1,
    created_at          TEXT    NOT NULL,
    updated_at          TEXT    NOT NULL
);
"""

_APPLICATIONS_TABLE = """
CREATE TABLE IF NOT EXISTS applications (
    id              TEXT PRIMARY KEY,
    opportunity_id  TEXT NOT NULL REFERENCES opportunities(id),
    motivation      TEXT NOT NULL,
    resume          TEXT,
    applicant_id    TEXT,
    submitted_at    TEXT NOT NULL
);
"""

_APPLICATIONS_INDEX = """
CREATE INDEX IF NOT EXISTS idx_applications_opportunity
    ON applications (opportunity_id, submitted_at);
"""


def init_db(path: str | Path, timeout: float = 5.0) -> sqlite3.Connection:
    """Create the database and tables, returning a connection.

    ``timeout`` is how long a call waits on a locked database before failing.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path), timeout=timeout)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    conn.execute(_OPPORTUNITIES_TABLE)
    conn.execute(_APPLICATIONS_TABLE)
    conn.execute(_APPLICATIONS_INDEX)
    conn.commit()
    return conn


def _row_to_opportunity(row: sqlite3.Row) -> Opportunity:
    return Opportunity(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        opportunity_type=row["opportunity_type"],
        location=row["location"],
        compensation_type=row["compensation_type"],
        compensation_amount=row["compensation_amount"],
        applicant_count=row["applicant_count"],
        created_by=row["created_by"],
        is_active=bool(row["is_active"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


def _row_to_application(row: sqlite3.Row) -> Application:
    return Application(
        id=row["id"],
        opportunity_id=row["opportunity_id"],
        motivation=row["motivation"],
        resume=row["resume"],
        applicant_id=row["applicant_id"],
        submitted_at=datetime.fromisoformat(row["submitted_at"]),
    )


def insert_opportunity(conn: sqlite3.Connection, opp: Opportunity) -> None:
    conn.execute(
        """
        INSERT INTO opportunities
            (id, title, description, opportunity_type, location,
             compensation_type, compensation_amount, applicant_count,
             created_by, is_active, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            opp.id,
            opp.title,
            opp.description,
            opp.opportunity_type,
            opp.location,
            opp.compensation_type,
            opp.compensation_amount,
            opp.applicant_count,
            opp.created_by,
            int(opp.is_active),
            opp.created_at.isoformat(),
            opp.updated_at.isoformat(),
        ),
    )
    conn.commit()


def get_opportunity(conn: sqlite3.Connection, opportunity_id: str) -> Opportunity | None:
    row = conn.execute(
        "SELECT * FROM opportunities WHERE id = ?", (opportunity_id,),
    ).fetchone()
    return _row_to_opportunity(row) if row is not None else None


def list_opportunities(
    conn: sqlite3.Connection,
    active_only: bool = True,
) -> list[Opportunity]:
    """Return opportunities, newest first."""
    sql = "SELECT * FROM opportunities"
    if active_only:
        sql += " WHERE is_active = 1"
    sql += " ORDER BY created_at DESC"
    return [_row_to_opportunity(row) for row in conn.execute(sql).fetchall()]


def set_applicant_count(conn: sqlite3.Connection, opportunity_id: str, count: int) -> bool:
    """Overwrite the cached applicant count. Returns False if no such opportunity."""
    cursor = conn.execute(
        "UPDATE opportunities SET applicant_count = ?, updated_at = ? WHERE id = ?",
        (count, datetime.now().isoformat(), opportunity_id),
    )
    conn.commit()
    return cursor.rowcount > 0


def set_active(conn: sqlite3.Connection, opportunity_id: str, active: bool) -> bool:
    """Flip the soft-delete flag. Returns False if no such opportunity."""
    cursor = conn.execute(
        "UPDATE opportunities SET is_active = ?, updated_at = ? WHERE id = ?",
        (int(active), datetime.now().isoformat(), opportunity_id),
    )
    conn.commit()
    return cursor.rowcount > 0


def insert_application(conn: sqlite3.Connection, app: Application) -> None:
    conn.execute(
        """
        INSERT INTO applications
            (id, opportunity_id, motivation, resume, applicant_id, submitted_at)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (
            app.id,
            app.opportunity_id,
            app.motivation,
            app.resume,
            app.applicant_id,
            app.submitted_at.isoformat(),
        ),
    )
    conn.commit()


def count_applications(conn: sqlite3.Connection, opportunity_id: str) -> int:
    row = conn.execute(
        "SELECT COUNT(*) FROM applications WHERE opportunity_id = ?",
        (opportunity_id,),
    ).fetchone()
    return int(row[0])


def list_applications(conn: sqlite3.Connection, opportunity_id: str) -> list[Application]:
    """Return applications for an opportunity, newest first."""
    rows = conn.execute(
        """
        SELECT * FROM applications
        WHERE opportunity_id = ?
        ORDER BY submitted_at DESC, rowid DESC
        """,
        (opportunity_id,),
    ).fetchall()
    return [_row_to_application(row) for row in rows]


def latest_application_at(conn: sqlite3.Connection, opportunity_id: str) -> datetime | None:
    row = conn.execute(
        "SELECT MAX(submitted_at) FROM applications WHERE opportunity_id = ?",
        (opportunity_id,),
    ).fetchone()
    if row is None or row[0] is None:
        return None
    return datetime.fromisoformat(row[0])
