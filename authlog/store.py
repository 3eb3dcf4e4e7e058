"""
authlog/store.py -- SQLAlchemy Core persistence for the authentication_logs table.

Pattern: Repository + Data Mapper (same as auth/store.py).
AuditStore is the repository; _row_to_record is the mapper.

The table is append-only from this package's point of view: there is an
insert and there are reads, but no update or delete. Retention is somebody
else's job.

Errors:
  Nothing here catches SQLAlchemyError. A failed insert (database locked,
  missing table, NOT NULL violation) propagates to the writer, the listener
  and finally the code that dispatched the auth event.

Concurrency:
  Each insert is a single-row statement in its own short transaction, so
  concurrent request threads append independently. SQLite runs in WAL mode
  with check_same_thread=False, as the user store does.

Security:
  All queries use bound parameters. No f-strings in SQL.
"""

from __future__ import annotations

import logging

from sqlalchemy import Column, Index, Integer, MetaData, String, Table, create_engine, event, func, select
from sqlalchemy.engine import Engine

from authlog.models import AuditRecord
from core.config import get_settings

logger = logging.getLogger("authlog.store")

TABLE_NAME = "authentication_logs"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_authentication_logs = Table(
    TABLE_NAME,
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("event_name", String(100), nullable=False),
    Column("email", String(255)),  # pre-auth events only
    Column("user_id", Integer),  # post-auth events only
    Column("created_at", String(32), nullable=False),  # ISO 8601 UTC
    Index("ix_authentication_logs_user_id", "user_id"),
    Index("ix_authentication_logs_email", "email"),
)


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AuditStore:
    """Repository for AuditRecord rows.

    Usage:
        store = AuditStore("sqlite:///:memory:")
        row_id = store.insert(record)
        store.records(event_name="Login", user_id=1000)
        store.close()
    """

    def __init__(self, db_url: str | None = None) -> None:
        db_url = db_url or get_settings().authlog_db_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)
        logger.info("Audit store initialized (%s)", self.engine.url.render_as_string(hide_password=True))

    def insert(self, record: AuditRecord) -> int:
        """Append one row for record and return its ID.

        record.id is ignored; the database always assigns it.
        """
        with self.engine.connect() as conn:
            result = conn.execute(
                _authentication_logs.insert().values(
                    event_name=record.event_name,
                    email=record.email,
                    user_id=record.user_id,
                    created_at=record.created_at,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def records(
        self,
        event_name: str | None = None,
        user_id: int | None = None,
        email: str | None = None,
    ) -> list[AuditRecord]:
        """Return stored records in insertion order, optionally filtered.

        Filters combine with AND. A filter left as None is not applied (it
        does NOT mean "column IS NULL").
        """
        stmt = _authentication_logs.select().where(*self._filters(event_name, user_id, email))
        with self.engine.connect() as conn:
            rows = conn.execute(stmt.order_by(_authentication_logs.c.id)).fetchall()
        return [_row_to_record(r) for r in rows]

    def count(
        self,
        event_name: str | None = None,
        user_id: int | None = None,
        email: str | None = None,
    ) -> int:
        """Return the number of rows matching the same filters as records()."""
        stmt = select(func.count()).select_from(_authentication_logs)
        stmt = stmt.where(*self._filters(event_name, user_id, email))
        with self.engine.connect() as conn:
            result = conn.execute(stmt).scalar()
        return result or 0

    @staticmethod
    def _filters(event_name: str | None, user_id: int | None, email: str | None) -> list:
        c = _authentication_logs.c
        clauses = []
        if event_name is not None:
            clauses.append(c.event_name == event_name)
        if user_id is not None:
            clauses.append(c.user_id == user_id)
        if email is not None:
            clauses.append(c.email == email)
        return clauses

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Data Mapper
# ---------------------------------------------------------------------------


def _row_to_record(row) -> AuditRecord:
    return AuditRecord(
        id=row.id,
        event_name=row.event_name,
        email=row.email,
        user_id=row.user_id,
        created_at=row.created_at,
    )
