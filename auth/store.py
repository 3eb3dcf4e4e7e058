"""
auth/store.py -- SQLAlchemy Core persistence layer for users.

Pattern: Repository + Data Mapper (same as authlog/store.py).
UserStore is the repository; _row_to_user is the mapper. The guard and the
account service never touch SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  Emails are lower-cased on write and on lookup, so the UNIQUE constraint
  on users.email is effectively case-insensitive.

DB URL: Settings.auth_db_url (SQLite file beside the package by default).

Layer rule: no imports from authlog/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.models import User
from core.config import get_settings

logger = logging.getLogger("authlog.auth.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text),
    Column("email_verified_at", String(32)),
    Column("created_at", String(32), nullable=False),
    Column("is_active", Integer, nullable=False, server_default="1"),
)


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so request threads can read during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _normalize_email(email: str) -> str:
    return email.strip().lower()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore("sqlite:///:memory:")
        uid = store.create_user(User(email="info@example.org", hashed_password=hash_password("secret")))
        user = store.get_by_email("INFO@example.org")
        store.close()
    """

    def __init__(self, db_url: str | None = None) -> None:
        db_url = db_url or get_settings().auth_db_url
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)
        logger.info("User store initialized (%s)", self.engine.url.render_as_string(hide_password=True))

    def create_user(self, user: User) -> int:
        """Insert a new user and return its database ID.

        An explicit user.id is honoured (fixtures and imports rely on stable
        IDs); otherwise the database assigns one.

        Raises ValueError if the email is already registered.
        """
        values = {
            "email": _normalize_email(user.email),
            "hashed_password": user.hashed_password,
            "email_verified_at": user.email_verified_at,
            "created_at": user.created_at or _now_iso(),
            "is_active": 1 if user.is_active else 0,
        }
        if user.id is not None:
            values["id"] = user.id
        try:
            with self.engine.connect() as conn:
                result = conn.execute(_users.insert().values(**values))
                conn.commit()
        except IntegrityError as exc:
            raise ValueError(f"A user with email {values['email']!r} already exists.") from exc
        return result.inserted_primary_key[0]

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by email (case-insensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == _normalize_email(email))).fetchone()
        return _row_to_user(row) if row is not None else None

    def update_password(self, user_id: int, hashed_password: str) -> bool:
        """Replace the stored hash. Returns True if a row was updated."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.update().where(_users.c.id == user_id).values(hashed_password=hashed_password)
            )
            conn.commit()
        return result.rowcount > 0

    def mark_email_verified(self, user_id: int) -> str | None:
        """Stamp email_verified_at if it is not set yet.

        Returns the stored timestamp, or None if the user does not exist.
        An already-verified user keeps the original timestamp.
        """
        stamp = _now_iso()
        with self.engine.connect() as conn:
            conn.execute(
                _users.update()
                .where((_users.c.id == user_id) & (_users.c.email_verified_at.is_(None)))
                .values(email_verified_at=stamp)
            )
            conn.commit()
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return row.email_verified_at if row is not None else None

    def close(self) -> None:
        """Dispose the engine connection pool."""
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Data Mapper
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        hashed_password=row.hashed_password,
        email_verified_at=row.email_verified_at,
        created_at=row.created_at,
        is_active=bool(row.is_active),
    )
