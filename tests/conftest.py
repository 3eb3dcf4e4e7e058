"""
tests/conftest.py -- Shared fixtures for AuthLog tests.

This module provides:
  - settings:      explicit Settings with both audit flags on
  - audit_store:   AuditStore on an in-memory SQLite DB
  - user_store:    UserStore on a separate in-memory SQLite DB
  - user:          the canonical subject (id=1000, info@example.org)
  - dispatcher:    EventDispatcher with the audit listener installed
  - channel_records: helper returning WARNING records logged on the channel

Design: plain sqlite:///:memory: is enough here because every test runs on
one thread; SQLAlchemy keeps one connection per thread for :memory: URLs, so
the schema created in __init__ stays visible to later queries.

Settings are built with explicit keyword arguments so a developer's .env or
AUTHLOG_* environment variables cannot change test outcomes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator

import pytest

from auth.dispatcher import EventDispatcher
from auth.hashing import hash_password
from auth.models import User
from auth.store import UserStore
from authlog.listener import AuthLogListener, install
from authlog.store import AuditStore
from core.config import Settings

USER_ID = 1000
USER_EMAIL = "info@example.org"
USER_PASSWORD = "correct horse battery staple"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        authlog_enabled=True,
        authlog_enable_channel=True,
        authlog_channel="security",
        authlog_db_url="sqlite:///:memory:",
        auth_db_url="sqlite:///:memory:",
        login_max_attempts=3,
        login_decay_seconds=60,
    )


@pytest.fixture
def audit_store() -> Generator[AuditStore, None, None]:
    store = AuditStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def user_store() -> Generator[UserStore, None, None]:
    store = UserStore("sqlite:///:memory:")
    yield store
    store.close()


@pytest.fixture
def user(user_store: UserStore) -> User:
    """The subject used across the suite: id=1000, email info@example.org."""
    user_store.create_user(User(id=USER_ID, email=USER_EMAIL, hashed_password=hash_password(USER_PASSWORD)))
    return user_store.get_by_id(USER_ID)


@pytest.fixture
def event_bus() -> EventDispatcher:
    return EventDispatcher()


@pytest.fixture
def listener(event_bus: EventDispatcher, settings: Settings, audit_store: AuditStore) -> AuthLogListener:
    return install(event_bus, settings=settings, store=audit_store)


@pytest.fixture
def dispatcher(event_bus: EventDispatcher, listener: AuthLogListener) -> EventDispatcher:
    """EventDispatcher with the audit listener subscribed to every auth event."""
    return event_bus


@pytest.fixture
def channel_records(caplog: pytest.LogCaptureFixture, settings: Settings) -> Callable[[], list[logging.LogRecord]]:
    """Return a callable listing the records the mirror wrote to the channel."""
    caplog.set_level(logging.WARNING, logger=settings.authlog_channel)

    def _records() -> list[logging.LogRecord]:
        return [r for r in caplog.records if r.name == settings.authlog_channel]

    return _records
