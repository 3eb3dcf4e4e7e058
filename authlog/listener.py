"""
authlog/listener.py -- Subscribes the audit sink to the auth event bus.

Per event, handle() does:
  1. normalize the event (router.normalize); Authenticated stops here,
  2. read authlog_enabled / authlog_enable_channel / authlog_channel once,
  3. writer.write(record, enabled),
  4. mirror.emit(record, enable_channel, channel).

Writer and mirror are independent: either, both or neither may act. A storage
failure in step 3 propagates before step 4 runs.

Usage:
    dispatcher = EventDispatcher()
    listener = install(dispatcher)            # uses get_settings()
    ...
    listener.store.close()
"""

from __future__ import annotations

import logging

from auth.dispatcher import EventDispatcher
from auth.events import AuthEvent
from authlog.mirror import LogMirror
from authlog.router import AUDITED_EVENTS, normalize
from authlog.store import AuditStore
from authlog.writer import AuditWriter
from core.config import Settings, get_settings

logger = logging.getLogger("authlog.listener")


class AuthLogListener:
    def __init__(self, settings: Settings, writer: AuditWriter, mirror: LogMirror | None = None) -> None:
        self.settings = settings
        self.writer = writer
        self.mirror = mirror or LogMirror()

    @property
    def store(self) -> AuditStore:
        return self.writer.store

    def handle(self, event: AuthEvent) -> None:
        record = normalize(event)
        if record is None:
            return
        enabled = self.settings.authlog_enabled
        enable_channel = self.settings.authlog_enable_channel
        channel = self.settings.authlog_channel

        self.writer.write(record, enabled)
        self.mirror.emit(record, enable_channel, channel)

    def subscribe(self, dispatcher: EventDispatcher) -> None:
        """Register handle() for every recognized auth event class."""
        for event_type in AUDITED_EVENTS:
            dispatcher.listen(event_type, self.handle)
        logger.info("Auth log listener subscribed to %d event types", len(AUDITED_EVENTS))


def install(
    dispatcher: EventDispatcher,
    settings: Settings | None = None,
    store: AuditStore | None = None,
) -> AuthLogListener:
    """Build a listener from settings and subscribe it to dispatcher.

    settings defaults to get_settings(); store defaults to an AuditStore on
    settings.authlog_db_url. The caller owns the returned listener's store
    and should close it on shutdown.
    """
    settings = settings or get_settings()
    store = store or AuditStore(settings.authlog_db_url)
    listener = AuthLogListener(settings, AuditWriter(store))
    listener.subscribe(dispatcher)
    return listener
