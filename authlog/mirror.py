"""
authlog/mirror.py -- Flag-gated copy of audit records to a log channel.

A channel is a logger name. The mirror emits one WARNING per record on
logging.getLogger(channel); where that ends up (file, stream, syslog, an
external sink) is decided by the host application's logging configuration.

Record shape:
  message -- the event's short class name, e.g. "Verified"
  context -- attached as LogRecord.context via `extra`:
               user_id  str, only when the record has one
               email    only when the record has one
               plus the record's metadata (guard, remember)

Formatters can reference it as %(context)s. Emission errors are handled by
the logging module itself (see logging.raiseExceptions); this module does
not catch anything.
"""

from __future__ import annotations

import logging
from typing import Any

from authlog.models import AuditRecord

logger = logging.getLogger("authlog.mirror")


def build_context(record: AuditRecord) -> dict[str, Any]:
    """Return the log context mapping for record."""
    context: dict[str, Any] = {}
    if record.user_id is not None:
        context["user_id"] = str(record.user_id)
    if record.email is not None:
        context["email"] = record.email
    for key, value in record.metadata.items():
        context.setdefault(key, value)
    return context


class LogMirror:
    def emit(self, record: AuditRecord, enabled: bool, channel: str) -> bool:
        """Log record at WARNING on channel if enabled. Returns True if emitted."""
        if not enabled:
            logger.debug("Log channel disabled; skipping %s", record.event_name)
            return False
        logging.getLogger(channel).warning(record.event_name, extra={"context": build_context(record)})
        return True
