"""
authlog/writer.py -- Flag-gated insert of audit records.

The writer does not read configuration itself; the listener passes the
current AUTHLOG_ENABLED value with every record so one event sees one
consistent flag value.
"""

from __future__ import annotations

import logging

from authlog.models import AuditRecord
from authlog.store import AuditStore

logger = logging.getLogger("authlog.writer")


class AuditWriter:
    def __init__(self, store: AuditStore) -> None:
        self.store = store

    def write(self, record: AuditRecord, enabled: bool) -> int | None:
        """Insert record if enabled and return the new row ID, else return None.

        Storage errors propagate unchanged: no retry, no buffering.
        """
        if not enabled:
            logger.debug("Audit table disabled; skipping %s", record.event_name)
            return None
        row_id = self.store.insert(record)
        logger.debug("Recorded %s as row %d", record.event_name, row_id)
        return row_id
