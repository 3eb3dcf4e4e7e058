"""
authlog/models.py -- Domain dataclass for audit records.

Pattern: Data class (pure data container, zero logic). The router builds
records; the store persists them; the mirror renders them into log context.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class AuditRecord:
    """One authentication event, normalized.

    Pre-authentication events (Attempting, Failed, Lockout) carry email only;
    post-authentication events carry user_id only. Both may be None when the
    payload did not resolve an identity -- that is a valid record, not an error.

    metadata holds event details that go to the log mirror but are not
    persisted (guard name, remember flag). id is None until the row is read
    back from the store.
    """

    event_name: str
    created_at: str  # ISO 8601 UTC
    user_id: int | None = None
    email: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    id: int | None = None
