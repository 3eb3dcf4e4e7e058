"""
authlog/router.py -- Event-to-record mapping.

_EXTRACTORS is the closed, compiled-in table of recognized event classes.
Each entry turns an event into the variable fields of an AuditRecord:

  Attempting, Failed        email from credentials["email"]
  Lockout                   email from request["email"]
  Login, Logout,
  OtherDeviceLogout,
  PasswordReset,
  Registered, Verified      user_id from the subject's id
  Authenticated             no record (Login already captures the success)

Malformed payloads never raise: a missing mapping, a non-string email or a
subject without an integer id all degrade to None for that field.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from auth.events import (
    Attempting,
    AuthEvent,
    Authenticated,
    Failed,
    Lockout,
    Login,
    Logout,
    OtherDeviceLogout,
    PasswordReset,
    Registered,
    Verified,
)
from authlog.models import AuditRecord

# ---------------------------------------------------------------------------
# Field extraction helpers
# ---------------------------------------------------------------------------


def _email_from(payload: Any) -> str | None:
    if not isinstance(payload, Mapping):
        return None
    email = payload.get("email")
    if not isinstance(email, str) or not email.strip():
        return None
    return email


def _user_id_from(user: Any) -> int | None:
    user_id = getattr(user, "id", None)
    # bool is an int subclass; True is not a user id.
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        return None
    return user_id


def _guard_meta(event: Any) -> dict[str, Any]:
    guard = getattr(event, "guard", None)
    return {"guard": guard} if guard else {}


# ---------------------------------------------------------------------------
# Extraction rules -- (user_id, email, metadata)
# ---------------------------------------------------------------------------

_Fields = tuple[int | None, str | None, dict[str, Any]]


def _from_credentials(event: Attempting | Failed) -> _Fields:
    meta = _guard_meta(event)
    if isinstance(event, Attempting):
        meta["remember"] = bool(event.remember)
    return None, _email_from(event.credentials), meta


def _from_request(event: Lockout) -> _Fields:
    return None, _email_from(event.request), {}


def _from_subject(event: Any) -> _Fields:
    meta = _guard_meta(event)
    if isinstance(event, Login):
        meta["remember"] = bool(event.remember)
    return _user_id_from(getattr(event, "user", None)), None, meta


_EXTRACTORS: dict[type, Callable[[Any], _Fields] | None] = {
    Attempting: _from_credentials,
    Failed: _from_credentials,
    Lockout: _from_request,
    Authenticated: None,
    Login: _from_subject,
    Logout: _from_subject,
    OtherDeviceLogout: _from_subject,
    PasswordReset: _from_subject,
    Registered: _from_subject,
    Verified: _from_subject,
}

# Every recognized event class, including Authenticated. The listener
# subscribes to all of them; normalize() decides which produce a record.
AUDITED_EVENTS: tuple[type, ...] = tuple(_EXTRACTORS)


def is_recorded(event_type: type) -> bool:
    """Return True if events of this class produce an AuditRecord."""
    return _EXTRACTORS.get(event_type) is not None


def normalize(event: AuthEvent, now: datetime | None = None) -> AuditRecord | None:
    """Map one auth event to an AuditRecord.

    Returns None for Authenticated and for any class outside the table.
    now is injectable for tests; it defaults to the current UTC time.
    """
    extract = _EXTRACTORS.get(type(event))
    if extract is None:
        return None
    user_id, email, metadata = extract(event)
    return AuditRecord(
        event_name=type(event).__name__,
        created_at=(now or datetime.now(timezone.utc)).isoformat(),
        user_id=user_id,
        email=email,
        metadata=metadata,
    )
