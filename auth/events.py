"""
auth/events.py -- Authentication lifecycle events.

Each class is one kind of occurrence the auth subsystem announces through
EventDispatcher.dispatch(). Events are immutable value objects; listeners
read them and must not mutate them.

Payload shapes:
  credentials -- the mapping the caller passed to SessionGuard.attempt()
                 (typically {"email": ..., "password": ...}).
  request     -- the request payload the lockout was triggered from
                 (form/query fields as a mapping).
  user        -- the subject the event is about.

Passwords travel inside credentials because Attempting/Failed listeners may
need the full payload. Listeners must never persist or log them.

Layer rule: no imports from authlog/.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from auth.models import User


@dataclass(frozen=True)
class Attempting:
    """Credentials were submitted; fired before they are checked."""

    guard: str
    credentials: Mapping[str, Any] = field(default_factory=dict)
    remember: bool = False


@dataclass(frozen=True)
class Authenticated:
    """A user was resolved for the current session (fires after every Login)."""

    guard: str
    user: User


@dataclass(frozen=True)
class Failed:
    """Credentials were rejected. user is set when the identity exists."""

    guard: str
    user: User | None = None
    credentials: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Lockout:
    """Too many failed attempts for one identity within the decay window."""

    request: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Login:
    guard: str
    user: User
    remember: bool = False


@dataclass(frozen=True)
class Logout:
    guard: str
    user: User


@dataclass(frozen=True)
class OtherDeviceLogout:
    """Every other session of user was invalidated by a password rehash."""

    guard: str
    user: User


@dataclass(frozen=True)
class PasswordReset:
    user: User


@dataclass(frozen=True)
class Registered:
    user: User


@dataclass(frozen=True)
class Verified:
    user: User


AuthEvent = Union[
    Attempting,
    Authenticated,
    Failed,
    Lockout,
    Login,
    Logout,
    OtherDeviceLogout,
    PasswordReset,
    Registered,
    Verified,
]
