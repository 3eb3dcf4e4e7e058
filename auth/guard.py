"""
auth/guard.py -- Session guard: credential checks, login/logout and lockout.

The guard is the producer of the session-level auth events. Event order for
a single attempt() call:

  locked out        -> Lockout, then TooManyAttempts is raised
  bad credentials   -> Attempting, Failed
  good credentials  -> Attempting, Login, Authenticated

Dispatch is synchronous, so any listener failure (e.g. the audit table is
unavailable) propagates out of attempt()/logout() to the caller.

The guard holds one session's state (the current user). Create one guard
per request/session; the UserStore, dispatcher and throttle are shared
(the default throttle is the process-wide get_login_throttle()).

Layer rule: no imports from authlog/.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from auth.dispatcher import EventDispatcher
from auth.events import Attempting, Authenticated, Failed, Lockout, Login, Logout, OtherDeviceLogout
from auth.hashing import authenticate_user, hash_password, verify_password
from auth.models import User
from auth.store import UserStore
from auth.throttle import LoginThrottle, get_login_throttle

logger = logging.getLogger("authlog.auth.guard")


class TooManyAttempts(Exception):
    """Raised by attempt() while the identity is locked out."""

    def __init__(self, retry_after: int) -> None:
        super().__init__(f"Too many login attempts. Try again in {retry_after} seconds.")
        self.retry_after = retry_after


class InvalidCredentials(Exception):
    """Raised when an operation requires the current password and it did not match."""


def _throttle_key(credentials: Mapping[str, Any]) -> str | None:
    """Return the per-identity throttle key, or None when there is no usable email.

    Email-less attempts cannot be tied to an account, so they are not throttled
    rather than all sharing one bucket.
    """
    email = credentials.get("email")
    if not isinstance(email, str) or not email.strip():
        return None
    return email.strip().lower()


def _without_secrets(payload: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in payload.items() if k != "password"}


class SessionGuard:
    """Stateful guard for one session.

    Usage:
        guard = SessionGuard("web", store, dispatcher, throttle)
        if guard.attempt({"email": "info@example.org", "password": "secret"}):
            ...
        guard.logout()
    """

    def __init__(
        self,
        name: str,
        store: UserStore,
        dispatcher: EventDispatcher,
        throttle: LoginThrottle | None = None,
    ) -> None:
        self.name = name
        self.store = store
        self.dispatcher = dispatcher
        self.throttle = throttle or get_login_throttle()
        self._user: User | None = None

    @property
    def user(self) -> User | None:
        return self._user

    def check(self) -> bool:
        return self._user is not None

    def attempt(
        self,
        credentials: Mapping[str, Any],
        remember: bool = False,
        request: Mapping[str, Any] | None = None,
    ) -> bool:
        """Try to log in with credentials ({"email": ..., "password": ...}).

        Returns True on success. request is the payload reported with a
        Lockout event; it defaults to the credentials minus the password.

        Raises TooManyAttempts while the email is locked out.
        """
        key = _throttle_key(credentials)
        if key is not None and self.throttle.too_many_attempts(key):
            payload = dict(request) if request is not None else _without_secrets(credentials)
            self.dispatcher.dispatch(Lockout(request=payload))
            raise TooManyAttempts(self.throttle.available_in(key))

        self.dispatcher.dispatch(Attempting(guard=self.name, credentials=credentials, remember=remember))

        email = credentials.get("email")
        password = credentials.get("password")
        user, valid = None, False
        if isinstance(email, str) and isinstance(password, str):
            user, valid = authenticate_user(self.store, email, password)

        if not valid:
            if key is not None:
                attempts = self.throttle.hit(key)
                logger.debug("Failed login on guard %r (%d/%d)", self.name, attempts, self.throttle.max_attempts)
            self.dispatcher.dispatch(Failed(guard=self.name, user=user, credentials=credentials))
            return False

        if key is not None:
            self.throttle.clear(key)
        self.login(user, remember=remember)
        return True

    def login(self, user: User, remember: bool = False) -> None:
        """Bind user to this session without checking credentials."""
        self._user = user
        self.dispatcher.dispatch(Login(guard=self.name, user=user, remember=remember))
        self.dispatcher.dispatch(Authenticated(guard=self.name, user=user))

    def logout(self) -> None:
        """End the session. No event is dispatched when nobody is logged in."""
        user = self._user
        if user is None:
            return
        self._user = None
        self.dispatcher.dispatch(Logout(guard=self.name, user=user))

    def logout_other_devices(self, password: str) -> None:
        """Invalidate every other session by rehashing the current password.

        Raises InvalidCredentials if password does not match, and
        RuntimeError when called without a logged-in user.
        """
        user = self._user
        if user is None:
            raise RuntimeError("logout_other_devices() requires a logged-in user.")
        if user.hashed_password is None or not verify_password(password, user.hashed_password):
            raise InvalidCredentials("The provided password does not match the current password.")

        user.hashed_password = hash_password(password)
        self.store.update_password(user.id, user.hashed_password)
        self.dispatcher.dispatch(OtherDeviceLogout(guard=self.name, user=user))
