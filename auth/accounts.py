"""
auth/accounts.py -- Account lifecycle: registration, password reset, verification.

Each successful operation dispatches exactly one event after the store write
has committed, so listeners never see an event for a change that did not
happen.

Layer rule: no imports from authlog/.
"""

from __future__ import annotations

import logging

from auth.dispatcher import EventDispatcher
from auth.events import PasswordReset, Registered, Verified
from auth.hashing import hash_password
from auth.models import User
from auth.store import UserStore

logger = logging.getLogger("authlog.auth.accounts")


class AccountService:
    def __init__(self, store: UserStore, dispatcher: EventDispatcher) -> None:
        self.store = store
        self.dispatcher = dispatcher

    def register(self, email: str, password: str) -> User:
        """Create a user and dispatch Registered.

        Raises ValueError if the email is already registered.
        """
        user = User(email=email, hashed_password=hash_password(password))
        user.id = self.store.create_user(user)
        user = self.store.get_by_id(user.id)
        logger.info("Registered user %d", user.id)
        self.dispatcher.dispatch(Registered(user=user))
        return user

    def reset_password(self, user: User, new_password: str) -> None:
        """Store a new password hash and dispatch PasswordReset.

        Raises LookupError if the user no longer exists.
        """
        hashed = hash_password(new_password)
        if not self.store.update_password(user.id, hashed):
            raise LookupError(f"User {user.id} does not exist.")
        user.hashed_password = hashed
        self.dispatcher.dispatch(PasswordReset(user=user))

    def verify_email(self, user: User) -> bool:
        """Mark the user's email as verified.

        Returns True and dispatches Verified on the first verification;
        returns False (no event) when the email was already verified.
        """
        if user.has_verified_email:
            return False
        stamp = self.store.mark_email_verified(user.id)
        if stamp is None:
            raise LookupError(f"User {user.id} does not exist.")
        user.email_verified_at = stamp
        self.dispatcher.dispatch(Verified(user=user))
        return True
