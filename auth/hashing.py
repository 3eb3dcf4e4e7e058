"""
auth/hashing.py -- Password hashing and credential checks.

Security design decisions:
  Passwords: bcrypt, used directly (no passlib wrapper). Bcrypt is the right
       choice for low-entropy secrets because its cost factor makes
       brute-force expensive.

  Timing equalization: authenticate_user() always runs one bcrypt check,
       against _DUMMY_HASH when the email is unknown, so response time does
       not reveal whether an account exists.

Layer rule: no imports from authlog/.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import bcrypt

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("authlog.auth.hashing")


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    Passwords longer than 72 bytes are truncated by bcrypt (a known bcrypt
    limitation); callers should cap input length well below that.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    A malformed hash counts as a mismatch rather than an error.
    """
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.debug("Unparseable password hash treated as mismatch")
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("authlog_timing_dummy")


def authenticate_user(store: UserStore, email: str, password: str) -> tuple[User | None, bool]:
    """Check an email/password pair with timing equalization.

    Returns (user, valid). user is the stored record when the email exists
    (even if the password is wrong) so the caller can attach it to a Failed
    event; valid is True only for an active user with a matching password.
    """
    user = store.get_by_email(email)
    if user is None or user.hashed_password is None:
        verify_password(password, _DUMMY_HASH)
        return user, False
    if not verify_password(password, user.hashed_password):
        return user, False
    return user, user.is_active
