"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic) -- dataclasses own
domain shape; stores and the guard do the work.

Layer rule: no imports from authlog/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """Represents an identity known to the auth subsystem.

    email is the login identifier and is stored lower-cased so lookups are
    case-insensitive. email_verified_at is None until verify_email() runs.
    hashed_password is a bcrypt hash and never leaves the auth package.
    """

    email: str
    id: int | None = None
    hashed_password: str | None = None
    email_verified_at: str | None = None  # ISO 8601, None = unverified
    created_at: str | None = None
    is_active: bool = True

    @property
    def has_verified_email(self) -> bool:
        return self.email_verified_at is not None
