"""
tests/test_accounts.py -- AccountService flows and UserStore behaviour.

Covers:
  - register() creates the user and records Registered with its new id
  - duplicate registration raises ValueError and records nothing
  - reset_password() replaces the hash and records PasswordReset
  - verify_email() records Verified once; re-verifying is a no-op
  - UserStore email normalization and explicit IDs
"""

from __future__ import annotations

import pytest

from auth.accounts import AccountService
from auth.hashing import verify_password
from auth.models import User


@pytest.fixture
def accounts(user_store, dispatcher) -> AccountService:
    return AccountService(user_store, dispatcher)


class TestRegister:
    def test_register_records_new_user_id(self, accounts, audit_store) -> None:
        user = accounts.register("New@Example.org", "s3cret-pass")

        assert user.id is not None
        assert user.email == "new@example.org"
        rows = audit_store.records(event_name="Registered")
        assert len(rows) == 1
        assert rows[0].user_id == user.id
        assert rows[0].email is None

    def test_duplicate_registration_raises(self, accounts, user, audit_store) -> None:
        with pytest.raises(ValueError):
            accounts.register("info@example.org", "whatever")
        assert audit_store.count(event_name="Registered") == 0


class TestPasswordReset:
    def test_reset_password(self, accounts, user, user_store, audit_store) -> None:
        accounts.reset_password(user, "brand-new-password")

        stored = user_store.get_by_id(1000)
        assert verify_password("brand-new-password", stored.hashed_password)
        assert audit_store.count(event_name="PasswordReset", user_id=1000) == 1

    def test_reset_password_for_missing_user(self, accounts, audit_store) -> None:
        with pytest.raises(LookupError):
            accounts.reset_password(User(id=4242, email="gone@example.org"), "x")
        assert audit_store.count() == 0


class TestVerifyEmail:
    def test_first_verification_records_event(self, accounts, user, user_store, audit_store) -> None:
        assert accounts.verify_email(user) is True

        assert user.has_verified_email
        assert user_store.get_by_id(1000).email_verified_at == user.email_verified_at
        assert audit_store.count(event_name="Verified", user_id=1000) == 1

    def test_second_verification_is_noop(self, accounts, user, audit_store) -> None:
        accounts.verify_email(user)
        assert accounts.verify_email(user) is False
        assert audit_store.count(event_name="Verified") == 1

    def test_verify_missing_user(self, accounts, audit_store) -> None:
        with pytest.raises(LookupError):
            accounts.verify_email(User(id=4242, email="gone@example.org"))
        assert audit_store.count() == 0


class TestUserStore:
    def test_explicit_id_is_kept(self, user_store) -> None:
        uid = user_store.create_user(User(id=77, email="seven@example.org"))
        assert uid == 77
        assert user_store.get_by_email("SEVEN@example.org").id == 77

    def test_get_missing_user(self, user_store) -> None:
        assert user_store.get_by_id(1) is None
        assert user_store.get_by_email("nobody@example.org") is None

    def test_update_password_missing_user(self, user_store) -> None:
        assert user_store.update_password(1, "hash") is False
