"""Tests for the account lifecycle: registration, activation, login, reset, profile."""

import re
from datetime import timedelta
from unittest.mock import patch

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.ledger import ExpenseCategoryAssigned, IncomeCategoryAssigned, PaymentMethodAssigned
from app.models.seed import DEFAULT_EXPENSE_CATEGORIES, DEFAULT_INCOME_CATEGORIES, DEFAULT_PAYMENT_METHODS
from app.models.user import RememberedLogin, User, utcnow
from app.services.account import EMAIL_TAKEN, SAVE_FAILED, AccountService
from app.services.password import verify_password
from app.services.token import Token


def _reset_token_from(mail: dict) -> str:
    match = re.search(r"/password/reset/([0-9a-f]{32})", mail["text"])
    assert match, mail["text"]
    return match.group(1)


class TestRegistration:
    """Tests for AccountService.save."""

    def test_save_creates_inactive_account(self, accounts: AccountService):
        result = accounts.save("Alice", "alice@example.com", "secret1")
        assert result.success
        assert result.errors == []
        assert result.user.id is not None
        assert result.user.is_active is False

    def test_save_stores_only_token_hash(self, accounts: AccountService):
        result = accounts.save("Alice", "alice@example.com", "secret1")
        assert result.user.activation_hash != result.token
        assert result.user.activation_hash == Token(result.token).hash

    def test_save_hashes_password(self, accounts: AccountService):
        result = accounts.save("Alice", "alice@example.com", "secret1")
        assert result.user.password_hash != "secret1"
        assert verify_password("secret1", result.user.password_hash)

    def test_save_normalizes_email(self, accounts: AccountService):
        result = accounts.save("  Alice  ", " Alice@Example.COM ", "secret1")
        assert result.user.email == "alice@example.com"
        assert result.user.name == "Alice"

    def test_save_copies_default_categories(self, accounts: AccountService, db_session: Session):
        result = accounts.save("Alice", "alice@example.com", "secret1")
        user_id = result.user.id

        incomes = db_session.query(IncomeCategoryAssigned).filter_by(user_id=user_id).all()
        expenses = db_session.query(ExpenseCategoryAssigned).filter_by(user_id=user_id).all()
        methods = db_session.query(PaymentMethodAssigned).filter_by(user_id=user_id).all()
        assert sorted(c.name for c in incomes) == sorted(DEFAULT_INCOME_CATEGORIES)
        assert sorted(c.name for c in expenses) == sorted(DEFAULT_EXPENSE_CATEGORIES)
        assert sorted(m.name for m in methods) == sorted(DEFAULT_PAYMENT_METHODS)

    def test_duplicate_email_fails_with_conflict(self, accounts: AccountService, db_session: Session):
        assert accounts.save("Alice", "alice@example.com", "secret1").success
        result = accounts.save("Other Alice", "alice@example.com", "secret2")
        assert not result.success
        assert EMAIL_TAKEN in result.errors
        assert db_session.query(User).count() == 1

    def test_validation_failure_writes_nothing(self, accounts: AccountService, db_session: Session):
        result = accounts.save("", "bad", "x")
        assert not result.success
        assert len(result.errors) >= 3
        assert db_session.query(User).count() == 0

    def test_provisioning_failure_rolls_back_account(self, accounts: AccountService, db_session: Session):
        error = IntegrityError("INSERT INTO expense_category_assigned", {}, Exception("constraint failed"))
        with patch.object(AccountService, "_provision_default_categories", side_effect=error):
            result = accounts.save("Alice", "alice@example.com", "secret1")

        assert not result.success
        assert result.errors == [SAVE_FAILED]
        assert db_session.query(User).count() == 0
        assert db_session.query(IncomeCategoryAssigned).count() == 0

    def test_activation_email(self, accounts: AccountService, mailer):
        result = accounts.save("Alice", "alice@example.com", "secret1")
        accounts.send_activation_email(result.user, result.token)

        mail = mailer.sent[-1]
        assert mail["to"] == "alice@example.com"
        assert mail["subject"] == "Account activation"
        assert f"/signup/activate/{result.token}" in mail["text"]
        assert f"/signup/activate/{result.token}" in mail["html"]


class TestActivation:
    """Tests for AccountService.activate."""

    def test_activate_sets_active_and_clears_hash(self, accounts: AccountService, db_session: Session):
        result = accounts.save("Alice", "alice@example.com", "secret1")
        assert accounts.activate(result.token) == 1

        user = db_session.query(User).filter_by(email="alice@example.com").one()
        assert user.is_active is True
        assert user.activation_hash is None

    def test_activate_touches_only_matching_row(self, accounts: AccountService, db_session: Session):
        alice = accounts.save("Alice", "alice@example.com", "secret1")
        bob = accounts.save("Bob", "bob@example.com", "secret2")
        bob_hash = bob.user.activation_hash

        accounts.activate(alice.token)

        bob_row = db_session.query(User).filter_by(email="bob@example.com").one()
        assert bob_row.is_active is False
        assert bob_row.activation_hash == bob_hash

    def test_unknown_token_activates_nothing(self, accounts: AccountService):
        accounts.save("Alice", "alice@example.com", "secret1")
        assert accounts.activate("0" * 32) == 0
        assert accounts.activate("") == 0

    def test_token_is_single_use(self, accounts: AccountService):
        result = accounts.save("Alice", "alice@example.com", "secret1")
        assert accounts.activate(result.token) == 1
        assert accounts.activate(result.token) == 0

    def test_activation_token_does_not_expire(self, accounts: AccountService, db_session: Session):
        """Unlike reset tokens, activation tokens stay valid indefinitely."""
        result = accounts.save("Alice", "alice@example.com", "secret1")
        result.user.created_at = utcnow() - timedelta(days=365)
        db_session.commit()

        assert accounts.activate(result.token) == 1


class TestAuthentication:
    """Tests for AccountService.authenticate."""

    def test_valid_credentials(self, accounts: AccountService, test_user: dict):
        user = accounts.authenticate("test@example.com", "password123")
        assert user is not None
        assert user.id == test_user["user_id"]

    def test_email_is_case_insensitive(self, accounts: AccountService, test_user: dict):
        assert accounts.authenticate("TEST@example.com", "password123") is not None

    def test_inactive_account_fails(self, accounts: AccountService):
        accounts.save("Alice", "alice@example.com", "secret1")
        assert accounts.authenticate("alice@example.com", "secret1") is None

    def test_wrong_password_and_unknown_email_are_indistinguishable(self, accounts: AccountService, test_user: dict):
        wrong_password = accounts.authenticate("test@example.com", "wrong-password1")
        unknown_email = accounts.authenticate("nobody@example.com", "password123")
        assert wrong_password is None
        assert unknown_email is None


class TestRememberLogin:
    """Tests for remember-me tokens."""

    def test_remember_login_stores_hash_with_30_day_expiry(self, accounts: AccountService, db_session: Session):
        result = accounts.save("Alice", "alice@example.com", "secret1")
        remembered = accounts.remember_login(result.user)

        row = db_session.query(RememberedLogin).one()
        assert row.token_hash == Token(remembered.value).hash
        assert row.token_hash != remembered.value
        assert row.user_id == result.user.id
        assert timedelta(days=29, hours=23) < row.expires_at - utcnow() <= timedelta(days=30)

    def test_find_by_remember_token(self, accounts: AccountService, test_user: dict):
        user = accounts.find_by_id(test_user["user_id"])
        remembered = accounts.remember_login(user)

        found = accounts.find_by_remember_token(remembered.value)
        assert found is not None
        assert found.id == test_user["user_id"]
        assert accounts.find_by_remember_token("f" * 32) is None

    def test_expired_remember_token_is_removed(self, accounts: AccountService, db_session: Session, test_user: dict):
        user = accounts.find_by_id(test_user["user_id"])
        remembered = accounts.remember_login(user)
        row = db_session.query(RememberedLogin).one()
        row.expires_at = utcnow() - timedelta(seconds=1)
        db_session.commit()

        assert accounts.find_by_remember_token(remembered.value) is None
        assert db_session.query(RememberedLogin).count() == 0

    def test_forget_login(self, accounts: AccountService, db_session: Session, test_user: dict):
        user = accounts.find_by_id(test_user["user_id"])
        remembered = accounts.remember_login(user)
        accounts.forget_login(remembered.value)

        assert db_session.query(RememberedLogin).count() == 0
        assert accounts.find_by_remember_token(remembered.value) is None


class TestPasswordReset:
    """Tests for the password reset state machine."""

    def test_unknown_email_is_silent_no_op(self, accounts: AccountService, mailer, db_session: Session):
        accounts.send_password_reset("nobody@example.com")
        assert mailer.sent == []

    def test_send_password_reset_stores_hash_and_emails_token(self, accounts: AccountService, mailer, test_user: dict):
        accounts.send_password_reset("test@example.com")

        mail = mailer.sent[-1]
        assert mail["to"] == "test@example.com"
        assert mail["subject"] == "Password reset"
        token = _reset_token_from(mail)

        user = accounts.find_by_id(test_user["user_id"])
        assert user.password_reset_hash == Token(token).hash
        assert user.password_reset_hash != token
        assert timedelta(minutes=119) < user.password_reset_expires_at - utcnow() <= timedelta(minutes=120)

    def test_find_by_password_reset(self, accounts: AccountService, test_user: dict):
        user = accounts.find_by_id(test_user["user_id"])
        token = accounts.start_password_reset(user)

        found = accounts.find_by_password_reset(token)
        assert found is not None
        assert found.id == test_user["user_id"]

    def test_unknown_reset_token(self, accounts: AccountService, test_user: dict):
        assert accounts.find_by_password_reset("0" * 32) is None
        assert accounts.find_by_password_reset("") is None

    def test_expired_token_is_not_found_even_though_hash_matches(
        self, accounts: AccountService, db_session: Session, test_user: dict
    ):
        user = accounts.find_by_id(test_user["user_id"])
        token = accounts.start_password_reset(user)
        user.password_reset_expires_at = utcnow() - timedelta(minutes=1)
        db_session.commit()

        assert accounts.find_by_password_reset(token) is None
        stored = db_session.query(User).filter_by(password_reset_hash=Token(token).hash).first()
        assert stored is not None

    def test_new_request_replaces_previous_token(self, accounts: AccountService, test_user: dict):
        user = accounts.find_by_id(test_user["user_id"])
        first = accounts.start_password_reset(user)
        second = accounts.start_password_reset(user)

        assert accounts.find_by_password_reset(first) is None
        assert accounts.find_by_password_reset(second) is not None

    def test_reset_password_clears_both_columns(self, accounts: AccountService, test_user: dict):
        user = accounts.find_by_id(test_user["user_id"])
        token = accounts.start_password_reset(user)

        result = accounts.reset_password(accounts.find_by_password_reset(token), "newpassword456")
        assert result.success

        user = accounts.find_by_id(test_user["user_id"])
        assert user.password_reset_hash is None
        assert user.password_reset_expires_at is None
        assert accounts.authenticate("test@example.com", "newpassword456") is not None
        assert accounts.authenticate("test@example.com", "password123") is None

    def test_reset_token_cannot_be_reused(self, accounts: AccountService, test_user: dict):
        user = accounts.find_by_id(test_user["user_id"])
        token = accounts.start_password_reset(user)
        accounts.reset_password(user, "newpassword456")

        assert accounts.find_by_password_reset(token) is None

    def test_invalid_new_password_keeps_reset_pending(self, accounts: AccountService, test_user: dict):
        user = accounts.find_by_id(test_user["user_id"])
        token = accounts.start_password_reset(user)

        result = accounts.reset_password(user, "short")
        assert not result.success
        assert result.errors

        user = accounts.find_by_password_reset(token)
        assert user is not None
        assert user.password_reset_hash is not None
        assert user.password_reset_expires_at is not None
        assert accounts.authenticate("test@example.com", "password123") is not None


class TestProfileUpdate:
    """Tests for AccountService.update_profile."""

    def test_update_name_and_email(self, accounts: AccountService, test_user: dict):
        user = accounts.find_by_id(test_user["user_id"])
        result = accounts.update_profile(user, "New Name", "New@Example.com", "")

        assert result.success
        user = accounts.find_by_id(test_user["user_id"])
        assert user.name == "New Name"
        assert user.email == "new@example.com"

    def test_keeping_own_email_is_allowed(self, accounts: AccountService, test_user: dict):
        user = accounts.find_by_id(test_user["user_id"])
        assert accounts.update_profile(user, "Renamed", "test@example.com").success

    def test_empty_password_keeps_hash(self, accounts: AccountService, test_user: dict):
        user = accounts.find_by_id(test_user["user_id"])
        old_hash = user.password_hash

        accounts.update_profile(user, "Test User", "test@example.com", "")
        assert accounts.find_by_id(test_user["user_id"]).password_hash == old_hash

    def test_new_password_is_hashed(self, accounts: AccountService, test_user: dict):
        user = accounts.find_by_id(test_user["user_id"])
        result = accounts.update_profile(user, "Test User", "test@example.com", "changed789")

        assert result.success
        assert accounts.authenticate("test@example.com", "changed789") is not None

    def test_email_of_other_account_is_rejected(self, accounts: AccountService, test_user: dict):
        accounts.save("Alice", "alice@example.com", "secret1")
        user = accounts.find_by_id(test_user["user_id"])

        result = accounts.update_profile(user, "Test User", "alice@example.com")
        assert not result.success
        assert result.errors == [EMAIL_TAKEN]
        assert accounts.find_by_id(test_user["user_id"]).email == "test@example.com"

    def test_invalid_password_is_rejected_without_changes(self, accounts: AccountService, test_user: dict):
        user = accounts.find_by_id(test_user["user_id"])
        result = accounts.update_profile(user, "", "test@example.com", "abc")

        assert not result.success
        assert len(result.errors) == 3
        assert accounts.find_by_id(test_user["user_id"]).name == "Test User"
