"""Account lifecycle: registration, login, activation, password reset, profile."""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import insert, literal, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.ledger import (
    ExpenseCategoryAssigned,
    ExpenseCategoryDefault,
    IncomeCategoryAssigned,
    IncomeCategoryDefault,
    PaymentMethodAssigned,
    PaymentMethodDefault,
)
from app.models.user import RememberedLogin, User, utcnow
from app.services.mail import Mailer, get_mailer, render_template
from app.services.password import hash_password, verify_password
from app.services.token import Token

logger = logging.getLogger("budget_keeper")

MIN_PASSWORD_LENGTH = 6

NAME_REQUIRED = "Name is required"
INVALID_EMAIL = "Invalid email"
EMAIL_TAKEN = "Email already taken"
PASSWORD_TOO_SHORT = f"Please enter at least {MIN_PASSWORD_LENGTH} characters for the password"
PASSWORD_NEEDS_LETTER = "Password needs at least one letter"
PASSWORD_NEEDS_NUMBER = "Password needs at least one number"
SAVE_FAILED = "Could not save account, please try again"

_LETTER_RE = re.compile(r"[a-z]", re.IGNORECASE)
_DIGIT_RE = re.compile(r"[0-9]")

# (global defaults, per-account copies) provisioned on registration
DEFAULT_CATEGORY_TABLES = (
    (IncomeCategoryDefault, IncomeCategoryAssigned),
    (ExpenseCategoryDefault, ExpenseCategoryAssigned),
    (PaymentMethodDefault, PaymentMethodAssigned),
)


def normalize_email(email: str) -> str:
    return email.strip().lower()


@dataclass
class AccountResult:
    """Outcome of an operation that validates before writing."""

    success: bool
    errors: list[str] = field(default_factory=list)
    user: User | None = None
    token: str | None = None


@dataclass
class RememberedToken:
    """Plaintext remember-me token handed to the client, with its expiry."""

    value: str
    expires_at: datetime


class AccountService:
    """Owns user records and the token flows layered on them.

    Every method works on the session passed in at construction and commits
    its own writes. Expected outcomes (bad credentials, validation errors,
    unknown tokens) are return values; only unexpected database errors raise.
    """

    def __init__(self, db: Session, mailer: Mailer | None = None) -> None:
        settings = get_settings()
        self.db = db
        self.mailer = mailer or get_mailer()
        self.base_url = settings.APP_BASE_URL.rstrip("/")
        self.reset_expire_minutes = settings.PASSWORD_RESET_EXPIRE_MINUTES
        self.remember_days = settings.REMEMBER_LOGIN_DAYS

    # --- Lookups ---

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == normalize_email(email)).first()

    def find_by_id(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    def email_exists(self, email: str, ignore_id: int | None = None) -> bool:
        """True if another account uses this email. The record with ``ignore_id`` doesn't count."""
        user = self.find_by_email(email)
        return user is not None and user.id != ignore_id

    # --- Validation ---

    def validate(self, name: str, email: str, password: str | None = None, user_id: int | None = None) -> list[str]:
        """Check candidate account values. Returns every error found, empty if valid."""
        errors = []

        if not name or not name.strip():
            errors.append(NAME_REQUIRED)

        try:
            validate_email(normalize_email(email), check_deliverability=False)
        except EmailNotValidError:
            errors.append(INVALID_EMAIL)

        if self.email_exists(email, ignore_id=user_id):
            errors.append(EMAIL_TAKEN)

        if password is not None:
            if len(password) < MIN_PASSWORD_LENGTH:
                errors.append(PASSWORD_TOO_SHORT)
            if not _LETTER_RE.search(password):
                errors.append(PASSWORD_NEEDS_LETTER)
            if not _DIGIT_RE.search(password):
                errors.append(PASSWORD_NEEDS_NUMBER)

        return errors

    # --- Registration and activation ---

    def save(self, name: str, email: str, password: str) -> AccountResult:
        """Register a new, inactive account and give it the default categories.

        On success the result carries the plaintext activation token; only its
        hash is stored.
        """
        errors = self.validate(name, email, password)
        if errors:
            return AccountResult(success=False, errors=errors)

        token = Token()
        user = User(
            name=name.strip(),
            email=normalize_email(email),
            password_hash=hash_password(password),
            is_active=False,
            activation_hash=token.hash,
        )
        try:
            self.db.add(user)
            self.db.flush()
            self._provision_default_categories(user.id)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Registration for %s rejected by the database", normalize_email(email))
            return AccountResult(success=False, errors=[SAVE_FAILED])

        self.db.refresh(user)
        logger.info("Registered account id=%s", user.id)
        return AccountResult(success=True, user=user, token=token.value)

    def _provision_default_categories(self, user_id: int) -> None:
        """Copy the global default categories to the account, in the caller's transaction."""
        for default_model, assigned_model in DEFAULT_CATEGORY_TABLES:
            self.db.execute(
                insert(assigned_model.__table__).from_select(
                    ["user_id", "name"],
                    select(literal(user_id), default_model.name).order_by(default_model.id),
                )
            )

    def send_activation_email(self, user: User, token: str, base_url: str | None = None) -> bool:
        url = f"{(base_url or self.base_url).rstrip('/')}/signup/activate/{token}"
        text = render_template("signup/activation_email.txt", url=url)
        html = render_template("signup/activation_email.html", url=url)
        return self.mailer.send(user.email, "Account activation", text, html)

    def activate(self, token: str) -> int:
        """Activate the account holding this activation token. Returns the number of rows activated.

        Activation tokens have no expiry.
        """
        if not token:
            return 0
        result = self.db.execute(
            update(User)
            .where(User.activation_hash == Token(token).hash)
            .values(is_active=True, activation_hash=None)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        if result.rowcount:
            logger.info("Activated %d account(s)", result.rowcount)
        return result.rowcount

    # --- Login ---

    def authenticate(self, email: str, password: str) -> User | None:
        """Return the user for valid credentials on an active account, None otherwise.

        Unknown email, inactive account and wrong password are indistinguishable.
        """
        user = self.find_by_email(email)
        if user is None or not user.is_active:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    def remember_login(self, user: User) -> RememberedToken | None:
        """Store a remember-me token for the user. Returns the plaintext for the cookie."""
        token = Token()
        expires_at = utcnow() + timedelta(days=self.remember_days)
        self.db.add(RememberedLogin(token_hash=token.hash, user_id=user.id, expires_at=expires_at))
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Could not remember login for user id=%s", user.id)
            return None
        return RememberedToken(value=token.value, expires_at=expires_at)

    def find_by_remember_token(self, token: str) -> User | None:
        """Resolve a remember-me cookie to an active user. Expired rows are removed."""
        remembered = self.db.get(RememberedLogin, Token(token).hash)
        if remembered is None:
            return None
        if remembered.expires_at <= utcnow():
            self.db.delete(remembered)
            self.db.commit()
            return None
        user = self.find_by_id(remembered.user_id)
        if user is None or not user.is_active:
            return None
        return user

    def forget_login(self, token: str) -> None:
        self.db.query(RememberedLogin).filter(RememberedLogin.token_hash == Token(token).hash).delete()
        self.db.commit()

    # --- Password reset ---

    def send_password_reset(self, email: str, base_url: str | None = None) -> None:
        """Start a reset and email the link. Unknown emails are silently ignored."""
        user = self.find_by_email(email)
        if user is None:
            return

        token = self.start_password_reset(user)
        if token:
            self.send_password_reset_email(user, token, base_url)

    def start_password_reset(self, user: User) -> str | None:
        """Store a new reset token hash and expiry. Returns the plaintext token."""
        token = Token()
        user.password_reset_hash = token.hash
        user.password_reset_expires_at = utcnow() + timedelta(minutes=self.reset_expire_minutes)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Could not start password reset for user id=%s", user.id)
            return None
        logger.info("Password reset started for user id=%s", user.id)
        return token.value

    def send_password_reset_email(self, user: User, token: str, base_url: str | None = None) -> bool:
        url = f"{(base_url or self.base_url).rstrip('/')}/password/reset/{token}"
        context = {"url": url, "expire_minutes": self.reset_expire_minutes}
        text = render_template("password/reset_email.txt", **context)
        html = render_template("password/reset_email.html", **context)
        return self.mailer.send(user.email, "Password reset", text, html)

    def find_by_password_reset(self, token: str) -> User | None:
        """Return the user holding this reset token, or None if unknown or expired."""
        if not token:
            return None
        user = self.db.query(User).filter(User.password_reset_hash == Token(token).hash).first()
        if user is None or user.password_reset_expires_at is None:
            return None
        if user.password_reset_expires_at > utcnow():
            return user
        return None

    def reset_password(self, user: User, password: str) -> AccountResult:
        """Set a new password and clear the pending reset in one commit."""
        errors = self.validate(user.name, user.email, password, user_id=user.id)
        if errors:
            return AccountResult(success=False, errors=errors)

        user.password_hash = hash_password(password)
        user.password_reset_hash = None
        user.password_reset_expires_at = None
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return AccountResult(success=False, errors=[SAVE_FAILED])

        logger.info("Password reset completed for user id=%s", user.id)
        return AccountResult(success=True, user=user)

    # --- Profile ---

    def update_profile(self, user: User, name: str, email: str, password: str | None = "") -> AccountResult:
        """Update name and email, and the password only when a non-empty one is given."""
        new_password = password or None
        errors = self.validate(name, email, new_password, user_id=user.id)
        if errors:
            return AccountResult(success=False, errors=errors)

        user.name = name.strip()
        user.email = normalize_email(email)
        if new_password is not None:
            user.password_hash = hash_password(new_password)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return AccountResult(success=False, errors=[SAVE_FAILED])

        return AccountResult(success=True, user=user)
