"""Request dependencies: services bound to the request session, and authentication."""

from datetime import datetime

from fastapi import Depends, HTTPException, Request, Response
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.models.user import User, utcnow
from app.services.account import AccountService
from app.services.jwt import get_jwt_service
from app.services.ledger import LedgerService
from app.services.mail import get_mailer

SESSION_COOKIE_NAME = "bk_session"
REMEMBER_COOKIE_NAME = "bk_remember"


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    """Account service bound to the request's database session."""
    return AccountService(db, mailer=get_mailer())


def get_ledger_service(db: Session = Depends(get_db)) -> LedgerService:
    """Ledger service bound to the request's database session."""
    return LedgerService(db)


def _bearer_or_cookie_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]
    return request.cookies.get(SESSION_COOKIE_NAME)


def get_current_user(
    request: Request,
    response: Response,
    accounts: AccountService = Depends(get_account_service),
) -> User:
    """Resolve the user from a session token, falling back to the remember-me cookie.

    A request authenticated by the remember-me cookie gets a fresh session
    cookie. Raises 401 if neither identifies an active account.
    """
    token = _bearer_or_cookie_token(request)
    if token:
        payload = get_jwt_service().decode_token(token)
        if payload:
            user = accounts.find_by_id(int(payload["sub"]))
            if user is not None and user.is_active:
                return user

    remember_token = request.cookies.get(REMEMBER_COOKIE_NAME)
    if remember_token:
        user = accounts.find_by_remember_token(remember_token)
        if user is not None:
            set_session_cookie(response, get_jwt_service().create_token(user))
            return user

    raise HTTPException(status_code=401, detail="Not authenticated")


def set_session_cookie(response: Response, token: str) -> None:
    """Set the session cookie."""
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=get_settings().APP_ENV == "production",
        max_age=get_settings().JWT_EXPIRE_MINUTES * 60,
    )


def set_remember_cookie(response: Response, token: str, expires_at: datetime) -> None:
    """Set the remember-me cookie to expire together with its stored row."""
    max_age = int((expires_at - utcnow()).total_seconds())
    response.set_cookie(
        key=REMEMBER_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=get_settings().APP_ENV == "production",
        max_age=max_age,
    )


def clear_auth_cookies(response: Response) -> None:
    """Clear the session and remember-me cookies."""
    response.delete_cookie(key=SESSION_COOKIE_NAME)
    response.delete_cookie(key=REMEMBER_COOKIE_NAME)
