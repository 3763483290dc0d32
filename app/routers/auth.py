"""Account API endpoints: sign-up, activation, login, password reset."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from app.dependencies import (
    REMEMBER_COOKIE_NAME,
    clear_auth_cookies,
    get_account_service,
    set_remember_cookie,
    set_session_cookie,
)
from app.rate_limit import limiter
from app.schemas.auth import (
    ActivationResponse,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserResponse,
)
from app.services.account import AccountService
from app.services.jwt import get_jwt_service

logger = logging.getLogger("budget_keeper")

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_RESET_LINK = "Invalid or expired reset link"
FORGOT_PASSWORD_MESSAGE = "If an account exists with that email, a password reset link has been sent."


@router.post("/register", response_model=UserResponse, status_code=201)
@limiter.limit("5/minute")
def register(
    request: Request,
    body: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
) -> UserResponse:
    """Create an inactive account and email its activation link."""
    result = accounts.save(body.name, body.email, body.password)
    if not result.success:
        raise HTTPException(status_code=400, detail={"errors": result.errors})

    accounts.send_activation_email(result.user, result.token)  # type: ignore[arg-type]
    return UserResponse.model_validate(result.user)


@router.get("/activate/{token}", response_model=ActivationResponse)
def activate(token: str, accounts: AccountService = Depends(get_account_service)) -> ActivationResponse:
    """Activate the account owning the token."""
    return ActivationResponse(activated=accounts.activate(token) > 0)


@router.post("/login", response_model=TokenResponse)
@limiter.limit("10/minute")
def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
) -> TokenResponse:
    """Authenticate and receive a session token, plus a remember-me cookie if asked."""
    user = accounts.authenticate(body.email, body.password)
    if user is None:
        raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

    token = get_jwt_service().create_token(user)
    set_session_cookie(response, token)

    remember_expires_at = None
    if body.remember_me:
        remembered = accounts.remember_login(user)
        if remembered is not None:
            set_remember_cookie(response, remembered.value, remembered.expires_at)
            remember_expires_at = remembered.expires_at

    return TokenResponse(
        token=token,
        user=UserResponse.model_validate(user),
        remember_expires_at=remember_expires_at,
    )


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    accounts: AccountService = Depends(get_account_service),
) -> dict:
    """Forget the remembered login, if any, and clear auth cookies."""
    remember_token = request.cookies.get(REMEMBER_COOKIE_NAME)
    if remember_token:
        accounts.forget_login(remember_token)
    clear_auth_cookies(response)
    return {"detail": "Logged out"}


@router.post("/forgot-password")
@limiter.limit("3/minute")
def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    accounts: AccountService = Depends(get_account_service),
) -> dict:
    """Email a reset link. The response never reveals whether the email is registered."""
    accounts.send_password_reset(body.email)
    return {"message": FORGOT_PASSWORD_MESSAGE}


@router.get("/reset-password/{token}")
def check_reset_token(token: str, accounts: AccountService = Depends(get_account_service)) -> dict:
    """Check that a reset token is known and not expired."""
    if accounts.find_by_password_reset(token) is None:
        raise HTTPException(status_code=400, detail=INVALID_RESET_LINK)
    return {"valid": True}


@router.post("/reset-password")
@limiter.limit("5/minute")
def reset_password(
    request: Request,
    body: ResetPasswordRequest,
    accounts: AccountService = Depends(get_account_service),
) -> dict:
    """Set a new password using a valid reset token."""
    user = accounts.find_by_password_reset(body.token)
    if user is None:
        raise HTTPException(status_code=400, detail=INVALID_RESET_LINK)

    result = accounts.reset_password(user, body.password)
    if not result.success:
        raise HTTPException(status_code=400, detail={"errors": result.errors})

    return {"detail": "Password has been reset"}
