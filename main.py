"""Budget Keeper - personal finance accounts and bookkeeping."""

import logging
import time

from fastapi import Depends, FastAPI, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.config import get_settings
from app.dependencies import get_account_service
from app.rate_limit import limiter
from app.routers import auth_router, ledger_router, profile_router
from app.services.account import AccountService
from app.services.mail import get_template_dir

# Logging
logger = logging.getLogger("budget_keeper")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

for warning in get_settings().validate():
    logger.warning(warning)

app = FastAPI(title="Budget Keeper", version="0.1.0")
app.state.limiter = limiter


# --- Security headers middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = "default-src 'self'; style-src 'self' 'unsafe-inline'"
        return response


# --- Request size limit middleware ---
class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    MAX_BODY_SIZE = 64 * 1024  # JSON and form bodies only, no uploads

    async def dispatch(self, request: Request, call_next) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and int(content_length) > self.MAX_BODY_SIZE:
            return JSONResponse(status_code=413, content={"detail": "Request body too large"})
        return await call_next(request)


# --- Audit logging middleware ---
class AuditLogMiddleware(BaseHTTPMiddleware):
    AUDIT_PATHS = {
        "/api/v1/auth/",
        "/api/v1/profile",
        "/signup/activate/",
        "/password/reset",
    }

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000

        path = request.url.path
        method = request.method
        if method in ("POST", "PUT") and any(path.startswith(p) for p in self.AUDIT_PATHS):
            logger.info(
                "AUDIT %s %s -> %d (%.0fms) from %s",
                method,
                path,
                response.status_code,
                duration_ms,
                request.client.host if request.client else "unknown",
            )

        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware)
app.add_middleware(AuditLogMiddleware)

# Templates
templates = Jinja2Templates(directory=str(get_template_dir()))

# API routers
app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(ledger_router)


# --- Rate limit error handler ---
@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Handle rate limit exceeded."""
    if request.url.path.startswith("/api/"):
        return JSONResponse(status_code=429, content={"detail": "Rate limit exceeded. Try again later."})
    return HTMLResponse(content="<h1>429</h1><p>Too many requests. Please try again later.</p>", status_code=429)


# --- Exception handler: JSON for API, HTML for web ---
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> Response:
    """Handle HTTP exceptions."""
    if request.url.path.startswith("/api/"):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=exc.headers)
    return HTMLResponse(
        content=f"<h1>{exc.status_code}</h1><p>{exc.detail}</p>",
        status_code=exc.status_code,
    )


# --- Health check ---
@app.get("/api/health")
def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "app": "budget-keeper", "version": "0.1.0"}


# --- Web routes (targets of emailed links) ---
@app.get("/signup/activate/{token}", response_class=HTMLResponse)
def activate_page(
    request: Request,
    token: str,
    accounts: AccountService = Depends(get_account_service),
) -> HTMLResponse:
    """Activate an account from the emailed link."""
    activated = accounts.activate(token) > 0
    return templates.TemplateResponse(request, "pages/activation.html", {"activated": activated})


@app.get("/password/reset/{token}", response_class=HTMLResponse)
def reset_password_page(
    request: Request,
    token: str,
    accounts: AccountService = Depends(get_account_service),
) -> HTMLResponse:
    """Render the new-password form for a valid reset link."""
    user = accounts.find_by_password_reset(token)
    if user is None:
        return templates.TemplateResponse(request, "pages/reset_password.html", {"expired": True}, status_code=400)
    return templates.TemplateResponse(request, "pages/reset_password.html", {"token": token})


@app.post("/password/reset", response_class=HTMLResponse)
@limiter.limit("5/minute")
def reset_password_submit(
    request: Request,
    token: str = Form(...),
    password: str = Form(...),
    accounts: AccountService = Depends(get_account_service),
) -> HTMLResponse:
    """Handle the new-password form."""
    user = accounts.find_by_password_reset(token)
    if user is None:
        return templates.TemplateResponse(request, "pages/reset_password.html", {"expired": True}, status_code=400)

    result = accounts.reset_password(user, password)
    if not result.success:
        return templates.TemplateResponse(
            request, "pages/reset_password.html", {"token": token, "errors": result.errors}
        )
    return templates.TemplateResponse(request, "pages/reset_password.html", {"success": True})
