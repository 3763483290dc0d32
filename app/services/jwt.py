"""JWT session token service."""

from datetime import timedelta
from typing import Any

from jose import JWTError, jwt

from app.config import get_settings
from app.models.user import User, utcnow


class JWTService:
    """Creates and validates the short-lived session tokens handed out at login."""

    def __init__(self) -> None:
        settings = get_settings()
        self.secret_key = settings.JWT_SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.expire_minutes = settings.JWT_EXPIRE_MINUTES

    def create_token(self, user: User) -> str:
        """Create a session token for the given user."""
        expire = utcnow() + timedelta(minutes=self.expire_minutes)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "name": user.name,
            "exp": expire,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode_token(self, token: str) -> dict[str, Any] | None:
        """Decode and validate a token. Returns None if invalid or expired."""
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None


_jwt_service: JWTService | None = None


def get_jwt_service() -> JWTService:
    """Get singleton JWT service instance."""
    global _jwt_service
    if _jwt_service is None:
        _jwt_service = JWTService()
    return _jwt_service
