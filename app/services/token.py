"""Random tokens stored only as keyed hashes."""

import hashlib
import hmac
import secrets

from app.config import get_settings

TOKEN_BYTES = 16


class Token:
    """Random plaintext value plus its HMAC-SHA256 digest.

    The plaintext goes to the user (email link, cookie); only ``hash`` is
    persisted. Passing an existing value recomputes the digest for lookups.
    """

    def __init__(self, value: str | None = None) -> None:
        self.value = value if value is not None else secrets.token_hex(TOKEN_BYTES)

    @property
    def hash(self) -> str:
        key = get_settings().SECRET_KEY.encode("utf-8")
        return hmac.new(key, self.value.encode("utf-8"), hashlib.sha256).hexdigest()

    def __repr__(self) -> str:
        return "Token(<hidden>)"
