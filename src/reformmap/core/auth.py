"""Single-admin authentication with signed session tokens."""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time
from collections.abc import Callable
from typing import Protocol

import structlog

from reformmap.errors import AuthorizationError

logger = structlog.get_logger(__name__)


class Authenticator(Protocol):
    """Answers whether a resolved caller identity is the admin."""

    def is_admin(self, identity: str | None) -> bool:
        """Return True only for the configured admin identity."""


class AdminAuthenticator:
    """Authenticate one configured admin and issue HMAC-signed session tokens.

    Token layout is ``<base64url(email|expires_at)>.<hex hmac-sha256>``.
    """

    def __init__(
        self,
        admin_email: str | None,
        admin_password: str | None,
        secret: str | None = None,
        *,
        session_ttl_seconds: int = 12 * 60 * 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._admin_email = admin_email.strip().lower() if admin_email else None
        self._admin_password = admin_password
        if not secret:
            logger.warning("session_secret_generated", reason="no secret configured")
            secret = secrets.token_urlsafe(32)
        self._secret = secret.encode("utf-8")
        self._session_ttl_seconds = session_ttl_seconds
        self._clock = clock

    @property
    def configured(self) -> bool:
        return bool(self._admin_email and self._admin_password)

    def is_admin(self, identity: str | None) -> bool:
        if not identity or self._admin_email is None:
            return False
        return hmac.compare_digest(identity.strip().lower(), self._admin_email)

    def login(self, email: str, password: str) -> str:
        """Check admin credentials and return a session token."""
        if not self.configured:
            raise AuthorizationError("Admin login is not configured")
        email_ok = self.is_admin(email)
        password_ok = hmac.compare_digest(
            password.encode("utf-8"), (self._admin_password or "").encode("utf-8")
        )
        if not (email_ok and password_ok):
            logger.info("admin_login_rejected", email=email)
            raise AuthorizationError("Invalid credentials")
        logger.info("admin_login_accepted", email=email)
        return self.issue_token(email.strip().lower())

    def issue_token(self, identity: str) -> str:
        expires_at = int(self._clock()) + self._session_ttl_seconds
        payload = f"{identity}|{expires_at}".encode()
        encoded = base64.urlsafe_b64encode(payload).decode("ascii").rstrip("=")
        return f"{encoded}.{self._sign(encoded)}"

    def identity_from_token(self, token: str | None) -> str | None:
        """Return the identity a valid, unexpired token was issued for."""
        if not token or "." not in token:
            return None
        encoded, _, signature = token.rpartition(".")
        try:
            expected = self._sign(encoded)
            if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("ascii")):
                return None
            padded = encoded + "=" * (-len(encoded) % 4)
            identity, _, expires_at = (
                base64.urlsafe_b64decode(padded).decode("utf-8").rpartition("|")
            )
            expired = int(expires_at) < self._clock()
        except ValueError:
            return None
        if expired or not identity:
            return None
        return identity

    def _sign(self, encoded: str) -> str:
        return hmac.new(self._secret, encoded.encode("ascii"), hashlib.sha256).hexdigest()
