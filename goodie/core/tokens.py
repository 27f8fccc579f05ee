# goodie/core/tokens.py
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

from jose import jwt, JWTError

from goodie.core.config import get_settings
from goodie.models.user import Role

OAUTH_STATE_PURPOSE = "oauth_state"
OAUTH_STATE_TTL = timedelta(minutes=10)


@dataclass(frozen=True)
class SessionClaims:
    """
    Decoded session token.

    The role is the one embedded when the token was minted; promoting
    or demoting the user in the store has no effect until reissue.
    """

    subject: uuid.UUID
    role: Role
    issued_at: datetime
    expires_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class SessionTokenIssuer:
    """
    Mint, decode and refresh stateless session tokens (HS256 JWT).

    Payload: {"sub": <user id>, "role": "standard"|"admin", "iat", "exp"}

    - exp is a fixed window (max_age) from the last issuance.
    - a token older than update_age is due for refresh; refreshing
      re-signs the same sub/role with a new iat/exp and never touches
      the store.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        max_age_seconds: int = 30 * 24 * 60 * 60,
        update_age_seconds: int = 24 * 60 * 60,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self.max_age = timedelta(seconds=max_age_seconds)
        self.update_age = timedelta(seconds=update_age_seconds)

    # ----- session tokens -----

    def mint(
        self,
        subject: uuid.UUID,
        role: Role,
        now: datetime | None = None,
    ) -> tuple[str, SessionClaims]:
        issued_at = (now or datetime.now(timezone.utc)).replace(microsecond=0)
        claims = SessionClaims(
            subject=subject,
            role=role,
            issued_at=issued_at,
            expires_at=issued_at + self.max_age,
        )
        payload = {
            "sub": str(subject),
            "role": role.value,
            "iat": int(claims.issued_at.timestamp()),
            "exp": int(claims.expires_at.timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm), claims

    def decode(self, token: str | None) -> SessionClaims | None:
        """
        Verify and decode a session token.

        Returns None ("no session") when the token is missing, has a bad
        signature, is expired, or carries malformed claims.
        """
        if not token:
            return None

        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError:
            return None

        try:
            return SessionClaims(
                subject=uuid.UUID(payload["sub"]),
                role=Role(payload["role"]),
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError):
            return None

    def needs_refresh(self, claims: SessionClaims, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now - claims.issued_at >= self.update_age

    def refresh(
        self,
        claims: SessionClaims,
        now: datetime | None = None,
    ) -> tuple[str, SessionClaims]:
        return self.mint(claims.subject, claims.role, now=now)

    # ----- OAuth state -----

    def mint_oauth_state(self, provider: str) -> tuple[str, str]:
        """
        Signed, short-lived CSRF state for an OAuth round trip.

        Returns (state, nonce). The nonce is also handed to the browser
        in a cookie; the callback accepts the state only from the
        browser holding that cookie.
        """
        now = datetime.now(timezone.utc)
        nonce = secrets.token_urlsafe(16)
        payload: dict[str, Any] = {
            "purpose": OAUTH_STATE_PURPOSE,
            "provider": provider,
            "nonce": nonce,
            "iat": int(now.timestamp()),
            "exp": int((now + OAUTH_STATE_TTL).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm), nonce

    def verify_oauth_state(self, state: str | None, provider: str, nonce: str | None) -> bool:
        if not state or not nonce:
            return False
        try:
            payload = jwt.decode(state, self._secret, algorithms=[self._algorithm])
        except JWTError:
            return False
        if payload.get("purpose") != OAUTH_STATE_PURPOSE or payload.get("provider") != provider:
            return False
        signed_nonce = payload.get("nonce")
        if not isinstance(signed_nonce, str):
            return False
        return secrets.compare_digest(signed_nonce, nonce)


@lru_cache
def get_token_issuer() -> SessionTokenIssuer:
    settings = get_settings()
    return SessionTokenIssuer(
        secret=settings.SESSION_SECRET,
        algorithm=settings.SESSION_ALG,
        max_age_seconds=settings.SESSION_MAX_AGE_SECONDS,
        update_age_seconds=settings.SESSION_UPDATE_AGE_SECONDS,
    )
