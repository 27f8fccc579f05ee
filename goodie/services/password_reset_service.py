# goodie/services/password_reset_service.py
import hashlib
import logging
import secrets
from datetime import timedelta

from sqlmodel import Session

from goodie.core.email_client import EmailClient
from goodie.core.errors import InvalidOrExpiredTokenError
from goodie.core.security import PasswordHasher, check_password_policy
from goodie.core.time import utc_now
from goodie.repositories.user_repo import UserRepository
from goodie.schemas.auth import GENERIC_RESET_MESSAGE
from goodie.services.auth_service import normalize_email

logger = logging.getLogger(__name__)


def hash_reset_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


class PasswordResetService:
    """
    Single-use, time-limited password reset.

    Only the SHA-256 digest of a token is stored on the user, together
    with its absolute expiry. Issuing a new token overwrites the old one;
    a successful reset clears both fields.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        hasher: PasswordHasher,
        email_client: EmailClient,
        frontend_base_url: str,
        token_ttl: timedelta = timedelta(hours=1),
        password_min_length: int = 6,
    ):
        self.user_repo = user_repo
        self.hasher = hasher
        self.email_client = email_client
        self.frontend_base_url = frontend_base_url.rstrip("/")
        self.token_ttl = token_ttl
        self.password_min_length = password_min_length

    def reset_link(self, raw_token: str) -> str:
        return f"{self.frontend_base_url}/auth/reset-password/{raw_token}"

    def request_reset(self, session: Session, email: str) -> str:
        """
        Issue a reset token and email it.

        Always returns the same generic message, whether or not the
        email belongs to an account and whether or not the email was
        actually delivered.
        """
        user = self.user_repo.get_by_email(session, normalize_email(email))
        if user is None:
            logger.info("Password reset requested for an unknown email")
            return GENERIC_RESET_MESSAGE

        raw_token = secrets.token_urlsafe(32)
        user.password_reset_token = hash_reset_token(raw_token)
        user.password_reset_token_expiry = utc_now() + self.token_ttl
        self.user_repo.update(session, user)

        try:
            self.email_client.send_password_reset_email(user.email, self.reset_link(raw_token))
            logger.info("Password reset email sent for user %s", user.id)
        except Exception:
            # The token is stored; the caller must not learn anything here
            logger.exception("Failed to send password reset email for user %s", user.id)

        return GENERIC_RESET_MESSAGE

    def consume_reset(self, session: Session, token: str, new_password: str) -> None:
        """
        Set a new password using a live reset token.

        Raises:
            ValidationError(400): new password violates the policy.
            InvalidOrExpiredTokenError(400): no user holds this token, or it expired.
        """
        check_password_policy(new_password, self.password_min_length)

        user = self.user_repo.get_by_live_reset_token(
            session, hash_reset_token(token), utc_now()
        )
        if user is None:
            raise InvalidOrExpiredTokenError()

        user.password_hash = self.hasher.hash(new_password)
        user.password_reset_token = None
        user.password_reset_token_expiry = None
        user.updated_at = utc_now()
        self.user_repo.update(session, user)

        logger.info("Password reset completed for user %s", user.id)
