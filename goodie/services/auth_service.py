# goodie/services/auth_service.py
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from goodie.core.errors import ConflictError, InternalError, InvalidCredentialsError
from goodie.core.identity_providers import FederatedAssertion
from goodie.core.security import PasswordHasher, check_password_policy
from goodie.core.time import utc_now
from goodie.core.tokens import SessionClaims, SessionTokenIssuer
from goodie.models.user import LinkedIdentity, User
from goodie.repositories.user_repo import LinkedIdentityRepository, UserRepository
from goodie.schemas.auth import Identity, RegisterRequest

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def default_name_from_email(email: str) -> str:
    """
    Derive a default display name from email when none was given.
    """
    if "@" in email:
        return email.split("@", 1)[0]
    return email


class AuthService:
    """
    Authentication core.

    Responsibilities:
      - credential registration
      - credential sign-in (generic failure, no enumeration)
      - federated sign-in: create or refresh the user, upsert the
        provider link, keep the stored role
      - minting the session token for a signed-in identity
    """

    def __init__(
        self,
        user_repo: UserRepository,
        identity_repo: LinkedIdentityRepository,
        hasher: PasswordHasher,
        issuer: SessionTokenIssuer,
        password_min_length: int = 6,
    ):
        self.user_repo = user_repo
        self.identity_repo = identity_repo
        self.hasher = hasher
        self.issuer = issuer
        self.password_min_length = password_min_length

    # ----- Identity / tokens -----

    @staticmethod
    def identity_for(user: User) -> Identity:
        return Identity(
            id=user.id,
            name=user.name,
            email=user.email,
            image=user.image,
            role=user.role,
        )

    def issue_session(self, identity: Identity) -> tuple[str, SessionClaims]:
        return self.issuer.mint(identity.id, identity.role)

    # ----- Registration -----

    def register(self, session: Session, payload: RegisterRequest) -> User:
        """
        Create a credential account.

        Raises:
            ValidationError(400): password too short / too long.
            ConflictError(409): email already registered.
        """
        check_password_policy(payload.password, self.password_min_length)
        email = normalize_email(payload.email)

        if self.user_repo.get_by_email(session, email) is not None:
            raise ConflictError("User with this email already exists.")

        user = User(
            email=email,
            name=payload.name or default_name_from_email(email),
            password_hash=self.hasher.hash(payload.password),
        )
        try:
            user = self.user_repo.create(session, user)
        except IntegrityError:
            # Lost a race against a concurrent registration for this email
            session.rollback()
            raise ConflictError("User with this email already exists.")

        logger.info("User registered: %s", user.id)
        return user

    # ----- Credential path -----

    def authenticate(self, session: Session, email: str, password: str) -> Identity:
        """
        Verify email + password.

        Unknown email, federated-only account and wrong password all
        raise the same InvalidCredentialsError.
        """
        user = self.user_repo.get_by_email(session, normalize_email(email))

        if user is None or not user.password_hash:
            raise InvalidCredentialsError()

        if not self.hasher.compare(password, user.password_hash):
            raise InvalidCredentialsError()

        logger.info("Credential sign-in for user %s", user.id)
        return self.identity_for(user)

    # ----- Federated path -----

    def sign_in_federated(self, session: Session, assertion: FederatedAssertion) -> Identity:
        """
        Sign in with an identity already verified by a provider.

          1. Look up the user by email.
          2. Absent  -> create with the default role, link the provider account.
          3. Present -> refresh profile fields, upsert the link; role untouched.

        Any store failure fails the sign-in (InternalError); nothing is
        half-applied from the caller's point of view. A provider account
        already linked to a different user is refused before the user
        row is created or touched.
        """
        try:
            self._check_link_owner(session, assertion)
            user = self._find_or_create_federated_user(session, assertion)
            self._upsert_link(session, user, assertion)
        except SQLAlchemyError:
            session.rollback()
            logger.exception(
                "Federated sign-in failed while persisting %s account",
                assertion.provider,
            )
            raise InternalError()

        logger.info("Federated sign-in (%s) for user %s", assertion.provider, user.id)
        return self.identity_for(user)

    def _refuse_foreign_link(self, assertion: FederatedAssertion) -> None:
        logger.warning(
            "%s account is already linked to another user; refusing sign-in",
            assertion.provider,
        )
        raise InvalidCredentialsError()

    def _check_link_owner(self, session: Session, assertion: FederatedAssertion) -> None:
        link = self.identity_repo.get_by_provider_account(
            session, assertion.provider, assertion.provider_account_id
        )
        if link is None:
            return

        owner = self.user_repo.get_by_email(session, normalize_email(assertion.profile.email))
        if owner is None or owner.id != link.user_id:
            self._refuse_foreign_link(assertion)

    def _find_or_create_federated_user(self, session: Session, assertion: FederatedAssertion) -> User:
        profile = assertion.profile
        email = normalize_email(profile.email)
        now = utc_now()

        user = self.user_repo.get_by_email(session, email)
        if user is None:
            user = User(
                email=email,
                name=profile.name or default_name_from_email(email),
                image=profile.image,
                email_verified=now if profile.email_verified else None,
            )
            try:
                return self.user_repo.create(session, user)
            except IntegrityError:
                session.rollback()
                user = self.user_repo.get_by_email(session, email)
                if user is None:
                    raise

        if profile.name:
            user.name = profile.name
        if profile.image:
            user.image = profile.image
        if user.email_verified is None and profile.email_verified:
            user.email_verified = now
        user.updated_at = now
        return self.user_repo.update(session, user)

    def _upsert_link(self, session: Session, user: User, assertion: FederatedAssertion) -> None:
        link = self.identity_repo.get_by_provider_account(
            session, assertion.provider, assertion.provider_account_id
        )

        if link is None:
            tokens = assertion.tokens
            link = LinkedIdentity(
                user_id=user.id,
                provider=assertion.provider,
                provider_account_id=assertion.provider_account_id,
                access_token=tokens.access_token,
                refresh_token=tokens.refresh_token,
                expires_at=tokens.expires_at,
                token_type=tokens.token_type,
                scope=tokens.scope,
                id_token=tokens.id_token,
            )
            try:
                self.identity_repo.create(session, link)
                return
            except IntegrityError:
                # A concurrent sign-in linked the same account first
                session.rollback()
                link = self.identity_repo.get_by_provider_account(
                    session, assertion.provider, assertion.provider_account_id
                )
                if link is None:
                    raise

        # Only reachable when a concurrent sign-in linked the account
        # between _check_link_owner and here
        if link.user_id != user.id:
            self._refuse_foreign_link(assertion)

        tokens = assertion.tokens
        link.access_token = tokens.access_token or link.access_token
        link.refresh_token = tokens.refresh_token or link.refresh_token
        link.expires_at = tokens.expires_at or link.expires_at
        link.token_type = tokens.token_type or link.token_type
        link.scope = tokens.scope or link.scope
        link.id_token = tokens.id_token or link.id_token
        self.identity_repo.update(session, link)
