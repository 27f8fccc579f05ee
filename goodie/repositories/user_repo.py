# goodie/repositories/user_repo.py
import uuid
from datetime import datetime

from sqlmodel import Session, select

from goodie.models.user import LinkedIdentity, User


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def get_by_email(self, session: Session, email: str) -> User | None:
        """Return a User by unique email, or None if not found."""
        stmt = select(User).where(User.email == email)
        return session.exec(stmt).first()

    def get_by_live_reset_token(
        self,
        session: Session,
        token_digest: str,
        now: datetime,
    ) -> User | None:
        """
        Return the user holding this reset token digest whose expiry
        has not passed (expiry >= now), or None.
        """
        stmt = select(User).where(
            User.password_reset_token == token_digest,
            User.password_reset_token_expiry >= now,
        )
        return session.exec(stmt).first()

    def create(self, session: Session, user: User) -> User:
        """Insert a new User and return the persisted row."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user


class LinkedIdentityRepository:
    """Data access layer for federated account links."""

    def get_by_provider_account(
        self,
        session: Session,
        provider: str,
        provider_account_id: str,
    ) -> LinkedIdentity | None:
        stmt = select(LinkedIdentity).where(
            LinkedIdentity.provider == provider,
            LinkedIdentity.provider_account_id == provider_account_id,
        )
        return session.exec(stmt).first()

    def create(self, session: Session, identity: LinkedIdentity) -> LinkedIdentity:
        session.add(identity)
        session.commit()
        session.refresh(identity)
        return identity

    def update(self, session: Session, identity: LinkedIdentity) -> LinkedIdentity:
        session.add(identity)
        session.commit()
        session.refresh(identity)
        return identity
