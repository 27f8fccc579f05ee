# goodie/services/user_service.py
import logging

from sqlmodel import Session

from goodie.core.errors import NotFoundError
from goodie.core.time import utc_now
from goodie.models.user import Role, User
from goodie.repositories.user_repo import UserRepository
from goodie.schemas.user import UserUpdate
from goodie.services.auth_service import normalize_email

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for User profiles.

    Responsibilities:
      - self-service profile edits (name only)
      - out-of-band role assignment (promote_admin.py); no HTTP
        endpoint changes a role
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """
        Partial update for profile edits.
        Currently, only `name` is editable.
        """
        if payload.name is not None:
            current_user.name = payload.name
            current_user.updated_at = utc_now()

        return self.repo.update(session, current_user)

    def set_role_by_email(self, session: Session, email: str, role: Role) -> User:
        """
        Change a user's role.

        Sessions already issued keep their old role until they are
        reissued (next sign-in).
        """
        user = self.repo.get_by_email(session, normalize_email(email))
        if not user:
            raise NotFoundError("User not found")

        user.role = role
        user.updated_at = utc_now()
        user = self.repo.update(session, user)
        logger.info("Role of user %s set to %s", user.id, role.value)
        return user
