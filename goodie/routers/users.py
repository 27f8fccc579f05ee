# goodie/routers/users.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from goodie.core.auth import get_current_user
from goodie.database import get_session
from goodie.models.user import User
from goodie.repositories.user_repo import UserRepository
from goodie.schemas.user import UserRead, UserUpdate
from goodie.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo)


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(get_current_user)):
    """
    Return the signed-in user's profile.

    Auth:
      - Requires a valid session (cookie or Bearer token).
    """
    return current_user


@router.patch("/me", response_model=UserRead)
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    Update the signed-in user's profile (partial update).

    Currently, only `name` is editable. The role is never editable here.
    """
    return service.update_me(session, current_user, payload)
