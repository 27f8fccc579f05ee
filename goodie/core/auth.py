# goodie/core/auth.py
from fastapi import Depends, Request, Response
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from goodie.core.config import Settings, get_settings
from goodie.core.errors import UnauthenticatedError, UnauthorizedError
from goodie.core.tokens import OAUTH_STATE_TTL, SessionClaims, get_token_issuer
from goodie.database import get_session
from goodie.models.user import User

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so we can fall back to the session cookie, or to guest mode.
bearer_scheme = HTTPBearer(auto_error=False)


def extract_token(request: Request, settings: Settings) -> tuple[str | None, bool]:
    """
    Find the raw session token on a request.

    The Authorization header wins over the cookie.

    Returns:
        (token, from_cookie)
    """
    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None, False

    cookie = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if cookie:
        return cookie, True

    return None, False


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    """
    Set the session token as an HttpOnly cookie.

    max_age matches the token's own expiry window.
    """
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")


def set_oauth_state_cookie(response: Response, nonce: str, settings: Settings) -> None:
    """Bind an OAuth round trip to the browser that started it."""
    response.set_cookie(
        key=settings.OAUTH_STATE_COOKIE_NAME,
        value=nonce,
        max_age=int(OAUTH_STATE_TTL.total_seconds()),
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def clear_oauth_state_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(key=settings.OAUTH_STATE_COOKIE_NAME, path="/")


def get_current_session(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> SessionClaims | None:
    """
    Resolve the decoded session for this request.

    AuthSessionMiddleware normally decodes the token once and stores it on
    request.state; when it didn't run (e.g. a router mounted on its own),
    the token is decoded here.

    Returns:
        SessionClaims, or None for guests (missing/invalid/expired token).
    """
    if hasattr(request.state, "session"):
        return request.state.session

    if credentials is not None:
        return get_token_issuer().decode(credentials.credentials)

    token, _ = extract_token(request, get_settings())
    return get_token_issuer().decode(token)


def require_session(session: SessionClaims | None = Depends(get_current_session)) -> SessionClaims:
    """
    Enforce authentication.

    Raises:
        UnauthenticatedError(401): for guests.
    """
    if session is None:
        raise UnauthenticatedError()
    return session


def require_admin(session: SessionClaims = Depends(require_session)) -> SessionClaims:
    """
    Enforce the admin role embedded in the token.

    Raises:
        UnauthorizedError(403): if role is not admin.
    """
    if not session.is_admin:
        raise UnauthorizedError()
    return session


def get_current_user(
    session: SessionClaims = Depends(require_session),
    db: Session = Depends(get_session),
) -> User:
    """
    Load the stored user behind the session.

    A token whose subject no longer exists is treated as no session.
    """
    user = db.get(User, session.subject)
    if user is None:
        raise UnauthenticatedError()
    return user
