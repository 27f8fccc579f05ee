# goodie/routers/auth.py
import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from goodie.core.auth import (
    clear_oauth_state_cookie,
    clear_session_cookie,
    require_session,
    set_oauth_state_cookie,
    set_session_cookie,
)
from goodie.core.config import Settings, get_settings
from goodie.core.email_client import EmailClient, get_email_client
from goodie.core.errors import AppError, NotFoundError
from goodie.core.identity_providers import (
    IdentityProvider,
    IdentityProviderError,
    get_identity_providers,
)
from goodie.core.security import PasswordHasher, get_password_hasher
from goodie.core.tokens import SessionClaims, SessionTokenIssuer, get_token_issuer
from goodie.database import get_session
from goodie.repositories.user_repo import LinkedIdentityRepository, UserRepository
from goodie.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    SessionRead,
)
from goodie.schemas.user import UserRead
from goodie.services.auth_service import AuthService
from goodie.services.password_reset_service import PasswordResetService

router = APIRouter(prefix="/auth", tags=["Auth"])

logger = logging.getLogger(__name__)

user_repo = UserRepository()
identity_repo = LinkedIdentityRepository()

OAUTH_ERROR_CODE = "oauth-signin"


# -------- Service wiring --------
#
# Services hold no per-request state, but they depend on process
# resources (hasher, token issuer, email client) that tests override,
# so they are assembled per request from those dependencies.


def get_auth_service(
    settings: Settings = Depends(get_settings),
    hasher: PasswordHasher = Depends(get_password_hasher),
    issuer: SessionTokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(
        user_repo,
        identity_repo,
        hasher,
        issuer,
        password_min_length=settings.PASSWORD_MIN_LENGTH,
    )


def get_password_reset_service(
    settings: Settings = Depends(get_settings),
    hasher: PasswordHasher = Depends(get_password_hasher),
    email_client: EmailClient = Depends(get_email_client),
) -> PasswordResetService:
    return PasswordResetService(
        user_repo,
        hasher,
        email_client,
        frontend_base_url=settings.FRONTEND_URL,
        token_ttl=timedelta(minutes=settings.RESET_TOKEN_TTL_MINUTES),
        password_min_length=settings.PASSWORD_MIN_LENGTH,
    )


def _get_provider(
    provider: str,
    providers: dict[str, IdentityProvider] = Depends(get_identity_providers),
) -> IdentityProvider:
    identity_provider = providers.get(provider)
    if identity_provider is None:
        raise NotFoundError("Unknown sign-in provider")
    return identity_provider


# -------- Credentials --------


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: RegisterRequest,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
):
    """
    Create a credential account with the standard role.

    Errors:
      - 400 if the password is shorter than the minimum length
      - 409 if the email is already registered
    """
    user = service.register(session, payload)
    return RegisterResponse(
        message="User created successfully",
        user=UserRead.model_validate(user),
    )


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    response: Response,
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """
    Sign in with email + password.

    On success the session token is set as an HttpOnly cookie and also
    returned in the body for non-browser clients. Any failure is a
    generic 401.
    """
    identity = service.authenticate(session, payload.email, payload.password)
    token, claims = service.issue_session(identity)
    set_session_cookie(response, token, settings)

    return LoginResponse(
        user=identity,
        access_token=token,
        expires_at=claims.expires_at,
    )


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, settings: Settings = Depends(get_settings)):
    """
    Drop the session cookie.

    Tokens are stateless, so a copy held elsewhere stays valid until it
    expires.
    """
    clear_session_cookie(response, settings)
    return MessageResponse(message="Signed out")


@router.get("/session", response_model=SessionRead)
def read_session(claims: SessionClaims = Depends(require_session)):
    """Decoded claims of the current session (401 for guests)."""
    return SessionRead(
        subject=claims.subject,
        role=claims.role,
        issued_at=claims.issued_at,
        expires_at=claims.expires_at,
    )


# -------- Password reset --------


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    payload: ForgotPasswordRequest,
    session: Session = Depends(get_session),
    service: PasswordResetService = Depends(get_password_reset_service),
):
    """
    Request a reset link by email.

    The response is identical whether or not the email is registered.
    """
    return MessageResponse(message=service.request_reset(session, payload.email))


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    payload: ResetPasswordRequest,
    session: Session = Depends(get_session),
    service: PasswordResetService = Depends(get_password_reset_service),
):
    """
    Set a new password with a reset token.

    Errors:
      - 400 for a too-short password
      - 400 for an unknown, used or expired token
    """
    service.consume_reset(session, payload.token, payload.password)
    return MessageResponse(message="Password has been reset successfully.")


# -------- Federated sign-in --------


@router.get("/oauth/{provider}/authorize")
def oauth_authorize(
    identity_provider: IdentityProvider = Depends(_get_provider),
    issuer: SessionTokenIssuer = Depends(get_token_issuer),
    settings: Settings = Depends(get_settings),
):
    """
    Redirect the browser to the provider's consent screen.

    The state's nonce is also set as a short-lived HttpOnly cookie, so a
    state harvested by someone else cannot complete in this browser.
    """
    state, nonce = issuer.mint_oauth_state(identity_provider.name)
    response = RedirectResponse(
        identity_provider.authorization_url(state),
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )
    set_oauth_state_cookie(response, nonce, settings)
    return response


@router.get("/oauth/{provider}/callback")
async def oauth_callback(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    identity_provider: IdentityProvider = Depends(_get_provider),
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
    issuer: SessionTokenIssuer = Depends(get_token_issuer),
    settings: Settings = Depends(get_settings),
):
    """
    Provider callback.

    Success: session cookie set, redirect to the site.
    Any failure (denied consent, bad state, provider error, store
    failure): no cookie, redirect to the sign-in page with an error.
    The state cookie is dropped either way, so a state completes at
    most once per browser.
    """
    frontend = settings.FRONTEND_URL.rstrip("/")
    failure = RedirectResponse(
        f"{frontend}/auth/login?error={OAUTH_ERROR_CODE}",
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )
    clear_oauth_state_cookie(failure, settings)

    if error or not code:
        logger.info("%s sign-in cancelled or missing code", identity_provider.name)
        return failure

    nonce = request.cookies.get(settings.OAUTH_STATE_COOKIE_NAME)
    if not issuer.verify_oauth_state(state, identity_provider.name, nonce):
        logger.warning("%s sign-in rejected: invalid state", identity_provider.name)
        return failure

    try:
        assertion = await identity_provider.verify(code)
    except IdentityProviderError:
        logger.exception("%s sign-in rejected by provider", identity_provider.name)
        return failure

    # Blocking store work; keep it off the event loop
    try:
        identity = await run_in_threadpool(service.sign_in_federated, session, assertion)
    except AppError:
        return failure

    token, _ = service.issue_session(identity)
    success = RedirectResponse(f"{frontend}/", status_code=status.HTTP_307_TEMPORARY_REDIRECT)
    clear_oauth_state_cookie(success, settings)
    set_session_cookie(success, token, settings)
    return success
