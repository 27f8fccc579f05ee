# goodie/core/middleware.py
import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from goodie.core.auth import extract_token, set_session_cookie
from goodie.core.config import Settings
from goodie.core.route_guard import RouteGuard
from goodie.core.tokens import SessionTokenIssuer

logger = logging.getLogger(__name__)


class AuthSessionMiddleware(BaseHTTPMiddleware):
    """
    Per-request session handling.

      1. Decode the session token (header or cookie) once and store the
         result on request.state.session (None for guests).
      2. Apply the route guard; a denied request is redirected before
         any handler runs.
      3. Slide the session: a cookie token older than the update age is
         re-signed with a fresh expiry on the way out.
    """

    def __init__(
        self,
        app: ASGIApp,
        issuer: SessionTokenIssuer,
        guard: RouteGuard,
        settings: Settings,
    ):
        super().__init__(app)
        self.issuer = issuer
        self.guard = guard
        self.settings = settings

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        token, from_cookie = extract_token(request, self.settings)
        session = self.issuer.decode(token)
        request.state.session = session

        path = request.url.path
        decision = self.guard.evaluate(path, session)
        if not decision.allowed:
            logger.info("Route guard denied %s %s", request.method, path)
            return RedirectResponse(decision.redirect_url, status_code=307)

        response = await call_next(request)

        if session is not None and from_cookie and self.issuer.needs_refresh(session):
            if not self._sets_session_cookie(response):
                refreshed, _ = self.issuer.refresh(session)
                set_session_cookie(response, refreshed, self.settings)

        return response

    def _sets_session_cookie(self, response: Response) -> bool:
        # login/logout already wrote the cookie; don't overwrite it
        prefix = f"{self.settings.SESSION_COOKIE_NAME}="
        return any(
            value.startswith(prefix)
            for value in response.headers.getlist("set-cookie")
        )
