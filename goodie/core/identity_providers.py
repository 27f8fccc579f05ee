# goodie/core/identity_providers.py
"""
Federated identity providers.

Each provider implements the same small contract:

  - authorization_url(state): where to send the browser
  - verify(code):             exchange the callback code and return a
                              FederatedAssertion (verified identity + tokens)
  - extract_profile(raw):     map the provider's userinfo payload onto
                              FederatedProfile

Sign-in logic only ever sees FederatedAssertion, so adding a provider
means adding a subclass and registering it in get_identity_providers().
"""
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any
from urllib.parse import urlencode

import httpx

from goodie.core.config import get_settings

HTTP_TIMEOUT_SECONDS = 10.0


class IdentityProviderError(Exception):
    """The provider rejected the code or returned an unusable profile."""


@dataclass(frozen=True)
class FederatedProfile:
    email: str
    name: str | None = None
    image: str | None = None
    email_verified: bool = False


@dataclass(frozen=True)
class ProviderTokens:
    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: int | None = None
    token_type: str | None = None
    scope: str | None = None
    id_token: str | None = None


@dataclass(frozen=True)
class FederatedAssertion:
    provider: str
    provider_account_id: str
    profile: FederatedProfile
    tokens: ProviderTokens = field(default_factory=ProviderTokens)


class IdentityProvider(ABC):
    name: str

    @abstractmethod
    def authorization_url(self, state: str) -> str:
        ...

    @abstractmethod
    async def verify(self, code: str) -> FederatedAssertion:
        ...

    @abstractmethod
    def extract_profile(self, raw: dict[str, Any]) -> tuple[str, FederatedProfile]:
        """Return (provider_account_id, profile) from a userinfo payload."""


class GoogleIdentityProvider(IdentityProvider):
    """Google OAuth 2.0 authorization-code flow."""

    name = "google"

    AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"
    SCOPES = ("openid", "email", "profile")

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": " ".join(self.SCOPES),
            "response_type": "code",
            "state": state,
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{self.AUTHORIZE_URL}?{urlencode(params)}"

    async def verify(self, code: str) -> FederatedAssertion:
        try:
            async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS) as client:
                token_response = await client.post(
                    self.TOKEN_URL,
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                        "grant_type": "authorization_code",
                        "redirect_uri": self.redirect_uri,
                    },
                )
                token_response.raise_for_status()
                token_data = token_response.json()

                userinfo_response = await client.get(
                    self.USERINFO_URL,
                    headers={"Authorization": f"Bearer {token_data['access_token']}"},
                )
                userinfo_response.raise_for_status()
                raw_profile = userinfo_response.json()
        except (httpx.HTTPError, KeyError, ValueError) as e:
            raise IdentityProviderError(f"Google token exchange failed: {e}") from e

        account_id, profile = self.extract_profile(raw_profile)

        expires_in = token_data.get("expires_in")
        tokens = ProviderTokens(
            access_token=token_data.get("access_token"),
            refresh_token=token_data.get("refresh_token"),
            expires_at=int(time.time()) + int(expires_in) if expires_in else None,
            token_type=token_data.get("token_type"),
            scope=token_data.get("scope"),
            id_token=token_data.get("id_token"),
        )
        return FederatedAssertion(
            provider=self.name,
            provider_account_id=account_id,
            profile=profile,
            tokens=tokens,
        )

    def extract_profile(self, raw: dict[str, Any]) -> tuple[str, FederatedProfile]:
        # v3 userinfo uses "sub"/"email_verified", v2 uses "id"/"verified_email"
        account_id = raw.get("sub") or raw.get("id")
        email = raw.get("email")
        if not account_id or not email:
            raise IdentityProviderError("Google profile is missing id or email")

        profile = FederatedProfile(
            email=email,
            name=raw.get("name"),
            image=raw.get("picture"),
            email_verified=bool(raw.get("email_verified", raw.get("verified_email", False))),
        )
        return str(account_id), profile


@lru_cache
def get_identity_providers() -> dict[str, IdentityProvider]:
    """
    Build the configured providers once per process.

    A provider without complete configuration is simply not offered.
    """
    settings = get_settings()
    providers: dict[str, IdentityProvider] = {}

    if settings.GOOGLE_CLIENT_ID and settings.GOOGLE_CLIENT_SECRET and settings.GOOGLE_REDIRECT_URI:
        providers["google"] = GoogleIdentityProvider(
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET,
            redirect_uri=settings.GOOGLE_REDIRECT_URI,
        )

    return providers
