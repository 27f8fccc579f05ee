"""Tests for session token minting, decoding and refresh."""

import uuid
from datetime import datetime, timedelta, timezone

from jose import jwt

from goodie.core.tokens import SessionTokenIssuer
from goodie.models.user import Role

SECRET = "unit-test-secret"


def make_issuer(**kwargs) -> SessionTokenIssuer:
    return SessionTokenIssuer(
        secret=SECRET,
        max_age_seconds=kwargs.get("max_age_seconds", 3600),
        update_age_seconds=kwargs.get("update_age_seconds", 600),
    )


class TestMintAndDecode:
    def test_decode_returns_minted_claims(self):
        issuer = make_issuer()
        user_id = uuid.uuid4()

        token, minted = issuer.mint(user_id, Role.ADMIN)
        claims = issuer.decode(token)

        assert claims == minted
        assert claims.subject == user_id
        assert claims.role is Role.ADMIN
        assert claims.is_admin is True

    def test_payload_carries_subject_and_role(self):
        user_id = uuid.uuid4()
        token, _ = make_issuer().mint(user_id, Role.STANDARD)

        payload = jwt.decode(token, SECRET, algorithms=["HS256"])

        assert payload["sub"] == str(user_id)
        assert payload["role"] == "standard"
        assert payload["exp"] - payload["iat"] == 3600

    def test_missing_token_is_no_session(self):
        assert make_issuer().decode(None) is None
        assert make_issuer().decode("") is None

    def test_garbage_token_is_no_session(self):
        assert make_issuer().decode("not.a.jwt") is None

    def test_token_signed_with_another_secret_is_rejected(self):
        token, _ = SessionTokenIssuer(secret="other-secret").mint(uuid.uuid4(), Role.ADMIN)

        assert make_issuer().decode(token) is None

    def test_expired_token_is_rejected(self):
        issuer = make_issuer()
        long_ago = datetime.now(timezone.utc) - timedelta(hours=2)
        token, _ = issuer.mint(uuid.uuid4(), Role.STANDARD, now=long_ago)

        assert issuer.decode(token) is None

    def test_unknown_role_claim_is_rejected(self):
        now = int(datetime.now(timezone.utc).timestamp())
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "role": "superuser", "iat": now, "exp": now + 60},
            SECRET,
            algorithm="HS256",
        )

        assert make_issuer().decode(token) is None

    def test_malformed_subject_is_rejected(self):
        now = int(datetime.now(timezone.utc).timestamp())
        token = jwt.encode(
            {"sub": "not-a-uuid", "role": "admin", "iat": now, "exp": now + 60},
            SECRET,
            algorithm="HS256",
        )

        assert make_issuer().decode(token) is None


class TestRefresh:
    def test_fresh_token_does_not_need_refresh(self):
        issuer = make_issuer()
        _, claims = issuer.mint(uuid.uuid4(), Role.STANDARD)

        assert issuer.needs_refresh(claims) is False

    def test_token_older_than_update_age_needs_refresh(self):
        issuer = make_issuer()
        issued = datetime.now(timezone.utc) - timedelta(minutes=11)
        _, claims = issuer.mint(uuid.uuid4(), Role.STANDARD, now=issued)

        assert issuer.needs_refresh(claims) is True

    def test_refresh_keeps_identity_and_extends_expiry(self):
        issuer = make_issuer()
        issued = datetime.now(timezone.utc) - timedelta(minutes=30)
        _, claims = issuer.mint(uuid.uuid4(), Role.ADMIN, now=issued)

        token, refreshed = issuer.refresh(claims)

        assert refreshed.subject == claims.subject
        assert refreshed.role is Role.ADMIN
        assert refreshed.expires_at > claims.expires_at
        assert issuer.decode(token) == refreshed


class TestOAuthState:
    def test_state_round_trip(self):
        issuer = make_issuer()
        state, nonce = issuer.mint_oauth_state("google")

        assert issuer.verify_oauth_state(state, "google", nonce) is True

    def test_state_is_bound_to_provider(self):
        issuer = make_issuer()
        state, nonce = issuer.mint_oauth_state("google")

        assert issuer.verify_oauth_state(state, "github", nonce) is False

    def test_state_is_bound_to_its_nonce(self):
        issuer = make_issuer()
        state, _ = issuer.mint_oauth_state("google")
        _, other_nonce = issuer.mint_oauth_state("google")

        assert issuer.verify_oauth_state(state, "google", other_nonce) is False
        assert issuer.verify_oauth_state(state, "google", None) is False

    def test_session_token_is_not_a_valid_state(self):
        issuer = make_issuer()
        token, _ = issuer.mint(uuid.uuid4(), Role.STANDARD)

        assert issuer.verify_oauth_state(token, "google", "nonce") is False

    def test_missing_state_is_rejected(self):
        assert make_issuer().verify_oauth_state(None, "google", "nonce") is False
