"""Shared fixtures: in-memory SQLite, app with injected fakes, users and tokens."""

import os

# Settings are read once and cached; set them before importing goodie.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SESSION_SECRET"] = "test-session-secret-not-for-production"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["FRONTEND_URL"] = "http://frontend.test"
os.environ.pop("GOOGLE_CLIENT_ID", None)

from collections.abc import Callable
from unittest.mock import Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from goodie.core.email_client import EmailClient, get_email_client
from goodie.core.identity_providers import get_identity_providers
from goodie.core.image_host import get_image_host
from goodie.core.security import PasswordHasher
from goodie.core.tokens import SessionTokenIssuer, get_token_issuer
from goodie.database import create_db_and_tables, dispose_engine, get_session, init_engine
from goodie.main import create_app
from goodie.models.product import Product
from goodie.models.user import Role, User
from tests.fakes import FakeIdentityProvider, FakeImageHost


@pytest.fixture
def engine():
    engine = init_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    create_db_and_tables()
    yield engine
    dispose_engine()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def issuer() -> SessionTokenIssuer:
    return get_token_issuer()


@pytest.fixture
def image_host() -> FakeImageHost:
    return FakeImageHost()


@pytest.fixture
def email_client() -> Mock:
    return Mock(spec=EmailClient)


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def app(session, image_host, email_client, identity_provider) -> FastAPI:
    app = create_app(use_lifespan=False)
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_image_host] = lambda: image_host
    app.dependency_overrides[get_email_client] = lambda: email_client
    app.dependency_overrides[get_identity_providers] = lambda: {"google": identity_provider}
    return app


@pytest.fixture
def client(app) -> TestClient:
    # Redirects are asserted on, never followed
    with TestClient(app, follow_redirects=False) as client:
        yield client


@pytest.fixture
def create_user(session, hasher) -> Callable[..., User]:
    def _create(
        email: str = "shopper@example.com",
        password: str | None = "secret123",
        role: Role = Role.STANDARD,
        name: str | None = "Shopper",
    ) -> User:
        user = User(
            email=email,
            name=name,
            role=role,
            password_hash=hasher.hash(password) if password else None,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _create


@pytest.fixture
def auth_headers(issuer) -> Callable[[User], dict[str, str]]:
    def _headers(user: User) -> dict[str, str]:
        token, _ = issuer.mint(user.id, user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def standard_user(create_user) -> User:
    return create_user()


@pytest.fixture
def admin_user(create_user) -> User:
    return create_user(email="admin@example.com", role=Role.ADMIN, name="Admin")


@pytest.fixture
def create_product(session) -> Callable[..., Product]:
    def _create(name: str = "Lemon Tart", price: float = 12.5, **kwargs) -> Product:
        product = Product(
            name=name,
            price=price,
            image_url=f"https://images.test/products/{name}.png",
            image_public_id=f"products/{name}.png",
            **kwargs,
        )
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _create
