"""Endpoint tests for credential registration, sign-in and sessions."""

from goodie.models.user import Role

API = "/api/v1"


def register(client, email="new@example.com", password="secret123", **extra):
    return client.post(
        f"{API}/auth/register",
        json={"email": email, "password": password, **extra},
    )


def login(client, email="new@example.com", password="secret123"):
    return client.post(f"{API}/auth/login", json={"email": email, "password": password})


class TestRegister:
    def test_register_creates_standard_user(self, client):
        response = register(client, name="Ada")

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "User created successfully"
        assert data["user"]["email"] == "new@example.com"
        assert data["user"]["name"] == "Ada"
        assert data["user"]["role"] == "standard"
        assert "password_hash" not in data["user"]

    def test_default_name_comes_from_email(self, client):
        response = register(client, email="baker@example.com")

        assert response.json()["user"]["name"] == "baker"

    def test_email_is_normalized(self, client):
        response = register(client, email="Mixed@Example.COM")

        assert response.status_code == 201
        assert response.json()["user"]["email"] == "mixed@example.com"

    def test_duplicate_email_conflicts(self, client):
        register(client)

        response = register(client, email="NEW@example.com")

        assert response.status_code == 409

    def test_short_password_is_rejected(self, client):
        response = register(client, password="abc")

        assert response.status_code == 400
        assert "at least 6" in response.json()["detail"]

    def test_client_cannot_choose_a_role(self, client):
        response = register(client, role="admin")

        assert response.status_code == 422

    def test_password_is_stored_hashed(self, client, session, hasher):
        from goodie.repositories.user_repo import UserRepository

        register(client)
        user = UserRepository().get_by_email(session, "new@example.com")

        assert user.password_hash != "secret123"
        assert hasher.compare("secret123", user.password_hash)


class TestLogin:
    def test_login_returns_identity_token_and_cookie(self, client, issuer):
        user_id = register(client).json()["user"]["id"]

        response = login(client)

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["id"] == user_id
        assert data["user"]["role"] == "standard"
        assert data["token_type"] == "bearer"
        assert response.cookies.get("goodie_session") == data["access_token"]
        assert "httponly" in response.headers["set-cookie"].lower()

        claims = issuer.decode(data["access_token"])
        assert str(claims.subject) == user_id
        assert claims.role is Role.STANDARD

    def test_admin_role_is_embedded_in_token(self, client, create_user, issuer):
        create_user(email="boss@example.com", password="secret123", role=Role.ADMIN)

        response = login(client, email="boss@example.com")

        assert issuer.decode(response.json()["access_token"]).role is Role.ADMIN

    def test_wrong_password_and_unknown_email_look_the_same(self, client):
        register(client)

        wrong_password = login(client, password="nope-nope")
        unknown_email = login(client, email="ghost@example.com")

        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json() == {"detail": "Invalid email or password"}

    def test_malformed_email_gets_the_generic_failure(self, client):
        response = login(client, email="not-an-email")

        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid email or password"}

    def test_federated_only_account_cannot_use_password(self, client, create_user):
        create_user(email="fed@example.com", password=None)

        response = login(client, email="fed@example.com")

        assert response.status_code == 401


class TestSession:
    def test_cookie_session_after_login(self, client):
        register(client)
        login(client)

        response = client.get(f"{API}/auth/session")

        assert response.status_code == 200
        assert response.json()["role"] == "standard"

    def test_guest_has_no_session(self, client):
        response = client.get(f"{API}/auth/session")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_header_wins_over_cookie(self, client, create_user, auth_headers):
        register(client)
        login(client)
        admin = create_user(email="boss@example.com", role=Role.ADMIN)

        response = client.get(f"{API}/auth/session", headers=auth_headers(admin))

        assert response.json()["subject"] == str(admin.id)

    def test_logout_clears_cookie(self, client):
        register(client)
        login(client)

        response = client.post(f"{API}/auth/logout")

        assert response.status_code == 200
        assert 'goodie_session=""' in response.headers["set-cookie"]
        assert client.get(f"{API}/auth/session").status_code == 401


class TestRegisterResetSignInScenario:
    def test_full_credential_lifecycle(self, client, email_client, issuer):
        created = register(client, email="scenario@example.com", password="first-pass")
        assert created.status_code == 201
        user_id = created.json()["user"]["id"]

        duplicate = register(client, email="scenario@example.com", password="first-pass")
        assert duplicate.status_code == 409

        forgot = client.post(f"{API}/auth/forgot-password", json={"email": "scenario@example.com"})
        assert forgot.status_code == 200

        wrong = client.post(
            f"{API}/auth/reset-password",
            json={"token": "not-the-token", "password": "second-pass"},
        )
        assert wrong.status_code == 400

        _, reset_link = email_client.send_password_reset_email.call_args.args
        token = reset_link.rsplit("/", 1)[1]
        reset = client.post(
            f"{API}/auth/reset-password",
            json={"token": token, "password": "second-pass"},
        )
        assert reset.status_code == 200

        assert login(client, email="scenario@example.com", password="first-pass").status_code == 401

        signed_in = login(client, email="scenario@example.com", password="second-pass")
        assert signed_in.status_code == 200
        claims = issuer.decode(signed_in.json()["access_token"])
        assert str(claims.subject) == user_id
        assert claims.role is Role.STANDARD
