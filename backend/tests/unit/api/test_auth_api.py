"""
Unit Tests for the auth endpoints
Tests for: register, login cookie, current user, logout, email verification, password reset
"""
import pytest

from conftest import DEFAULT_PASSWORD
from vital_registry.models.user import UserRole


def registration_body(**overrides):
    body = {
        "email": "ama.owusu@example.com",
        "password": "SecurePassword123!",
        "firstName": "Ama",
        "lastName": "Owusu",
    }
    body.update(overrides)
    return body


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_public_user(self, client, mock_email):
        response = await client.post("/api/auth/register", json=registration_body())

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["email"] == "ama.owusu@example.com"
        assert user["firstName"] == "Ama"
        assert user["role"] == "public"
        assert "password" not in user
        assert "hashedPassword" not in user
        mock_email.send_verification_email.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_new_account_cannot_sign_in_until_verified(self, client, mock_email):
        await client.post("/api/auth/register", json=registration_body())

        response = await client.post(
            "/api/auth/login",
            json={"email": "ama.owusu@example.com", "password": "SecurePassword123!"},
        )

        assert response.status_code == 401
        assert response.json()["code"] == "EMAIL_NOT_VERIFIED"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client, mock_email):
        await client.post("/api/auth/register", json=registration_body())

        response = await client.post(
            "/api/auth/register", json=registration_body(email="AMA.OWUSU@example.com")
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Email already registered"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", ["registrar", "admin"])
    async def test_privileged_roles_cannot_self_register(self, client, mock_email, role):
        response = await client.post("/api/auth/register", json=registration_body(role=role))

        assert response.status_code == 403
        mock_email.send_verification_email.assert_not_called()

    @pytest.mark.asyncio
    async def test_health_worker_can_self_register(self, client, mock_email):
        response = await client.post("/api/auth/register", json=registration_body(role="health_worker"))

        assert response.status_code == 200
        assert response.json()["user"]["role"] == "health_worker"

    @pytest.mark.asyncio
    async def test_missing_fields(self, client):
        response = await client.post("/api/auth/register", json={"email": "x@example.com"})

        assert response.status_code == 400
        fields = {e["field"] for e in response.json()["errors"]}
        assert {"password", "firstName", "lastName"} <= fields


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_sets_session_cookie(self, client, test_user):
        response = await client.post(
            "/api/auth/login",
            json={"email": test_user.email, "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == 200
        assert response.json()["user"]["email"] == test_user.email
        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith("sid=")
        assert "HttpOnly" in set_cookie
        assert "samesite=lax" in set_cookie.lower()

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_the_same(self, client, test_user):
        wrong = await client.post(
            "/api/auth/login", json={"email": test_user.email, "password": "not-the-password"}
        )
        unknown = await client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"}
        )

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json()
        assert "set-cookie" not in wrong.headers

    @pytest.mark.asyncio
    async def test_current_user(self, client, login, registrar_user):
        await login(registrar_user)

        response = await client.get("/api/auth/user")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == str(registrar_user.id)
        assert body["role"] == UserRole.REGISTRAR.value

    @pytest.mark.asyncio
    async def test_current_user_requires_session(self, client):
        response = await client.get("/api/auth/user")

        assert response.status_code == 401
        assert response.json()["message"] == "Unauthorized"

    @pytest.mark.asyncio
    async def test_bogus_cookie(self, client):
        client.cookies.set("sid", "made-up-session-id")

        response = await client.get("/api/auth/user")

        assert response.status_code == 401


class TestLogout:

    @pytest.mark.asyncio
    async def test_logout_ends_session(self, client, login, test_user):
        login_response = await login(test_user)
        sid = login_response.cookies["sid"]

        response = await client.post("/api/auth/logout")

        assert response.status_code == 200
        assert response.json() == {"message": "Logged out successfully"}

        client.cookies.set("sid", sid)
        assert (await client.get("/api/auth/user")).status_code == 401

    @pytest.mark.asyncio
    async def test_logout_without_session(self, client):
        response = await client.post("/api/auth/logout")

        assert response.status_code == 200


class TestAccountEmails:

    @pytest.mark.asyncio
    async def test_verify_then_login(self, client, mock_email):
        await client.post("/api/auth/register", json=registration_body())
        token = mock_email.send_verification_email.call_args.kwargs["verification_token"]

        verified = await client.post("/api/auth/verify-email", json={"token": token})
        login = await client.post(
            "/api/auth/login",
            json={"email": "ama.owusu@example.com", "password": "SecurePassword123!"},
        )

        assert verified.status_code == 200
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_verify_with_bad_token(self, client):
        response = await client.post("/api/auth/verify-email", json={"token": "nope"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_resend_does_not_reveal_accounts(self, client, mock_email):
        response = await client.post("/api/auth/resend-verification", json={"email": "ghost@example.com"})

        assert response.status_code == 200
        mock_email.send_verification_email.assert_not_called()

    @pytest.mark.asyncio
    async def test_password_reset_flow(self, client, mock_email, test_user):
        requested = await client.post("/api/auth/forgot-password", json={"email": test_user.email})
        token = mock_email.send_password_reset_email.call_args.kwargs["reset_token"]

        reset = await client.post(
            "/api/auth/reset-password", json={"token": token, "password": "BrandNewPass456"}
        )
        reused = await client.post(
            "/api/auth/reset-password", json={"token": token, "password": "AnotherPass789"}
        )
        old_login = await client.post(
            "/api/auth/login", json={"email": test_user.email, "password": DEFAULT_PASSWORD}
        )
        new_login = await client.post(
            "/api/auth/login", json={"email": test_user.email, "password": "BrandNewPass456"}
        )

        assert requested.status_code == 200
        assert reset.status_code == 200
        assert reused.status_code == 400
        assert old_login.status_code == 401
        assert new_login.status_code == 200

    @pytest.mark.asyncio
    async def test_forgot_password_unknown_email(self, client, mock_email):
        response = await client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})

        assert response.status_code == 200
        mock_email.send_password_reset_email.assert_not_called()
