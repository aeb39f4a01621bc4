"""
API tests for registration, login and profile endpoints.
"""

from datetime import timedelta

import pytest

from app.core.dependencies import get_token_service
from app.main import app
from app.modules.auth.token_service import TokenService
from app.modules.users.dto import CreateUserDto, UserResponseDto
from app.modules.users.service import UsersService
from conftest import STRONG_PASSWORD, register_user


class TestRegister:
    async def test_register_returns_profile_without_hash(self, client):
        response = await register_user(client, "carol@example.com")

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "User registered successfully"
        user = body["data"]["user"]
        assert user["email"] == "carol@example.com"
        assert user["first_name"] == "Alice"
        assert "password" not in user
        assert "password_hash" not in user

    async def test_duplicate_email_is_rejected(self, client):
        first = await register_user(client, "dup@example.com")
        second = await register_user(client, "dup@example.com")

        assert first.status_code == 201
        assert second.status_code == 400
        assert second.json()["success"] is False
        assert second.json()["error"] == "User with this email already exists"

    @pytest.mark.parametrize(
        "password",
        ["Sh0rt!", "alllowercase1!", "ALLUPPERCASE1!", "NoDigits!!", "NoSpecial123"],
    )
    async def test_weak_passwords_are_rejected(self, client, password):
        response = await register_user(client, "weak@example.com", password=password)

        assert response.status_code == 400
        assert response.json()["message"] == "Validation error"

    async def test_invalid_email_and_short_names_are_rejected(self, client):
        response = await client.post(
            "/api/auth/register",
            json={"email": "not-an-email", "password": STRONG_PASSWORD, "first_name": "A", "last_name": "B"},
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert "email" in error
        assert "first_name" in error


class TestLogin:
    async def test_login_returns_verifiable_token(self, client):
        registered = (await register_user(client, "dave@example.com")).json()["data"]["user"]

        response = await client.post(
            "/api/auth/login", json={"email": "dave@example.com", "password": STRONG_PASSWORD}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["id"] == registered["id"]
        assert "password_hash" not in data["user"]

        identity = get_token_service().verify(data["token"]).identity
        assert identity.user_id == registered["id"]
        assert identity.email == "dave@example.com"

    async def test_wrong_password_and_unknown_email_look_the_same(self, client):
        await register_user(client, "erin@example.com")

        wrong_password = await client.post(
            "/api/auth/login", json={"email": "erin@example.com", "password": "Wr0ng!Pass"}
        )
        unknown_email = await client.post(
            "/api/auth/login", json={"email": "nobody@example.com", "password": STRONG_PASSWORD}
        )

        assert wrong_password.status_code == 401
        assert unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json()
        assert wrong_password.json()["error"] == "Invalid email or password"


class TestProfile:
    async def test_get_profile(self, client, alice):
        response = await client.get("/api/auth/profile", headers=alice)

        assert response.status_code == 200
        assert response.json()["data"]["user"]["email"] == "alice@example.com"

    async def test_profile_requires_token(self, client):
        response = await client.get("/api/auth/profile")

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "message": "Access token required",
            "error": "No token provided",
        }

    async def test_token_for_missing_user_is_404(self, client):
        token = get_token_service().issue(999, "ghost@example.com")

        response = await client.get(
            "/api/auth/profile", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 404

    async def test_expired_token_is_401_and_forged_token_is_403(self, client):
        expired = get_token_service().issue(1, "a@example.com", expires_in=timedelta(seconds=-5))
        forged = TokenService(secret="someone-else").issue(1, "a@example.com")

        expired_response = await client.get(
            "/api/auth/profile", headers={"Authorization": f"Bearer {expired}"}
        )
        forged_response = await client.get(
            "/api/auth/profile", headers={"Authorization": f"Bearer {forged}"}
        )

        assert expired_response.status_code == 401
        assert "expired" in expired_response.json()["message"].lower()
        assert forged_response.status_code == 403
        assert forged_response.json()["message"] == "Invalid token"

    async def test_missing_secret_is_a_server_fault(self, client):
        app.dependency_overrides[get_token_service] = lambda: TokenService(secret="")

        response = await client.get(
            "/api/auth/profile", headers={"Authorization": "Bearer whatever"}
        )

        assert response.status_code == 500
        assert response.json()["success"] is False

    async def test_update_profile(self, client, alice):
        response = await client.put(
            "/api/auth/profile", json={"first_name": "Alicia"}, headers=alice
        )

        assert response.status_code == 200
        assert response.json()["data"]["user"]["first_name"] == "Alicia"
        assert response.json()["data"]["user"]["last_name"] == "Smith"

    async def test_update_password_allows_login_with_new_password(self, client, alice):
        response = await client.put(
            "/api/auth/profile", json={"password": "N3w!Password"}, headers=alice
        )
        assert response.status_code == 200

        old = await client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": STRONG_PASSWORD}
        )
        new = await client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "N3w!Password"}
        )
        assert old.status_code == 401
        assert new.status_code == 200

    async def test_update_with_no_fields_is_rejected(self, client, alice):
        response = await client.put("/api/auth/profile", json={}, headers=alice)

        assert response.status_code == 400
        assert response.json()["error"] == "No valid fields to update"

    async def test_update_to_taken_email_is_rejected(self, client, alice):
        await register_user(client, "taken@example.com")

        response = await client.put(
            "/api/auth/profile", json={"email": "taken@example.com"}, headers=alice
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Email already exists"

    async def test_update_requires_token(self, client):
        response = await client.put("/api/auth/profile", json={"first_name": "Zed"})

        assert response.status_code == 401



class TestCredentialStore:
    async def test_lookup_by_email_returns_public_profile(self, db):
        service = UsersService()
        created = await service.create_user(
            db,
            CreateUserDto(
                email="frank@example.com",
                password=STRONG_PASSWORD,
                first_name="Frank",
                last_name="Ocean",
            ),
        )

        found = await service.get_user_by_email(db, "frank@example.com")

        assert isinstance(found, UserResponseDto)
        assert found.id == created.id
        assert "password_hash" not in found.model_dump()
        assert (await service.get_credentials_by_email(db, "frank@example.com")).password_hash

    async def test_lookup_by_unknown_email_is_none(self, db):
        assert await UsersService().get_user_by_email(db, "nobody@example.com") is None

    async def test_lookup_is_case_sensitive(self, db):
        service = UsersService()
        await service.create_user(
            db,
            CreateUserDto(
                email="grace@example.com",
                password=STRONG_PASSWORD,
                first_name="Grace",
                last_name="Hopper",
            ),
        )

        assert await service.get_user_by_email(db, "Grace@Example.com") is None
