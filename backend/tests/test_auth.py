# tests for auth router: signup, login, me, refresh, profile
# tests for app/routers/auth.py

import pytest

from tests.conftest import THERAPIST_ID, SUPERVISOR_ID
from app.services.auth_service import create_access_token, create_refresh_token, decode_token


class TestSignup:
    """staff registration endpoint"""

    async def test_signup_therapist_success(self, client, mock_db):
        resp = await client.post("/auth/signup", json={
            "email": "New.Therapist@TheraTrack.dev",
            "password": "securepass123",
            "name": "Jess Moreno",
            "role": "therapist",
            "specialization": "Fluency",
            "experience": 2,
        })
        assert resp.status_code == 201
        data = resp.json()
        assert "accessToken" in data
        assert "refreshToken" in data
        assert data["token_type"] == "bearer"
        assert decode_token(data["accessToken"])["role"] == "therapist"

        stored = mock_db.users._data[-1]
        assert stored["email"] == "new.therapist@theratrack.dev"
        assert stored["hashed_password"] != "securepass123"

    async def test_signup_supervisor_success(self, client):
        resp = await client.post("/auth/signup", json={
            "email": "lead@theratrack.dev",
            "password": "securepass123",
            "name": "Pat Lead",
            "role": "supervisor",
            "specialization": "Clinical Supervision",
            "experience": 12,
        })
        assert resp.status_code == 201

    async def test_signup_duplicate_email(self, client):
        resp = await client.post("/auth/signup", json={
            "email": "dana.whitfield@theratrack.dev",
            "password": "securepass123",
            "name": "Dana Again",
            "role": "therapist",
            "specialization": "Voice",
            "experience": 1,
        })
        assert resp.status_code == 409

    async def test_signup_unknown_role(self, client):
        resp = await client.post("/auth/signup", json={
            "email": "someone@theratrack.dev",
            "password": "securepass123",
            "name": "Someone",
            "role": "patient",
            "specialization": "N/A",
            "experience": 0,
        })
        assert resp.status_code == 422

    async def test_signup_missing_specialization(self, client):
        resp = await client.post("/auth/signup", json={
            "email": "someone@theratrack.dev",
            "password": "securepass123",
            "name": "Someone",
            "role": "therapist",
            "experience": 0,
        })
        assert resp.status_code == 422

    async def test_signup_short_password(self, client):
        resp = await client.post("/auth/signup", json={
            "email": "someone@theratrack.dev",
            "password": "short",
            "name": "Someone",
            "role": "therapist",
            "specialization": "Voice",
            "experience": 0,
        })
        assert resp.status_code == 422


class TestLogin:
    """login endpoint"""

    async def test_login_success(self, client):
        resp = await client.post("/auth/login", json={
            "email": "dana.whitfield@theratrack.dev",
            "password": "theratrack123",
        })
        assert resp.status_code == 200
        data = resp.json()
        assert decode_token(data["accessToken"])["sub"] == THERAPIST_ID

    async def test_login_wrong_password(self, client):
        resp = await client.post("/auth/login", json={
            "email": "dana.whitfield@theratrack.dev",
            "password": "wrong_password",
        })
        assert resp.status_code == 401

    async def test_login_nonexistent_email(self, client):
        resp = await client.post("/auth/login", json={
            "email": "nobody@theratrack.dev",
            "password": "theratrack123",
        })
        assert resp.status_code == 401


class TestMe:
    """get current user profile"""

    async def test_get_me_therapist(self, therapist_client):
        resp = await therapist_client.get("/auth/me")
        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == "Dana Whitfield"
        assert data["role"] == "therapist"
        assert "hashed_password" not in data

    async def test_get_me_supervisor(self, supervisor_client):
        resp = await supervisor_client.get("/auth/me")
        assert resp.status_code == 200
        assert resp.json()["role"] == "supervisor"

    async def test_get_me_no_auth(self, client):
        resp = await client.get("/auth/me")
        assert resp.status_code == 401

    async def test_get_me_garbage_token(self, client):
        resp = await client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401

    async def test_get_me_refresh_token_rejected(self, client):
        token = create_refresh_token({"sub": THERAPIST_ID, "role": "therapist"})
        resp = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    async def test_get_me_unknown_user(self, client):
        token = create_access_token({"sub": "507f1f77bcf86cd799439011", "role": "therapist"})
        resp = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401


class TestRefresh:
    """token refresh endpoint"""

    async def test_refresh_success(self, client):
        refresh = create_refresh_token({"sub": SUPERVISOR_ID, "role": "supervisor"})
        resp = await client.post("/auth/refresh", json={"refreshToken": refresh})
        assert resp.status_code == 200
        assert decode_token(resp.json()["accessToken"])["role"] == "supervisor"

    async def test_refresh_invalid_token(self, client):
        resp = await client.post("/auth/refresh", json={"refreshToken": "invalid.token.here"})
        assert resp.status_code == 401

    async def test_refresh_with_access_token_fails(self, client):
        access = create_access_token({"sub": THERAPIST_ID, "role": "therapist"})
        resp = await client.post("/auth/refresh", json={"refreshToken": access})
        assert resp.status_code == 401


class TestProfileUpdate:
    """patch /auth/profile"""

    async def test_update_name_and_experience(self, therapist_client, mock_db):
        resp = await therapist_client.patch("/auth/profile", json={"name": "Dana W.", "experience": 7})
        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == "Dana W."
        assert data["experience"] == 7
        assert mock_db.users._data[0]["name"] == "Dana W."

    async def test_update_nothing(self, therapist_client):
        resp = await therapist_client.patch("/auth/profile", json={})
        assert resp.status_code == 400

    async def test_cannot_change_role(self, therapist_client, mock_db):
        resp = await therapist_client.patch("/auth/profile", json={"role": "supervisor", "name": "Dana"})
        assert resp.status_code == 200
        assert mock_db.users._data[0]["role"] == "therapist"
