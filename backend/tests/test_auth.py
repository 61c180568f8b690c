"""
Tests for login, bearer token handling and role gating.
"""
import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.auth.models import UserRole
from app.auth.schemas import CreateUserRequest
from app.auth.service import create_access_token, create_user, decode_access_token
from app.config import settings


async def _user(db, role=UserRole.TRANSLATOR, email="translator@lexbridge.example", password="s3cret-pass"):
    user = await create_user(db, CreateUserRequest(
        email=email, password=password, full_name="Test User", role=role,
    ))
    await db.commit()
    return user


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


class TestTokens:

    def test_round_trip_claims(self):
        user_id = str(uuid.uuid4())
        payload = decode_access_token(create_access_token(user_id, "translator"))
        assert payload["sub"] == user_id
        assert payload["role"] == "translator"

    def test_wrong_secret_rejected(self):
        token = jwt.encode({"sub": str(uuid.uuid4())}, "another-secret", algorithm="HS256")
        with pytest.raises(jwt.PyJWTError):
            decode_access_token(token)


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_then_me(self, token_client, db):
        user = await _user(db)
        resp = await token_client.post("/api/auth/login", json={
            "email": "translator@lexbridge.example", "password": "s3cret-pass",
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["user"]["role"] == "translator"
        assert decode_access_token(body["access_token"])["sub"] == str(user.id)

        me = await token_client.get("/api/auth/me", headers=_bearer(body["access_token"]))
        assert me.status_code == 200
        assert me.json()["email"] == "translator@lexbridge.example"

    @pytest.mark.asyncio
    async def test_wrong_password(self, token_client, db):
        await _user(db)
        resp = await token_client.post("/api/auth/login", json={
            "email": "translator@lexbridge.example", "password": "nope",
        })
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid email or password", "type": "AuthorizationFailure"}

    @pytest.mark.asyncio
    async def test_deactivated_account(self, token_client, db):
        user = await _user(db)
        user.is_active = False
        await db.commit()
        resp = await token_client.post("/api/auth/login", json={
            "email": "translator@lexbridge.example", "password": "s3cret-pass",
        })
        assert resp.status_code == 403


class TestBearerAuth:

    @pytest.mark.asyncio
    async def test_no_token_is_401(self, token_client):
        resp = await token_client.post(f"/api/documents/{uuid.uuid4()}/approve", json={
            "versionId": str(uuid.uuid4()), "decision": "approved",
        })
        assert resp.status_code == 401
        assert resp.json()["type"] == "AuthorizationFailure"

    @pytest.mark.asyncio
    async def test_garbage_token_is_401(self, token_client):
        resp = await token_client.get("/api/auth/me", headers=_bearer("not-a-jwt"))
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid or expired token", "type": "AuthorizationFailure"}

    @pytest.mark.asyncio
    async def test_expired_token_is_401(self, token_client):
        past = datetime.now(timezone.utc) - timedelta(minutes=5)
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "role": "admin", "exp": past},
            settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM,
        )
        resp = await token_client.get("/api/auth/me", headers=_bearer(token))
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_role_cannot_approve(self, token_client, db, make_document, make_version):
        document = await make_document()
        version = await make_version(document)
        await db.commit()

        token = create_access_token(str(uuid.uuid4()), "superuser")
        resp = await token_client.post(
            f"/api/documents/{document.id}/approve",
            json={"versionId": str(version.id), "targetLang": "source", "decision": "approved"},
            headers=_bearer(token),
        )
        assert resp.status_code == 403
        assert resp.json()["type"] == "AuthorizationFailure"

    @pytest.mark.asyncio
    async def test_admin_only_user_creation(self, token_client):
        payload = {"email": "lawyer@lexbridge.example", "password": "pw", "full_name": "Counsel",
                   "role": "foreign_lawyer"}

        translator = create_access_token(str(uuid.uuid4()), "translator")
        resp = await token_client.post("/api/auth/users", json=payload, headers=_bearer(translator))
        assert resp.status_code == 403

        admin = create_access_token(str(uuid.uuid4()), "admin")
        resp = await token_client.post("/api/auth/users", json=payload, headers=_bearer(admin))
        assert resp.status_code == 201
        assert resp.json()["role"] == "foreign_lawyer"

        resp = await token_client.post("/api/auth/users", json=payload, headers=_bearer(admin))
        assert resp.status_code == 409
        assert resp.json()["type"] == "ValidationFailure"
