"""Tests for authentication endpoints."""

from datetime import timedelta

import pytest
from sqlalchemy import select

from conftest import auth_headers, make_user
from app.models.user import User, UserRole
from app.services.auth import create_access_token, decode_access_token, hash_password, verify_password


def test_password_hashing():
    """Password hashing should be one-way and verifiable."""
    password = "supersecret123"
    hashed = hash_password(password)

    assert hashed != password
    assert verify_password(password, hashed) is True
    assert verify_password("wrongpassword", hashed) is False


def test_expired_token_does_not_decode():
    token = create_access_token({"sub": "someone"}, expires_delta=timedelta(minutes=-1))
    assert decode_access_token(token) is None
    assert decode_access_token(create_access_token({"sub": "someone"}))["sub"] == "someone"


@pytest.mark.asyncio
async def test_login_returns_token_and_user(client, db, admin_user):
    resp = await client.post("/api/auth/login", json={"email": "admin@ruidcar.com", "password": "testpass123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["tokenType"] == "bearer"
    assert body["data"]["user"]["email"] == "admin@ruidcar.com"
    assert body["data"]["user"]["role"] == "admin"

    claims = decode_access_token(body["data"]["accessToken"])
    assert claims["sub"] == str(admin_user.id)

    await db.refresh(admin_user)
    assert admin_user.last_login_at is not None


@pytest.mark.asyncio
async def test_login_with_wrong_password_fails(client, admin_user):
    resp = await client.post("/api/auth/login", json={"email": "admin@ruidcar.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Email ou senha inválidos"}


@pytest.mark.asyncio
async def test_login_unknown_email_fails(client):
    resp = await client.post("/api/auth/login", json={"email": "ghost@ruidcar.com", "password": "testpass123"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_login_disabled_account_is_forbidden(client, db):
    await make_user(db, "off@ruidcar.com", UserRole.ADMIN, is_active=False)
    resp = await client.post("/api/auth/login", json={"email": "off@ruidcar.com", "password": "testpass123"})
    assert resp.status_code == 403
    assert resp.json()["message"] == "Conta desativada"


@pytest.mark.asyncio
async def test_login_rejects_malformed_email(client):
    resp = await client.post("/api/auth/login", json={"email": "not-an-email", "password": "x"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Dados inválidos"


@pytest.mark.asyncio
async def test_me_returns_current_user(client, owner_user):
    resp = await client.get("/api/auth/me", headers=auth_headers(owner_user))
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["id"] == str(owner_user.id)
    assert data["role"] == "workshop_owner"
    assert data["isActive"] is True


@pytest.mark.asyncio
async def test_me_requires_token(client):
    resp = await client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Autenticação necessária"

    resp = await client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_disabled_user_token_is_forbidden(client, db):
    user = await make_user(db, "gone@ruidcar.com", UserRole.ADMIN)
    headers = auth_headers(user)
    user.is_active = False
    await db.commit()

    resp = await client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 403

    result = await db.execute(select(User).where(User.email == "gone@ruidcar.com"))
    assert result.scalar_one().is_active is False
