"""
Auth endpoint tests — signup, login and the availability checks.
"""
import pytest
from httpx import AsyncClient

from conftest import TEST_PASSWORD


@pytest.mark.asyncio
async def test_signup(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/auth/signup", json={
        "email": "new@example.com",
        "nickname": "newcomer",
        "password": TEST_PASSWORD,
    })
    assert resp.status_code == 201
    body = resp.json()
    assert body["email"] == "new@example.com"
    assert body["nickname"] == "newcomer"
    assert "id" in body
    assert "registered_at" in body
    assert "password" not in body


@pytest.mark.asyncio
async def test_signup_validation(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/auth/signup", json={
        "email": "not-an-email", "nickname": "x", "password": TEST_PASSWORD,
    })
    assert resp.status_code == 422

    resp = await async_client.post("/api/v1/auth/signup", json={
        "email": "short@example.com", "nickname": "short", "password": "short",
    })
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_signup_duplicates(async_client: AsyncClient, signup):
    await signup("taken")

    resp = await async_client.post("/api/v1/auth/signup", json={
        "email": "taken@example.com", "nickname": "fresh", "password": TEST_PASSWORD,
    })
    assert resp.status_code == 409

    resp = await async_client.post("/api/v1/auth/signup", json={
        "email": "fresh@example.com", "nickname": "taken", "password": TEST_PASSWORD,
    })
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_login(async_client: AsyncClient, signup):
    await signup("member")

    resp = await async_client.post("/api/v1/auth/login", json={
        "email": "member@example.com", "password": TEST_PASSWORD,
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]


@pytest.mark.asyncio
async def test_login_wrong_password(async_client: AsyncClient, signup):
    await signup("member")

    resp = await async_client.post("/api/v1/auth/login", json={
        "email": "member@example.com", "password": "wrong-password",
    })
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_login_unknown_email(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/auth/login", json={
        "email": "ghost@example.com", "password": TEST_PASSWORD,
    })
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_check_email(async_client: AsyncClient, signup):
    await signup("member")

    resp = await async_client.get("/api/v1/auth/check-email", params={"email": "free@example.com"})
    assert resp.status_code == 200
    assert resp.json() == {"available": True}

    resp = await async_client.get("/api/v1/auth/check-email", params={"email": "member@example.com"})
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_check_nickname(async_client: AsyncClient, signup):
    await signup("member")

    resp = await async_client.get("/api/v1/auth/check-nickname", params={"nickname": "free"})
    assert resp.status_code == 200

    resp = await async_client.get("/api/v1/auth/check-nickname", params={"nickname": "member"})
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    resp = await async_client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
