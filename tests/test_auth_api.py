"""Registration, sign-in, email verification and profile endpoints."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select

from app.models.user import User
from app.models.verification_token import VerificationToken
from app.routers.auth import COOKIE_KEY


@pytest.mark.asyncio
async def test_register_creates_verified_user(client, db):
    resp = await client.post(
        "/register",
        json={"name": "Sam Founder", "email": "Sam@Example.com", "password": "hunter2hunter2"},
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["email"] == "sam@example.com"
    assert body["points"] == 0
    assert body["emailVerifiedAt"] is not None
    assert "passwordHash" not in body and "password" not in body

    user = (await db.execute(select(User).where(User.email == "sam@example.com"))).scalar_one()
    assert user.password_hash != "hunter2hunter2"
    assert user.check_password("hunter2hunter2")


@pytest.mark.asyncio
async def test_register_rejects_duplicates_and_bad_input(client, make_user):
    await make_user(email="taken@example.com")

    duplicate = await client.post(
        "/register", json={"name": "Again", "email": "taken@example.com", "password": "longenough"}
    )
    short_password = await client.post(
        "/register", json={"name": "Shorty", "email": "new@example.com", "password": "short"}
    )

    assert duplicate.status_code == 409
    assert duplicate.json() == {"error": "User with this email already exists"}
    assert short_password.status_code == 400


@pytest.mark.asyncio
async def test_login_sets_cookie_that_authenticates(client, make_user):
    user = await make_user(email="login@example.com", password="correct-horse")

    bad = await client.post("/auth/login", json={"email": "login@example.com", "password": "wrong-pony"})
    good = await client.post("/auth/login", json={"email": "login@example.com", "password": "correct-horse"})

    assert bad.status_code == 401
    assert good.status_code == 200
    assert good.json()["accessToken"]
    assert COOKIE_KEY in good.cookies

    me = await client.get("/users/me")
    assert me.status_code == 200
    assert me.json()["id"] == user.id


@pytest.mark.asyncio
async def test_login_requires_verified_email(client, make_user):
    await make_user(email="pending@example.com", password="password123", verified=False)

    resp = await client.post("/auth/login", json={"email": "pending@example.com", "password": "password123"})

    assert resp.status_code == 403
    assert resp.json() == {"error": "EmailNotVerified"}


@pytest.mark.asyncio
async def test_me_requires_authentication(client):
    resp = await client.get("/users/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_resend_then_verify_email(client, db, make_user):
    user = await make_user(email="verifyme@example.com", verified=False)

    with patch("app.services.accounts.send_verification_email", new=AsyncMock(return_value=True)) as sender:
        resp = await client.post("/auth/resend-verification", json={"email": "verifyme@example.com"})

    assert resp.status_code == 200
    sender.assert_awaited_once()
    token = sender.await_args.args[1]

    verified = await client.post("/auth/verify-email", json={"token": token})
    assert verified.status_code == 200

    await db.refresh(user)
    assert user.email_verified_at is not None
    leftover = (await db.execute(select(VerificationToken))).scalars().all()
    assert leftover == []

    again = await client.post("/auth/resend-verification", json={"email": "verifyme@example.com"})
    assert again.status_code == 400


@pytest.mark.asyncio
async def test_verify_rejects_unknown_and_expired_tokens(client, db, make_user):
    await make_user(email="late@example.com", verified=False)
    db.add(VerificationToken(
        identifier="late@example.com",
        token="expired-token",
        expires=datetime.now(timezone.utc) - timedelta(hours=1),
    ))
    await db.commit()

    unknown = await client.post("/auth/verify-email", json={"token": "nope"})
    expired = await client.post("/auth/verify-email", json={"token": "expired-token"})

    assert unknown.status_code == 400
    assert unknown.json() == {"error": "Invalid verification token"}
    assert expired.status_code == 400
    assert expired.json() == {"error": "Verification token has expired"}


@pytest.mark.asyncio
async def test_leaderboard_ranks_by_points(client, make_user):
    await make_user(name="Low", points=5)
    await make_user(name="High", points=90)
    await make_user(name="Mid", points=40)

    resp = await client.get("/users/leaderboard?limit=2")

    assert resp.status_code == 200
    assert [(e["rank"], e["name"]) for e in resp.json()] == [(1, "High"), (2, "Mid")]


@pytest.mark.asyncio
async def test_public_profile(client, make_user):
    user = await make_user(name="Visible")

    found = await client.get(f"/users/{user.id}")
    missing = await client.get("/users/9999")

    assert found.json()["name"] == "Visible"
    assert missing.status_code == 404
