import re

import pytest

from travelplan.core.security import decode_token


def _token_from(outbox, path):
    match = re.search(rf"{path}\?token=([\w\-]+)", outbox[-1]["html"])
    assert match, "no token link in email"
    return match.group(1)


async def _signup(client, email="dana@example.com", password="secret123", name="Dana"):
    return await client.post("/auth/signup", json={"name": name, "email": email, "password": password})


async def test_signup_creates_unverified_user_and_sends_link(client, sent_emails):
    resp = await _signup(client)

    assert resp.status_code == 201
    body = resp.json()
    assert body["email"] == "dana@example.com"
    assert body["email_verified_at"] is None
    assert "hashed_password" not in body
    assert sent_emails[-1]["to"] == "dana@example.com"


async def test_signup_rejects_short_password_and_duplicates(client):
    resp = await _signup(client, password="abc")
    assert resp.status_code == 422

    assert (await _signup(client)).status_code == 201
    resp = await _signup(client, email="DANA@example.com")
    assert resp.status_code == 400


async def test_signup_survives_email_failure(client, monkeypatch):
    from travelplan.services import email_service

    def broken(*args, **kwargs):
        raise OSError("smtp down")

    monkeypatch.setattr(email_service, "send_email_html", broken)
    resp = await _signup(client)
    assert resp.status_code == 201


async def test_login_requires_verified_email(client, sent_emails):
    await _signup(client)

    resp = await client.post("/auth/login", json={"email": "dana@example.com", "password": "secret123"})
    assert resp.status_code == 403

    token = _token_from(sent_emails, "/auth/verify")
    resp = await client.get("/auth/verify", params={"token": token})
    assert resp.status_code == 200

    resp = await client.post("/auth/login", json={"email": "dana@example.com", "password": "secret123"})
    assert resp.status_code == 200
    assert resp.json()["token_type"] == "bearer"
    assert "access_token" in resp.cookies


async def test_verify_token_is_single_use(client, sent_emails):
    await _signup(client)
    token = _token_from(sent_emails, "/auth/verify")

    assert (await client.get("/auth/verify", params={"token": token})).status_code == 200
    assert (await client.get("/auth/verify", params={"token": token})).status_code == 400
    assert (await client.get("/auth/verify", params={"token": "nope"})).status_code == 400


async def test_resend_verification_is_silent_for_unknown_email(client, sent_emails):
    resp = await client.post("/auth/resend-verification", json={"email": "ghost@example.com"})
    assert resp.status_code == 200
    assert sent_emails == []

    await _signup(client)
    resp = await client.post("/auth/resend-verification", json={"email": "dana@example.com"})
    assert resp.status_code == 200
    assert len(sent_emails) == 2


@pytest.mark.parametrize("email,password", [
    ("alice@example.com", "wrong-password"),
    ("nobody@example.com", "secret123"),
])
async def test_login_bad_credentials(client, alice, email, password):
    resp = await client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 401


async def test_protected_route_needs_token(client):
    assert (await client.get("/trips")).status_code == 401
    resp = await client.get("/trips", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


async def test_refresh_and_logout(client, alice):
    resp = await client.post("/auth/login", json={"email": alice["email"], "password": "secret123"})
    refresh_token = resp.json()["refresh_token"]

    resp = await client.post("/auth/refresh", json={"refresh_token": refresh_token})
    assert resp.status_code == 200
    assert decode_token(resp.json()["access_token"])["sub"] == str(alice["id"])

    resp = await client.post("/auth/logout", json={"refresh_token": refresh_token})
    assert resp.status_code == 200

    resp = await client.post("/auth/refresh", json={"refresh_token": refresh_token})
    assert resp.status_code == 401


async def test_access_token_cannot_be_used_to_refresh(client, alice):
    access = alice["headers"]["Authorization"].split(" ", 1)[1]
    resp = await client.post("/auth/refresh", json={"refresh_token": access})
    assert resp.status_code == 401


async def test_old_sessions_are_evicted(client, alice, fake_redis):
    tokens = []
    for _ in range(5):
        resp = await client.post("/auth/login", json={"email": alice["email"], "password": "secret123"})
        tokens.append(resp.json()["refresh_token"])

    assert await fake_redis.zcard(f"refreshs:{alice['id']}") == 3
    resp = await client.post("/auth/refresh", json={"refresh_token": tokens[0]})
    assert resp.status_code == 401
    resp = await client.post("/auth/refresh", json={"refresh_token": tokens[-1]})
    assert resp.status_code == 200


async def test_password_reset_flow(client, alice, sent_emails):
    login = await client.post("/auth/login", json={"email": alice["email"], "password": "secret123"})
    old_refresh = login.json()["refresh_token"]

    resp = await client.post("/auth/forgot-password", json={"email": alice["email"]})
    assert resp.status_code == 200
    token = _token_from(sent_emails, "/auth/reset-password")

    resp = await client.post("/auth/reset-password", json={"reset_token": token, "new_password": "brand-new"})
    assert resp.status_code == 200

    # Existing sessions are gone and the old password no longer works
    assert (await client.post("/auth/refresh", json={"refresh_token": old_refresh})).status_code == 401
    resp = await client.post("/auth/login", json={"email": alice["email"], "password": "secret123"})
    assert resp.status_code == 401
    resp = await client.post("/auth/login", json={"email": alice["email"], "password": "brand-new"})
    assert resp.status_code == 200

    resp = await client.post("/auth/reset-password", json={"reset_token": token, "new_password": "another1"})
    assert resp.status_code == 400


async def test_forgot_password_unknown_email_is_quiet(client, sent_emails):
    resp = await client.post("/auth/forgot-password", json={"email": "ghost@example.com"})
    assert resp.status_code == 200
    assert sent_emails == []


async def test_profile_read_and_update(client, alice):
    resp = await client.get("/me", headers=alice["headers"])
    assert resp.status_code == 200
    assert resp.json()["name"] == "Alice"

    resp = await client.put("/me", json={"name": "  Alicia "}, headers=alice["headers"])
    assert resp.status_code == 200
    assert resp.json()["name"] == "Alicia"

    resp = await client.put("/me", json={}, headers=alice["headers"])
    assert resp.status_code == 400
