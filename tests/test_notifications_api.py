"""HTTP tests for /notifications."""

import pytest
import pytest_asyncio

from app.models.notification import NotificationType
from app.services.notifications import notify


@pytest_asyncio.fixture
async def inbox(db, make_user):
    user = await make_user()
    other = await make_user()
    notes = [
        notify(db, user.id, NotificationType.SYSTEM, f"Note {i}", f"Body {i}")
        for i in range(3)
    ]
    foreign = notify(db, other.id, NotificationType.SYSTEM, "Theirs", "Not yours")
    await db.commit()
    return user, notes, foreign


@pytest.mark.asyncio
async def test_requires_authentication(client):
    resp = await client.get("/notifications")

    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_list_with_unread_count(client, inbox, auth_headers):
    user, _, _ = inbox

    resp = await client.get("/notifications?limit=2", headers=auth_headers(user))

    assert resp.status_code == 200
    body = resp.json()
    assert len(body["notifications"]) == 2
    assert body["unreadCount"] == 3
    assert body["pagination"]["total"] == 3
    assert body["pagination"]["pages"] == 2
    assert all(n["userId"] == user.id for n in body["notifications"])


@pytest.mark.asyncio
async def test_mark_selected_then_all_read(client, inbox, auth_headers):
    user, notes, foreign = inbox
    headers = auth_headers(user)

    first = await client.post("/notifications", json={"ids": [notes[0].id, foreign.id]}, headers=headers)
    assert first.json()["updated"] == 1

    unread = await client.get("/notifications?unread=true", headers=headers)
    assert unread.json()["unreadCount"] == 2
    assert len(unread.json()["notifications"]) == 2

    rest = await client.post("/notifications", json={"all": True}, headers=headers)
    assert rest.json()["updated"] == 2

    done = await client.get("/notifications", headers=headers)
    assert done.json()["unreadCount"] == 0


@pytest.mark.asyncio
async def test_mark_read_needs_ids_or_all(client, inbox, auth_headers):
    user, _, _ = inbox

    resp = await client.post("/notifications", json={}, headers=auth_headers(user))

    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_delete_one_checks_ownership(client, inbox, auth_headers):
    user, notes, foreign = inbox
    headers = auth_headers(user)

    assert (await client.delete(f"/notifications?id={foreign.id}", headers=headers)).status_code == 403
    assert (await client.delete("/notifications?id=99999", headers=headers)).status_code == 404
    assert (await client.delete("/notifications", headers=headers)).status_code == 400

    ok = await client.delete(f"/notifications?id={notes[0].id}", headers=headers)
    assert ok.status_code == 200
    remaining = await client.get("/notifications", headers=headers)
    assert remaining.json()["pagination"]["total"] == 2


@pytest.mark.asyncio
async def test_delete_all(client, inbox, auth_headers):
    user, _, _ = inbox
    headers = auth_headers(user)

    resp = await client.delete("/notifications?all=true", headers=headers)

    assert resp.json()["deleted"] == 3
    assert (await client.get("/notifications", headers=headers)).json()["notifications"] == []
