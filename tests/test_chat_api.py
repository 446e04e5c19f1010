"""HTTP tests for /chat."""

from datetime import datetime

import pytest
from sqlalchemy import select, update

from app.models.chat import ChatParticipant
from app.models.notification import Notification, NotificationType


async def _titles(db, user_id):
    result = await db.execute(
        select(Notification).where(Notification.user_id == user_id).order_by(Notification.id)
    )
    return [(n.type, n.title, n.content) for n in result.scalars().all()]


@pytest.mark.asyncio
async def test_create_chat_adds_creator_and_notifies(client, db, make_user, make_idea, auth_headers):
    alice = await make_user(name="Alice")
    bob = await make_user(name="Bob")
    idea = await make_idea(bob, is_anonymous=True)

    resp = await client.post(
        "/chat",
        json={"name": "Pitch review", "ideaId": idea.id, "participants": [bob.id]},
        headers=auth_headers(alice),
    )

    assert resp.status_code == 200
    chat = resp.json()["chat"]
    assert resp.json()["success"] is True
    assert sorted(p["userId"] for p in chat["participants"]) == sorted([alice.id, bob.id])
    assert chat["idea"]["user"]["id"] == "anonymous"

    assert await _titles(db, bob.id) == [
        (NotificationType.SYSTEM, "New Chat", 'Alice added you to a chat "Pitch review"'),
    ]
    assert await _titles(db, alice.id) == []


@pytest.mark.asyncio
async def test_create_chat_validation(client, make_user, auth_headers):
    alice = await make_user()
    headers = auth_headers(alice)

    missing_user = await client.post("/chat", json={"participants": [alice.id, 4040]}, headers=headers)
    missing_idea = await client.post("/chat", json={"ideaId": 5050, "participants": [alice.id]}, headers=headers)
    no_participants = await client.post("/chat", json={"participants": []}, headers=headers)

    assert missing_user.status_code == 400
    assert missing_user.json() == {"error": "One or more participants do not exist"}
    assert missing_idea.status_code == 404
    assert no_participants.status_code == 400
    assert no_participants.json()["error"] == "Invalid request data"


@pytest.mark.asyncio
async def test_send_message_and_read_history(client, db, make_user, auth_headers):
    alice = await make_user(name="Alice")
    bob = await make_user(name="Bob")
    created = await client.post("/chat", json={"participants": [bob.id]}, headers=auth_headers(alice))
    chat_id = created.json()["chat"]["id"]

    for text in ("hi", "are you there?"):
        sent = await client.post(
            "/chat", json={"chatId": chat_id, "content": text}, headers=auth_headers(alice)
        )
        assert sent.status_code == 200
        assert sent.json()["message"]["sender"]["name"] == "Alice"

    history = await client.get(f"/chat/messages?chatId={chat_id}", headers=auth_headers(bob))

    assert history.status_code == 200
    assert [m["content"] for m in history.json()["messages"]] == ["hi", "are you there?"]
    assert history.json()["hasMore"] is False

    notes = await _titles(db, bob.id)
    assert notes.count((NotificationType.MESSAGE, "New Message", "Alice sent you a message")) == 2


@pytest.mark.asyncio
async def test_message_paging_with_before(client, make_user, auth_headers):
    alice = await make_user()
    bob = await make_user()
    created = await client.post("/chat", json={"participants": [bob.id]}, headers=auth_headers(alice))
    chat_id = created.json()["chat"]["id"]
    ids = []
    for text in ("one", "two", "three"):
        sent = await client.post("/chat", json={"chatId": chat_id, "content": text}, headers=auth_headers(alice))
        ids.append(sent.json()["message"]["id"])

    latest = await client.get(f"/chat/messages?chatId={chat_id}&limit=2", headers=auth_headers(bob))
    older = await client.get(f"/chat/messages?chatId={chat_id}&limit=2&before={ids[1]}", headers=auth_headers(bob))

    assert [m["content"] for m in latest.json()["messages"]] == ["two", "three"]
    assert latest.json()["hasMore"] is True
    assert [m["content"] for m in older.json()["messages"]] == ["one"]
    assert older.json()["hasMore"] is False


@pytest.mark.asyncio
async def test_non_participants_are_rejected(client, make_user, auth_headers):
    alice = await make_user()
    bob = await make_user()
    mallory = await make_user()
    created = await client.post("/chat", json={"participants": [bob.id]}, headers=auth_headers(alice))
    chat_id = created.json()["chat"]["id"]

    sent = await client.post("/chat", json={"chatId": chat_id, "content": "let me in"}, headers=auth_headers(mallory))
    read = await client.get(f"/chat/messages?chatId={chat_id}", headers=auth_headers(mallory))

    assert sent.status_code == 403
    assert sent.json() == {"error": "You are not a participant in this chat"}
    assert read.status_code == 403


@pytest.mark.asyncio
async def test_chat_list_reports_unread_and_last_message(client, db, make_user, auth_headers):
    alice = await make_user()
    bob = await make_user()
    created = await client.post("/chat", json={"participants": [bob.id]}, headers=auth_headers(alice))
    chat_id = created.json()["chat"]["id"]
    await db.execute(
        update(ChatParticipant)
        .where(ChatParticipant.chat_id == chat_id, ChatParticipant.user_id == bob.id)
        .values(last_read=datetime(2000, 1, 1))
    )
    await db.commit()

    await client.post("/chat", json={"chatId": chat_id, "content": "ping"}, headers=auth_headers(alice))

    bob_view = await client.get("/chat", headers=auth_headers(bob))
    alice_view = await client.get("/chat", headers=auth_headers(alice))

    chat = bob_view.json()["chats"][0]
    assert chat["unreadCount"] == 1
    assert chat["messageCount"] == 1
    assert chat["lastMessage"]["content"] == "ping"
    assert alice_view.json()["chats"][0]["unreadCount"] == 0
