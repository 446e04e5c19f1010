"""HTTP tests for /ideas."""

import pytest
from sqlalchemy import select

from app.models.idea import IdeaStatus
from app.models.notification import Notification

IDEA_BODY = {
    "title": "Campus Bike Share",
    "description": "Shared bikes parked at every faculty building.",
    "problem": "Walking between buildings takes too long.",
    "solution": "Dockless bikes unlocked with a student card.",
    "tags": ["Mobility", "Campus"],
}


@pytest.mark.asyncio
async def test_create_idea_awards_points_and_notifies(client, db, make_user, auth_headers):
    owner = await make_user()

    resp = await client.post("/ideas", json=IDEA_BODY, headers=auth_headers(owner))

    assert resp.status_code == 201
    body = resp.json()
    assert body["pointsAwarded"] == 50
    assert body["idea"]["status"] == "DRAFT"
    assert body["idea"]["mediaType"] == "TEXT"
    assert sorted(t["name"] for t in body["idea"]["tags"]) == ["Campus", "Mobility"]

    await db.refresh(owner)
    assert owner.points == 50
    assert owner.ideas_count == 1

    notes = (await db.execute(select(Notification).where(Notification.user_id == owner.id))).scalars().all()
    assert [n.title for n in notes] == ["Idea Submitted Successfully"]
    assert notes[0].content == (
        'Your idea "Campus Bike Share" has been submitted successfully. You\'ve earned 50 points!'
    )


@pytest.mark.asyncio
async def test_media_type_is_derived_from_urls(client, make_user, auth_headers):
    owner = await make_user()
    body = dict(
        IDEA_BODY,
        audioUrl="https://cdn.example.com/pitch.mp3",
        videoUrl="https://cdn.example.com/pitch.mp4",
    )

    resp = await client.post("/ideas", json=body, headers=auth_headers(owner))

    assert resp.status_code == 201
    assert resp.json()["idea"]["mediaType"] == "MIXED"


@pytest.mark.asyncio
async def test_create_idea_validates_lengths(client, make_user, auth_headers):
    owner = await make_user()

    resp = await client.post("/ideas", json=dict(IDEA_BODY, title="No"), headers=auth_headers(owner))

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request data"


@pytest.mark.asyncio
async def test_list_defaults_to_published_and_masks_anonymous(client, make_user, make_idea):
    owner = await make_user(name="Dana")
    await make_idea(owner, title="Draft Only", status=IdeaStatus.DRAFT)
    await make_idea(owner, title="Public Idea")
    await make_idea(owner, title="Hidden Owner", is_anonymous=True)

    resp = await client.get("/ideas")

    assert resp.status_code == 200
    body = resp.json()
    titles = {i["title"] for i in body["ideas"]}
    assert titles == {"Public Idea", "Hidden Owner"}
    assert body["pagination"] == {"total": 2, "pages": 1, "page": 1, "limit": 10}

    by_title = {i["title"]: i for i in body["ideas"]}
    assert by_title["Hidden Owner"]["user"] == {"id": "anonymous", "name": "Anonymous", "image": None}
    assert by_title["Public Idea"]["user"]["name"] == "Dana"
    assert by_title["Public Idea"]["feedbackCount"] == 0


@pytest.mark.asyncio
async def test_list_search_is_case_insensitive(client, make_user, make_idea):
    owner = await make_user()
    await make_idea(owner, title="Solar Backpack")
    await make_idea(owner, title="Recipe Swap")

    resp = await client.get("/ideas?search=SOLAR")

    assert [i["title"] for i in resp.json()["ideas"]] == ["Solar Backpack"]


@pytest.mark.asyncio
async def test_detail_counts_a_view(client, make_user, make_idea):
    owner = await make_user()
    idea = await make_idea(owner)

    first = await client.get(f"/ideas/{idea.id}")
    second = await client.get(f"/ideas/{idea.id}")

    assert first.status_code == 200
    assert first.json()["views"] == 1
    assert second.json()["views"] == 2
    assert second.json()["feedbacks"] == []


@pytest.mark.asyncio
async def test_detail_of_unknown_idea_is_404(client):
    resp = await client.get("/ideas/12345")

    assert resp.status_code == 404
    assert resp.json() == {"error": "Idea not found"}


@pytest.mark.asyncio
async def test_only_owner_or_admin_can_update(client, make_user, make_idea, auth_headers):
    owner = await make_user()
    stranger = await make_user()
    idea = await make_idea(owner, status=IdeaStatus.DRAFT)

    denied = await client.patch(f"/ideas/{idea.id}", json={"status": "PUBLISHED"}, headers=auth_headers(stranger))
    allowed = await client.patch(
        f"/ideas/{idea.id}",
        json={"status": "PUBLISHED", "tags": ["Green"]},
        headers=auth_headers(owner),
    )

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert allowed.json()["status"] == "PUBLISHED"
    assert [t["name"] for t in allowed.json()["tags"]] == ["Green"]


@pytest.mark.asyncio
async def test_delete_removes_idea_and_feedback(client, make_user, make_idea, auth_headers):
    owner = await make_user()
    reviewer = await make_user()
    idea = await make_idea(owner)
    await client.post("/feedback", json={"ideaId": idea.id, "action": "like"}, headers=auth_headers(reviewer))

    resp = await client.delete(f"/ideas/{idea.id}", headers=auth_headers(owner))

    assert resp.status_code == 200
    assert (await client.get(f"/ideas/{idea.id}")).status_code == 404


@pytest.mark.asyncio
async def test_idea_feedback_page(client, make_user, make_idea, auth_headers):
    owner = await make_user()
    idea = await make_idea(owner)
    for rating in (3, 5):
        reviewer = await make_user()
        await client.post(
            "/feedback",
            json={"ideaId": idea.id, "action": "detailed", "rating": rating},
            headers=auth_headers(reviewer),
        )

    resp = await client.get(f"/ideas/{idea.id}/feedback?page=1&limit=1")

    assert resp.status_code == 200
    body = resp.json()
    assert len(body["feedback"]) == 1
    assert body["averageRating"] == 4
    assert body["pagination"] == {"total": 2, "pages": 2, "page": 1, "limit": 1}
