"""HTTP contract tests for /feedback."""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError


@pytest.mark.asyncio
async def test_submit_requires_authentication(client):
    resp = await client.post("/feedback", json={"ideaId": 1, "action": "like"})

    assert resp.status_code == 401
    assert resp.json() == {"error": "Authentication required"}


@pytest.mark.asyncio
async def test_submit_like(client, make_user, make_idea, auth_headers):
    owner = await make_user()
    reviewer = await make_user()
    idea = await make_idea(owner)

    resp = await client.post(
        "/feedback", json={"ideaId": idea.id, "action": "like"}, headers=auth_headers(reviewer)
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["pointsAwarded"] == 10
    assert body["feedback"]["ideaId"] == idea.id
    assert body["feedback"]["userId"] == reviewer.id
    assert body["feedback"]["action"] == "like"

    me = await client.get("/users/me", headers=auth_headers(reviewer))
    assert me.json()["points"] == 10
    assert me.json()["feedbackCount"] == 1


@pytest.mark.asyncio
async def test_resubmit_awards_nothing(client, make_user, make_idea, auth_headers):
    owner = await make_user()
    reviewer = await make_user()
    idea = await make_idea(owner)
    headers = auth_headers(reviewer)

    await client.post("/feedback", json={"ideaId": idea.id, "action": "like"}, headers=headers)
    resp = await client.post(
        "/feedback",
        json={"ideaId": idea.id, "action": "detailed", "rating": 4, "comment": "nice"},
        headers=headers,
    )

    assert resp.status_code == 200
    assert resp.json()["pointsAwarded"] == 0
    assert resp.json()["feedback"]["rating"] == 4
    assert resp.json()["feedback"]["comment"] == "nice"


@pytest.mark.asyncio
async def test_self_review_is_a_bad_request(client, make_user, make_idea, auth_headers):
    owner = await make_user()
    idea = await make_idea(owner)

    resp = await client.post(
        "/feedback", json={"ideaId": idea.id, "action": "like"}, headers=auth_headers(owner)
    )

    assert resp.status_code == 400
    assert resp.json() == {"error": "You cannot provide feedback on your own idea"}


@pytest.mark.asyncio
async def test_unknown_idea_is_404(client, make_user, auth_headers):
    reviewer = await make_user()

    resp = await client.post("/feedback", json={"ideaId": 424242, "action": "like"}, headers=auth_headers(reviewer))

    assert resp.status_code == 404
    assert resp.json() == {"error": "Idea not found"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"ideaId": 1, "action": "love"},
        {"ideaId": 1, "action": "detailed", "rating": 6},
        {"ideaId": 1, "action": "detailed", "rating": "4"},
        {"ideaId": 1, "action": "detailed", "rating": 4.0},
        {"action": "like"},
    ],
)
async def test_invalid_payload_is_400_with_details(client, make_user, auth_headers, body):
    reviewer = await make_user()

    resp = await client.post("/feedback", json=body, headers=auth_headers(reviewer))

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request data"
    assert resp.json()["details"]


@pytest.mark.asyncio
async def test_list_requires_a_filter(client, make_user, auth_headers):
    user = await make_user()

    resp = await client.get("/feedback", headers=auth_headers(user))

    assert resp.status_code == 400
    assert resp.json() == {"error": "Either Idea ID or User ID is required"}


@pytest.mark.asyncio
async def test_list_by_idea_includes_stats_and_masks_anonymous_owner(
    client, make_user, make_idea, auth_headers
):
    owner = await make_user()
    reviewer = await make_user()
    idea = await make_idea(owner, is_anonymous=True)
    await client.post(
        "/feedback",
        json={"ideaId": idea.id, "action": "detailed", "rating": 5, "comment": "ship it"},
        headers=auth_headers(reviewer),
    )

    resp = await client.get(f"/feedback?ideaId={idea.id}", headers=auth_headers(reviewer))

    assert resp.status_code == 200
    body = resp.json()
    assert len(body["feedback"]) == 1
    item = body["feedback"][0]
    assert item["idea"]["user"] == {"id": "anonymous", "name": "Anonymous"}
    assert item["user"]["id"] == reviewer.id
    assert body["stats"]["total"] == 1
    assert body["stats"]["detailed"] == 1
    assert body["stats"]["averageRating"] == 5
    assert body["stats"]["likePercentage"] == 0


@pytest.mark.asyncio
async def test_list_for_unknown_idea_is_404(client, make_user, auth_headers):
    user = await make_user()

    resp = await client.get("/feedback?ideaId=999", headers=auth_headers(user))

    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_database_failure_is_500(client, make_user, make_idea, auth_headers):
    owner = await make_user()
    reviewer = await make_user()
    idea = await make_idea(owner)

    with patch("app.services.feedback.insert_for", side_effect=SQLAlchemyError("database is locked")):
        resp = await client.post(
            "/feedback", json={"ideaId": idea.id, "action": "like"}, headers=auth_headers(reviewer)
        )

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to submit feedback"}
