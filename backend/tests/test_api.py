"""
Tests for the HTTP endpoints: status mapping, auth and organizer gating.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_register_endpoint_admits(client: AsyncClient, make_event, auth_headers):
    event = await make_event(capacity=2)
    response = await client.post(
        f"/api/v1/events/{event.id}/registrations",
        headers=auth_headers(1),
    )
    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["outcome"] == "admitted"
    assert data["registration"]["status"] == "registered"
    assert data["registration"]["user_id"] == 1


@pytest.mark.asyncio
async def test_register_endpoint_waitlists(client: AsyncClient, make_event, auth_headers):
    event = await make_event(capacity=1)
    await client.post(f"/api/v1/events/{event.id}/registrations", headers=auth_headers(1))

    response = await client.post(f"/api/v1/events/{event.id}/registrations", headers=auth_headers(2))
    assert response.status_code == 202
    assert response.json()["outcome"] == "waitlisted"


@pytest.mark.asyncio
async def test_register_unauthenticated(client: AsyncClient, make_event):
    event = await make_event()
    response = await client.post(f"/api/v1/events/{event.id}/registrations")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_register_with_bad_token(client: AsyncClient, make_event):
    event = await make_event()
    response = await client.post(
        f"/api/v1/events/{event.id}/registrations",
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_register_invite_only(client: AsyncClient, make_event, auth_headers):
    event = await make_event(registration_type="invite_only", invite_code="SPRING24")

    missing = await client.post(f"/api/v1/events/{event.id}/registrations", headers=auth_headers(1))
    assert missing.status_code == 403
    assert missing.json()["reason"] == "invite_required"

    wrong = await client.post(
        f"/api/v1/events/{event.id}/registrations",
        json={"invite_code": "wrong"},
        headers=auth_headers(1),
    )
    assert wrong.status_code == 403
    assert wrong.json()["reason"] == "invalid_invite_code"

    correct = await client.post(
        f"/api/v1/events/{event.id}/registrations",
        json={"invite_code": "spring24"},
        headers=auth_headers(1),
    )
    assert correct.status_code == 201


@pytest.mark.asyncio
async def test_register_duplicate_returns_conflict(client: AsyncClient, make_event, auth_headers):
    event = await make_event(capacity=5)
    first = await client.post(f"/api/v1/events/{event.id}/registrations", headers=auth_headers(1))
    second = await client.post(f"/api/v1/events/{event.id}/registrations", headers=auth_headers(1))

    assert second.status_code == 409
    body = second.json()
    assert body["reason"] == "already_registered"
    assert body["registration"]["id"] == first.json()["registration"]["id"]


@pytest.mark.asyncio
async def test_register_past_event(client: AsyncClient, make_event, auth_headers):
    event = await make_event(days_from_now=-1)
    response = await client.post(f"/api/v1/events/{event.id}/registrations", headers=auth_headers(1))
    assert response.status_code == 400
    assert response.json()["reason"] == "event_in_past"


@pytest.mark.asyncio
async def test_register_unknown_event(client: AsyncClient, auth_headers):
    response = await client.post("/api/v1/events/99999/registrations", headers=auth_headers(1))
    assert response.status_code == 404
    assert response.json()["reason"] == "event_not_found"


@pytest.mark.asyncio
async def test_cancel_endpoint_promotes(client: AsyncClient, make_event, auth_headers):
    event = await make_event(capacity=1)
    await client.post(f"/api/v1/events/{event.id}/registrations", headers=auth_headers(1))
    await client.post(f"/api/v1/events/{event.id}/registrations", headers=auth_headers(2))

    response = await client.delete(f"/api/v1/events/{event.id}/registrations/me", headers=auth_headers(1))
    assert response.status_code == 200
    data = response.json()
    assert data["outcome"] == "cancelled"
    assert data["registration"]["status"] == "cancelled"
    assert [r["user_id"] for r in data["promoted"]] == [2]

    mine = await client.get(f"/api/v1/events/{event.id}/registrations/me", headers=auth_headers(2))
    assert mine.json()["registration"]["status"] == "registered"


@pytest.mark.asyncio
async def test_cancel_endpoint_not_registered(client: AsyncClient, make_event, auth_headers):
    event = await make_event()
    response = await client.delete(f"/api/v1/events/{event.id}/registrations/me", headers=auth_headers(1))
    assert response.status_code == 404
    assert response.json()["reason"] == "not_registered"


@pytest.mark.asyncio
async def test_my_registration_reports_position(client: AsyncClient, make_event, auth_headers):
    event = await make_event(capacity=1)
    for user_id in (1, 2, 3):
        await client.post(f"/api/v1/events/{event.id}/registrations", headers=auth_headers(user_id))

    response = await client.get(f"/api/v1/events/{event.id}/registrations/me", headers=auth_headers(3))
    assert response.status_code == 200
    data = response.json()
    assert data["registration"]["status"] == "waitlist"
    assert data["waitlist_position"] == 2


@pytest.mark.asyncio
async def test_invite_requires_organizer(client: AsyncClient, make_event, auth_headers):
    event = await make_event()
    response = await client.post(
        f"/api/v1/events/{event.id}/invitations",
        json={"user_id": 5},
        headers=auth_headers(1),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_organizer_invite_and_check_in(client: AsyncClient, make_event, auth_headers, organizer_headers):
    event = await make_event(capacity=1)

    invited = await client.post(
        f"/api/v1/events/{event.id}/invitations",
        json={"user_id": 5},
        headers=organizer_headers,
    )
    assert invited.status_code == 201
    assert invited.json()["registration"]["status"] == "invited"

    await client.post(f"/api/v1/events/{event.id}/registrations", headers=auth_headers(6))
    checked_in = await client.post(
        f"/api/v1/events/{event.id}/check-ins",
        json={"user_id": 6},
        headers=organizer_headers,
    )
    assert checked_in.status_code == 200
    assert checked_in.json()["registration"]["status"] == "attended"

    again = await client.post(
        f"/api/v1/events/{event.id}/check-ins",
        json={"user_id": 6},
        headers=organizer_headers,
    )
    assert again.status_code == 409


@pytest.mark.asyncio
async def test_promote_endpoint(client: AsyncClient, make_event, auth_headers, organizer_headers, db_session):
    event = await make_event(capacity=1)
    for user_id in (1, 2, 3):
        await client.post(f"/api/v1/events/{event.id}/registrations", headers=auth_headers(user_id))

    event.capacity = 2
    await db_session.commit()

    response = await client.post(f"/api/v1/events/{event.id}/waitlist/promote", headers=organizer_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["outcome"] == "promoted"
    assert [r["user_id"] for r in data["promoted"]] == [2]


@pytest.mark.asyncio
async def test_event_and_summary(client: AsyncClient, make_event, auth_headers):
    event = await make_event(capacity=2, title="Intro to Burp Suite")
    for user_id in (1, 2, 3):
        await client.post(f"/api/v1/events/{event.id}/registrations", headers=auth_headers(user_id))

    detail = await client.get(f"/api/v1/events/{event.id}")
    assert detail.status_code == 200
    assert detail.json()["title"] == "Intro to Burp Suite"
    assert "invite_code" not in detail.json()

    summary = await client.get(f"/api/v1/events/{event.id}/summary")
    assert summary.status_code == 200
    data = summary.json()
    assert data["registered_count"] == 2
    assert data["waitlist_count"] == 1
    assert data["at_capacity"] is True
    assert data["cached"] is False


@pytest.mark.asyncio
async def test_event_not_found(client: AsyncClient):
    assert (await client.get("/api/v1/events/99999")).status_code == 404
    assert (await client.get("/api/v1/events/99999/summary")).status_code == 404


@pytest.mark.asyncio
async def test_health_and_metrics(client: AsyncClient):
    health = await client.get("/health")
    assert health.status_code == 200
    assert health.json()["cache"] == {"status": "disabled"}

    metrics = await client.get("/metrics")
    assert metrics.status_code == 200
    assert "registration_outcomes_total" in metrics.text


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
