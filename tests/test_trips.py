from datetime import datetime, timedelta

from sqlalchemy import select, func

from travelplan.models import TripMember, TripInvite, ItineraryItem, Cost, Task, Poll, Vote, Trip
from helpers import create_trip, add_member


async def test_create_trip_makes_creator_a_member(client, alice):
    trip = await create_trip(client, alice["headers"], description="Sun", start_date="2026-05-01", end_date="2026-05-07")

    assert trip["creator"]["id"] == alice["id"]
    assert [(m["user_id"], m["role"]) for m in trip["members"]] == [(alice["id"], "creator")]


async def test_create_trip_validates_dates(client, alice):
    resp = await client.post(
        "/trips",
        json={"name": "Backwards", "start_date": "2026-05-07", "end_date": "2026-05-01"},
        headers=alice["headers"],
    )
    assert resp.status_code == 422

    resp = await client.post("/trips", json={"description": "no name"}, headers=alice["headers"])
    assert resp.status_code == 422


async def test_trip_name_cannot_be_blank(client, alice):
    resp = await client.post("/trips", json={"name": "   "}, headers=alice["headers"])
    assert resp.status_code == 422

    trip = await create_trip(client, alice["headers"], name="  Porto ")
    assert trip["name"] == "Porto"
    resp = await client.put(f"/trips/{trip['id']}", json={"name": " "}, headers=alice["headers"])
    assert resp.status_code == 422


async def test_list_trips_includes_memberships_newest_first(client, alice, bob):
    first = await create_trip(client, alice["headers"], name="First")
    second = await create_trip(client, alice["headers"], name="Second")
    bobs = await create_trip(client, bob["headers"], name="Bob's")
    await add_member(client, bobs["id"], bob, alice)

    resp = await client.get("/trips", headers=alice["headers"])
    assert resp.status_code == 200
    trips = resp.json()
    assert [t["id"] for t in trips] == [bobs["id"], second["id"], first["id"]]
    assert trips[0]["member_count"] == 2
    assert trips[0]["creator"]["name"] == "Bob"


async def test_non_member_gets_404(client, alice, bob):
    trip = await create_trip(client, alice["headers"])

    for path in ("", "/members", "/items", "/costs", "/tasks", "/polls", "/invites"):
        resp = await client.get(f"/trips/{trip['id']}{path}", headers=bob["headers"])
        assert resp.status_code == 404, path


async def test_only_creator_updates_trip(client, alice, bob):
    trip = await create_trip(client, alice["headers"])
    await add_member(client, trip["id"], alice, bob)

    resp = await client.put(f"/trips/{trip['id']}", json={"name": "Porto"}, headers=bob["headers"])
    assert resp.status_code == 404

    resp = await client.put(f"/trips/{trip['id']}", json={"name": "Porto"}, headers=alice["headers"])
    assert resp.status_code == 200
    assert resp.json()["name"] == "Porto"
    assert len(resp.json()["members"]) == 2


async def test_update_rejects_end_before_existing_start(client, alice):
    trip = await create_trip(client, alice["headers"], start_date="2026-05-10")
    resp = await client.put(f"/trips/{trip['id']}", json={"end_date": "2026-05-01"}, headers=alice["headers"])
    assert resp.status_code == 422


async def test_delete_trip_removes_everything(client, alice, bob, session_factory, future_iso):
    trip = await create_trip(client, alice["headers"])
    trip_id = trip["id"]
    await add_member(client, trip_id, alice, bob)
    h = alice["headers"]

    await client.post(f"/trips/{trip_id}/invites", json={"email": "later@example.com"}, headers=h)
    await client.post(
        f"/trips/{trip_id}/items",
        json={"type": "food", "title": "Dinner", "has_cost": True, "cost_amount": "40.00"},
        headers=h,
    )
    await client.post(f"/trips/{trip_id}/tasks", json={"title": "Book table"}, headers=h)
    poll = (await client.post(
        f"/trips/{trip_id}/polls",
        json={"question": "Where?", "options": ["A", "B"], "expires_at": future_iso()},
        headers=h,
    )).json()
    await client.post(f"/trips/{trip_id}/polls/{poll['id']}/vote", json={"option": "A"}, headers=bob["headers"])

    resp = await client.delete(f"/trips/{trip_id}", headers=bob["headers"])
    assert resp.status_code == 404

    resp = await client.delete(f"/trips/{trip_id}", headers=h)
    assert resp.status_code == 200

    async with session_factory() as session:
        for model in (Trip, TripMember, TripInvite, ItineraryItem, Cost, Task, Poll, Vote):
            count = await session.scalar(select(func.count()).select_from(model))
            assert count == 0, model.__name__

    resp = await client.get(f"/trips/{trip_id}", headers=h)
    assert resp.status_code == 404
