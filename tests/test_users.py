from sqlalchemy import select, func

from travelplan.models import Trip, TripMember, TripInvite, ItineraryItem, Cost, Task, Poll, Vote, User
from helpers import create_trip, add_member


async def _search(client, headers, q, trip_id=None):
    params = {"q": q}
    if trip_id is not None:
        params["trip_id"] = trip_id
    resp = await client.get("/users/search", params=params, headers=headers)
    assert resp.status_code == 200
    return [u["email"] for u in resp.json()["users"]]


async def test_search_by_name_or_email(client, alice, bob, make_user):
    await make_user("Bobby", email="robert@example.com")

    assert sorted(await _search(client, alice["headers"], "BOB")) == ["bob@example.com", "robert@example.com"]
    assert await _search(client, alice["headers"], "robert@") == ["robert@example.com"]
    assert await _search(client, alice["headers"], "alice") == []
    assert await _search(client, alice["headers"], " b ") == []


async def test_search_is_capped(client, alice, make_user):
    for i in range(12):
        await make_user(f"Traveler{i}", email=f"traveler{i}@example.com")
    assert len(await _search(client, alice["headers"], "traveler")) == 10


async def test_search_hides_members_and_pending_invitees(client, alice, bob, carol, make_user):
    await make_user("Dave")
    trip = await create_trip(client, alice["headers"])
    await add_member(client, trip["id"], alice, bob)
    await client.post(f"/trips/{trip['id']}/invites", json={"email": carol["email"]}, headers=alice["headers"])

    found = await _search(client, alice["headers"], "example.com", trip_id=trip["id"])
    assert found == ["dave@example.com"]


async def test_search_with_foreign_trip_is_404(client, alice, bob, carol):
    trip = await create_trip(client, alice["headers"])
    await add_member(client, trip["id"], alice, bob)

    resp = await client.get(
        "/users/search", params={"q": "bob", "trip_id": trip["id"]}, headers=carol["headers"]
    )
    assert resp.status_code == 404
    resp = await client.get("/users/search", params={"q": "b", "trip_id": trip["id"]}, headers=carol["headers"])
    assert resp.status_code == 404


async def test_search_treats_wildcards_literally(client, alice, bob, make_user):
    await make_user("Under_Score", email="under_score@example.com")

    assert await _search(client, alice["headers"], "__") == []
    assert await _search(client, alice["headers"], "%%") == []
    assert await _search(client, alice["headers"], "r_s") == ["under_score@example.com"]


async def test_data_summary(client, alice, bob):
    trip = await create_trip(client, alice["headers"])
    await add_member(client, trip["id"], alice, bob)
    await client.post(f"/trips/{trip['id']}/costs", json={"amount": "5", "description": "Tea"}, headers=alice["headers"])
    await client.post(
        f"/trips/{trip['id']}/tasks", json={"title": "Map", "assigned_to_id": alice["id"]}, headers=bob["headers"]
    )

    data = (await client.get("/me/data", headers=alice["headers"])).json()
    assert data["user"]["id"] == alice["id"]
    assert data["data_summary"]["trips"] == 1
    assert data["data_summary"]["costs"] == 1
    assert data["data_summary"]["assigned_tasks"] == 1
    assert data["data_summary"]["sent_invites"] == 1
    assert data["trips"][0]["member_count"] == 2
    assert data["trips"][0]["cost_count"] == 1


async def test_delete_account(client, alice, bob, session_factory, future_iso, fake_redis):
    # Bob's trip, where Alice is a guest leaving traces
    bobs = await create_trip(client, bob["headers"], name="Bob's")
    await add_member(client, bobs["id"], bob, alice)
    await client.post(f"/trips/{bobs['id']}/costs", json={"amount": "30", "description": "Taxi"}, headers=alice["headers"])
    await client.post(f"/trips/{bobs['id']}/items", json={"type": "food", "title": "Lunch"}, headers=alice["headers"])
    await client.post(
        f"/trips/{bobs['id']}/tasks", json={"title": "Assigned", "assigned_to_id": alice["id"]}, headers=bob["headers"]
    )
    await client.post(f"/trips/{bobs['id']}/tasks", json={"title": "Hers"}, headers=alice["headers"])
    her_poll = (await client.post(
        f"/trips/{bobs['id']}/polls",
        json={"question": "Q", "options": ["x", "y"], "expires_at": future_iso()},
        headers=alice["headers"],
    )).json()
    await client.post(f"/trips/{bobs['id']}/polls/{her_poll['id']}/vote", json={"option": "x"}, headers=bob["headers"])
    bobs_poll = (await client.post(
        f"/trips/{bobs['id']}/polls",
        json={"question": "B", "options": ["x", "y"], "expires_at": future_iso()},
        headers=bob["headers"],
    )).json()
    await client.post(f"/trips/{bobs['id']}/polls/{bobs_poll['id']}/vote", json={"option": "y"}, headers=alice["headers"])

    # Alice's own trip with Bob in it
    hers = await create_trip(client, alice["headers"], name="Alice's")
    await add_member(client, hers["id"], alice, bob)
    await client.post(f"/trips/{hers['id']}/costs", json={"amount": "9", "description": "Bus"}, headers=bob["headers"])

    resp = await client.delete("/me/data", headers=alice["headers"])
    assert resp.status_code == 200
    deleted = resp.json()["deleted_data"]
    assert deleted["trips"] == 1
    assert deleted["polls"] == 1
    assert deleted["tasks"] == 1
    assert await fake_redis.zcard(f"refreshs:{alice['id']}") == 0

    async with session_factory() as session:
        count = lambda model, *where: session.scalar(select(func.count()).select_from(model).where(*where))  # noqa: E731

        assert await session.get(User, alice["id"]) is None
        assert await count(Trip) == 1
        assert await count(Trip, Trip.id == hers["id"]) == 0
        assert await count(TripMember, TripMember.user_id == alice["id"]) == 0
        assert await count(TripInvite) == 0
        assert await count(Vote) == 0
        assert await count(Poll) == 1

        taxi = (await session.execute(select(Cost).where(Cost.description == "Taxi"))).scalar_one()
        assert taxi.paid_by_id is None
        lunch = (await session.execute(select(ItineraryItem).where(ItineraryItem.title == "Lunch"))).scalar_one()
        assert lunch.created_by_id is None
        tasks = (await session.execute(select(Task))).scalars().all()
        assert [(t.title, t.assigned_to_id) for t in tasks] == [("Assigned", None)]

    resp = await client.get("/me", headers=alice["headers"])
    assert resp.status_code == 401
