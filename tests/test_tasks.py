from helpers import create_trip, add_member


async def test_create_task_defaults(client, alice):
    trip = await create_trip(client, alice["headers"])
    resp = await client.post(f"/trips/{trip['id']}/tasks", json={"title": "  Pack bags  "}, headers=alice["headers"])

    assert resp.status_code == 201
    task = resp.json()
    assert task["title"] == "Pack bags"
    assert (task["category"], task["priority"], task["status"]) == ("general", "medium", "pending")
    assert task["created_by"]["id"] == alice["id"]
    assert task["assigned_to"] is None


async def test_blank_title_rejected(client, alice):
    trip = await create_trip(client, alice["headers"])
    resp = await client.post(f"/trips/{trip['id']}/tasks", json={"title": "   "}, headers=alice["headers"])
    assert resp.status_code == 422


async def test_assignee_must_be_member(client, alice, bob, carol):
    trip = await create_trip(client, alice["headers"])
    await add_member(client, trip["id"], alice, bob)

    resp = await client.post(
        f"/trips/{trip['id']}/tasks", json={"title": "Tickets", "assigned_to_id": carol["id"]}, headers=alice["headers"]
    )
    assert resp.status_code == 400

    resp = await client.post(
        f"/trips/{trip['id']}/tasks", json={"title": "Tickets", "assigned_to_id": bob["id"]}, headers=alice["headers"]
    )
    assert resp.status_code == 201
    assert resp.json()["assigned_to"]["name"] == "Bob"


async def test_filters(client, alice, bob):
    trip = await create_trip(client, alice["headers"])
    await add_member(client, trip["id"], alice, bob)
    url = f"/trips/{trip['id']}/tasks"
    await client.post(url, json={"title": "Visa", "category": "other", "priority": "high"}, headers=alice["headers"])
    await client.post(url, json={"title": "Snacks", "category": "food", "assigned_to_id": bob["id"]}, headers=alice["headers"])
    done = (await client.post(url, json={"title": "Insurance"}, headers=alice["headers"])).json()
    await client.put(f"{url}/{done['id']}", json={"status": "completed"}, headers=alice["headers"])

    titles = lambda resp: [t["title"] for t in resp.json()]  # noqa: E731
    assert titles(await client.get(url, headers=alice["headers"])) == ["Insurance", "Snacks", "Visa"]
    assert titles(await client.get(url, params={"status": "completed"}, headers=alice["headers"])) == ["Insurance"]
    assert titles(await client.get(url, params={"category": "food"}, headers=alice["headers"])) == ["Snacks"]
    assert titles(await client.get(url, params={"priority": "high"}, headers=alice["headers"])) == ["Visa"]
    assert titles(await client.get(url, params={"assigned_to_id": bob["id"]}, headers=alice["headers"])) == ["Snacks"]


async def test_unassign_with_null(client, alice, bob):
    trip = await create_trip(client, alice["headers"])
    await add_member(client, trip["id"], alice, bob)
    task = (await client.post(
        f"/trips/{trip['id']}/tasks", json={"title": "Car", "assigned_to_id": bob["id"]}, headers=alice["headers"]
    )).json()

    resp = await client.put(
        f"/trips/{trip['id']}/tasks/{task['id']}", json={"assigned_to_id": None}, headers=bob["headers"]
    )
    assert resp.status_code == 200
    assert resp.json()["assigned_to_id"] is None
    assert resp.json()["title"] == "Car"


async def test_delete_task(client, alice):
    trip = await create_trip(client, alice["headers"])
    task = (await client.post(f"/trips/{trip['id']}/tasks", json={"title": "Go"}, headers=alice["headers"])).json()

    assert (await client.delete(f"/trips/{trip['id']}/tasks/{task['id']}", headers=alice["headers"])).status_code == 200
    assert (await client.get(f"/trips/{trip['id']}/tasks/{task['id']}", headers=alice["headers"])).status_code == 404
