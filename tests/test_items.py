from decimal import Decimal

from helpers import create_trip


async def test_flight_keeps_route_and_drops_location(client, alice):
    trip = await create_trip(client, alice["headers"])
    resp = await client.post(
        f"/trips/{trip['id']}/items",
        json={
            "type": "flight",
            "title": "LIS to OPO",
            "location": "Airport",
            "start_location": "Lisbon",
            "end_location": "Porto",
        },
        headers=alice["headers"],
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["cost"] is None
    assert body["item"]["location"] is None
    assert body["item"]["start_location"] == "Lisbon"
    assert body["item"]["end_location"] == "Porto"
    assert body["item"]["created_by"]["id"] == alice["id"]


async def test_activity_keeps_location_only(client, alice):
    trip = await create_trip(client, alice["headers"])
    resp = await client.post(
        f"/trips/{trip['id']}/items",
        json={"type": "activity", "title": "Museum", "location": "Belem", "start_location": "x", "end_location": "y"},
        headers=alice["headers"],
    )
    item = resp.json()["item"]
    assert item["location"] == "Belem"
    assert item["start_location"] is None and item["end_location"] is None


async def test_item_with_cost_creates_cost(client, alice):
    trip = await create_trip(client, alice["headers"])
    resp = await client.post(
        f"/trips/{trip['id']}/items",
        json={"type": "accommodation", "title": "Hotel", "has_cost": True, "cost_amount": "250.00",
              "cost_currency": "eur", "cost_category": "hotel"},
        headers=alice["headers"],
    )

    cost = resp.json()["cost"]
    assert Decimal(cost["amount"]) == Decimal("250")
    assert cost["currency"] == "EUR"
    assert cost["category"] == "hotel"
    assert cost["description"] == "Hotel"
    assert cost["paid_by_id"] == alice["id"]

    costs = (await client.get(f"/trips/{trip['id']}/costs", headers=alice["headers"])).json()
    assert [c["id"] for c in costs] == [cost["id"]]


async def test_zero_cost_is_ignored(client, alice):
    trip = await create_trip(client, alice["headers"])
    resp = await client.post(
        f"/trips/{trip['id']}/items",
        json={"type": "food", "title": "Picnic", "has_cost": True, "cost_amount": "0"},
        headers=alice["headers"],
    )
    assert resp.json()["cost"] is None


async def test_items_ordered_by_start(client, alice):
    trip = await create_trip(client, alice["headers"])
    for title, start in (("Late", "2026-05-03T10:00:00"), ("Early", "2026-05-01T10:00:00")):
        await client.post(
            f"/trips/{trip['id']}/items",
            json={"type": "activity", "title": title, "start_date": start},
            headers=alice["headers"],
        )

    items = (await client.get(f"/trips/{trip['id']}/items", headers=alice["headers"])).json()
    assert [i["title"] for i in items] == ["Early", "Late"]


async def test_update_reapplies_location_rule(client, alice):
    trip = await create_trip(client, alice["headers"])
    item = (await client.post(
        f"/trips/{trip['id']}/items",
        json={"type": "activity", "title": "Tour", "location": "Old town"},
        headers=alice["headers"],
    )).json()["item"]

    resp = await client.put(
        f"/trips/{trip['id']}/items/{item['id']}",
        json={"type": "transport", "start_location": "A", "end_location": "B"},
        headers=alice["headers"],
    )
    assert resp.status_code == 200
    assert resp.json()["location"] is None
    assert resp.json()["title"] == "Tour"


async def test_item_must_belong_to_trip(client, alice):
    trip = await create_trip(client, alice["headers"])
    other = await create_trip(client, alice["headers"], name="Other")
    item = (await client.post(
        f"/trips/{trip['id']}/items", json={"type": "other", "title": "Thing"}, headers=alice["headers"]
    )).json()["item"]

    assert (await client.get(f"/trips/{other['id']}/items/{item['id']}", headers=alice["headers"])).status_code == 404
    assert (await client.delete(f"/trips/{trip['id']}/items/{item['id']}", headers=alice["headers"])).status_code == 200
    assert (await client.get(f"/trips/{trip['id']}/items/{item['id']}", headers=alice["headers"])).status_code == 404


async def test_item_requires_type_and_title(client, alice):
    trip = await create_trip(client, alice["headers"])
    resp = await client.post(f"/trips/{trip['id']}/items", json={"title": "No type"}, headers=alice["headers"])
    assert resp.status_code == 422
    resp = await client.post(f"/trips/{trip['id']}/items", json={"type": "food"}, headers=alice["headers"])
    assert resp.status_code == 422
    resp = await client.post(
        f"/trips/{trip['id']}/items", json={"type": "food", "title": "  "}, headers=alice["headers"]
    )
    assert resp.status_code == 422

    item = (await client.post(
        f"/trips/{trip['id']}/items", json={"type": "food", "title": "Dinner"}, headers=alice["headers"]
    )).json()["item"]
    resp = await client.put(
        f"/trips/{trip['id']}/items/{item['id']}", json={"title": "\t"}, headers=alice["headers"]
    )
    assert resp.status_code == 422
