"""Request helpers shared by the API tests."""


async def create_trip(client, headers, name="Lisbon", **extra):
    resp = await client.post("/trips", json={"name": name, **extra}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def add_member(client, trip_id, owner, guest):
    """Invite ``guest`` to the trip and accept on their behalf."""
    resp = await client.post(f"/trips/{trip_id}/invites", json={"email": guest["email"]}, headers=owner["headers"])
    assert resp.status_code == 201, resp.text
    invite_id = resp.json()["id"]
    resp = await client.put(f"/invites/{invite_id}", json={"action": "accept"}, headers=guest["headers"])
    assert resp.status_code == 200, resp.text
