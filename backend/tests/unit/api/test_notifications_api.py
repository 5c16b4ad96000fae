"""
Unit Tests for Notification API Endpoints
Tests for: feed, counts, group join requests and their resolution
"""
import pytest
from httpx import AsyncClient


async def _request_join(client: AsyncClient, profile_id: str, group_id: str, **extra) -> str:
    response = await client.post(
        "/api/notifications/group-request",
        json={"profileId": profile_id, "groupId": group_id, **extra},
    )
    assert response.status_code == 201, response.text
    return response.json()["notificationId"]


class TestFeed:

    async def test_create_and_list(self, client: AsyncClient):
        created = await client.post(
            "/api/notifications", json={"title": "Welcome", "message": "Hello admins", "priority": "high"}
        )

        assert created.status_code == 201
        notification_id = created.json()["notificationId"]
        assert notification_id.startswith("notif_")

        feed = (await client.get("/api/notifications")).json()
        assert len(feed) == 1
        assert feed[0]["id"] == notification_id
        assert feed[0]["type"] == "general"
        assert feed[0]["priority"] == "high"
        assert feed[0]["read"] is False
        assert feed[0]["profileInfo"] is None

    async def test_counts(self, client: AsyncClient, make_profile, make_group):
        await client.post("/api/notifications", json={"title": "A", "message": "a"})
        await _request_join(client, await make_profile(), await make_group())

        counts = (await client.get("/api/notifications/count")).json()

        assert counts == {"totalCount": 2, "unreadCount": 2, "pendingRequests": 1}

    async def test_mark_read_and_read_all(self, client: AsyncClient):
        ids = []
        for title in ("A", "B", "C"):
            response = await client.post("/api/notifications", json={"title": title, "message": "x"})
            ids.append(response.json()["notificationId"])

        single = await client.put(f"/api/notifications/{ids[0]}/read")
        assert single.status_code == 200
        assert (await client.get("/api/notifications/count")).json()["unreadCount"] == 2

        everything = await client.put("/api/notifications/read-all")
        assert everything.json()["message"] == "2 notifications marked as read"
        assert (await client.get("/api/notifications/count")).json()["unreadCount"] == 0

    async def test_delete_and_clear(self, client: AsyncClient):
        first = (await client.post("/api/notifications", json={"title": "A", "message": "a"})).json()
        await client.post("/api/notifications", json={"title": "B", "message": "b"})

        deleted = await client.delete(f"/api/notifications/{first['notificationId']}")
        assert deleted.status_code == 200
        assert (await client.get("/api/notifications/count")).json()["totalCount"] == 1

        cleared = await client.delete("/api/notifications")
        assert cleared.json()["message"] == "1 notifications cleared"
        assert (await client.get("/api/notifications")).json() == []

    async def test_missing_notification(self, client: AsyncClient):
        assert (await client.put("/api/notifications/notif_missing/read")).status_code == 404
        assert (await client.delete("/api/notifications/notif_missing")).status_code == 404


class TestGroupRequests:

    async def test_default_message_and_feed_details(self, client: AsyncClient, make_profile, make_group):
        profile_id = await make_profile("Ada", "Lovelace")
        group_id = await make_group(name="Readers")

        await _request_join(client, profile_id, group_id)

        entry = (await client.get("/api/notifications")).json()[0]
        assert entry["type"] == "group_request"
        assert entry["title"] == "Group Join Request"
        assert entry["message"] == 'Ada Lovelace wants to join the "Readers" group'
        assert entry["groupName"] == "Readers"
        assert entry["profileInfo"]["fullName"] == "Ada Lovelace"
        assert entry["resolved"] is False

    async def test_unknown_profile_or_group(self, client: AsyncClient, make_profile, make_group):
        bad_profile = await client.post(
            "/api/notifications/group-request", json={"profileId": "nope", "groupId": await make_group()}
        )
        bad_group = await client.post(
            "/api/notifications/group-request", json={"profileId": await make_profile(), "groupId": "nope"}
        )

        assert bad_profile.status_code == 404
        assert bad_group.status_code == 404

    async def test_approve_moves_profile(self, client: AsyncClient, make_profile, make_group):
        profile_id = await make_profile()
        old_group = await make_group([profile_id])
        new_group = await make_group()
        notification_id = await _request_join(client, profile_id, new_group)

        response = await client.put(f"/api/notifications/{notification_id}/resolve", json={"action": "approve"})

        assert response.status_code == 200
        assert response.json()["message"] == "Group request approved successfully"
        assert (await client.get(f"/api/profiles/{profile_id}")).json()["groupId"] == new_group
        assert (await client.get(f"/api/groups/{old_group}")).json()["memberCount"] == 0

        entry = (await client.get("/api/notifications")).json()[0]
        assert entry["resolved"] is True
        assert entry["resolution"] == "approved"
        assert entry["read"] is True
        assert entry["resolvedAt"] is not None
        assert (await client.get("/api/notifications/count")).json()["pendingRequests"] == 0

    async def test_deny_leaves_groups_alone(self, client: AsyncClient, make_profile, make_group):
        profile_id = await make_profile()
        old_group = await make_group([profile_id])
        notification_id = await _request_join(client, profile_id, await make_group())

        response = await client.put(f"/api/notifications/{notification_id}/resolve", json={"action": "deny"})

        assert response.status_code == 200
        assert (await client.get(f"/api/profiles/{profile_id}")).json()["groupId"] == old_group
        assert (await client.get("/api/notifications")).json()[0]["resolution"] == "denied"

    async def test_resolve_twice_conflicts(self, client: AsyncClient, make_profile, make_group):
        notification_id = await _request_join(client, await make_profile(), await make_group())
        await client.put(f"/api/notifications/{notification_id}/resolve", json={"action": "deny"})

        response = await client.put(f"/api/notifications/{notification_id}/resolve", json={"action": "approve"})

        assert response.status_code == 409

    async def test_general_notification_cannot_be_resolved(self, client: AsyncClient):
        created = await client.post("/api/notifications", json={"title": "A", "message": "a"})
        notification_id = created.json()["notificationId"]

        response = await client.put(f"/api/notifications/{notification_id}/resolve", json={"action": "approve"})

        assert response.status_code == 404

    async def test_invalid_action(self, client: AsyncClient, make_profile, make_group):
        notification_id = await _request_join(client, await make_profile(), await make_group())

        response = await client.put(f"/api/notifications/{notification_id}/resolve", json={"action": "maybe"})

        assert response.status_code == 400

    async def test_approve_retags_seat(self, client: AsyncClient, make_profile, make_group, make_room):
        profile_id = await make_profile()
        old_group = await make_group([profile_id])
        new_group = await make_group()
        room_id = await make_room(3)
        await client.post(f"/api/rooms/{room_id}/groups", json={"groupIds": [old_group]})
        notification_id = await _request_join(client, profile_id, new_group)

        await client.put(f"/api/notifications/{notification_id}/resolve", json={"action": "approve"})

        room = (await client.get(f"/api/rooms/{room_id}")).json()
        assert room["current_count"] == 1
        assert room["members"][0]["groupId"] == new_group


class TestNotificationReferences:

    @pytest.mark.parametrize("field", ["profileId", "groupId", "roomId", "userId"])
    async def test_unknown_reference_is_rejected(self, client: AsyncClient, field):
        response = await client.post(
            "/api/notifications", json={"title": "A", "message": "a", field: "no-such-row"}
        )

        assert response.status_code == 404
        assert response.json()["code"].endswith("_NOT_FOUND")
        assert (await client.get("/api/notifications/count")).json()["totalCount"] == 0

    async def test_group_request_with_unknown_ids_is_rejected(self, client: AsyncClient):
        response = await client.post("/api/notifications", json={
            "type": "group_request",
            "title": "Group Join Request",
            "message": "please",
            "profileId": "no-such-profile",
            "groupId": "no-such-group",
        })

        assert response.status_code == 404
        assert (await client.get("/api/notifications/count")).json()["pendingRequests"] == 0

    async def test_group_request_needs_profile_and_group(self, client: AsyncClient, make_profile):
        response = await client.post("/api/notifications", json={
            "type": "group_request", "title": "T", "message": "m", "profileId": await make_profile(),
        })

        assert response.status_code == 400

    async def test_group_request_through_generic_create_can_be_approved(self, client: AsyncClient,
                                                                      make_profile, make_group, make_room):
        profile_id, group_id, room_id = await make_profile(), await make_group(), await make_room()
        created = await client.post("/api/notifications", json={
            "type": "group_request",
            "title": "Group Join Request",
            "message": "please",
            "profileId": profile_id,
            "groupId": group_id,
            "roomId": room_id,
        })
        assert created.status_code == 201

        notification_id = created.json()["notificationId"]
        response = await client.put(f"/api/notifications/{notification_id}/resolve", json={"action": "approve"})

        assert response.status_code == 200
        assert (await client.get(f"/api/profiles/{profile_id}")).json()["groupId"] == group_id
        entry = (await client.get("/api/notifications")).json()[0]
        assert entry["roomName"] is not None

    async def test_user_reference(self, client: AsyncClient, test_user):
        response = await client.post(
            "/api/notifications", json={"title": "A", "message": "a", "userId": test_user["id"]}
        )

        assert response.status_code == 201
