"""
Integration Tests for room capacity

Drives mixed sequences of admissions through the API and checks that no
room ever reports more seats than its max_capacity.
"""
import random

import pytest
from httpx import AsyncClient


async def _occupancy(client: AsyncClient) -> dict:
    rooms = (await client.get("/api/rooms")).json()
    return {r["id"]: (r["current_count"], r["max_capacity"]) for r in rooms}


class TestCapacityScenario:

    async def test_group_fills_room_then_individual_rejected(self, client: AsyncClient, make_room,
                                                             make_profile, make_group, seated_count):
        """Room of 5 with 3 seated: a group of 2 fits exactly, one more does not"""
        room_id = await make_room(5)
        for _ in range(3):
            response = await client.post(f"/api/rooms/{room_id}/members", json={"profileId": await make_profile()})
            assert response.status_code == 200
        group_id = await make_group([await make_profile(), await make_profile()])

        assigned = await client.post(f"/api/rooms/{room_id}/groups", json={"groupIds": [group_id]})
        assert assigned.status_code == 200
        assert await seated_count(room_id) == 5

        rejected = await client.post(f"/api/rooms/{room_id}/members", json={"profileId": await make_profile()})
        assert rejected.status_code == 400
        assert rejected.json()["code"] == "CAPACITY_EXCEEDED"
        assert await seated_count(room_id) == 5

    async def test_multiple_groups_all_or_nothing(self, client: AsyncClient, make_room, make_profile,
                                                  make_group, seated_count):
        room_id = await make_room(4)
        small = await make_group([await make_profile(), await make_profile()])
        large = await make_group([await make_profile() for _ in range(3)])

        response = await client.post(f"/api/rooms/{room_id}/groups", json={"groupIds": [small, large]})

        assert response.status_code == 400
        assert await seated_count(room_id) == 0
        assert (await client.get(f"/api/groups/{small}")).json()["assignedRoom"] is None

    @pytest.mark.parametrize("seed", [1, 7, 42])
    async def test_random_admissions_never_overfill(self, client: AsyncClient, make_room, make_profile,
                                                    make_group, seed):
        rng = random.Random(seed)
        rooms = [await make_room(rng.randint(0, 4)) for _ in range(3)]
        profiles = [await make_profile() for _ in range(12)]
        groups = [
            await make_group(profiles[i:i + rng.randint(1, 3)])
            for i in (0, 4, 8)
        ]

        for _ in range(20):
            room_id = rng.choice(rooms)
            action = rng.choice(["single", "bulk", "group", "auto"])
            if action == "single":
                await client.post(f"/api/rooms/{room_id}/members", json={"profileId": rng.choice(profiles)})
            elif action == "bulk":
                await client.post(
                    f"/api/rooms/{room_id}/members/bulk", json={"profileIds": rng.sample(profiles, 4)}
                )
            elif action == "group":
                await client.post(f"/api/rooms/{room_id}/groups", json={"groupIds": [rng.choice(groups)]})
            else:
                await client.post("/api/rooms/auto-assign")

            for count, capacity in (await _occupancy(client)).values():
                assert count <= capacity

        # Every profile holds at most one seat
        seated = []
        for room_id in rooms:
            seated.extend(m["id"] for m in (await client.get(f"/api/rooms/{room_id}")).json()["members"])
        assert len(seated) == len(set(seated))
