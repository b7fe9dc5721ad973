"""API tests for groups, their leaderboard and weekly chart."""
from datetime import date

from conftest import auth_headers, make_pizza, make_user
from models import UserYearlyCounter


def create_group(client, owner, name="Pizza Club", visibility="public"):
    response = client.post(
        "/api/groups",
        json={"name": name, "visibility": visibility},
        headers=auth_headers(owner.id),
    )
    assert response.status_code == 201
    return response.json()


class TestMembership:
    def test_owner_is_a_member(self, client, db):
        owner = make_user(db, "mario")
        group = create_group(client, owner)

        detail = client.get(f"/api/groups/{group['id']}", headers=auth_headers(owner.id)).json()

        assert detail["is_owner"] is True
        assert detail["membership_status"] == "active"
        assert detail["member_count"] == 1

    def test_invalid_visibility(self, client, db):
        owner = make_user(db, "mario")

        response = client.post(
            "/api/groups", json={"name": "Club", "visibility": "secret"}, headers=auth_headers(owner.id)
        )

        assert response.status_code == 400

    def test_join_public_group(self, client, db):
        owner = make_user(db, "mario")
        guest = make_user(db, "luigi")
        group = create_group(client, owner)

        response = client.post(f"/api/groups/{group['id']}/join", headers=auth_headers(guest.id))
        again = client.post(f"/api/groups/{group['id']}/join", headers=auth_headers(guest.id))

        assert response.json()["status"] == "active"
        assert again.status_code == 400

    def test_closed_group_needs_approval(self, client, db):
        owner = make_user(db, "mario")
        guest = make_user(db, "luigi")
        group = create_group(client, owner, visibility="closed")

        joined = client.post(f"/api/groups/{group['id']}/join", headers=auth_headers(guest.id)).json()
        detail = client.get(f"/api/groups/{group['id']}", headers=auth_headers(owner.id)).json()
        approved = client.post(
            f"/api/groups/{group['id']}/members", json={"user_id": str(guest.id)}, headers=auth_headers(owner.id)
        ).json()

        assert joined["status"] == "pending"
        assert [m["user_id"] for m in detail["pending_requests"]] == [str(guest.id)]
        assert approved["status"] == "active"

    def test_private_group_is_hidden(self, client, db):
        owner = make_user(db, "mario")
        stranger = make_user(db, "peach")
        group = create_group(client, owner, visibility="private")

        response = client.get(f"/api/groups/{group['id']}", headers=auth_headers(stranger.id))
        listing = client.get("/api/groups", headers=auth_headers(stranger.id)).json()

        assert response.status_code == 404
        assert listing["explore"] == []

    def test_only_owner_adds_members(self, client, db):
        owner = make_user(db, "mario")
        guest = make_user(db, "luigi")
        group = create_group(client, owner)

        response = client.post(
            f"/api/groups/{group['id']}/members", json={"user_id": str(owner.id)}, headers=auth_headers(guest.id)
        )

        assert response.status_code == 403

    def test_owner_cannot_leave(self, client, db):
        owner = make_user(db, "mario")
        group = create_group(client, owner)

        response = client.post(f"/api/groups/{group['id']}/leave", headers=auth_headers(owner.id))

        assert response.status_code == 400

    def test_member_leaves(self, client, db):
        owner = make_user(db, "mario")
        guest = make_user(db, "luigi")
        group = create_group(client, owner)
        client.post(f"/api/groups/{group['id']}/join", headers=auth_headers(guest.id))

        response = client.post(f"/api/groups/{group['id']}/leave", headers=auth_headers(guest.id))

        assert response.status_code == 204

    def test_invite_candidates_skip_members(self, client, db):
        owner = make_user(db, "mario")
        make_user(db, "marina")
        group = create_group(client, owner)

        data = client.get(
            f"/api/groups/{group['id']}/invite-candidates?q=mar", headers=auth_headers(owner.id)
        ).json()

        assert [c["username"] for c in data["candidates"]] == ["marina"]


class TestGroupLeaderboard:
    def _group_of_three(self, client, db):
        a = make_user(db, "anna")
        b = make_user(db, "bruno")
        c = make_user(db, "carla")
        group = create_group(client, a)
        for member in (b, c):
            client.post(f"/api/groups/{group['id']}/join", headers=auth_headers(member.id))

        for day in range(1, 6):
            make_pizza(db, a, date(2025, 1, day))
            make_pizza(db, b, date(2025, 2, day))
        make_pizza(db, c, date(2025, 3, 1))
        make_pizza(db, c, date(2025, 3, 2))
        db.add(UserYearlyCounter(user_id=b.id, year=2025, base_count=10))
        db.commit()
        return group, a, b, c

    def test_base_counts_are_included(self, client, db):
        group, a, b, c = self._group_of_three(client, db)

        data = client.get(
            f"/api/groups/{group['id']}/leaderboard?year=2025&view=all", headers=auth_headers(a.id)
        ).json()

        entries = data["entries"]
        assert [e["user_id"] for e in entries] == [str(b.id), str(a.id), str(c.id)]
        assert [e["total"] for e in entries] == [15, 5, 2]
        assert [e["position"] for e in entries] == [1, 2, 3]
        assert all(e["is_podium"] for e in entries)
        assert entries[1]["is_me"] is True
        assert entries[0]["profile"]["username"] == "bruno"

    def test_search_miss(self, client, db):
        group, a, _, _ = self._group_of_three(client, db)

        data = client.get(
            f"/api/groups/{group['id']}/leaderboard?year=2025&view=search&search=zorro",
            headers=auth_headers(a.id),
        ).json()

        assert data["search_error"] == "No user found"
        assert data["mode"] == "around_me"
        assert len(data["entries"]) == 3

    def test_invalid_view(self, client, db):
        owner = make_user(db, "mario")
        group = create_group(client, owner)

        response = client.get(f"/api/groups/{group['id']}/leaderboard?view=sideways", headers=auth_headers(owner.id))

        assert response.status_code == 400

    def test_weekly_chart(self, client, db):
        group, a, b, c = self._group_of_three(client, db)

        data = client.get(
            f"/api/groups/{group['id']}/weekly?year=2025&mode=pizzas&view=top", headers=auth_headers(a.id)
        ).json()

        assert {p["username"] for p in data["participants"]} == {"anna", "bruno", "carla"}
        last = data["points"][-1]
        assert last["data"] == {str(a.id): 5, str(b.id): 5, str(c.id): 2}
        assert data["points"][0]["week_label"] == "S1"

    def test_weekly_chart_invalid_mode(self, client, db):
        owner = make_user(db, "mario")
        group = create_group(client, owner)

        response = client.get(f"/api/groups/{group['id']}/weekly?mode=pies", headers=auth_headers(owner.id))

        assert response.status_code == 400
