"""API tests for friend requests and the friends leaderboard."""
from datetime import date
from uuid import uuid4

from conftest import auth_headers, make_pizza, make_user
from models import Friendship


def befriend(client, requester, addressee):
    request = client.post(
        "/api/friends/requests", json={"addressee_id": str(addressee.id)}, headers=auth_headers(requester.id)
    ).json()
    client.post(f"/api/friends/requests/{request['id']}/accept", headers=auth_headers(addressee.id))
    return request


class TestFriendRequests:
    def test_request_and_accept(self, client, db):
        mario = make_user(db, "mario")
        luigi = make_user(db, "luigi")

        sent = client.post(
            "/api/friends/requests", json={"addressee_id": str(luigi.id)}, headers=auth_headers(mario.id)
        )
        incoming = client.get("/api/friends", headers=auth_headers(luigi.id)).json()["incoming"]
        accepted = client.post(f"/api/friends/requests/{sent.json()['id']}/accept", headers=auth_headers(luigi.id))

        assert sent.status_code == 201
        assert sent.json()["status"] == "pending"
        assert [f["profile"]["username"] for f in incoming] == ["mario"]
        assert accepted.json()["status"] == "accepted"

        friends = client.get("/api/friends", headers=auth_headers(mario.id)).json()
        assert [f["user_id"] for f in friends["friends"]] == [str(luigi.id)]

    def test_request_to_self(self, client, db):
        mario = make_user(db, "mario")

        response = client.post(
            "/api/friends/requests", json={"addressee_id": str(mario.id)}, headers=auth_headers(mario.id)
        )

        assert response.status_code == 400

    def test_request_to_unknown_user(self, client, db):
        mario = make_user(db, "mario")

        response = client.post(
            "/api/friends/requests", json={"addressee_id": str(uuid4())}, headers=auth_headers(mario.id)
        )

        assert response.status_code == 404

    def test_duplicate_request_in_either_direction(self, client, db):
        mario = make_user(db, "mario")
        luigi = make_user(db, "luigi")
        client.post("/api/friends/requests", json={"addressee_id": str(luigi.id)}, headers=auth_headers(mario.id))

        response = client.post(
            "/api/friends/requests", json={"addressee_id": str(mario.id)}, headers=auth_headers(luigi.id)
        )

        assert response.status_code == 400

    def test_only_recipient_accepts(self, client, db):
        mario = make_user(db, "mario")
        luigi = make_user(db, "luigi")
        request = client.post(
            "/api/friends/requests", json={"addressee_id": str(luigi.id)}, headers=auth_headers(mario.id)
        ).json()

        response = client.post(f"/api/friends/requests/{request['id']}/accept", headers=auth_headers(mario.id))
        missing = client.post("/api/friends/requests/999/accept", headers=auth_headers(luigi.id))

        assert response.status_code == 403
        assert missing.status_code == 404


class TestFriendSearch:
    def test_linked_users_are_left_out(self, client, db):
        mario = make_user(db, "mario")
        luigi = make_user(db, "luigi")
        make_user(db, "luisa")
        befriend(client, mario, luigi)

        data = client.get("/api/friends/search?q=lu", headers=auth_headers(mario.id)).json()

        assert [p["username"] for p in data["results"]] == ["luisa"]


class TestFriendsLeaderboard:
    def test_includes_me_and_friends_only(self, client, db):
        mario = make_user(db, "mario")
        luigi = make_user(db, "luigi")
        stranger = make_user(db, "peach")
        befriend(client, mario, luigi)
        make_pizza(db, mario, date(2025, 4, 1))
        make_pizza(db, luigi, date(2025, 4, 1))
        make_pizza(db, luigi, date(2025, 4, 2))
        make_pizza(db, stranger, date(2025, 4, 2))

        data = client.get("/api/friends/leaderboard?year=2025", headers=auth_headers(mario.id)).json()

        assert [e["user_id"] for e in data["entries"]] == [str(luigi.id), str(mario.id)]
        assert data["entries"][1]["is_me"] is True
        assert data["total"] == 2

    def test_large_friend_list_is_not_truncated(self, client, db):
        mario = make_user(db, "mario")
        friends = [make_user(db, f"amico{n:02d}") for n in range(55)]
        for friend in friends:
            db.add(Friendship(requester_id=mario.id, addressee_id=friend.id, status=Friendship.STATUS_ACCEPTED))
        db.commit()
        make_pizza(db, friends[0], date(2025, 5, 1))

        data = client.get("/api/friends/leaderboard?year=2025", headers=auth_headers(mario.id)).json()

        assert data["total"] == 56
        assert len(data["entries"]) == 56
        assert data["entries"][0]["user_id"] == str(friends[0].id)
        assert sum(1 for e in data["entries"] if e["is_me"]) == 1
