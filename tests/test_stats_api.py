"""API tests for statistics pages, ingredient pages and the home dashboard."""
from datetime import date

from sqlalchemy.exc import SQLAlchemyError

from conftest import auth_headers, make_ingredient, make_pizza, make_user
from services.home_service import HomeService, ingredient_moment_periods


class TestOverview:
    def test_year_overview(self, client, db):
        user = make_user(db, "mario")
        funghi = make_ingredient(db, "Funghi")
        salame = make_ingredient(db, "Salame")
        make_pizza(db, user, date(2025, 3, 3), ingredients=[funghi, salame], rating=8, origin="takeaway")
        make_pizza(db, user, date(2025, 3, 10), ingredients=[salame, funghi], rating=6)
        make_pizza(db, user, date(2024, 3, 10), ingredients=[funghi])

        response = client.get("/api/stats/overview?year=2025")

        assert response.status_code == 200
        data = response.json()
        assert data["total_pizzas"] == 2
        assert data["top_by_count"][0]["avg_rating"] == 7.0
        assert data["top_combinations"][0]["key"] == f"{funghi.id},{salame.id}"
        assert data["top_combinations"][0]["count"] == 2
        assert data["weekday_series"][1] == 2
        assert {s["origin"] for s in data["origins"]} == {"takeaway", "other"}

    def test_origin_filter(self, client, db):
        user = make_user(db, "mario")
        make_pizza(db, user, date(2025, 3, 3), origin="frozen")
        make_pizza(db, user, date(2025, 3, 3))

        data = client.get("/api/stats/overview?year=2025&origin=frozen").json()

        assert data["weekday_series"][1] == 1
        assert data["weekday_max"] == 1

    def test_invalid_origin(self, client):
        assert client.get("/api/stats/overview?origin=moon").status_code == 400

    def test_month_out_of_range(self, client):
        assert client.get("/api/stats/overview?month=13").status_code == 422


class TestBoards:
    def test_top_ingredients_search(self, client, db):
        user = make_user(db, "mario")
        funghi = make_ingredient(db, "Funghi")
        olive = make_ingredient(db, "Olive")
        make_pizza(db, user, date(2025, 3, 3), ingredients=[funghi, olive])
        make_pizza(db, user, date(2025, 3, 4), ingredients=[funghi])

        found = client.get("/api/stats/ingredients/top-count?year=2025&view=search&search=oli").json()
        missed = client.get("/api/stats/ingredients/top-count?year=2025&view=search&search=ananas").json()

        assert found["mode"] == "search"
        assert [r["name"] for r in found["rows"]] == ["Funghi", "Olive"]
        assert missed["search_error"] == "No ingredient found"
        assert missed["mode"] == "all"

    def test_top_combinations_include_single_occurrences(self, client, db):
        user = make_user(db, "mario")
        funghi = make_ingredient(db, "Funghi")
        olive = make_ingredient(db, "Olive")
        make_pizza(db, user, date(2025, 3, 3), ingredients=[funghi, olive])

        data = client.get("/api/stats/ingredients/top-combinations?year=2025").json()

        assert data["total"] == 1
        assert data["rows"][0]["count"] == 1

    def test_top_weekday_users(self, client, db):
        mario = make_user(db, "mario")
        luigi = make_user(db, "luigi")
        make_pizza(db, mario, date(2025, 3, 3))
        make_pizza(db, luigi, date(2025, 3, 3))
        make_pizza(db, luigi, date(2025, 3, 10))
        make_pizza(db, mario, date(2025, 3, 4))

        data = client.get("/api/stats/users/top-weekday?year=2025&weekday=1", headers=auth_headers(mario.id)).json()

        assert [(r["profile"]["username"], r["count"]) for r in data["rows"]] == [("luigi", 2), ("mario", 1)]
        assert data["rows"][1]["is_me"] is True

    def test_weekday_out_of_range(self, client):
        assert client.get("/api/stats/users/top-weekday?weekday=7").status_code == 422

    def test_invalid_view(self, client):
        assert client.get("/api/stats/ingredients/top-count?view=sideways").status_code == 400

    def test_top_distinct_ingredients(self, client, db):
        mario = make_user(db, "mario")
        funghi = make_ingredient(db, "Funghi")
        olive = make_ingredient(db, "Olive")
        for day in (3, 4, 5):
            make_pizza(db, mario, date(2025, 3, day), ingredients=[funghi, olive])

        data = client.get(
            "/api/stats/users/top-distinct-ingredients?year=2025", headers=auth_headers(mario.id)
        ).json()

        assert data["rows"][0]["avg_distinct"] == 2.0
        assert data["rows"][0]["is_me"] is True


class TestIngredientPage:
    def test_profile_and_badges(self, client, db):
        mario = make_user(db, "mario")
        funghi = make_ingredient(db, "Funghi")
        salame = make_ingredient(db, "Salame")
        for day in (3, 10, 17):
            make_pizza(db, mario, date(2025, 3, day), ingredients=[funghi, salame], rating=8)

        response = client.get(f"/api/ingredients/{funghi.id}/profile")

        assert response.status_code == 200
        data = response.json()
        assert data["total_pizzas"] == 3
        assert data["avg_rating"] == 8.0
        assert data["co_occurring"][0]["name"] == "Salame"
        assert data["top_users"][0]["count"] == 3
        assert "Re del Lunedì" in [b["label"] for b in data["badges"]]
        assert "#1 più usato" in [b["label"] for b in data["badges"]]

    def test_unknown_ingredient(self, client):
        assert client.get("/api/ingredients/999/profile").status_code == 404

    def test_create_reuses_existing_name(self, client, db):
        mario = make_user(db, "mario")
        existing = make_ingredient(db, "Funghi")

        response = client.post("/api/ingredients", json={"name": "  funghi "}, headers=auth_headers(mario.id))

        assert response.status_code == 201
        assert response.json()["id"] == existing.id

    def test_create_rejects_offensive_names(self, client, db):
        mario = make_user(db, "mario")

        response = client.post("/api/ingredients", json={"name": "Merda"}, headers=auth_headers(mario.id))

        assert response.status_code == 400

    def test_search(self, client, db):
        make_ingredient(db, "Funghi")
        make_ingredient(db, "Funghi porcini")
        make_ingredient(db, "Salame")

        data = client.get("/api/ingredients?search=FUN").json()

        assert [i["name"] for i in data] == ["Funghi", "Funghi porcini"]


class TestHome:
    def test_dashboard(self, client, db):
        mario = make_user(db, "mario")
        make_pizza(db, mario, date.today())
        client.post("/api/groups", json={"name": "Club"}, headers=auth_headers(mario.id))

        response = client.get("/api/stats/home", headers=auth_headers(mario.id))

        assert response.status_code == 200
        data = response.json()
        assert data["counter"]["pizza_count"] == 1
        assert data["global_counters"]["total_pizzas"] == 1
        assert len(data["ingredient_moments"]) == 4
        assert data["friends_top"]["entries"][0]["is_me"] is True
        assert data["group_widget"]["group_name"] == "Club"
        assert data["group_widget"]["leaderboard"]["entries"][0]["position"] == 1
        assert data["errors"] == []

    def test_failed_section_degrades(self, db, monkeypatch):
        mario = make_user(db, "mario")

        def broken(db, year):
            raise SQLAlchemyError("connection lost")

        monkeypatch.setattr(HomeService, "global_counters", staticmethod(broken))

        home = HomeService.dashboard(db, mario.id, today=date(2025, 6, 15))

        assert home.global_counters is None
        assert home.errors == ["Could not load global counters"]
        assert home.counter is not None
        assert home.group_widget is None

    def test_moment_periods(self):
        periods = ingredient_moment_periods(date(2025, 1, 8))

        assert periods[0][:2] == ("previous_month", "Mese di dicembre")
        assert periods[0][2:] == (date(2024, 12, 1), date(2025, 1, 1))
        assert periods[2][2:] == (date(2024, 12, 30), date(2025, 1, 6))
        assert periods[3][2:] == (date(2025, 1, 6), date(2025, 1, 13))
