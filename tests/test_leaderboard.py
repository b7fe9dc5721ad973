"""Tests for leaderboard aggregation and windowing."""
from datetime import date
from uuid import uuid4

from services.leaderboard_service import (
    CHART_PIZZAS,
    CHART_POSITIONS,
    VIEW_ALL,
    VIEW_AROUND_ME,
    VIEW_SEARCH,
    VIEW_TOP,
    around_index,
    build_leaderboard,
    chart_participants,
    find_in_leaderboard,
    full_view,
    index_of_user,
    page_slice,
    position_of,
    rank_counts,
    select_view,
    total_pages,
    weekly_progression,
)
from services.ranking_service import global_rank
from services.rows import LeaderboardRow, PizzaRow, ProfileRow


def _row(n, total=0, username=None, display_name=None):
    uid = uuid4()
    return LeaderboardRow(
        user_id=uid,
        profile=ProfileRow(id=uid, username=username or f"user{n}", display_name=display_name),
        base_count=0,
        pizza_count=total,
        total=total,
        is_me=False,
    )


def _board(size):
    return [_row(n, total=size - n) for n in range(size)]


class TestBuildLeaderboard:
    def test_base_count_changes_order(self):
        a, b, c = uuid4(), uuid4(), uuid4()
        pizzas = [a] * 5 + [b] * 5 + [c] * 2

        rows = build_leaderboard([a, b, c], pizzas, {b: 10}, viewer_id=a, profiles={})

        assert [r.user_id for r in rows] == [b, a, c]
        assert [r.total for r in rows] == [15, 5, 2]
        assert rows[0].base_count == 10
        assert rows[0].pizza_count == 5
        assert rows[1].is_me is True

    def test_global_rank_ignores_base_count(self):
        a, b, c = uuid4(), uuid4(), uuid4()
        pizzas = [a] * 5 + [b] * 5 + [c] * 2

        assert global_rank(pizzas, a).rank == 1
        assert global_rank(pizzas, b).rank == 2
        assert global_rank(pizzas, c).rank == 3
        assert global_rank(pizzas, c).total_users == 3

    def test_participants_without_pizzas_are_listed(self):
        a, b = uuid4(), uuid4()

        rows = build_leaderboard([a, b], [a], {}, viewer_id=None, profiles={})

        assert [(r.user_id, r.total) for r in rows] == [(a, 1), (b, 0)]

    def test_pizzas_of_non_participants_are_ignored(self):
        a, outsider = uuid4(), uuid4()

        rows = build_leaderboard([a], [outsider, outsider, a], {}, viewer_id=None, profiles={})

        assert len(rows) == 1
        assert rows[0].total == 1

    def test_ties_keep_participant_order(self):
        a, b, c = uuid4(), uuid4(), uuid4()

        rows = build_leaderboard([c, a, b], [a, b, c], {}, viewer_id=None, profiles={})

        assert [r.user_id for r in rows] == [c, a, b]


class TestRanking:
    def test_rank_counts_is_stable(self):
        ranked = rank_counts({"x": 1, "y": 3, "z": 1, "w": 3})
        assert ranked == [("y", 3), ("w", 3), ("x", 1), ("z", 1)]

    def test_position_of(self):
        ranked = [("y", 3), ("x", 1)]
        assert position_of(ranked, "x") == 2
        assert position_of(ranked, "missing") is None

    def test_global_rank_without_pizzas(self):
        rank = global_rank([uuid4()], uuid4())
        assert rank.rank is None
        assert rank.count == 0
        assert rank.total_users == 1


class TestWindowing:
    def test_around_index_in_the_middle(self):
        rows = list(range(30))
        offset, window = around_index(rows, 10)
        assert offset == 5
        assert window == list(range(5, 16))

    def test_around_index_at_the_edges(self):
        rows = list(range(8))
        assert around_index(rows, 0) == (0, list(range(0, 6)))
        assert around_index(rows, 7) == (2, list(range(2, 8)))

    def test_around_index_always_contains_the_row(self):
        rows = list(range(3))
        for index in range(3):
            _, window = around_index(rows, index)
            assert index in window

    def test_page_slice(self):
        rows = list(range(120))
        offset, window = page_slice(rows, 2)
        assert offset == 100
        assert window == list(range(100, 120))
        assert total_pages(120) == 3
        assert total_pages(0) == 0


class TestSearch:
    def test_matches_username_or_display_name(self):
        rows = [_row(0, username="mario"), _row(1, username="luigi", display_name="Luigi Verdi")]

        assert find_in_leaderboard(rows, "MAR") == 0
        assert find_in_leaderboard(rows, "verdi") == 1
        assert find_in_leaderboard(rows, "peach") is None

    def test_returns_first_match(self):
        rows = [_row(0, username="anna"), _row(1, username="annalisa")]
        assert find_in_leaderboard(rows, "anna") == 0

    def test_blank_term_matches_nothing(self):
        assert find_in_leaderboard([_row(0)], "   ") is None


class TestSelectView:
    def test_around_me_window(self):
        rows = _board(30)
        view = select_view(rows, mode=VIEW_AROUND_ME, anchor_index=20)

        assert view.mode == VIEW_AROUND_ME
        assert view.start_pos == 16
        assert view.end_pos == 26
        assert view.total == 30
        assert len(view.rows) == 11

    def test_around_me_without_anchor_falls_back_to_top(self):
        rows = _board(30)
        view = select_view(rows, mode=VIEW_AROUND_ME, anchor_index=None, fallback_top=11)

        assert view.rows == rows[:11]
        assert view.start_pos == 1

    def test_top(self):
        rows = _board(30)
        view = select_view(rows, mode=VIEW_TOP, top_n=10)
        assert view.rows == rows[:10]
        assert (view.start_pos, view.end_pos) == (1, 10)

    def test_all_is_paginated(self):
        rows = _board(120)
        view = select_view(rows, mode=VIEW_ALL, page=1)

        assert view.rows == rows[50:100]
        assert (view.start_pos, view.end_pos) == (51, 100)
        assert view.page == 1
        assert view.total_pages == 3

    def test_full_view_is_not_paginated(self):
        rows = _board(120)
        view = full_view(rows)

        assert view.mode == VIEW_ALL
        assert view.rows == rows
        assert (view.start_pos, view.end_pos, view.total) == (1, 120, 120)
        assert view.total_pages == 1

    def test_full_view_of_empty_board(self):
        view = full_view([])
        assert (view.start_pos, view.end_pos, view.total_pages) == (0, 0, 0)


    def test_search_hit_centres_on_match(self):
        rows = _board(30)
        target = rows[25].profile.username

        view = select_view(rows, mode=VIEW_SEARCH, search=target)

        assert view.mode == VIEW_SEARCH
        assert view.search_error is None
        assert rows[25] in view.rows

    def test_search_miss_reports_error(self):
        rows = _board(5)
        view = select_view(rows, mode=VIEW_SEARCH, search="nobody", anchor_index=2)

        assert view.search_error == "No user found"
        assert view.mode == VIEW_AROUND_ME

    def test_empty_search_resets_to_default(self):
        rows = _board(5)
        view = select_view(rows, mode=VIEW_SEARCH, search="  ", default_mode=VIEW_TOP)

        assert view.mode == VIEW_TOP
        assert view.search_error is None

    def test_empty_board(self):
        view = select_view([], mode=VIEW_TOP)
        assert view.rows == []
        assert (view.start_pos, view.end_pos, view.total) == (0, 0, 0)


class TestWeeklyProgression:
    def test_trims_empty_weeks_and_accumulates(self):
        a, b = uuid4(), uuid4()
        pizzas = [
            PizzaRow(id=1, user_id=a, eaten_at=date(2025, 1, 8)),   # week 2
            PizzaRow(id=2, user_id=b, eaten_at=date(2025, 1, 15)),  # week 3
            PizzaRow(id=3, user_id=b, eaten_at=date(2025, 1, 16)),  # week 3
            PizzaRow(id=4, user_id=a, eaten_at=date(2025, 1, 29)),  # week 5
        ]

        points = weekly_progression([a, b], pizzas, 2025, CHART_PIZZAS)

        assert [p.week_number for p in points] == [2, 3, 4, 5]
        assert points[0].week_label == "S2"
        assert points[0].data == {str(a): 1, str(b): 0}
        assert points[1].data == {str(a): 1, str(b): 2}
        assert points[2].data == {str(a): 1, str(b): 2}
        assert points[3].data == {str(a): 2, str(b): 2}

    def test_positions_mode(self):
        a, b = uuid4(), uuid4()
        pizzas = [
            PizzaRow(id=1, user_id=a, eaten_at=date(2025, 1, 8)),
            PizzaRow(id=2, user_id=b, eaten_at=date(2025, 1, 15)),
            PizzaRow(id=3, user_id=b, eaten_at=date(2025, 1, 16)),
        ]

        points = weekly_progression([a, b], pizzas, 2025, CHART_POSITIONS)

        assert points[0].data == {str(a): 1, str(b): 2}
        assert points[1].data == {str(b): 1, str(a): 2}

    def test_no_pizzas(self):
        assert weekly_progression([uuid4()], [], 2025) == []

    def test_early_january_of_previous_iso_year_counts_in_week_one(self):
        a = uuid4()
        pizzas = [
            PizzaRow(id=1, user_id=a, eaten_at=date(2027, 1, 1)),  # ISO week 53 of 2026
            PizzaRow(id=2, user_id=a, eaten_at=date(2027, 3, 3)),
        ]

        points = weekly_progression([a], pizzas, 2027, CHART_PIZZAS)

        assert points[0].week_number == 1
        assert points[0].data == {str(a): 1}
        assert points[-1].data == {str(a): 2}

    def test_late_december_of_next_iso_year_counts_in_last_week(self):
        a = uuid4()
        pizzas = [PizzaRow(id=1, user_id=a, eaten_at=date(2024, 12, 30))]  # ISO week 1 of 2025

        points = weekly_progression([a], pizzas, 2024, CHART_PIZZAS)

        assert [(p.week_number, p.data[str(a)]) for p in points] == [(52, 1)]


class TestChartParticipants:
    def test_top_view_adds_viewer(self):
        rows = _board(15)
        viewer = rows[12].user_id

        ids = chart_participants(rows, viewer, VIEW_TOP)

        assert ids[:10] == [r.user_id for r in rows[:10]]
        assert ids[-1] == viewer
        assert len(ids) == 11

    def test_around_me_view(self):
        rows = _board(30)
        viewer = rows[20].user_id

        ids = chart_participants(rows, viewer, VIEW_AROUND_ME)

        assert ids == [r.user_id for r in rows[15:26]]
        assert index_of_user(rows, viewer) == 20
