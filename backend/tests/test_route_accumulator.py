"""
Tests for the route accumulator state machine.
"""
import pytest

from domain.models import DrawingMode, EditingMode, Point, Route
from services.route_accumulator import RouteAccumulator, RouteRejected


def _acc_with_points(*coords):
    acc = RouteAccumulator()
    for x, y in coords:
        acc.add_point(Point(x, y))
    return acc


def _committed(count):
    acc = RouteAccumulator()
    for i in range(count):
        acc.add_point(Point(i, 0))
        acc.add_point(Point(i, 10))
        acc.finish_route(f"R{i}", "V1")
    return acc


class TestFinishRoute:
    def test_three_point_route_with_name_and_grade(self):
        acc = _acc_with_points((10, 10), (50, 10), (50, 50))
        acc.set_draft_name("Crimpy")
        acc.set_draft_grade("V3")
        route = acc.finish_route()

        assert len(acc.routes) == 1
        assert route.points == (Point(10, 10), Point(50, 10), Point(50, 50))
        assert route.name == "Crimpy"
        assert route.grade == "V3"
        assert acc.points == []
        assert acc.draft_name == ""

    def test_single_point_is_rejected_and_state_kept(self):
        acc = _acc_with_points((10, 10))
        with pytest.raises(RouteRejected):
            acc.finish_route("Solo", "V2")
        assert acc.routes == []
        assert acc.points == [Point(10, 10)]

    def test_empty_buffer_is_rejected(self):
        with pytest.raises(RouteRejected):
            RouteAccumulator().finish_route()

    def test_blank_name_gets_positional_default(self):
        acc = _committed(2)
        acc.add_point(Point(1, 1))
        acc.add_point(Point(2, 2))
        route = acc.finish_route("   ", "V0")
        assert route.name == "Route 3"

    def test_point_count_matches_points_since_last_commit(self):
        acc = _committed(1)
        for i in range(7):
            acc.add_point(Point(i, i))
        assert len(acc.finish_route().points) == 7

    def test_unknown_grade_is_rejected(self):
        acc = _acc_with_points((0, 0), (1, 1))
        with pytest.raises(RouteRejected):
            acc.finish_route("Bad", "5.12a")
        assert acc.routes == []

    def test_grade_carries_over_to_next_draft(self):
        acc = _acc_with_points((0, 0), (1, 1))
        acc.finish_route("A", "V5")
        assert acc.draft_grade == "V5"


class TestUndo:
    def test_removes_last_point_first(self):
        acc = _committed(1)
        acc.add_point(Point(5, 5))
        acc.add_point(Point(6, 6))
        acc.undo()
        assert acc.points == [Point(5, 5)]
        assert len(acc.routes) == 1

    def test_removes_last_route_when_buffer_empty(self):
        acc = _committed(2)
        acc.undo()
        assert [r.name for r in acc.routes] == ["R0"]

    def test_repeated_undo_past_empty_is_noop(self):
        acc = _committed(1)
        acc.add_point(Point(1, 1))
        for _ in range(10):
            acc.undo()
        assert acc.routes == []
        assert acc.points == []
        assert isinstance(acc.mode, DrawingMode)

    def test_undo_clears_selection_of_removed_route(self):
        acc = _committed(2)
        acc.select_for_edit(1)
        acc.undo()
        assert len(acc.routes) == 1
        assert acc.editing_index is None

    def test_undo_keeps_selection_of_other_route(self):
        acc = _committed(2)
        acc.select_for_edit(0)
        acc.undo()
        assert acc.editing_index == 0


class TestEditing:
    def test_select_loads_metadata_and_clears_points(self):
        acc = _committed(2)
        acc.add_point(Point(3, 3))
        acc.select_for_edit(1)

        assert acc.mode == EditingMode(index=1, name="R1", grade="V1")
        assert acc.points == []
        assert acc.is_editing

    def test_select_out_of_range(self):
        acc = _committed(1)
        with pytest.raises(RouteRejected):
            acc.select_for_edit(3)

    def test_update_replaces_route_in_place(self):
        acc = _committed(3)
        original_points = acc.routes[1].points
        acc.select_for_edit(1)
        updated = acc.update_selected("Slab Master", "V7")

        assert acc.routes[1] is updated
        assert updated == Route(points=original_points, name="Slab Master", grade="V7")
        assert not acc.is_editing

    def test_update_with_blank_name_keeps_original(self):
        acc = _committed(1)
        acc.select_for_edit(0)
        acc.update_selected("", "V9")
        assert acc.routes[0].name == "R0"
        assert acc.routes[0].grade == "V9"

    def test_update_without_selection(self):
        with pytest.raises(RouteRejected):
            _committed(1).update_selected("x", "V1")

    def test_new_point_cancels_edit_without_losing_route(self):
        acc = _committed(1)
        acc.select_for_edit(0)
        acc.add_point(Point(9, 9))
        assert not acc.is_editing
        assert acc.points == [Point(9, 9)]
        assert acc.routes[0].name == "R0"

    def test_finish_while_editing_is_rejected(self):
        acc = _committed(1)
        acc.select_for_edit(0)
        with pytest.raises(RouteRejected):
            acc.finish_route()

    def test_primary_action_dispatches_by_mode(self):
        acc = _committed(1)
        acc.select_for_edit(0)
        acc.set_draft_name("Renamed")
        acc.primary_action()
        assert acc.routes[0].name == "Renamed"

        acc.add_point(Point(0, 0))
        acc.add_point(Point(5, 5))
        acc.primary_action()
        assert len(acc.routes) == 2


def test_clear_draft_keeps_committed_routes():
    acc = _committed(1)
    acc.select_for_edit(0)
    acc.clear_draft()
    acc.add_point(Point(1, 1))
    acc.set_draft_name("Draft")
    acc.clear_draft()

    assert len(acc.routes) == 1
    assert acc.points == []
    assert acc.draft_name == ""
    assert not acc.is_editing


def test_listeners_fire_on_every_mutation():
    acc = RouteAccumulator()
    calls = []
    acc.subscribe(lambda: calls.append(1))
    acc.add_point(Point(0, 0))
    acc.add_point(Point(1, 1))
    acc.finish_route()
    acc.undo()
    assert len(calls) == 4


def test_set_draft_grade_validates():
    with pytest.raises(RouteRejected):
        RouteAccumulator().set_draft_grade("V99")
