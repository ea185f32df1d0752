"""
Tests for the full-repaint render pipeline.
"""
import pytest

from domain.models import CurveMode, DrawingMode, EditingMode, Point, Route, Session
from services.coordinate_mapper import CoordinateMapper
from services.redraw import (
    RecordingSurface,
    RedrawOrchestrator,
    RenderStyle,
    configured_style,
    render,
)
from services.surface_commands import (
    Clear,
    FillCircle,
    FillText,
    QuadTo,
    SetLineDash,
    StrokePath,
)
from settings import Settings, settings


def _mapper(natural=(1000, 800), display=(500, 400)):
    mapper = CoordinateMapper(*natural)
    mapper.measure(*display)
    return mapper


def _session(routes=None, mode=None):
    return Session(
        image_url="/media/uploads/s1/photo.jpg",
        session_id="s1",
        routes=routes or [],
        mode=mode or DrawingMode(),
    )


def _route(name="A", grade="V2"):
    return Route(points=(Point(0, 0), Point(100, 0), Point(200, 100)), name=name, grade=grade)


def _texts(commands):
    return [c.text for c in commands if isinstance(c, FillText)]


def test_clear_comes_first():
    commands = render(_session([_route()]), _mapper())
    assert commands[0] == Clear()


def test_not_ready_only_clears():
    commands = render(_session([_route()]), CoordinateMapper())
    assert commands == [Clear()]


def test_committed_route_is_scaled_to_display():
    commands = render(_session([_route()]), _mapper())
    stroke = next(c for c in commands if isinstance(c, StrokePath))
    coords = [(s.x, s.y) for s in stroke.segments]
    assert coords == [(0, 0), (50, 0), (100, 50)]
    assert stroke.width == pytest.approx(1.5)


def test_labels_follow_their_route():
    commands = render(_session([_route("Crimpy", "V3")]), _mapper())
    grade, name = [c for c in commands if isinstance(c, FillText)]
    assert (grade.text, grade.x, grade.y) == ("V3", 50, 0)
    assert name.text == "Crimpy"
    assert (name.x, name.y) == pytest.approx((100 + 20 * 0.5, 50 + 15 * 0.5))
    assert grade.font_size == pytest.approx(14 * 0.5)


def test_routes_in_commit_order_then_preview():
    draft = DrawingMode(points=[Point(10, 10), Point(20, 20)], name="Draft", grade="V1")
    commands = render(_session([_route("First"), _route("Second")], draft), _mapper())
    assert _texts(commands) == ["V2", "First", "V2", "Second", "V1", "Draft"]

    first_marker = next(i for i, c in enumerate(commands) if isinstance(c, FillCircle))
    last_route_text = max(i for i, c in enumerate(commands) if isinstance(c, FillText) and c.text == "Second")
    assert first_marker > last_route_text


def test_preview_is_dashed_and_dash_reset():
    draft = DrawingMode(points=[Point(10, 10), Point(20, 20), Point(40, 20)])
    commands = render(_session(mode=draft), _mapper())
    dash_index = commands.index(SetLineDash((5.0, 5.0)))
    assert isinstance(commands[dash_index + 1], StrokePath)
    assert commands[dash_index + 2] == SetLineDash(())
    assert sum(isinstance(c, FillCircle) for c in commands) == 3


def test_single_draft_point_shows_marker_only():
    commands = render(_session(mode=DrawingMode(points=[Point(10, 10)])), _mapper())
    assert sum(isinstance(c, FillCircle) for c in commands) == 1
    assert not any(isinstance(c, StrokePath) for c in commands)


def test_live_labels_need_name_and_grade():
    draft = DrawingMode(points=[Point(10, 10), Point(20, 20)], name="  ", grade="V1")
    assert _texts(render(_session(mode=draft), _mapper())) == []


def test_editing_route_is_highlighted():
    style = RenderStyle()
    session = _session([_route("A"), _route("B")], EditingMode(index=1, name="B", grade="V2"))
    strokes = [c for c in render(session, _mapper(), style) if isinstance(c, StrokePath)]
    assert strokes[0].color == style.route_color
    assert strokes[1].color == style.highlight_color


def test_smoothed_style_emits_quadratics():
    style = RenderStyle(curve_mode=CurveMode.SMOOTHED)
    commands = render(_session([_route()]), _mapper(), style)
    stroke = next(c for c in commands if isinstance(c, StrokePath))
    assert any(isinstance(s, QuadTo) for s in stroke.segments)


def test_render_is_idempotent():
    session = _session([_route()], DrawingMode(points=[Point(1, 1), Point(5, 5)], name="x", grade="V0"))
    mapper = _mapper()
    assert render(session, mapper) == render(session, mapper)


def test_orchestrator_writes_each_pass_to_surface():
    surface = RecordingSurface()
    orchestrator = RedrawOrchestrator(surface, _mapper())
    orchestrator.redraw(_session([_route()]))
    orchestrator.redraw(_session())
    assert surface.passes == 2
    assert surface.commands == [Clear()]


class TestConfiguredStyle:
    def test_default_settings_match_default_style(self, monkeypatch):
        monkeypatch.delenv("ROUTE_CURVE_MODE", raising=False)
        assert Settings().ROUTE_CURVE_MODE == RenderStyle().curve_mode.value

    def test_reads_curve_mode_and_labels(self, monkeypatch):
        monkeypatch.setattr(settings, "ROUTE_CURVE_MODE", "smoothed")
        monkeypatch.setattr(settings, "LABEL_FONT_SIZE", 18)
        monkeypatch.setattr(settings, "LABEL_PLAQUE_ENABLED", False)
        style = configured_style()
        assert style.curve_mode == CurveMode.SMOOTHED
        assert style.labels.font_size == 18
        assert style.labels.plaque is False

    def test_unknown_curve_mode_falls_back_to_straight(self, monkeypatch):
        monkeypatch.setattr(settings, "ROUTE_CURVE_MODE", "wiggly")
        assert configured_style().curve_mode == CurveMode.STRAIGHT
