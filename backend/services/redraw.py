"""
Redraw orchestration for the route drawing surface.

Every pass is a full repaint computed from the current Session:
`render()` is pure and returns surface commands, and the orchestrator is
the only writer to the surface.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence

from domain.models import CurveMode, Point, Route, Session
from services.coordinate_mapper import CoordinateMapper
from services.curve_renderer import stroke_route
from services.label_placement import (
    LabelStyle,
    TextMeasurer,
    approximate_measurer,
    route_labels,
)
from services.surface_commands import Clear, Color, Commands, FillCircle, XY
from settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderStyle:
    route_color: Color = (239, 68, 68, 255)
    route_width: float = 3.0
    highlight_color: Color = (250, 204, 21, 255)
    draft_color: Color = (59, 130, 246, 255)
    draft_width: float = 2.0
    draft_dash: tuple = (5.0, 5.0)
    marker_color: Color = (59, 130, 246, 255)
    marker_radius: float = 4.0
    curve_mode: CurveMode = CurveMode.STRAIGHT
    labels: LabelStyle = field(default_factory=LabelStyle)


def configured_style() -> RenderStyle:
    """Render style built from settings; shared by the drawing view and previews."""
    try:
        curve_mode = CurveMode(settings.ROUTE_CURVE_MODE)
    except ValueError:
        logger.warning("[redraw] unknown ROUTE_CURVE_MODE %r, using straight", settings.ROUTE_CURVE_MODE)
        curve_mode = CurveMode.STRAIGHT
    return RenderStyle(
        curve_mode=curve_mode,
        labels=LabelStyle(
            font_size=settings.LABEL_FONT_SIZE,
            plaque=settings.LABEL_PLAQUE_ENABLED,
        ),
    )


def _to_display(mapper: CoordinateMapper, points: Sequence[Point]) -> List[XY]:
    return [mapper.natural_to_display(p) for p in points]


def _route_commands(
    route: Route,
    mapper: CoordinateMapper,
    style: RenderStyle,
    measure: TextMeasurer,
    color: Color,
) -> Commands:
    if len(route.points) < 2:
        return []
    scale = mapper.label_scale
    coords = _to_display(mapper, route.points)
    commands = stroke_route(
        coords,
        color=color,
        width=max(1.0, style.route_width * scale),
        mode=style.curve_mode,
    )
    commands += route_labels(coords, route.name, route.grade, scale, style.labels, measure)
    return commands


def render(
    session: Session,
    mapper: CoordinateMapper,
    style: Optional[RenderStyle] = None,
    measure: TextMeasurer = approximate_measurer,
) -> Commands:
    """
    Compute the full command list for one repaint.

    Order: clear, committed routes in commit order, then the in-progress
    preview (markers, dashed stroke, live labels) so it is never covered.
    """
    style = style or RenderStyle()
    commands: Commands = [Clear()]
    if not mapper.is_ready:
        return commands

    editing_index = session.editing_index
    for index, route in enumerate(session.routes):
        color = style.highlight_color if index == editing_index else style.route_color
        commands += _route_commands(route, mapper, style, measure, color)

    mode = session.mode
    draft_points = getattr(mode, "points", None) or []
    if not draft_points:
        return commands

    scale = mapper.label_scale
    coords = _to_display(mapper, draft_points)
    radius = max(1.0, style.marker_radius * scale)
    commands += [FillCircle(center=c, radius=radius, color=style.marker_color) for c in coords]
    commands += stroke_route(
        coords,
        color=style.draft_color,
        width=max(1.0, style.draft_width * scale),
        dash=style.draft_dash,
        mode=style.curve_mode,
    )
    if mode.name.strip() and mode.grade.strip():
        commands += route_labels(coords, mode.name, mode.grade, scale, style.labels, measure)
    return commands


class Surface(Protocol):
    def execute(self, commands: Commands) -> None:
        ...


class RecordingSurface:
    """Keeps the most recent pass; useful for tests and debugging."""

    def __init__(self):
        self.commands: Commands = []
        self.passes = 0

    def execute(self, commands: Commands) -> None:
        self.commands = list(commands)
        self.passes += 1


class RedrawOrchestrator:
    """Owns write access to one surface and repaints it from Session state."""

    def __init__(
        self,
        surface: Surface,
        mapper: CoordinateMapper,
        style: Optional[RenderStyle] = None,
        measure: TextMeasurer = approximate_measurer,
    ):
        self.surface = surface
        self.mapper = mapper
        self.style = style or RenderStyle()
        self.measure = measure

    def redraw(self, session: Session) -> Commands:
        commands = render(session, self.mapper, self.style, self.measure)
        self.surface.execute(commands)
        logger.debug("[redraw] %d routes, %d commands", len(session.routes), len(commands))
        return commands
