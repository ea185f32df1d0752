"""
Route accumulator: the point/route state machine behind the drawing view.

The draft name/grade fields belong to the current mode, so a button
press always means exactly one thing: commit while drawing, update while
editing.
"""
import logging
from dataclasses import replace
from typing import Callable, List, Optional

from domain.models import (
    DEFAULT_GRADE,
    DrawingMode,
    EditingMode,
    Mode,
    Point,
    Route,
    is_valid_grade,
)

logger = logging.getLogger(__name__)

MIN_ROUTE_POINTS = 2


class RouteRejected(Exception):
    """An accumulator action was refused; state is unchanged."""


def default_route_name(position: int) -> str:
    return f"Route {position}"


class RouteAccumulator:
    """Holds committed routes plus the in-progress draft."""

    def __init__(self, routes: Optional[List[Route]] = None, mode: Optional[Mode] = None):
        self.routes: List[Route] = list(routes or [])
        self.mode: Mode = mode or DrawingMode()
        self._listeners: List[Callable[[], None]] = []

    # ==================== Change notification ====================

    def subscribe(self, listener: Callable[[], None]) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener()

    # ==================== State ====================

    @property
    def points(self) -> List[Point]:
        """In-progress points (empty while editing)."""
        if isinstance(self.mode, DrawingMode):
            return self.mode.points
        return []

    @property
    def editing_index(self) -> Optional[int]:
        if isinstance(self.mode, EditingMode):
            return self.mode.index
        return None

    @property
    def is_editing(self) -> bool:
        return isinstance(self.mode, EditingMode)

    @property
    def draft_name(self) -> str:
        return self.mode.name

    @property
    def draft_grade(self) -> str:
        return self.mode.grade

    def set_draft_name(self, name: str) -> None:
        self.mode.name = name or ""
        self._changed()

    def set_draft_grade(self, grade: str) -> None:
        if not is_valid_grade(grade):
            raise RouteRejected(f"Unknown grade: {grade!r}")
        self.mode.grade = grade
        self._changed()

    # ==================== Operations ====================

    def add_point(self, point: Point) -> None:
        """Append a point; starting to draw cancels any edit selection."""
        if isinstance(self.mode, EditingMode):
            logger.debug("[routes] edit of route %s cancelled by new point", self.mode.index)
            self.mode = DrawingMode()
        self.mode.points.append(point)
        self._changed()

    def undo(self) -> None:
        """Remove the last draft point, else the last committed route."""
        if self.points:
            self.mode.points.pop()
            self._changed()
            return
        if not self.routes:
            return

        self.routes.pop()
        removed_index = len(self.routes)
        if isinstance(self.mode, EditingMode) and self.mode.index >= removed_index:
            self.mode = DrawingMode()
        self._changed()

    def finish_route(self, name: Optional[str] = None, grade: Optional[str] = None) -> Route:
        """
        Commit the drawing buffer as a Route.

        Raises RouteRejected when fewer than two points have been placed
        or the grade is unknown.
        """
        if not isinstance(self.mode, DrawingMode):
            raise RouteRejected("Finish the current edit before drawing a new route")
        draft = self.mode
        if len(draft.points) < MIN_ROUTE_POINTS:
            raise RouteRejected("A route needs at least 2 points")

        name = draft.name if name is None else name
        grade = draft.grade if grade is None else grade
        if not is_valid_grade(grade):
            raise RouteRejected(f"Unknown grade: {grade!r}")

        name = name.strip() or default_route_name(len(self.routes) + 1)
        route = Route(points=tuple(draft.points), name=name, grade=grade)
        self.routes.append(route)
        # grade carries over to the next route
        self.mode = DrawingMode(grade=grade)
        logger.info("[routes] committed %r (%s, %d points)", route.name, route.grade, len(route.points))
        self._changed()
        return route

    def select_for_edit(self, index: int) -> None:
        """Load a committed route's name/grade for editing. Geometry is not editable."""
        if not 0 <= index < len(self.routes):
            raise RouteRejected(f"No route at index {index}")
        route = self.routes[index]
        self.mode = EditingMode(index=index, name=route.name, grade=route.grade)
        self._changed()

    def update_selected(self, name: Optional[str] = None, grade: Optional[str] = None) -> Route:
        """Apply the edit draft to the selected route and leave edit mode."""
        if not isinstance(self.mode, EditingMode):
            raise RouteRejected("No route selected for editing")
        draft = self.mode
        name = draft.name if name is None else name
        grade = draft.grade if grade is None else grade
        if not is_valid_grade(grade):
            raise RouteRejected(f"Unknown grade: {grade!r}")

        original = self.routes[draft.index]
        updated = replace(original, name=name.strip() or original.name, grade=grade)
        self.routes[draft.index] = updated
        self.mode = DrawingMode(grade=grade)
        self._changed()
        return updated

    def clear_draft(self) -> None:
        """Drop the in-progress points, draft name and any selection."""
        grade = self.mode.grade if is_valid_grade(self.mode.grade) else DEFAULT_GRADE
        self.mode = DrawingMode(grade=grade)
        self._changed()

    def primary_action(self) -> Route:
        """Commit while drawing, update while editing."""
        if isinstance(self.mode, EditingMode):
            return self.update_selected()
        return self.finish_route()
