"""
Drawing-view controller.

Wires pointer input, the route accumulator and the redraw orchestrator
together for one mounted view of one image, and hands the finished
session to the persistence layer.
"""
import logging
from typing import Callable, Dict, Optional

from domain.models import Point, Route, Session, Transform
from services.coordinate_mapper import CoordinateMapper
from services.redraw import (
    RecordingSurface,
    RedrawOrchestrator,
    RenderStyle,
    Surface,
    configured_style,
)
from services.label_placement import TextMeasurer, approximate_measurer
from services.route_accumulator import RouteAccumulator, RouteRejected

logger = logging.getLogger(__name__)

KEY_ENTER = "Enter"
KEY_ESCAPE = "Escape"
KEY_BACKSPACE = "Backspace"


class ShortcutRegistry:
    """
    Key -> handler table shared by mounted views.

    Binding the same key twice replaces the handler, so re-mounting can
    never stack duplicate handlers.
    """

    def __init__(self):
        self._handlers: Dict[str, Callable[[], None]] = {}

    def bind(self, key: str, handler: Callable[[], None]) -> None:
        self._handlers[key] = handler

    def unbind(self, key: str, handler: Callable[[], None]) -> None:
        if self._handlers.get(key) is handler:
            del self._handlers[key]

    def dispatch(self, key: str) -> bool:
        handler = self._handlers.get(key)
        if handler is None:
            return False
        handler()
        return True

    def __len__(self) -> int:
        return len(self._handlers)


class DrawSession:
    """One annotation pass over one image."""

    def __init__(
        self,
        image_url: str,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        session_id: Optional[str] = None,
        surface: Optional[Surface] = None,
        style: Optional[RenderStyle] = None,
        measure: TextMeasurer = approximate_measurer,
        shortcuts: Optional[ShortcutRegistry] = None,
        on_reject: Optional[Callable[[str], None]] = None,
    ):
        self.session = Session(
            image_url=image_url,
            latitude=latitude,
            longitude=longitude,
            session_id=session_id or Session.generate_id(),
        )
        self.mapper = CoordinateMapper()
        self.accumulator = RouteAccumulator()
        self.orchestrator = RedrawOrchestrator(
            surface or RecordingSurface(),
            self.mapper,
            style=style or configured_style(),
            measure=measure,
        )
        self.shortcuts = shortcuts or ShortcutRegistry()
        self.on_reject = on_reject
        self.last_rejection: Optional[str] = None
        self._mounted = False
        self._bindings = {
            KEY_ENTER: self._shortcut_primary,
            KEY_ESCAPE: self.accumulator.clear_draft,
            KEY_BACKSPACE: self.accumulator.undo,
        }
        self.accumulator.subscribe(self._on_change)

    # ==================== Lifecycle ====================

    def mount(self) -> None:
        if self._mounted:
            return
        for key, handler in self._bindings.items():
            self.shortcuts.bind(key, handler)
        self._mounted = True

    def unmount(self) -> None:
        if not self._mounted:
            return
        for key, handler in self._bindings.items():
            self.shortcuts.unbind(key, handler)
        self._mounted = False

    def load_image(
        self,
        natural_width: float,
        natural_height: float,
        display_width: float,
        display_height: float,
        surface_left: float = 0.0,
        surface_top: float = 0.0,
    ) -> None:
        """Image finished loading: record sizes and paint."""
        self.mapper.set_natural_size(natural_width, natural_height)
        self.mapper.measure(display_width, display_height, surface_left, surface_top)
        self.redraw()

    def resize(
        self,
        display_width: float,
        display_height: float,
        surface_left: float = 0.0,
        surface_top: float = 0.0,
    ) -> None:
        self.mapper.measure(display_width, display_height, surface_left, surface_top)
        self.redraw()

    def on_transform(self, transform: Optional[Transform]) -> None:
        self.mapper.set_transform(transform)
        self.redraw()

    # ==================== Input ====================

    def click(self, client_x: float, client_y: float) -> Optional[Point]:
        """Add a point at a pointer position; ignored outside the image."""
        point = self.mapper.device_to_natural(client_x, client_y)
        if point is None:
            logger.debug("[draw] ignored click at (%s, %s)", client_x, client_y)
            return None
        self.accumulator.add_point(point)
        return point

    def handle_key(self, key: str) -> bool:
        return self.shortcuts.dispatch(key)

    def perform(self, action: Callable[..., Route], *args) -> Optional[Route]:
        """Run an accumulator action, reporting a rejection instead of raising."""
        try:
            result = action(*args)
        except RouteRejected as e:
            self._reject(str(e))
            return None
        self.last_rejection = None
        return result

    def _shortcut_primary(self) -> None:
        self.perform(self.accumulator.primary_action)

    def _reject(self, message: str) -> None:
        self.last_rejection = message
        logger.info("[draw] rejected: %s", message)
        if self.on_reject:
            self.on_reject(message)

    # ==================== Rendering ====================

    def _on_change(self) -> None:
        self.session.routes = self.accumulator.routes
        self.session.mode = self.accumulator.mode
        self.redraw()

    def redraw(self):
        return self.orchestrator.redraw(self.session)

    # ==================== Persistence ====================

    def save(self, persist: Callable[[dict], None]) -> bool:
        """
        Hand the serialized session to `persist`.

        On failure the in-memory session is left intact so the user can
        retry; nothing is retried automatically.
        """
        payload = self.session.to_dict()
        try:
            persist(payload)
        except Exception:
            logger.exception("[draw] failed to save session %s", self.session.session_id)
            self._reject("Failed to save routes")
            return False
        logger.info(
            "[draw] saved session %s with %d routes",
            self.session.session_id, len(self.session.routes),
        )
        return True
