"""
Coordinate mapping between pointer, display and natural image space.

Routes are persisted in natural image pixels so they stay valid however
the photo is displayed later. The mapper converts pointer positions into
that space and converts stored points back for drawing.
"""
import logging
from typing import Optional, Tuple

from domain.models import Point, Transform

logger = logging.getLogger(__name__)


class CoordinateMapper:
    """
    Converts between three coordinate spaces:

    - device: pixels relative to the viewport (pointer event coordinates)
    - display: pixels of the image as currently rendered
    - natural: pixel grid of the original uploaded image

    The pan/zoom transform is applied on top of display space and is
    replaced wholesale on every gesture update.
    """

    def __init__(
        self,
        natural_width: Optional[float] = None,
        natural_height: Optional[float] = None,
    ):
        self.natural_width = natural_width
        self.natural_height = natural_height
        self.display_width: Optional[float] = None
        self.display_height: Optional[float] = None
        self.surface_left = 0.0
        self.surface_top = 0.0
        self.scale_x: Optional[float] = None
        self.scale_y: Optional[float] = None
        self.transform = Transform.identity()

    def set_natural_size(self, width: float, height: float) -> None:
        self.natural_width = width
        self.natural_height = height
        self._recompute_scale()

    def measure(
        self,
        display_width: float,
        display_height: float,
        surface_left: float = 0.0,
        surface_top: float = 0.0,
    ) -> None:
        """
        Record the rendered size and position of the image element.

        Call on image load and whenever the host re-measures the layout.
        """
        self.display_width = display_width
        self.display_height = display_height
        self.surface_left = surface_left
        self.surface_top = surface_top
        self._recompute_scale()

    def set_transform(self, transform: Optional[Transform]) -> None:
        """Latest pan/zoom wins; None means identity."""
        self.transform = transform or Transform.identity()

    def _recompute_scale(self) -> None:
        if not self._dimensions_known():
            self.scale_x = None
            self.scale_y = None
            return
        self.scale_x = self.display_width / self.natural_width
        self.scale_y = self.display_height / self.natural_height
        logger.debug(
            "[mapper] natural=%sx%s display=%sx%s scale=(%.4f, %.4f)",
            self.natural_width, self.natural_height,
            self.display_width, self.display_height,
            self.scale_x, self.scale_y,
        )

    def _dimensions_known(self) -> bool:
        dims = (self.natural_width, self.natural_height, self.display_width, self.display_height)
        return all(d is not None and d > 0 for d in dims)

    @property
    def is_ready(self) -> bool:
        return self.scale_x is not None and self.scale_y is not None

    @property
    def label_scale(self) -> float:
        """Uniform factor for label and stroke sizes at the current view."""
        if not self.is_ready:
            return 1.0
        return min(self.scale_x, self.scale_y) * self.transform.scale

    def device_to_natural(self, client_x: float, client_y: float) -> Optional[Point]:
        """
        Map a pointer position to natural image space.

        Returns None when the image is not measured yet or the position
        falls outside the drawing surface or the image.
        """
        if not self.is_ready:
            return None

        local_x = client_x - self.surface_left
        local_y = client_y - self.surface_top
        if not (0 <= local_x <= self.display_width and 0 <= local_y <= self.display_height):
            return None

        t = self.transform
        display_x = (local_x - t.offset_x) / t.scale
        display_y = (local_y - t.offset_y) / t.scale

        x = display_x / self.scale_x
        y = display_y / self.scale_y
        if not (0 <= x <= self.natural_width and 0 <= y <= self.natural_height):
            return None
        return Point(x, y)

    def natural_to_display(self, point: Point) -> Tuple[float, float]:
        """Map a stored point to surface pixels, including pan/zoom."""
        if not self.is_ready:
            raise ValueError("Image dimensions are not known yet")
        t = self.transform
        x = point.x * self.scale_x * t.scale + t.offset_x
        y = point.y * self.scale_y * t.scale + t.offset_y
        return x, y
