"""
Pillow surface backend.

Replays surface commands onto a transparent RGBA overlay which can be
composited over the source photo for server-side previews.
"""
import math
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from domain.models import Session
from services.coordinate_mapper import CoordinateMapper
from services.redraw import RedrawOrchestrator, RenderStyle
from services.surface_commands import (
    Clear,
    Commands,
    FillCircle,
    FillRect,
    FillText,
    LineTo,
    MoveTo,
    PathSegment,
    QuadTo,
    SetLineDash,
    StrokePath,
    XY,
)

QUAD_SAMPLES = 12


@lru_cache(maxsize=64)
def _load_font(font_path: str, size: int) -> ImageFont.ImageFont:
    try:
        return ImageFont.truetype(font_path, size)
    except Exception:
        return ImageFont.load_default(size=size)


class PillowTextMeasurer:
    """Measures label text with the same font the surface draws with."""

    def __init__(self, font_path: str = "DejaVuSans.ttf"):
        self.font_path = font_path

    def __call__(self, text: str, font_size: float) -> float:
        font = _load_font(self.font_path, max(1, int(round(font_size))))
        return float(font.getlength(text))


def flatten_segments(segments: Sequence[PathSegment], samples: int = QUAD_SAMPLES) -> List[XY]:
    """Approximate a path by a polyline, sampling quadratic curves."""
    coords: List[XY] = []
    for seg in segments:
        if isinstance(seg, (MoveTo, LineTo)):
            coords.append((seg.x, seg.y))
        elif isinstance(seg, QuadTo):
            if not coords:
                coords.append((seg.x, seg.y))
                continue
            x0, y0 = coords[-1]
            for i in range(1, samples + 1):
                t = i / float(samples)
                mt = 1.0 - t
                x = mt * mt * x0 + 2 * mt * t * seg.cx + t * t * seg.x
                y = mt * mt * y0 + 2 * mt * t * seg.cy + t * t * seg.y
                coords.append((x, y))
    return coords


def dash_polyline(coords: Sequence[XY], pattern: Sequence[float]) -> List[List[XY]]:
    """Split a polyline into the "on" pieces of a dash pattern."""
    if not pattern or sum(pattern) <= 0 or len(coords) < 2:
        return [list(coords)]

    pieces: List[List[XY]] = []
    idx = 0
    remaining = pattern[0]
    drawing = True
    current: List[XY] = [coords[0]]

    for (x1, y1), (x2, y2) in zip(coords, coords[1:]):
        seg_len = math.hypot(x2 - x1, y2 - y1)
        pos = 0.0
        while seg_len - pos > remaining:
            pos += remaining
            t = pos / seg_len
            point = (x1 + (x2 - x1) * t, y1 + (y2 - y1) * t)
            if drawing:
                current.append(point)
                pieces.append(current)
            else:
                current = [point]
            drawing = not drawing
            idx = (idx + 1) % len(pattern)
            remaining = pattern[idx]
        remaining -= seg_len - pos
        if drawing:
            current.append((x2, y2))
    if drawing and len(current) >= 2:
        pieces.append(current)
    return pieces


class PillowSurface:
    """RGBA overlay surface."""

    def __init__(self, size: Tuple[int, int], font_path: str = "DejaVuSans.ttf"):
        self.size = size
        self.font_path = font_path
        self.image = Image.new("RGBA", size, (0, 0, 0, 0))
        self._dash: Tuple[float, ...] = ()

    def execute(self, commands: Commands) -> None:
        draw = ImageDraw.Draw(self.image)
        for cmd in commands:
            if isinstance(cmd, Clear):
                self.image = Image.new("RGBA", self.size, (0, 0, 0, 0))
                draw = ImageDraw.Draw(self.image)
                self._dash = ()
            elif isinstance(cmd, SetLineDash):
                self._dash = tuple(cmd.pattern)
            elif isinstance(cmd, StrokePath):
                self._stroke(draw, cmd)
            elif isinstance(cmd, FillCircle):
                x, y = cmd.center
                r = cmd.radius
                draw.ellipse((x - r, y - r, x + r, y + r), fill=cmd.color)
            elif isinstance(cmd, FillRect):
                draw.rectangle(
                    (cmd.x, cmd.y, cmd.x + cmd.width, cmd.y + cmd.height),
                    fill=cmd.color,
                )
            elif isinstance(cmd, FillText):
                font = _load_font(self.font_path, max(1, int(round(cmd.font_size))))
                anchor = "mm" if cmd.align == "center" else "lm"
                draw.text((cmd.x, cmd.y), cmd.text, fill=cmd.color, font=font, anchor=anchor)

    def _stroke(self, draw: ImageDraw.ImageDraw, cmd: StrokePath) -> None:
        coords = flatten_segments(cmd.segments)
        if len(coords) < 2:
            return
        width = max(1, int(round(cmd.width)))
        for piece in dash_polyline(coords, self._dash):
            if len(piece) >= 2:
                draw.line(piece, fill=cmd.color, width=width, joint="curve")

    def composite_over(self, photo: Image.Image) -> Image.Image:
        base = photo.convert("RGBA")
        if base.size != self.image.size:
            base = base.resize(self.image.size)
        return Image.alpha_composite(base, self.image)


def render_session_preview(
    photo: Image.Image,
    session: Session,
    style: Optional[RenderStyle] = None,
    font_path: str = "DejaVuSans.ttf",
    max_size: Optional[int] = None,
) -> Image.Image:
    """
    Draw a session's routes over its photo.

    The photo is optionally downscaled to `max_size`; routes are mapped
    from natural space so they land in the same place at any size.
    """
    natural_w, natural_h = photo.size
    display = photo
    if max_size and max(natural_w, natural_h) > max_size:
        display = photo.copy()
        display.thumbnail((max_size, max_size))

    mapper = CoordinateMapper(natural_w, natural_h)
    mapper.measure(display.width, display.height)

    surface = PillowSurface(display.size, font_path=font_path)
    orchestrator = RedrawOrchestrator(
        surface, mapper, style=style, measure=PillowTextMeasurer(font_path)
    )
    orchestrator.redraw(session)
    return surface.composite_over(display)
