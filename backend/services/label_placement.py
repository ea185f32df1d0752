"""
Label placement for route grade and name labels.

The grade sits on the vertex at the middle index of the route; the name
sits just past the final vertex. Each label is drawn over a plaque so it
stays readable on any photo.
"""
from dataclasses import dataclass
from typing import Callable, Sequence, Tuple, TypeVar

from services.surface_commands import Color, Commands, FillRect, FillText, XY

# (text, font_size) -> rendered width in pixels
TextMeasurer = Callable[[str, float], float]

T = TypeVar("T")

NAME_OFFSET: XY = (20.0, 15.0)


@dataclass(frozen=True)
class LabelStyle:
    font_size: float = 14.0
    padding: float = 4.0
    text_color: Color = (255, 255, 255, 255)
    plaque_color: Color = (0, 0, 0, 190)
    name_offset: XY = NAME_OFFSET
    plaque: bool = True


def grade_anchor(points: Sequence[T]) -> T:
    """Vertex at index floor(n / 2), by index rather than arc length."""
    if not points:
        raise ValueError("Cannot anchor a label on an empty route")
    return points[len(points) // 2]


def name_anchor(points: Sequence[XY], scale: float = 1.0, offset: XY = NAME_OFFSET) -> XY:
    """Last vertex, nudged right/down so the label clears the end marker."""
    if not points:
        raise ValueError("Cannot anchor a label on an empty route")
    x, y = points[-1]
    return x + offset[0] * scale, y + offset[1] * scale


def approximate_measurer(text: str, font_size: float) -> float:
    """Width estimate for when no font is available."""
    return len(text) * font_size * 0.6


def place_label(
    text: str,
    anchor: XY,
    align: str,
    scale: float,
    style: LabelStyle,
    measure: TextMeasurer = approximate_measurer,
) -> Commands:
    """
    Plaque + text commands for one label.

    `align` is "center" (plaque centred on the anchor) or "left" (plaque
    starts at the anchor). The anchor y is the label's vertical middle.
    """
    if not text:
        return []

    font_size = style.font_size * scale
    padding = style.padding * scale
    text_width = measure(text, font_size)
    text_height = font_size
    ax, ay = anchor

    commands: Commands = []
    if style.plaque:
        if align == "center":
            left = ax - text_width / 2.0 - padding
        else:
            left = ax - padding
        commands.append(
            FillRect(
                x=left,
                y=ay - text_height / 2.0 - padding,
                width=text_width + 2 * padding,
                height=text_height + 2 * padding,
                color=style.plaque_color,
            )
        )
    commands.append(
        FillText(
            text=text,
            x=ax,
            y=ay,
            color=style.text_color,
            font_size=font_size,
            align=align,
        )
    )
    return commands


def route_labels(
    points: Sequence[XY],
    name: str,
    grade: str,
    scale: float,
    style: LabelStyle,
    measure: TextMeasurer = approximate_measurer,
) -> Commands:
    """Grade label at the midpoint vertex, then the name label past the end."""
    if len(points) < 2:
        return []
    commands = place_label(grade, grade_anchor(points), "center", scale, style, measure)
    commands += place_label(
        name,
        name_anchor(points, scale, style.name_offset),
        "left",
        scale,
        style,
        measure,
    )
    return commands
