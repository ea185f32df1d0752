"""
Curve renderer: turns a route's display-space vertices into stroke commands.
"""
from typing import List, Optional, Sequence, Tuple

from domain.models import CurveMode
from services.surface_commands import (
    Color,
    Commands,
    LineTo,
    MoveTo,
    PathSegment,
    QuadTo,
    SetLineDash,
    StrokePath,
    XY,
)


def _midpoint(a: XY, b: XY) -> XY:
    return (a[0] + b[0]) / 2.0, (a[1] + b[1]) / 2.0


def build_segments(points: Sequence[XY], mode: CurveMode = CurveMode.STRAIGHT) -> List[PathSegment]:
    """
    Build path segments through `points`.

    Smoothed mode curves through each interior vertex toward the midpoint
    of it and the next vertex, then finishes with a straight segment to
    the last vertex. Stored vertices are never altered.
    """
    if len(points) < 2:
        return []

    segments: List[PathSegment] = [MoveTo(*points[0])]
    if mode == CurveMode.SMOOTHED:
        for i in range(1, len(points) - 1):
            mx, my = _midpoint(points[i], points[i + 1])
            segments.append(QuadTo(points[i][0], points[i][1], mx, my))
        segments.append(LineTo(*points[-1]))
    else:
        segments.extend(LineTo(x, y) for x, y in points[1:])
    return segments


def stroke_route(
    points: Sequence[XY],
    color: Color,
    width: float,
    dash: Optional[Tuple[float, ...]] = None,
    mode: CurveMode = CurveMode.STRAIGHT,
) -> Commands:
    """
    Stroke a connected path. A dash pattern only applies to this stroke;
    the surface is reset to solid afterwards.
    """
    segments = build_segments(points, mode)
    if not segments:
        return []

    stroke = StrokePath(segments=tuple(segments), color=color, width=width)
    if not dash:
        return [stroke]
    return [SetLineDash(tuple(dash)), stroke, SetLineDash(())]
