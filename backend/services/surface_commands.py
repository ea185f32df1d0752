"""
Drawing-surface commands.

The renderer produces a flat list of these; a surface backend replays
them. Coordinates are surface (display) pixels.
"""
from dataclasses import dataclass
from typing import List, Tuple, Union

Color = Tuple[int, int, int, int]
XY = Tuple[float, float]


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class SetLineDash:
    pattern: Tuple[float, ...] = ()


@dataclass(frozen=True)
class MoveTo:
    x: float
    y: float


@dataclass(frozen=True)
class LineTo:
    x: float
    y: float


@dataclass(frozen=True)
class QuadTo:
    cx: float
    cy: float
    x: float
    y: float


PathSegment = Union[MoveTo, LineTo, QuadTo]


@dataclass(frozen=True)
class StrokePath:
    segments: Tuple[PathSegment, ...]
    color: Color
    width: float


@dataclass(frozen=True)
class FillCircle:
    center: XY
    radius: float
    color: Color


@dataclass(frozen=True)
class FillRect:
    x: float
    y: float
    width: float
    height: float
    color: Color


@dataclass(frozen=True)
class FillText:
    text: str
    x: float
    y: float
    color: Color
    font_size: float
    align: str = "left"  # "left" | "center"; y is the vertical middle


SurfaceCommand = Union[Clear, SetLineDash, StrokePath, FillCircle, FillRect, FillText]
Commands = List[SurfaceCommand]
