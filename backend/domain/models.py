"""
Core domain models for the route topo editor.
These are framework-agnostic and can be used across all services.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union
import uuid


# Bouldering V-scale as offered by the naming form
GRADES: Tuple[str, ...] = tuple(f"V{i}" for i in range(18))
DEFAULT_GRADE = "V0"


def is_valid_grade(grade: Optional[str]) -> bool:
    return grade in GRADES


class ClimbStatus(str, Enum):
    """Status of a submitted climb in the moderation queue."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class CurveMode(str, Enum):
    """How a route polyline is stroked."""
    STRAIGHT = "straight"
    SMOOTHED = "smoothed"


@dataclass(frozen=True)
class Point:
    """A vertex in natural image pixel space."""
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Point":
        return cls(x=float(data["x"]), y=float(data["y"]))


@dataclass(frozen=True)
class Route:
    """
    A committed route annotation.

    Geometry is fixed once committed; name and grade are changed by
    building a replacement Route at the same index.
    """
    points: Tuple[Point, ...]
    name: str
    grade: str = DEFAULT_GRADE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "points": [p.to_dict() for p in self.points],
            "grade": self.grade,
            "name": self.name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Route":
        return cls(
            points=tuple(Point.from_dict(p) for p in data.get("points", [])),
            name=data.get("name", ""),
            grade=data.get("grade", DEFAULT_GRADE),
        )


@dataclass(frozen=True)
class Transform:
    """Pan/zoom state reported by the gesture layer."""
    scale: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0

    def __post_init__(self):
        if not self.scale > 0:
            raise ValueError(f"Transform scale must be positive, got {self.scale}")

    @classmethod
    def identity(cls) -> "Transform":
        return cls()


@dataclass
class DrawingMode:
    """Collecting points for a new route."""
    points: List[Point] = field(default_factory=list)
    name: str = ""
    grade: str = DEFAULT_GRADE


@dataclass
class EditingMode:
    """Editing name/grade of the committed route at `index`."""
    index: int
    name: str = ""
    grade: str = DEFAULT_GRADE


Mode = Union[DrawingMode, EditingMode]


@dataclass
class GpsFix:
    """GPS position read from a photo. Any field may be missing."""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None

    @property
    def has_gps(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "altitude": self.altitude,
        }


@dataclass
class Session:
    """
    Working state of one annotation pass over one image.

    Only `routes` (and the draft held in `mode`) change while drawing;
    the image reference, coordinates and session id are fixed at creation.
    """
    image_url: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    session_id: str = field(default_factory=lambda: Session.generate_id())
    routes: List[Route] = field(default_factory=list)
    mode: Mode = field(default_factory=DrawingMode)

    @staticmethod
    def generate_id() -> str:
        return str(uuid.uuid4())

    @property
    def has_gps(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def editing_index(self) -> Optional[int]:
        if isinstance(self.mode, EditingMode):
            return self.mode.index
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialized form handed to the persistence layer."""
        return {
            "imageUrl": self.image_url,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "routes": [r.to_dict() for r in self.routes],
            "sessionId": self.session_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        return cls(
            image_url=data["imageUrl"],
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            session_id=data.get("sessionId") or cls.generate_id(),
            routes=[Route.from_dict(r) for r in data.get("routes", [])],
        )


@dataclass
class Boulder:
    """A located boulder/crag that climbs hang off."""
    id: str
    name: str
    latitude: float
    longitude: float
    created_at: datetime = field(default_factory=datetime.utcnow)

    @staticmethod
    def generate_id() -> str:
        return str(uuid.uuid4())


@dataclass
class Climb:
    """A submitted route, awaiting or past moderation."""
    id: str
    boulder_id: str
    name: str
    grade: str
    image_url: str
    points: List[Point] = field(default_factory=list)
    description: str = ""
    status: ClimbStatus = ClimbStatus.PENDING
    session_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    boulder: Optional[Boulder] = None

    @staticmethod
    def generate_id() -> str:
        return str(uuid.uuid4())
