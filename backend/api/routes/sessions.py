"""
Drawing-session API routes.

Saves the serialized session produced by the drawing view, serves it
back to the naming step, renders previews and submits named routes.
"""
import logging
import math
from io import BytesIO
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel, Field

from db import SessionLocal
from domain.models import Session, is_valid_grade
from repositories import ClimbsRepository, SessionsRepository
from services.image_source import ImageSourceError, load_image
from services.redraw import configured_style
from services.route_accumulator import MIN_ROUTE_POINTS, default_route_name
from services.surface_pillow import render_session_preview
from settings import settings

logger = logging.getLogger(__name__)

router = APIRouter()
sessions_repo = SessionsRepository()
climbs_repo = ClimbsRepository()

MAX_IMAGE_DIMENSION = 65535


class PointPayload(BaseModel):
    x: float
    y: float


class RoutePayload(BaseModel):
    points: List[PointPayload]
    grade: str
    name: str


class SessionPayload(BaseModel):
    imageUrl: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    routes: List[RoutePayload] = Field(default_factory=list)
    sessionId: str


class SubmitRequest(BaseModel):
    descriptions: List[str] = Field(default_factory=list)
    created_by: Optional[str] = None


class ClimbResponse(BaseModel):
    id: str
    boulder_id: str
    name: str
    grade: str
    status: str
    image_url: str


class SubmitResponse(BaseModel):
    session_id: str
    climbs: List[ClimbResponse]


def _validate_routes(payload: SessionPayload) -> None:
    """Reject routes the drawing view could not have produced; fill blank names."""
    for index, route in enumerate(payload.routes):
        if len(route.points) < MIN_ROUTE_POINTS:
            raise HTTPException(
                status_code=400,
                detail=f"Route {index + 1} needs at least {MIN_ROUTE_POINTS} points",
            )
        if not is_valid_grade(route.grade):
            raise HTTPException(status_code=400, detail=f"Invalid grade: {route.grade}")
        for point in route.points:
            if not _is_natural_coordinate(point.x) or not _is_natural_coordinate(point.y):
                raise HTTPException(
                    status_code=400,
                    detail=f"Route {index + 1} has a point outside the image: ({point.x}, {point.y})",
                )
        if not route.name.strip():
            route.name = default_route_name(index + 1)


def _is_natural_coordinate(value: float) -> bool:
    # Pillow cannot open images wider or taller than 65535 pixels
    return math.isfinite(value) and 0 <= value <= MAX_IMAGE_DIMENSION


def _get_or_404(session_id: str) -> Session:
    with SessionLocal() as db:
        route_session = sessions_repo.get_session(db, session_id)
    if not route_session:
        raise HTTPException(status_code=404, detail="Session not found")
    return route_session


@router.post("", response_model=SessionPayload)
async def save_session(payload: SessionPayload):
    """Store the drawing view's session until the naming step."""
    _validate_routes(payload)
    route_session = Session.from_dict(payload.model_dump())
    with SessionLocal() as db:
        sessions_repo.save_session(db, route_session)
    logger.info("[sessions] saved %s (%d routes)", route_session.session_id, len(route_session.routes))
    return SessionPayload(**route_session.to_dict())


@router.get("/{session_id}", response_model=SessionPayload)
async def get_session(session_id: str):
    return SessionPayload(**_get_or_404(session_id).to_dict())


@router.get("/{session_id}/preview.png")
async def session_preview(session_id: str, max_size: int = Query(1600, ge=64, le=8000)):
    """Session routes drawn over the source photo."""
    route_session = _get_or_404(session_id)
    try:
        photo = load_image(route_session.image_url)
    except ImageSourceError as e:
        logger.warning("[sessions] preview image unavailable for %s: %s", session_id, e)
        raise HTTPException(status_code=502, detail="Session image could not be loaded")

    image = render_session_preview(
        photo,
        route_session,
        style=configured_style(),
        font_path=settings.LABEL_FONT_PATH,
        max_size=max_size,
    )
    output = BytesIO()
    image.save(output, format="PNG")
    return Response(content=output.getvalue(), media_type="image/png")


@router.post("/{session_id}/submit", response_model=SubmitResponse)
async def submit_session(session_id: str, data: SubmitRequest):
    """Create pending climbs from a saved session, then discard the session."""
    route_session = _get_or_404(session_id)
    if not route_session.has_gps:
        raise HTTPException(status_code=400, detail="Session has no GPS coordinates")
    if not route_session.routes:
        raise HTTPException(status_code=400, detail="Session has no routes")

    with SessionLocal() as db:
        try:
            climbs = climbs_repo.submit_session(
                db, route_session, data.descriptions, created_by=data.created_by
            )
        except Exception:
            # Session stays stored so the user can retry
            logger.exception("[sessions] submit failed for %s", session_id)
            raise HTTPException(status_code=500, detail="Failed to submit routes")
        sessions_repo.delete_session(db, session_id)

    return SubmitResponse(
        session_id=session_id,
        climbs=[
            ClimbResponse(
                id=c.id,
                boulder_id=c.boulder_id,
                name=c.name,
                grade=c.grade,
                status=c.status.value,
                image_url=c.image_url,
            )
            for c in climbs
        ],
    )
