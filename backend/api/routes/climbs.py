"""
Climb listing routes for the map view.
"""
from typing import List, Optional
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from db import SessionLocal
from domain.models import Climb, ClimbStatus
from repositories import ClimbsRepository

router = APIRouter()
climbs_repo = ClimbsRepository()


class BoulderResponse(BaseModel):
    id: str
    name: str
    latitude: float
    longitude: float


class MapClimbResponse(BaseModel):
    id: str
    name: str
    grade: str
    image_url: str
    status: str
    points: List[dict]
    boulder: Optional[BoulderResponse] = None


def climb_to_response(climb: Climb) -> MapClimbResponse:
    boulder = None
    if climb.boulder:
        boulder = BoulderResponse(
            id=climb.boulder.id,
            name=climb.boulder.name,
            latitude=climb.boulder.latitude,
            longitude=climb.boulder.longitude,
        )
    return MapClimbResponse(
        id=climb.id,
        name=climb.name,
        grade=climb.grade,
        image_url=climb.image_url,
        status=climb.status.value,
        points=[p.to_dict() for p in climb.points],
        boulder=boulder,
    )


@router.get("", response_model=List[MapClimbResponse])
async def list_climbs(status: str = "approved"):
    """List climbs by status; the map shows approved ones."""
    try:
        status_enum = ClimbStatus(status)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid status: {status}")

    with SessionLocal() as session:
        climbs = climbs_repo.list_climbs(session, status_enum)
    return [climb_to_response(c) for c in climbs]
