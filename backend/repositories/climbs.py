"""
Boulder/climb repository backed by SQLAlchemy/SQLite.
"""
from datetime import datetime
from typing import List, Optional, Sequence
from sqlalchemy.orm import Session, joinedload

from domain.models import Boulder, Climb, ClimbStatus, Point, Session as RouteSession
from repositories.models import BoulderORM, ClimbORM


def boulder_name(latitude: float, longitude: float) -> str:
    return f"Boulder at {latitude:.4f}, {longitude:.4f}"


def _boulder_from_orm(orm: BoulderORM) -> Boulder:
    return Boulder(
        id=orm.id,
        name=orm.name,
        latitude=orm.latitude,
        longitude=orm.longitude,
        created_at=orm.created_at,
    )


def _climb_from_orm(orm: ClimbORM) -> Climb:
    return Climb(
        id=orm.id,
        boulder_id=orm.boulder_id,
        name=orm.name,
        grade=orm.grade,
        image_url=orm.image_url,
        points=[Point.from_dict(p) for p in orm.coordinates or []],
        description=orm.description or "",
        status=ClimbStatus(orm.status),
        session_id=orm.session_id,
        created_by=orm.created_by,
        created_at=orm.created_at,
        boulder=_boulder_from_orm(orm.boulder) if orm.boulder else None,
    )


class ClimbsRepository:
    """Boulder lookup and climb submission."""

    def get_or_create_boulder(self, session: Session, latitude: float, longitude: float) -> BoulderORM:
        orm = (
            session.query(BoulderORM)
            .filter(BoulderORM.latitude == latitude, BoulderORM.longitude == longitude)
            .first()
        )
        if orm:
            return orm
        orm = BoulderORM(
            id=Boulder.generate_id(),
            name=boulder_name(latitude, longitude),
            latitude=latitude,
            longitude=longitude,
            created_at=datetime.utcnow(),
        )
        session.add(orm)
        session.flush()
        return orm

    def submit_session(
        self,
        session: Session,
        route_session: RouteSession,
        descriptions: Optional[Sequence[str]] = None,
        created_by: Optional[str] = None,
    ) -> List[Climb]:
        """
        Turn every route of a saved session into a pending climb.

        Boulder and climbs are written in one transaction; on error nothing
        is committed.
        """
        if not route_session.has_gps:
            raise ValueError("Session has no GPS coordinates")
        descriptions = list(descriptions or [])

        try:
            boulder = self.get_or_create_boulder(
                session, route_session.latitude, route_session.longitude
            )
            orms = []
            now = datetime.utcnow()
            for index, route in enumerate(route_session.routes):
                orm = ClimbORM(
                    id=Climb.generate_id(),
                    boulder_id=boulder.id,
                    name=route.name,
                    grade=route.grade,
                    description=descriptions[index] if index < len(descriptions) else "",
                    coordinates=[p.to_dict() for p in route.points],
                    image_url=route_session.image_url,
                    status=ClimbStatus.PENDING.value,
                    session_id=route_session.session_id,
                    created_by=created_by,
                    created_at=now,
                )
                session.add(orm)
                orms.append(orm)
            session.commit()
        except Exception:
            session.rollback()
            raise

        for orm in orms:
            session.refresh(orm)
        return [_climb_from_orm(o) for o in orms]

    def list_climbs(self, session: Session, status: Optional[ClimbStatus] = None) -> List[Climb]:
        query = session.query(ClimbORM).options(joinedload(ClimbORM.boulder))
        if status:
            query = query.filter(ClimbORM.status == status.value)
        climbs = query.order_by(ClimbORM.created_at.desc()).all()
        return [_climb_from_orm(c) for c in climbs]
