"""
Drawing-session repository backed by SQLAlchemy/SQLite.

Holds serialized sessions between the drawing step and the naming step.
"""
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from domain.models import Session as RouteSession
from repositories.models import RouteSessionORM


class SessionsRepository:
    """CRUD operations for saved drawing sessions."""

    def save_session(self, session: Session, route_session: RouteSession) -> RouteSession:
        """Insert or overwrite the stored blob for this session id."""
        now = datetime.utcnow()
        orm = session.get(RouteSessionORM, route_session.session_id)
        if orm is None:
            orm = RouteSessionORM(id=route_session.session_id, created_at=now)
            session.add(orm)
        orm.payload = route_session.to_dict()
        orm.updated_at = now
        session.commit()
        return route_session

    def get_session(self, session: Session, session_id: str) -> Optional[RouteSession]:
        orm = session.get(RouteSessionORM, session_id)
        if not orm:
            return None
        return RouteSession.from_dict(orm.payload)

    def delete_session(self, session: Session, session_id: str) -> bool:
        orm = session.get(RouteSessionORM, session_id)
        if not orm:
            return False
        session.delete(orm)
        session.commit()
        return True
