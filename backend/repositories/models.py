"""
SQLAlchemy ORM models for persistence.
"""
from datetime import datetime
from sqlalchemy import Column, DateTime, Float, ForeignKey, JSON, String, Text
from sqlalchemy.orm import relationship

from db import Base


class RouteSessionORM(Base):
    """Saved drawing session, kept until the naming step submits it."""
    __tablename__ = "route_sessions"

    id = Column(String, primary_key=True, index=True)
    payload = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class BoulderORM(Base):
    __tablename__ = "boulders"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    latitude = Column(Float, nullable=False, index=True)
    longitude = Column(Float, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    climbs = relationship(
        "ClimbORM",
        back_populates="boulder",
        cascade="all, delete-orphan",
    )


class ClimbORM(Base):
    __tablename__ = "climbs"

    id = Column(String, primary_key=True, index=True)
    boulder_id = Column(String, ForeignKey("boulders.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    grade = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    coordinates = Column(JSON, nullable=False)
    image_url = Column(String, nullable=False)
    status = Column(String, nullable=False, index=True)
    session_id = Column(String, nullable=True, index=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    boulder = relationship("BoulderORM", back_populates="climbs")
