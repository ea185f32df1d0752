from .sessions import SessionsRepository
from .climbs import ClimbsRepository
from . import models

__all__ = ["SessionsRepository", "ClimbsRepository", "models"]
