"""
Upload API routes.

Receives route photos, reads their GPS position and stores them so the
drawing view can be opened.
"""
import logging
from io import BytesIO
from typing import Optional
from fastapi import APIRouter, File, HTTPException, UploadFile
from pydantic import BaseModel

from domain.models import Session
from services.metadata_extractor import (
    GpsExtractionError,
    extract_gps,
    is_image_upload,
    read_image_size,
)
from settings import settings
from storage.file_storage import FileStorage

logger = logging.getLogger(__name__)

router = APIRouter()
storage = FileStorage(settings.MEDIA_ROOT)


class GpsResponse(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    altitude: Optional[float] = None


class UploadResponse(BaseModel):
    """Query parameters for the drawing view."""
    imageUrl: str
    lat: Optional[float] = None
    lng: Optional[float] = None
    hasGps: bool
    sessionId: str
    width: Optional[int] = None
    height: Optional[int] = None


def _validate_upload(file: UploadFile, content: bytes) -> None:
    if not is_image_upload(file.filename, file.content_type):
        raise HTTPException(status_code=400, detail="Please select an image file")
    if len(content) > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise HTTPException(status_code=413, detail=f"File size must be less than {limit_mb}MB")


@router.post("/extract-gps", response_model=GpsResponse)
async def extract_gps_endpoint(file: Optional[UploadFile] = File(None)):
    """Return the photo's GPS fix; missing GPS gives null coordinates."""
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")
    content = await file.read()
    try:
        fix = extract_gps(content)
    except GpsExtractionError:
        logger.exception("[uploads] GPS extraction failed for %s", file.filename)
        raise HTTPException(status_code=500, detail="Failed to extract GPS data")
    return GpsResponse(**fix.to_dict())


@router.post("", response_model=UploadResponse)
async def upload_photo(file: UploadFile = File(...)):
    """Store a route photo and return the drawing-view parameters."""
    content = await file.read()
    _validate_upload(file, content)

    try:
        fix = extract_gps(content)
    except GpsExtractionError:
        logger.exception("[uploads] unreadable upload %s", file.filename)
        raise HTTPException(status_code=400, detail="Could not read image")

    session_id = Session.generate_id()
    relative = storage.save_upload(
        session_id=session_id,
        file=BytesIO(content),
        filename=file.filename or "photo.jpg",
    )
    width, height = read_image_size(content)
    logger.info("[uploads] stored %s (gps=%s)", relative, fix.has_gps)

    return UploadResponse(
        imageUrl=storage.public_url(relative),
        lat=fix.latitude,
        lng=fix.longitude,
        hasGps=fix.has_gps,
        sessionId=session_id,
        width=width,
        height=height,
    )
