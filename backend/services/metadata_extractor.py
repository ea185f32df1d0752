"""
EXIF GPS extraction service.

Reads the GPS position (and pixel size) from an uploaded photo so the
drawing view can be opened with the boulder's coordinates. Missing GPS
is a normal outcome, not an error.
"""
import logging
from io import BytesIO
from typing import Any, Dict, Optional, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError
from PIL.ExifTags import GPSTAGS

from domain.models import GpsFix

logger = logging.getLogger(__name__)

GPS_IFD_TAG = 0x8825


class GpsExtractionError(Exception):
    """The upload could not be read as an image at all."""


def extract_gps(file_bytes: bytes) -> GpsFix:
    """
    Extract the GPS fix from image bytes.

    Returns:
        GpsFix with None fields when the photo carries no (or partial)
        GPS data.

    Raises:
        GpsExtractionError if the bytes are not a readable image.
    """
    try:
        img = Image.open(BytesIO(file_bytes))
    except (UnidentifiedImageError, OSError) as e:
        raise GpsExtractionError(f"Unreadable image: {e}") from e

    gps_info = _get_gps_dict(img)
    if not gps_info:
        return GpsFix()

    lat, lon = _parse_gps_coordinates(gps_info)
    if lat is None or lon is None:
        return GpsFix()
    return GpsFix(latitude=lat, longitude=lon, altitude=_parse_gps_altitude(gps_info))


def read_image_size(file_bytes: bytes) -> Tuple[Optional[int], Optional[int]]:
    """
    Natural pixel size of an image, or (None, None) if it cannot be read.

    EXIF orientation is applied, so a rotated phone photo reports the size
    it is displayed (and drawn on) at.
    """
    try:
        with Image.open(BytesIO(file_bytes)) as img:
            oriented = ImageOps.exif_transpose(img)
            return oriented.width, oriented.height
    except Exception:
        return None, None


def _get_gps_dict(img) -> Optional[Dict[str, Any]]:
    """
    Extract the GPS IFD as a human-readable dictionary.

    Converts numeric tag IDs to string names and makes values JSON-serializable.
    """
    try:
        exif = img.getexif()
        if not exif:
            return None
        gps_raw = exif.get_ifd(GPS_IFD_TAG)
        if not gps_raw:
            return None
        return {
            GPSTAGS.get(tag_id, str(tag_id)): _make_json_safe(value)
            for tag_id, value in gps_raw.items()
        }
    except Exception:
        logger.debug("[gps] could not read EXIF GPS block", exc_info=True)
        return None


def _make_json_safe(value: Any) -> Any:
    """Convert EXIF value to JSON-serializable type."""
    if value is None:
        return None

    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")

    # Handle tuples/lists (common for GPS coordinates)
    if isinstance(value, (tuple, list)):
        return [_make_json_safe(v) for v in value]

    # Handle IFDRational or similar fraction types
    if hasattr(value, "numerator") and hasattr(value, "denominator"):
        try:
            if value.denominator == 0:
                return None
            return float(value.numerator) / float(value.denominator)
        except Exception:
            return str(value)

    if isinstance(value, (int, float, str, bool)):
        return value

    return str(value)


def _parse_gps_coordinates(gps_info: Dict[str, Any]) -> Tuple[Optional[float], Optional[float]]:
    """
    Parse GPS latitude and longitude from EXIF GPSInfo.

    Converts degrees/minutes/seconds format to decimal degrees.

    Returns:
        Tuple of (latitude, longitude) in decimal degrees, or (None, None) on error.
    """
    try:
        lat = gps_info.get("GPSLatitude")
        lat_ref = gps_info.get("GPSLatitudeRef", "N")
        lon = gps_info.get("GPSLongitude")
        lon_ref = gps_info.get("GPSLongitudeRef", "E")

        if lat is None or lon is None:
            return None, None

        return _dms_to_decimal(lat, lat_ref), _dms_to_decimal(lon, lon_ref)

    except Exception:
        return None, None


def _dms_to_decimal(dms: Any, ref: str) -> Optional[float]:
    """
    Convert degrees/minutes/seconds to decimal degrees.

    Args:
        dms: List/tuple of [degrees, minutes, seconds] (may be floats or rationals)
        ref: Reference direction ("N", "S", "E", "W")

    Returns:
        Decimal degrees, negative for S/W.
    """
    try:
        if not isinstance(dms, (list, tuple)) or len(dms) < 3:
            return None

        degrees = float(dms[0])
        minutes = float(dms[1])
        seconds = float(dms[2])

        decimal = degrees + (minutes / 60.0) + (seconds / 3600.0)

        if str(ref).upper() in ("S", "W"):
            decimal = -decimal

        return round(decimal, 7)  # ~1cm precision

    except Exception:
        return None


def _parse_gps_altitude(gps_info: Dict[str, Any]) -> Optional[float]:
    """Parse GPS altitude from EXIF GPSInfo."""
    try:
        altitude = gps_info.get("GPSAltitude")
        if altitude is None:
            return None

        alt_value = float(altitude)

        # 0 = above sea level, 1 = below
        alt_ref = gps_info.get("GPSAltitudeRef", 0)
        if alt_ref in (1, b"\x01", "\x01"):
            alt_value = -alt_value

        return round(alt_value, 2)

    except Exception:
        return None


def is_image_upload(filename: Optional[str], content_type: Optional[str] = None) -> bool:
    """Accept anything that declares an image content type or has an image extension."""
    if content_type:
        return content_type.lower().startswith("image/")
    if filename and "." in filename:
        ext = filename.lower().rsplit(".", 1)[-1]
        return ext in ("jpg", "jpeg", "png", "gif", "heic", "heif", "webp")
    return False


def register_heif_opener():
    """
    Register HEIF/HEIC opener with Pillow if pillow-heif is available.

    Call this at application startup to enable HEIC support.
    Safe to call multiple times or if pillow-heif is not installed.
    """
    try:
        from pillow_heif import register_heif_opener as _register
        _register()
        return True
    except ImportError:
        return False
