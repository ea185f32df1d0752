"""
Image source: resolves a session's image URL to a Pillow image.

Uploaded photos live under the /media mount and are read straight from
storage. Remote URLs are fetched over HTTP only from hosts listed in
IMAGE_FETCH_ALLOWED_HOSTS.
"""
import logging
from io import BytesIO
from typing import Optional
from urllib.parse import urlsplit

import requests
from PIL import Image, ImageOps

from settings import settings
from storage.file_storage import FileStorage

logger = logging.getLogger(__name__)

MEDIA_URL_PREFIX = "/media/"

_HTTP_SESSION = requests.Session()


class ImageSourceError(Exception):
    """The image behind a URL could not be loaded."""


def load_image(image_url: str, storage: Optional[FileStorage] = None) -> Image.Image:
    """
    Load the image behind `image_url`.

    Raises:
        ImageSourceError on missing or out-of-root files, disallowed hosts,
        HTTP errors or undecodable data.
    """
    if not image_url:
        raise ImageSourceError("No image URL")

    if image_url.startswith(MEDIA_URL_PREFIX):
        storage = storage or FileStorage(settings.MEDIA_ROOT)
        relative = image_url[len(MEDIA_URL_PREFIX):]
        if not storage.contains(relative):
            logger.warning("[image_source] refused path outside media root: %s", image_url)
            raise ImageSourceError("Image path is outside the media directory")
        if not storage.file_exists(relative):
            raise ImageSourceError(f"Image not found: {image_url}")
        data = storage.get_absolute_path(relative).read_bytes()
    else:
        _check_remote_allowed(image_url)
        try:
            resp = _HTTP_SESSION.get(
                image_url, timeout=settings.IMAGE_FETCH_TIMEOUT, allow_redirects=False
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning("[image_source] fetch failed for %s: %s", image_url, e)
            raise ImageSourceError(f"Could not fetch image: {e}") from e
        data = resp.content

    try:
        img = Image.open(BytesIO(data))
        img.load()
    except Exception as e:
        raise ImageSourceError(f"Could not decode image: {e}") from e
    # Natural size is the orientation the viewer sees
    return ImageOps.exif_transpose(img)


def _check_remote_allowed(image_url: str) -> None:
    parts = urlsplit(image_url)
    host = (parts.hostname or "").lower()
    if parts.scheme not in ("http", "https") or not host:
        raise ImageSourceError(f"Unsupported image URL: {image_url}")
    if host not in settings.IMAGE_FETCH_ALLOWED_HOSTS:
        logger.warning("[image_source] refused fetch from %s", host)
        raise ImageSourceError(f"Image host not allowed: {host}")
