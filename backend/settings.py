import os

# Basic settings helper to read environment configuration.


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_list(val: str | None) -> list[str]:
    if not val:
        return []
    return [item.strip().lower() for item in val.split(",") if item.strip()]


class Settings:
    def __init__(self) -> None:
        self.MEDIA_ROOT: str = os.getenv("MEDIA_ROOT", "media")
        self.DATABASE_URL: str | None = os.getenv("DATABASE_URL")
        # "straight" or "smoothed"; read by redraw.configured_style
        self.ROUTE_CURVE_MODE: str = os.getenv("ROUTE_CURVE_MODE", "straight").lower()
        self.LABEL_FONT_PATH: str = os.getenv("LABEL_FONT_PATH", "DejaVuSans.ttf")
        self.LABEL_FONT_SIZE: int = int(os.getenv("LABEL_FONT_SIZE", "14"))
        self.LABEL_PLAQUE_ENABLED: bool = _as_bool(os.getenv("LABEL_PLAQUE_ENABLED"), True)
        self.IMAGE_FETCH_TIMEOUT: float = float(os.getenv("IMAGE_FETCH_TIMEOUT", "10"))
        # Hosts session images may be fetched from; empty means /media only
        self.IMAGE_FETCH_ALLOWED_HOSTS: list[str] = _as_list(os.getenv("IMAGE_FETCH_ALLOWED_HOSTS"))
        self.MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(16 * 1024 * 1024)))


settings = Settings()
