"""
File storage abstraction.

Provides a simple interface for storing and retrieving uploaded photos.
Currently uses local filesystem, served under the /media mount.
"""
import shutil
from pathlib import Path
from typing import BinaryIO, Optional
import uuid


class FileStorage:
    """
    Local file storage implementation.

    Files are organized as:
    - media/uploads/{session_id}/  - Uploaded route photos
    """

    def __init__(self, media_root: str = "media"):
        self.media_root = Path(media_root)
        self.media_root.mkdir(parents=True, exist_ok=True)

    def get_uploads_dir(self, session_id: str) -> Path:
        """Get the upload directory for a drawing session."""
        path = self.media_root / "uploads" / session_id
        path.mkdir(parents=True, exist_ok=True)
        return path

    def save_upload(
        self,
        session_id: str,
        file: BinaryIO,
        filename: str,
        upload_id: Optional[str] = None,
    ) -> str:
        """
        Save an uploaded photo.

        Args:
            session_id: Drawing session the photo belongs to
            file: File-like object with the photo data
            filename: Original filename
            upload_id: Optional ID (used for naming)

        Returns:
            Relative path to the saved file
        """
        ext = Path(filename).suffix.lower() or ".jpg"
        new_filename = f"{upload_id or uuid.uuid4()}{ext}"

        file_path = self.get_uploads_dir(session_id) / new_filename
        with open(file_path, "wb") as f:
            shutil.copyfileobj(file, f)

        return file_path.relative_to(self.media_root).as_posix()

    def public_url(self, relative_path: str) -> str:
        """URL under which the /media mount serves a stored file."""
        return f"/media/{relative_path}"

    def get_absolute_path(self, relative_path: str) -> Path:
        """Convert a relative path to absolute."""
        return self.media_root / relative_path

    def file_exists(self, relative_path: str) -> bool:
        """Check if a file exists."""
        return (self.media_root / relative_path).exists()

    def contains(self, relative_path: str) -> bool:
        """True if the path stays under the media root once resolved."""
        root = self.media_root.resolve()
        return (root / relative_path).resolve().is_relative_to(root)
