"""
Local media storage
Writes uploaded files under UPLOAD_DIR and renders JPEG thumbnails for photos.
"""
import io
import logging
import os
import re
import uuid
from dataclasses import dataclass
from typing import Optional

from PIL import Image

from app.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncomingFile:
    """An uploaded file, already read into memory by the route."""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class StoredFile:
    url: str
    thumb_url: Optional[str]


def safe_filename(filename: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]", "_", filename or "upload")


class LocalStorage:
    def __init__(self, root: Optional[str] = None, url_prefix: Optional[str] = None):
        self.root = root or settings.UPLOAD_DIR
        self.url_prefix = (url_prefix or settings.UPLOAD_URL_PREFIX).rstrip("/")

    def _url(self, name: str) -> str:
        return f"{self.url_prefix}/{name}"

    def save(self, incoming: IncomingFile, make_thumbnail: bool = False) -> StoredFile:
        os.makedirs(self.root, exist_ok=True)

        stored_name = f"{uuid.uuid4().hex}-{safe_filename(incoming.filename)}"
        with open(os.path.join(self.root, stored_name), "wb") as fh:
            fh.write(incoming.data)

        thumb_url = None
        if make_thumbnail:
            thumb_name = f"thumb-{os.path.splitext(stored_name)[0]}.jpg"
            if self._write_thumbnail(incoming.data, os.path.join(self.root, thumb_name)):
                thumb_url = self._url(thumb_name)

        return StoredFile(url=self._url(stored_name), thumb_url=thumb_url)

    def _write_thumbnail(self, data: bytes, path: str) -> bool:
        """Resize to THUMBNAIL_WIDTH (never enlarging) and save as JPEG."""
        try:
            image = Image.open(io.BytesIO(data))
            if image.mode not in ("RGB", "L"):
                image = image.convert("RGB")

            width = settings.THUMBNAIL_WIDTH
            if image.width > width:
                height = int(image.height * width / image.width)
                image = image.resize((width, height), Image.Resampling.LANCZOS)

            image.save(path, format="JPEG", quality=settings.THUMBNAIL_QUALITY)
            return True
        except Exception as exc:
            # Unreadable image: keep the original, skip the thumbnail
            logger.warning(f"[STORAGE] Thumbnail failed for {path}: {exc}")
            return False
