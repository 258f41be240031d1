import base64
import logging
import uuid
from pathlib import Path
from typing import Iterable, Optional

from scavenger_hunt.core.exceptions import ImageNotFound, ValidationError

logger = logging.getLogger(__name__)

MIME_TO_EXT = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
}
EXT_TO_MIME = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
}
DEFAULT_ALLOWED_FORMATS = ("jpg", "png", "gif")


def validate_image(
    content_type: Optional[str],
    size: int,
    *,
    allowed_formats: Optional[Iterable[str]],
    max_file_size: int,
) -> str:
    """
    Check an upload against a question's constraints and return the file extension.
    """
    formats = [f.strip().lower() for f in (allowed_formats or DEFAULT_ALLOWED_FORMATS) if f and f.strip()]
    allowed_mimes = {EXT_TO_MIME[f] for f in formats if f in EXT_TO_MIME}

    if content_type not in MIME_TO_EXT:
        raise ValidationError("Unsupported image format")
    if content_type not in allowed_mimes:
        raise ValidationError(f"Invalid file format. Allowed: {', '.join(formats)}")
    if size <= 0:
        raise ValidationError("Empty file")
    if size > max_file_size:
        raise ValidationError("File too large")
    return MIME_TO_EXT[content_type]


class LocalImageStorage:
    """
    Stores uploaded photos under <root>/uploads/<event_slug>/<question_id>/
    and serves them back to the oracle as data URLs.
    """

    def __init__(self, root: str):
        self._root = Path(root).resolve()

    def upload_image(self, data: bytes, ext: str, question_id: str, event_slug: str) -> str:
        upload_dir = self._root / "uploads" / event_slug / question_id
        upload_dir.mkdir(parents=True, exist_ok=True)

        filename = f"{uuid.uuid4()}.{ext}"
        (upload_dir / filename).write_bytes(data)

        url = f"/uploads/{event_slug}/{question_id}/{filename}"
        logger.info(f"Stored upload {url} ({len(data)} bytes)")
        return url

    def cleanup_image(self, url: str) -> None:
        path = self._path_for(url)
        try:
            path.unlink()
            logger.info(f"Removed upload {url}")
        except FileNotFoundError:
            logger.warning(f"Upload already gone: {url}")

    def load_data_url(self, url: str) -> str:
        path = self._path_for(url)
        if not path.is_file():
            raise ImageNotFound(f"Image file not found: {url}")

        mime = EXT_TO_MIME.get(path.suffix.lstrip(".").lower(), "image/jpeg")
        encoded = base64.b64encode(path.read_bytes()).decode("ascii")
        return f"data:{mime};base64,{encoded}"

    def _path_for(self, url: str) -> Path:
        path = (self._root / url.lstrip("/")).resolve()
        # urls come from clients; keep them inside the upload root
        if self._root not in path.parents:
            raise ValidationError("Invalid image url")
        return path
