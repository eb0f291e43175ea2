from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path
import uuid
from typing import Optional

from app.core.config import settings
from app.core.errors import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)

MAX_FILES_PER_REQUEST = 10
PUBLIC_PREFIX = "/uploads"


def uploads_dir() -> Path:
    path = Path(settings.uploads_dir).resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path


def public_url(filename: str) -> str:
    return f"{PUBLIC_PREFIX}/{filename}"


def generate_filename(original_name: Optional[str]) -> str:
    suffix = Path(original_name or "").suffix.lower()
    stamp = int(datetime.now(timezone.utc).timestamp() * 1000)
    return f"file-{stamp}-{uuid.uuid4().hex}{suffix}"


def resolve_file(filename: str) -> Path:
    """Path of a stored upload; anything outside the uploads directory is rejected."""
    if not filename or "/" in filename or "\\" in filename or filename in (".", ".."):
        raise BadRequestError("Invalid filename")
    path = uploads_dir() / filename
    if not path.is_file():
        raise NotFoundError(f"File {filename} not found")
    return path


def read_upload(stream) -> bytes:
    """Read an incoming file, stopping one byte past the size limit."""
    return stream.read(settings.upload_max_bytes + 1)


def _check_size(original_name: Optional[str], data: bytes) -> None:
    if not data:
        raise BadRequestError(f"File {original_name or ''} is empty")
    if len(data) > settings.upload_max_bytes:
        raise BadRequestError(
            f"File {original_name or ''} exceeds the maximum size of "
            f"{settings.upload_max_bytes} bytes"
        )


def store_file(original_name: Optional[str], content_type: Optional[str], data: bytes) -> dict:
    if not data:
        raise BadRequestError("No file provided")
    _check_size(original_name, data)
    filename = generate_filename(original_name)
    (uploads_dir() / filename).write_bytes(data)
    logger.info("Stored upload %s as %s (%s bytes)", original_name, filename, len(data))
    return {
        "filename": filename,
        "original_name": original_name,
        "url": public_url(filename),
        "size": len(data),
        "content_type": content_type,
    }


def store_files(files: list[tuple[Optional[str], Optional[str], bytes]]) -> list[dict]:
    if not files:
        raise BadRequestError("No files provided")
    if len(files) > MAX_FILES_PER_REQUEST:
        raise BadRequestError(f"At most {MAX_FILES_PER_REQUEST} files per request")
    # Validate everything first so a rejected file leaves nothing behind.
    for original_name, _, data in files:
        _check_size(original_name, data)
    return [store_file(*item) for item in files]


def list_files() -> list[dict]:
    return [
        {"filename": path.name, "url": public_url(path.name)}
        for path in sorted(uploads_dir().iterdir())
        if path.is_file()
    ]


def delete_file(filename: str) -> dict:
    resolve_file(filename).unlink()
    logger.info("Deleted upload %s", filename)
    return {"success": True, "message": f"File {filename} deleted successfully"}
