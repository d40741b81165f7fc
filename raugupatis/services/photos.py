"""
Photo file storage.

Uploaded images live under ``uploads_dir/<fermentation_id>/`` with generated
names, so user-supplied filenames never reach the filesystem. Only the path
relative to ``uploads_dir`` is stored in the database.
"""
import logging
import re
import secrets
import shutil
from datetime import datetime, timezone
from pathlib import Path

import aiofiles
from fastapi import UploadFile

from raugupatis.exceptions import PayloadTooLarge, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}
CHUNK_SIZE = 64 * 1024


def sanitize_filename(filename: str) -> str:
    """Strip directories and anything outside ``[A-Za-z0-9._-]``."""
    name = Path(filename.replace("\\", "/")).name
    name = re.sub(r"[^A-Za-z0-9._-]", "_", name).lstrip(".")
    return name or "upload"


def photo_extension(filename: str | None) -> str:
    """Lower-cased extension of an allowed image, else ValidationError."""
    if not filename or "." not in filename:
        raise ValidationError.for_field("photo", "A photo file with an image extension is required")
    ext = sanitize_filename(filename).rsplit(".", 1)[-1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        allowed = ", ".join(sorted(ALLOWED_EXTENSIONS))
        raise ValidationError.for_field("photo", f"Unsupported file type '.{ext}'. Allowed: {allowed}")
    return ext


def generate_photo_name(ext: str) -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"{stamp}_{secrets.token_hex(8)}.{ext}"


async def save_photo(upload: UploadFile, uploads_dir: Path, fermentation_id: int, max_bytes: int) -> str:
    """
    Stream an upload to disk and return its path relative to ``uploads_dir``.

    Raises:
        ValidationError: empty file or unsupported extension
        PayloadTooLarge: the file exceeds ``max_bytes`` (partial file is removed)
    """
    ext = photo_extension(upload.filename)
    relative = Path(str(fermentation_id)) / generate_photo_name(ext)
    target = uploads_dir / relative
    target.parent.mkdir(parents=True, exist_ok=True)

    written = 0
    try:
        async with aiofiles.open(target, "wb") as f:
            while chunk := await upload.read(CHUNK_SIZE):
                written += len(chunk)
                if written > max_bytes:
                    raise PayloadTooLarge(f"Photo exceeds the {max_bytes // (1024 * 1024)} MB limit")
                await f.write(chunk)
    except Exception:
        target.unlink(missing_ok=True)
        raise

    if written == 0:
        target.unlink(missing_ok=True)
        raise ValidationError.for_field("photo", "Uploaded file is empty")

    logger.info(f"[PHOTOS] Saved {written} bytes for fermentation {fermentation_id} as {relative.as_posix()}")
    return relative.as_posix()


def resolve_photo_path(uploads_dir: Path, relative: str) -> Path | None:
    """Absolute path for a stored photo, or None if it escapes ``uploads_dir``."""
    root = uploads_dir.resolve()
    candidate = (root / relative).resolve()
    if root not in candidate.parents:
        return None
    return candidate


def remove_fermentation_photos(uploads_dir: Path, fermentation_id: int) -> None:
    """Delete a fermentation's photo directory after its rows are gone."""
    directory = uploads_dir / str(fermentation_id)
    if directory.is_dir():
        shutil.rmtree(directory, ignore_errors=True)
        logger.info(f"[PHOTOS] Removed photo directory for fermentation {fermentation_id}")


def discard_photo(uploads_dir: Path, relative: str) -> None:
    """Delete a stored photo whose database row was never written."""
    path = resolve_photo_path(uploads_dir, relative)
    if path is None:
        return
    path.unlink(missing_ok=True)
    logger.warning(f"[PHOTOS] Discarded unrecorded upload {relative}")
