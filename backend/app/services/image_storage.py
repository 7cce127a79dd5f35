# backend/app/services/image_storage.py
"""
Image Storage Service

Stores product images on the local filesystem under UPLOAD_DIR and hands back
public paths of the form "/uploads/<uuid><ext>".

Upload limits are checked for the whole batch before anything is written:
  - at most MAX_FILES files per request          -> TooManyFiles
  - only image/* content types                   -> InvalidFileType
  - at most MAX_FILE_SIZE bytes per file         -> PayloadTooLarge
"""

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from starlette.datastructures import UploadFile

from app.config import settings
from app.core.errors import InvalidFileType, PayloadTooLarge, TooManyFiles

logger = logging.getLogger("uvicorn.error")


@dataclass
class PendingImage:
    """An upload that passed validation and is ready to be written."""
    filename: str
    content_type: str
    data: bytes


def _human_size(size: int) -> str:
    if size >= 1024 * 1024:
        return f"{size / (1024 * 1024):g}MB"
    if size >= 1024:
        return f"{size / 1024:g}KB"
    return f"{size}B"


class ImageStorage:
    def __init__(self, upload_dir: str, url_prefix: str = "/uploads",
                 max_file_size: int = 5 * 1024 * 1024, max_files: int = 10):
        self.upload_dir = Path(upload_dir)
        self.url_prefix = "/" + url_prefix.strip("/")
        self.max_file_size = max_file_size
        self.max_files = max_files

    # -------- validation --------
    async def validate(self, files: Sequence[UploadFile]) -> List[PendingImage]:
        """
        Check every file against the upload limits and read it into memory.

        Raises before any file is persisted, so a rejected batch leaves no
        trace on disk.
        """
        if len(files) > self.max_files:
            raise TooManyFiles("Too many files", details={"maxFiles": self.max_files})

        pending: List[PendingImage] = []
        for upload in files:
            content_type = upload.content_type or ""
            if not content_type.startswith("image/"):
                raise InvalidFileType(
                    "Only image files are allowed",
                    details={"filename": upload.filename, "contentType": content_type},
                )
            # One byte past the limit is enough to know the file is too large
            data = await upload.read(self.max_file_size + 1)
            if len(data) > self.max_file_size:
                raise PayloadTooLarge(
                    "File too large",
                    details={"filename": upload.filename, "maxSize": _human_size(self.max_file_size)},
                )
            pending.append(PendingImage(upload.filename or "", content_type, data))
        return pending

    # -------- write / delete --------
    def save(self, images: Sequence[PendingImage]) -> List[str]:
        """Write validated images under collision-resistant names; return their public paths."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        paths: List[str] = []
        for image in images:
            ext = os.path.splitext(image.filename)[1].lower()
            name = f"{uuid.uuid4().hex}{ext}"
            with open(self.upload_dir / name, "wb") as buffer:
                buffer.write(image.data)
            paths.append(f"{self.url_prefix}/{name}")
        logger.info("[uploads] stored %d image(s) in %s", len(paths), self.upload_dir)
        return paths

    def path_for(self, public_path: str) -> Path:
        # Only the basename is honoured so a stored path cannot point outside upload_dir
        return self.upload_dir / Path(public_path).name

    def delete(self, public_path: str) -> bool:
        """Remove a stored file. Missing files are ignored."""
        target = self.path_for(public_path)
        if target.is_file():
            target.unlink()
            logger.info("[uploads] deleted %s", target)
            return True
        return False

    def delete_many(self, public_paths: Sequence[str]) -> None:
        for public_path in public_paths:
            self.delete(public_path)


def get_image_storage() -> ImageStorage:
    """FastAPI dependency: storage configured from current settings."""
    return ImageStorage(
        upload_dir=settings.UPLOAD_DIR,
        url_prefix=settings.UPLOAD_URL_PREFIX,
        max_file_size=settings.MAX_FILE_SIZE,
        max_files=settings.MAX_FILES,
    )
