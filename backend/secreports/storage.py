# backend/secreports/storage.py
"""
Attachment file storage on local disk.

Files land in UPLOAD_DIR/<folder>/ under a generated unique name; the
database keeps the relative path. Only the multipart field `attachment` is
accepted.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import Request
from starlette.datastructures import UploadFile

from .errors import UploadRejected, is_development
from .utils.identifiers import unique_upload_name

logger = logging.getLogger(__name__)

# You can override these per environment:
#   UPLOAD_DIR=/var/lib/secreports/uploads
#   MAX_UPLOAD_BYTES=10485760
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", "uploads"))
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)) or "0")

UPLOAD_FIELD = "attachment"
_CHUNK_SIZE = 1024 * 1024

ALLOWED_MIME_TYPES = frozenset(
    {
        # images
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/svg+xml",
        "image/webp",
        # documents
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-powerpoint",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        # text
        "text/plain",
        "text/csv",
        # archives
        "application/zip",
        "application/x-rar-compressed",
    }
)


@dataclass(frozen=True)
class StoredFile:
    filename: str
    original_name: str
    path: str
    mimetype: str
    size: int


def is_allowed_type(mimetype: Optional[str]) -> bool:
    if is_development():
        return True
    return (mimetype or "").lower() in ALLOWED_MIME_TYPES


async def attachment_upload(request: Request) -> UploadFile:
    """
    Dependency pulling the single `attachment` file out of a multipart body.
    """
    form = await request.form()
    upload = form.get(UPLOAD_FIELD)
    if isinstance(upload, UploadFile) and upload.filename:
        return upload

    if any(isinstance(value, UploadFile) for _, value in form.multi_items()):
        raise UploadRejected(
            f'Unexpected file field; upload the file as "{UPLOAD_FIELD}".',
            code="LIMIT_UNEXPECTED_FILE",
        )
    raise UploadRejected("No file was uploaded.", code="NO_FILE")


def save_upload(upload: UploadFile, *, folder: str) -> StoredFile:
    """
    Validate and write an upload to disk. Raises UploadRejected; a file that
    turns out too large is removed again.
    """
    if upload is None or not upload.filename:
        raise UploadRejected("No file was uploaded.", code="NO_FILE")

    mimetype = upload.content_type or "application/octet-stream"
    if not is_allowed_type(mimetype):
        raise UploadRejected(
            f"File type {mimetype} is not allowed.",
            code="UNSUPPORTED_MEDIA_TYPE",
        )

    target_dir = UPLOAD_DIR / folder
    target_dir.mkdir(parents=True, exist_ok=True)
    filename = unique_upload_name(UPLOAD_FIELD, upload.filename)
    dest_path = target_dir / filename

    total = 0
    with dest_path.open("wb") as out:
        while True:
            chunk = upload.file.read(_CHUNK_SIZE)
            if not chunk:
                break
            total += len(chunk)
            if MAX_UPLOAD_BYTES and total > MAX_UPLOAD_BYTES:
                break
            out.write(chunk)

    if MAX_UPLOAD_BYTES and total > MAX_UPLOAD_BYTES:
        delete_stored_file(str(dest_path))
        raise UploadRejected(
            f"File is too large; the maximum size is {MAX_UPLOAD_BYTES // (1024 * 1024)} MB.",
            code="LIMIT_FILE_SIZE",
        )

    return StoredFile(
        filename=filename,
        original_name=upload.filename,
        path=dest_path.as_posix(),
        mimetype=mimetype,
        size=total,
    )


def delete_stored_file(path: Optional[str]) -> None:
    """Best-effort removal; a missing or locked file is only logged."""
    if not path:
        return
    try:
        p = Path(path)
        if p.exists():
            p.unlink()
    except OSError:
        logger.warning("Could not delete stored file %s", path, exc_info=True)
