"""
Object Storage

S3-compatible storage (Scaleway Object Storage by default) for session
attachments. boto3 is synchronous, so every call runs in a worker thread.

Files are stored under ``sessions/<session id>/<timestamp>_<safe name>``
and uploaded with a public-read ACL; downloads go through short-lived
presigned URLs carrying the original file name.
"""

import asyncio
import logging
import re
import time
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import quote

import boto3
from botocore.config import Config

from supchaissac.core.config import settings
from supchaissac.core.errors import StorageUnavailableError, ValidationError

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = 5 * 1024 * 1024  # 5 MB

ALLOWED_MIME_TYPES = frozenset(
    {
        "application/pdf",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "image/jpeg",
        "image/png",
    }
)

EXCEL_MIME_TYPES = frozenset(
    {
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    }
)

DOWNLOAD_URL_TTL_SECONDS = 3600

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


@dataclass
class StoredFile:
    """Location of an uploaded object."""

    key: str
    url: str
    filename: str
    size: int
    mime_type: str


def is_storage_configured() -> bool:
    return settings.storage_configured


@lru_cache
def get_s3_client():
    """Build the S3 client once; path-style addressing is required by Scaleway."""
    return boto3.client(
        "s3",
        endpoint_url=settings.s3_endpoint,
        region_name=settings.s3_region,
        aws_access_key_id=settings.s3_access_key_id,
        aws_secret_access_key=settings.s3_secret_access_key,
        config=Config(s3={"addressing_style": "path"}),
    )


def sanitize_filename(filename: str) -> str:
    """Replace anything outside [a-zA-Z0-9.-] with underscores."""
    return _UNSAFE_FILENAME_CHARS.sub("_", filename) or "file"


def validate_upload(mime_type: str | None, size: int) -> None:
    """
    Check size and MIME type of an incoming file.

    Raises:
        ValidationError: If the file is too large or of a refused type
    """
    if size > MAX_FILE_SIZE:
        raise ValidationError(
            f"Fichier trop volumineux (max {MAX_FILE_SIZE // (1024 * 1024)} MB)",
            error_code="FILE_TOO_LARGE",
        )
    if mime_type not in ALLOWED_MIME_TYPES:
        raise ValidationError(
            "Type de fichier non autorisé (PDF, Excel, JPG, PNG uniquement)",
            error_code="FILE_TYPE_NOT_ALLOWED",
        )


def build_object_key(session_id: int, filename: str, timestamp_ms: int | None = None) -> str:
    timestamp_ms = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return f"sessions/{session_id}/{timestamp_ms}_{sanitize_filename(filename)}"


def public_url(key: str) -> str:
    return f"{settings.s3_endpoint.rstrip('/')}/{settings.s3_bucket_name}/{key}"


def _require_storage() -> None:
    if not is_storage_configured():
        raise StorageUnavailableError()


async def upload_file(content: bytes, filename: str, mime_type: str, session_id: int) -> StoredFile:
    """
    Upload ``content`` for a session.

    Raises:
        StorageUnavailableError: If storage credentials are missing
    """
    _require_storage()
    key = build_object_key(session_id, filename)

    await asyncio.to_thread(
        get_s3_client().put_object,
        Bucket=settings.s3_bucket_name,
        Key=key,
        Body=content,
        ContentType=mime_type,
        ACL="public-read",
    )
    logger.info(f"Uploaded {key} ({len(content)} bytes)")

    return StoredFile(
        key=key,
        url=public_url(key),
        filename=sanitize_filename(filename),
        size=len(content),
        mime_type=mime_type,
    )


async def delete_file(key: str) -> None:
    _require_storage()
    await asyncio.to_thread(
        get_s3_client().delete_object,
        Bucket=settings.s3_bucket_name,
        Key=key,
    )
    logger.info(f"Deleted {key}")


async def presigned_download_url(
    key: str,
    download_name: str | None = None,
    expires_in: int = DOWNLOAD_URL_TTL_SECONDS,
) -> str:
    """Temporary GET URL; ``download_name`` sets the Content-Disposition filename."""
    _require_storage()
    params = {"Bucket": settings.s3_bucket_name, "Key": key}
    if download_name:
        params["ResponseContentDisposition"] = (
            f"attachment; filename*=UTF-8''{quote(download_name)}"
        )
    return await asyncio.to_thread(
        get_s3_client().generate_presigned_url,
        "get_object",
        Params=params,
        ExpiresIn=expires_in,
    )
