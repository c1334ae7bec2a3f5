"""Image upload routes: validated multipart upload, signed read URLs, local file serving."""

import logging
import os
from datetime import timedelta
from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, File, Query, Response, UploadFile

from runners_api.api.v1.auth import get_current_user
from runners_api.core.config import settings
from runners_api.core.errors import AuthenticationFailed, NotFound, ValidationFailed
from runners_api.core.security import decode_file_token
from runners_api.models.user import User
from runners_api.schemas.upload import SignedUrlResponse, UploadedFile, UploadResponse
from runners_api.services.images import (
    CANONICAL_CONTENT_TYPES,
    EXTENSIONS,
    IMAGE_MAX_BYTES,
    MAX_FILES_PER_REQUEST,
    store_images,
    validate_images,
)
from runners_api.services.storage import LocalStorageProvider, StorageProvider, get_storage, is_valid_storage_key

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_upload_files(files: list[UploadFile], max_bytes: int) -> list[tuple[str | None, str | None, bytes]]:
    """
    Read each part into memory as (filename, content_type, data).
    Reads at most max_bytes + 1 bytes per file so oversize parts fail validation.
    """
    if len(files) > MAX_FILES_PER_REQUEST:
        raise ValidationFailed(
            f"At most {MAX_FILES_PER_REQUEST} files may be uploaded per request",
            details={"files": f"Received {len(files)} files"},
        )
    parts = []
    for upload in files:
        data = await upload.read(max_bytes + 1)
        parts.append((upload.filename, upload.content_type, data))
    return parts


@router.post("/images", response_model=UploadResponse)
async def upload_images(
    current_user: Annotated[User, Depends(get_current_user)],
    storage: Annotated[StorageProvider, Depends(get_storage)],
    files: Annotated[list[UploadFile], File(description="Up to 10 images, 5MB each")],
) -> UploadResponse:
    """
    Upload 1 to 10 JPEG/PNG/GIF/WebP images.

    Extension, declared content type and leading bytes must agree. One bad
    file rejects the whole request; nothing is stored in that case.
    """
    images = validate_images(await read_upload_files(files, IMAGE_MAX_BYTES), IMAGE_MAX_BYTES)
    stored = store_images(storage, images, "images")
    logger.info(
        "Images uploaded",
        extra={"user_id": current_user.id, "count": len(stored), "bytes": sum(f["size"] for f in stored)},
    )
    return UploadResponse(files=[UploadedFile.model_validate(f) for f in stored])


@router.get("/signed-url", response_model=SignedUrlResponse)
def signed_url(
    current_user: Annotated[User, Depends(get_current_user)],
    storage: Annotated[StorageProvider, Depends(get_storage)],
    file_name: str = Query(..., alias="fileName", min_length=1, max_length=200),
) -> SignedUrlResponse:
    """Time-boxed read URL for a stored file (SIGNED_URL_EXPIRE_MINUTES, default 1h)."""
    if not is_valid_storage_key(file_name):
        raise ValidationFailed("Invalid file name", details={"fileName": "Not a stored file key"})
    if not storage.exists(file_name):
        raise NotFound("File not found")
    url, expires_at = storage.signed_url(file_name, timedelta(minutes=settings.SIGNED_URL_EXPIRE_MINUTES))
    return SignedUrlResponse(file_name=file_name, url=url, expires_at=expires_at)


@router.get("/files/{key:path}")
def serve_file(
    key: str,
    storage: Annotated[StorageProvider, Depends(get_storage)],
    token: str = Query(..., min_length=1),
) -> Response:
    """Local backend only: stream a stored file when the signed token grants this key."""
    if not isinstance(storage, LocalStorageProvider):
        raise NotFound("File not found")
    try:
        granted_key = decode_file_token(token)
    except jwt.PyJWTError:
        raise AuthenticationFailed("Invalid or expired file token", code="INVALID_TOKEN")
    if granted_key != key or not storage.exists(key):
        raise NotFound("File not found")
    kind = EXTENSIONS[os.path.splitext(key)[1]][0]
    return Response(content=storage.read(key), media_type=CANONICAL_CONTENT_TYPES[kind])
