"""Request/response schemas for image uploads."""

from pydantic import Field

from runners_api.schemas.common import CamelModel, UtcDateTime


class UploadedFile(CamelModel):
    """One stored file. fileName is the storage key, not the client's name."""

    original_name: str
    file_name: str
    url: str
    size: int = Field(..., ge=0)
    content_type: str


class UploadResponse(CamelModel):
    files: list[UploadedFile]


class SignedUrlResponse(CamelModel):
    file_name: str
    url: str
    expires_at: UtcDateTime
