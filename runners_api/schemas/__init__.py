"""Pydantic request/response schemas."""

from runners_api.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from runners_api.schemas.cases import CaseCreateRequest, CaseResponse, PublicCaseResponse
from runners_api.schemas.common import CamelModel, ErrorResponse, OkResponse, Page
from runners_api.schemas.devices import DeviceRegisterRequest, DeviceResponse
from runners_api.schemas.health import HealthResponse
from runners_api.schemas.runners import RunnerCreateRequest, RunnerResponse
from runners_api.schemas.topics import BulkSubscribeResponse, SubscriptionResponse
from runners_api.schemas.upload import UploadedFile, UploadResponse

__all__ = [
    "AuthResponse",
    "BulkSubscribeResponse",
    "CamelModel",
    "CaseCreateRequest",
    "CaseResponse",
    "DeviceRegisterRequest",
    "DeviceResponse",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "OkResponse",
    "Page",
    "PublicCaseResponse",
    "RegisterRequest",
    "RunnerCreateRequest",
    "RunnerResponse",
    "SubscriptionResponse",
    "UploadResponse",
    "UploadedFile",
]
