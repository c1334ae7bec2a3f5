"""Image storage backends: Azure Blob Storage and the local filesystem."""

import logging
import re
import uuid
from datetime import datetime, timedelta
from functools import lru_cache
from pathlib import Path

from azure.storage.blob import (
    BlobSasPermissions,
    BlobServiceClient,
    ContentSettings,
    generate_blob_sas,
)

from runners_api.core.config import settings
from runners_api.core.security import create_file_token
from runners_api.core.timeutil import utcnow

logger = logging.getLogger(__name__)

# Keys are generated by new_storage_key; anything else is refused.
STORAGE_KEY_PATTERN = re.compile(r"^[a-z]+/[0-9a-f]{32}\.(jpg|jpeg|png|gif|webp)$")


def new_storage_key(category: str, extension: str) -> str:
    """Fresh random key such as 'images/3f2a...e1.png'. The client's filename is never used."""
    return f"{category}/{uuid.uuid4().hex}{extension.lower()}"


def is_valid_storage_key(key: str) -> bool:
    return bool(STORAGE_KEY_PATTERN.match(key or ""))


class StorageProvider:
    name = "base"

    def save(self, key: str, data: bytes, content_type: str) -> str:
        """Persist data under key and return its URL."""
        raise NotImplementedError

    def exists(self, key: str) -> bool:
        raise NotImplementedError

    def signed_url(self, key: str, expires_in: timedelta) -> tuple[str, datetime]:
        """Time-boxed read URL for key; returns (url, expires_at)."""
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class LocalStorageProvider(StorageProvider):
    """Writes under base_dir; reads go through the signed /uploads/files route."""

    name = "local"

    def __init__(self, base_dir: str, public_base_url: str, api_prefix: str) -> None:
        self.base_path = Path(base_dir).expanduser().resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._files_url = f"{public_base_url.rstrip('/')}{api_prefix}/uploads/files"

    def path_for(self, key: str) -> Path:
        """Resolve key inside base_path. Raises ValueError for keys that escape it."""
        if not is_valid_storage_key(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        target = (self.base_path / key).resolve()
        target.relative_to(self.base_path)
        return target

    def save(self, key: str, data: bytes, content_type: str) -> str:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as handle:
            handle.write(data)
        return f"{self._files_url}/{key}"

    def exists(self, key: str) -> bool:
        try:
            return self.path_for(key).is_file()
        except ValueError:
            return False

    def read(self, key: str) -> bytes:
        with open(self.path_for(key), "rb") as handle:
            return handle.read()

    def signed_url(self, key: str, expires_in: timedelta) -> tuple[str, datetime]:
        token, expires_at = create_file_token(key, expires_in)
        return f"{self._files_url}/{key}?token={token}", expires_at

    def delete(self, key: str) -> None:
        try:
            path = self.path_for(key)
        except ValueError:
            return
        path.unlink(missing_ok=True)


class AzureBlobStorageProvider(StorageProvider):
    """Uploads to one container; read access is granted with blob SAS tokens."""

    name = "azure"

    def __init__(self, connection_string: str, container: str) -> None:
        self.container = container
        self._service_client = BlobServiceClient.from_connection_string(connection_string)
        self._container_client = self._service_client.get_container_client(container)
        # StorageSharedKeyCredential when the string has an AccountKey; SAS-only strings carry none.
        self._account_key = getattr(self._service_client.credential, "account_key", None)

    def save(self, key: str, data: bytes, content_type: str) -> str:
        blob_client = self._container_client.get_blob_client(key)
        blob_client.upload_blob(
            data,
            overwrite=True,
            content_settings=ContentSettings(content_type=content_type),
        )
        return blob_client.url

    def exists(self, key: str) -> bool:
        return self._container_client.get_blob_client(key).exists()

    def signed_url(self, key: str, expires_in: timedelta) -> tuple[str, datetime]:
        if not self._account_key:
            raise RuntimeError("AZURE_STORAGE_CONNECTION_STRING has no AccountKey; cannot sign URLs")
        expires_at = utcnow() + expires_in
        sas = generate_blob_sas(
            account_name=self._service_client.account_name,
            container_name=self.container,
            blob_name=key,
            account_key=self._account_key,
            permission=BlobSasPermissions(read=True),
            expiry=expires_at,
        )
        blob_url = self._container_client.get_blob_client(key).url
        return f"{blob_url}?{sas}", expires_at

    def delete(self, key: str) -> None:
        self._container_client.delete_blob(key)


@lru_cache
def get_storage() -> StorageProvider:
    """Dependency returning the configured storage backend."""
    if settings.STORAGE_BACKEND == "azure":
        if settings.AZURE_STORAGE_CONNECTION_STRING is None:
            raise RuntimeError("STORAGE_BACKEND=azure requires AZURE_STORAGE_CONNECTION_STRING")
        logger.info("Using Azure Blob storage", extra={"container": settings.AZURE_STORAGE_CONTAINER})
        return AzureBlobStorageProvider(
            settings.AZURE_STORAGE_CONNECTION_STRING.get_secret_value(),
            settings.AZURE_STORAGE_CONTAINER,
        )
    logger.info("Using local file storage", extra={"base_dir": settings.LOCAL_UPLOAD_DIR})
    return LocalStorageProvider(settings.LOCAL_UPLOAD_DIR, settings.PUBLIC_BASE_URL, settings.API_V1_PREFIX)
