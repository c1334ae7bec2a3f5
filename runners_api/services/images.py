"""Image upload validation: extension, declared MIME type, size and magic bytes."""

import os
from dataclasses import dataclass

from werkzeug.utils import secure_filename

from runners_api.core.errors import ValidationFailed
from runners_api.services.storage import StorageProvider, new_storage_key

MAX_FILES_PER_REQUEST = 10
IMAGE_MAX_BYTES = 5 * 1024 * 1024
RUNNER_PHOTO_MAX_BYTES = 10 * 1024 * 1024

# Extension -> (image kind, accepted declared content types).
EXTENSIONS: dict[str, tuple[str, frozenset[str]]] = {
    ".jpg": ("jpeg", frozenset({"image/jpeg", "image/jpg", "image/pjpeg"})),
    ".jpeg": ("jpeg", frozenset({"image/jpeg", "image/jpg", "image/pjpeg"})),
    ".png": ("png", frozenset({"image/png"})),
    ".gif": ("gif", frozenset({"image/gif"})),
    ".webp": ("webp", frozenset({"image/webp"})),
}
CANONICAL_CONTENT_TYPES = {
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}
# Clients that do not know the type send one of these; the signature check still applies.
UNDECLARED_CONTENT_TYPES = frozenset({"", "application/octet-stream"})

MAX_FILENAME_LEN = 100


def sniff_image_kind(data: bytes) -> str | None:
    """Identify JPEG/PNG/GIF/WebP from leading bytes; None when no signature matches."""
    if data.startswith(b"\xff\xd8\xff"):
        return "jpeg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "png"
    if data.startswith((b"GIF87a", b"GIF89a")):
        return "gif"
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "webp"
    return None


def sanitize_filename(filename: str | None) -> str:
    """
    Reduce a client-supplied name to a safe display name.

    Only the last path component is kept; secure_filename then drops anything
    outside ASCII letters, digits, '_', '-' and '.'. The result is never used
    as a storage key.
    """
    basename = (filename or "").replace("\\", "/").rsplit("/", 1)[-1]
    name = secure_filename(basename)
    if not name:
        return "file"
    if len(name) > MAX_FILENAME_LEN:
        stem, ext = os.path.splitext(name)
        name = stem[: MAX_FILENAME_LEN - len(ext)] + ext
    return name


@dataclass(frozen=True)
class ValidatedImage:
    original_name: str
    safe_name: str
    extension: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def check_image(filename: str | None, content_type: str | None, data: bytes, max_bytes: int) -> ValidatedImage:
    """Validate one file. Raises ValueError with a client-facing message."""
    safe_name = sanitize_filename(filename)
    extension = os.path.splitext(safe_name)[1].lower()
    if extension not in EXTENSIONS:
        raise ValueError(
            f"File type not allowed; allowed extensions: {', '.join(sorted(EXTENSIONS))}"
        )
    kind, accepted_types = EXTENSIONS[extension]
    declared = (content_type or "").split(";")[0].strip().lower()
    if declared not in UNDECLARED_CONTENT_TYPES and declared not in accepted_types:
        raise ValueError(f"Content type '{declared}' does not match extension '{extension}'")
    if not data:
        raise ValueError("File is empty")
    if len(data) > max_bytes:
        raise ValueError(f"File exceeds the {max_bytes // (1024 * 1024)}MB size limit")
    sniffed = sniff_image_kind(data)
    if sniffed != kind:
        raise ValueError(f"File content is not a valid {kind.upper()} image")
    return ValidatedImage(
        original_name=filename or safe_name,
        safe_name=safe_name,
        extension=extension,
        content_type=CANONICAL_CONTENT_TYPES[kind],
        data=data,
    )


def validate_images(
    files: list[tuple[str | None, str | None, bytes]],
    max_bytes: int,
) -> list[ValidatedImage]:
    """
    Validate a batch of (filename, content_type, data) tuples.

    Any invalid file rejects the whole batch with per-file messages keyed
    files[index].
    """
    if not files:
        raise ValidationFailed("At least one file is required", details={"files": "No files uploaded"})
    if len(files) > MAX_FILES_PER_REQUEST:
        raise ValidationFailed(
            f"At most {MAX_FILES_PER_REQUEST} files may be uploaded per request",
            details={"files": f"Received {len(files)} files"},
        )
    accepted: list[ValidatedImage] = []
    errors: dict[str, str] = {}
    for index, (filename, content_type, data) in enumerate(files):
        try:
            accepted.append(check_image(filename, content_type, data, max_bytes))
        except ValueError as e:
            errors[f"files[{index}]"] = f"{sanitize_filename(filename)}: {e}"
    if errors:
        raise ValidationFailed("One or more files are invalid", code="INVALID_FILE", details=errors)
    return accepted


def store_images(storage: StorageProvider, images: list[ValidatedImage], category: str) -> list[dict]:
    """Write each validated image under a fresh key; return UploadedFile-shaped dicts."""
    stored: list[dict] = []
    for image in images:
        key = new_storage_key(category, image.extension)
        url = storage.save(key, image.data, image.content_type)
        stored.append(
            {
                "original_name": image.safe_name,
                "file_name": key,
                "url": url,
                "size": image.size,
                "content_type": image.content_type,
            }
        )
    return stored
