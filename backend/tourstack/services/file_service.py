"""
TourStack Backend — File Storage Service
==========================================

What:  Writes, locates and removes files under the uploads directory.
Why:   Centralizes all file system operations: media library uploads,
       synthesized speech, deletions and the disk-to-database sync.
How:   Validates MIME type and size, stores under a category directory with
       a UUID filename, and maps public URLs (/uploads/...) back to paths.
Who:   MediaService (uploads, delete, sync) and GoogleTTSService (audio).

Directory Structure:
    uploads/
    ├── images/          image/*
    ├── audio/           audio/*
    │   └── generated/   text-to-speech output
    └── documents/       everything else that is allowed (pdf, video)

    Everything under uploads/ is served at /uploads/.

Filenames are always <uuid4><ext>. The original name is kept in the
database only, so concurrent uploads or generations never share a path.
"""

import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

import aiofiles

from tourstack.config import settings
from tourstack.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/ogg",
    "audio/webm",
    "video/mp4",
    "video/webm",
    "application/pdf",
}

# Used when registering files found on disk (no upload headers to go on)
EXTENSION_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".webm": "audio/webm",
    ".mp4": "video/mp4",
    ".pdf": "application/pdf",
}

# category directory -> MIME prefix assumed for unknown extensions
CATEGORIES = {
    "images": "image/",
    "audio": "audio/",
    "documents": "application/",
}

GENERATED_AUDIO_DIR = "audio/generated"


@dataclass
class StoredFile:
    relative_path: str
    url: str
    size: int


@dataclass
class ScannedFile:
    filename: str
    url: str
    mime_type: str
    size: int
    created_at: datetime
    modified_at: datetime


def category_for(mime_type: str) -> str:
    if mime_type.startswith("image/"):
        return "images"
    if mime_type.startswith("audio/"):
        return "audio"
    return "documents"


class FileService:
    """
    Manages the uploads directory.

    Lifecycle of an uploaded file:
        1. MediaService hands over name, bytes and declared MIME type
        2. MIME type checked against the allow-list
        3. Size checked against MAX_UPLOAD_SIZE
        4. Written to uploads/<category>/<uuid><ext>
        5. Public URL returned (stored in the media row)
        6. On delete: URL mapped back to a path inside uploads/ and removed
    """

    def __init__(self, uploads_root: Optional[str] = None, max_upload_size: Optional[int] = None):
        self.uploads_root = Path(uploads_root or settings.uploads_dir).resolve()
        self.max_upload_size = max_upload_size or settings.max_upload_size

    def ensure_directories(self) -> None:
        """Create the category directories. Called at startup."""
        for category in CATEGORIES:
            (self.uploads_root / category).mkdir(parents=True, exist_ok=True)
        (self.uploads_root / GENERATED_AUDIO_DIR).mkdir(parents=True, exist_ok=True)
        logger.info("Uploads directory: %s", self.uploads_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_mime_type(self, mime_type: str) -> None:
        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=f"File type {mime_type} not allowed",
                field="file",
                context={"mime_type": mime_type},
            )

    def validate_size(self, size: int) -> None:
        if size > self.max_upload_size:
            max_mb = self.max_upload_size / (1024 * 1024)
            raise ValidationError(
                message=f"File size ({size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB",
                field="file",
                context={"size": size, "max_size": self.max_upload_size},
            )

    # ── Writing ───────────────────────────────────────────────────────────

    async def _write(self, relative_dir: str, extension: str, content: bytes) -> StoredFile:
        filename = f"{uuid.uuid4()}{extension}"
        relative_path = f"{relative_dir}/{filename}"
        absolute_path = self.uploads_root / relative_path

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save file",
                context={"path": str(absolute_path), "os_error": str(e)},
            ) from e

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return StoredFile(
            relative_path=relative_path,
            url=f"{PUBLIC_PREFIX}/{relative_path}",
            size=len(content),
        )

    async def store_upload(self, filename: str, content: bytes, mime_type: str) -> StoredFile:
        """
        Validate and store a media upload.

        The extension of the client's filename is kept so the static file
        server can pick the right Content-Type.
        """
        self.validate_mime_type(mime_type)
        self.validate_size(len(content))
        extension = Path(filename or "").suffix.lower()
        return await self._write(category_for(mime_type), extension, content)

    async def write_generated_audio(self, content: bytes, extension: str) -> StoredFile:
        """Store synthesized speech under audio/generated/ (created on first use)."""
        return await self._write(GENERATED_AUDIO_DIR, extension, content)

    # ── Locating & Removing ───────────────────────────────────────────────

    def path_for(self, relative_or_url: str) -> Path:
        """
        Map "/uploads/images/x.png" or "images/x.png" to an absolute path.

        Raises ValidationError for anything resolving outside uploads/.
        """
        relative = relative_or_url
        if relative.startswith(PUBLIC_PREFIX + "/"):
            relative = relative[len(PUBLIC_PREFIX) + 1:]
        path = (self.uploads_root / relative.lstrip("/")).resolve()
        if path != self.uploads_root and self.uploads_root not in path.parents:
            raise ValidationError(message="Invalid file path", context={"path": relative_or_url})
        return path

    async def delete(self, relative_or_url: str) -> bool:
        """
        Remove a stored file. A file that is already gone is not an error.

        Returns True if a file was removed.
        """
        path = self.path_for(relative_or_url)
        if not path.is_file():
            logger.debug("Delete: file already gone: %s", relative_or_url)
            return False
        try:
            os.remove(path)
        except OSError as e:
            logger.error("Failed to delete %s: %s", path, str(e))
            raise FileStorageError(
                message="Failed to delete file",
                context={"path": str(path), "os_error": str(e)},
            ) from e
        logger.info("Deleted file: %s", relative_or_url)
        return True

    async def cleanup_file(self, relative_or_url: str) -> None:
        """
        Best-effort removal after a failed request (e.g. the database insert
        after a successful write). Failures are logged, not raised, so the
        original error reaches the client.
        """
        try:
            await self.delete(relative_or_url)
        except (FileStorageError, ValidationError) as e:
            logger.warning("Failed to clean up file %s: %s", relative_or_url, e.message)

    def scan_uploads(self) -> Iterator[ScannedFile]:
        """
        Yield every regular, non-hidden file directly inside a category
        directory (sub-directories such as audio/generated are skipped).
        """
        for category, mime_prefix in CATEGORIES.items():
            directory = self.uploads_root / category
            if not directory.is_dir():
                continue
            for entry in sorted(directory.iterdir()):
                if entry.name.startswith(".") or not entry.is_file():
                    continue
                stat = entry.stat()
                yield ScannedFile(
                    filename=entry.name,
                    url=f"{PUBLIC_PREFIX}/{category}/{entry.name}",
                    mime_type=EXTENSION_MIME_TYPES.get(
                        entry.suffix.lower(), f"{mime_prefix}octet-stream"
                    ),
                    size=stat.st_size,
                    created_at=datetime.fromtimestamp(stat.st_ctime, tz=timezone.utc),
                    modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                )


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
