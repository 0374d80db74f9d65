"""
File Storage

Local filesystem storage for uploaded documents. Files are addressed by a
relative key of the form "<namespace>/<filename>" (for example
"scholarships/<student id>/grades_1718000000_a1b2c3d4.pdf"), which is what
gets persisted in the database.

Blocking filesystem calls run in a worker thread so they don't stall the
event loop.
"""

import asyncio
import logging
import re
import secrets
from datetime import UTC, datetime
from pathlib import Path, PurePosixPath

from osas.core.config import settings
from osas.core.errors import StorageError

logger = logging.getLogger(__name__)

CONTENT_TYPE_EXTENSIONS = {
    "application/pdf": ".pdf",
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
}

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lowercase ASCII slug safe for use in a filename."""
    slug = _SLUG_PATTERN.sub("_", value.lower()).strip("_")
    return slug or "file"


def unique_filename(label: str, content_type: str, now: datetime | None = None) -> str:
    """
    Build a collision-resistant filename from a label and the upload time.

    Example: "Certificate of Grades" -> "certificate_of_grades_1718000000_9f2c1ab4.pdf"
    """
    now = now or datetime.now(UTC)
    extension = CONTENT_TYPE_EXTENSIONS.get(content_type, "")
    return f"{slugify(label)}_{int(now.timestamp())}_{secrets.token_hex(4)}{extension}"


class FileStorage:
    """Store and delete files under a root directory by relative key."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def _resolve(self, key: str) -> Path:
        relative = PurePosixPath(key)
        if relative.is_absolute() or ".." in relative.parts:
            raise StorageError(f"Invalid storage key: {key}")
        return self.root.joinpath(*relative.parts)

    def _write(self, path: Path, content: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    async def store(self, namespace: str, filename: str, content: bytes) -> str:
        """
        Write a file and return its storage key.

        Raises:
            StorageError: If the file cannot be written
        """
        key = f"{namespace.strip('/')}/{filename}"
        path = self._resolve(key)

        try:
            await asyncio.to_thread(self._write, path, content)
        except OSError as e:
            logger.error(f"Failed to store file {key}: {e}")
            raise StorageError("Failed to save uploaded file") from e

        logger.debug(f"Stored file {key} ({len(content)} bytes)")
        return key

    async def delete(self, key: str) -> None:
        """Delete a file by key; a missing file is not an error."""
        path = self._resolve(key)
        try:
            await asyncio.to_thread(path.unlink, True)
        except OSError as e:
            logger.error(f"Failed to delete file {key}: {e}")
            raise StorageError("Failed to delete stored file") from e

    async def delete_many(self, keys: list[str]) -> None:
        """
        Best-effort removal of several files.

        Used to compensate for a failed multi-file write, so failures are
        logged instead of raised.
        """
        for key in keys:
            try:
                await self.delete(key)
            except StorageError:
                logger.error(f"Could not remove orphaned file {key}")


storage = FileStorage(settings.upload_dir)


def get_storage() -> FileStorage:
    """FastAPI dependency returning the configured storage backend."""
    return storage
