"""
Uploaded file descriptors.

Routers turn multipart uploads into immutable UploadedDocument values so
services never touch the framework's request objects.
"""

from dataclasses import dataclass

from fastapi import UploadFile

# Read at most this many bytes past a size cap; enough to know the cap was exceeded
_OVERFLOW_MARGIN = 1


@dataclass(frozen=True)
class UploadedDocument:
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def is_empty(self) -> bool:
        return not self.content


async def read_upload(upload: UploadFile, max_bytes: int) -> UploadedDocument:
    """
    Read an upload into memory, stopping just past `max_bytes`.

    An oversized file therefore reports a size of max_bytes + 1, which is
    all the validators need.
    """
    content = await upload.read(max_bytes + _OVERFLOW_MARGIN)
    await upload.close()
    return UploadedDocument(
        filename=upload.filename or "",
        content_type=(upload.content_type or "").lower(),
        content=content,
    )
