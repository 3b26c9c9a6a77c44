from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

PDF_MEDIA_TYPE = "application/pdf"
CSV_MEDIA_TYPE = "text/csv"
TEXT_MEDIA_TYPE = "text/plain"

SUPPORTED_MEDIA_TYPES = (PDF_MEDIA_TYPE, CSV_MEDIA_TYPE, TEXT_MEDIA_TYPE)


class FileKind(str, Enum):
    """Document kinds handled by the remote extraction service."""

    PDF = "pdf"
    PLAINTEXT = "plaintext"

    @property
    def media_type(self) -> str:
        return PDF_MEDIA_TYPE if self is FileKind.PDF else TEXT_MEDIA_TYPE


class UploadedFile(BaseModel):
    """
    A user-supplied file handle.

    Either *path* (a file on disk) or *content* (an in-memory upload, e.g.
    from a web form) must be set.  *media_type* is the type declared by the
    caller; it is not sniffed.
    """

    name: str
    media_type: str
    path: Optional[Path] = None
    content: Optional[bytes] = None

    @property
    def size(self) -> int:
        if self.content is not None:
            return len(self.content)
        if self.path is not None and self.path.exists():
            return self.path.stat().st_size
        return 0

    @classmethod
    def from_path(cls, path: Path, media_type: str) -> "UploadedFile":
        return cls(name=Path(path).name, media_type=media_type, path=Path(path))
