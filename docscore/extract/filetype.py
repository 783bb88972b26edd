# docscore/extract/filetype.py

from __future__ import annotations

from enum import Enum
from typing import Optional


class FileType(str, Enum):
    PDF = "pdf"
    DOCX = "docx"
    DOC = "doc"
    JPG = "jpg"
    JPEG = "jpeg"
    PNG = "png"
    UNSUPPORTED = "unsupported"

    @property
    def is_image(self) -> bool:
        return self in (FileType.JPG, FileType.JPEG, FileType.PNG)


def file_extension(file_name: str) -> str:
    """Last dot-segment, lowercased; empty when the name has no dot."""
    name = file_name or ""
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


def classify_file(file_name: str, declared_kind: Optional[str] = None) -> FileType:
    """
    Map a file to a FileType. A declared kind (e.g. "pdf", ".PNG") takes
    precedence over the name's extension.
    """
    ext = (declared_kind or "").strip().lstrip(".").lower() or file_extension(file_name)
    try:
        return FileType(ext)
    except ValueError:
        return FileType.UNSUPPORTED
