# docscore/extract/__init__.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Document:
    """
    One submitted file. kind is the declared type ("pdf", "png", ...) when the
    caller knows it; otherwise the file name's extension decides.
    """
    file_name: str
    content: bytes = field(repr=False)
    kind: Optional[str] = None


@dataclass
class ExtractedContent:
    """Text of a document, plus visual labels when the document is an image."""
    text: str
    visual_tags: List[str] = field(default_factory=list)
