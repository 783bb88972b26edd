# docscore/extract/pdf_text.py

from __future__ import annotations

import logging

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import fitz  # PyMuPDF

from docscore.errors import ExtractionError, ExtractionErrorKind

logger = logging.getLogger(__name__)


@dataclass
class ExtractedDoc:
    """
    Text of one document plus minimal provenance.
    Keeping this uniform lets the OCR fallback replace a weak text layer in place.
    """
    text: str
    pages: int
    source: str  # "pdf_text", "ocr", "docx"
    meta: Dict[str, Any] = field(default_factory=dict)


def extract_pdf_text(
    data: bytes,
    *,
    max_pages: Optional[int] = None,
    join_pages_with: str = "\n",
) -> ExtractedDoc:
    """
    Extract the text layer of a PDF using PyMuPDF.

    Scanned PDFs come back (nearly) empty; the caller decides whether to OCR.

    Args:
        data: raw PDF bytes
        max_pages: only read the first N pages
        join_pages_with: separator between pages

    Raises:
        ExtractionError(PARSE_FAILURE) when the bytes are not a readable PDF
    """
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        logger.warning("PyMuPDF could not open document: %s", e)
        raise ExtractionError(ExtractionErrorKind.PARSE_FAILURE, "Failed to parse PDF file") from e

    with doc:
        total_pages = doc.page_count
        n = total_pages if max_pages is None else min(max_pages, total_pages)

        page_texts: List[str] = []
        for i in range(n):
            page = doc.load_page(i)
            page_texts.append(page.get_text("text") or "")

    return ExtractedDoc(
        text=join_pages_with.join(page_texts).strip(),
        pages=total_pages,
        source="pdf_text",
        meta={"extracted_pages": n, "total_pages": total_pages, "engine": "pymupdf"},
    )
