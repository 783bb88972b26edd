# docscore/extract/docx_text.py

from __future__ import annotations

import io
import logging

from docx import Document

from docscore.errors import ExtractionError, ExtractionErrorKind
from .pdf_text import ExtractedDoc

logger = logging.getLogger(__name__)


def extract_docx_text(data: bytes) -> ExtractedDoc:
    """
    Raw text of a .docx: body paragraphs, then table cells.
    Blocks are separated by a blank line so paragraph structure survives.
    """
    try:
        doc = Document(io.BytesIO(data))
    except Exception as e:
        logger.warning("python-docx could not open document: %s", e)
        raise ExtractionError(ExtractionErrorKind.PARSE_FAILURE, "Failed to parse DOCX file") from e

    lines = [p.text for p in doc.paragraphs if p.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                if cell.text.strip():
                    lines.append(cell.text)

    return ExtractedDoc(
        text="\n\n".join(lines).strip(),
        pages=0,
        source="docx",
        meta={"paragraphs": len(doc.paragraphs), "tables": len(doc.tables), "engine": "python-docx"},
    )
