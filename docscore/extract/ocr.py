# docscore/extract/ocr.py

from __future__ import annotations

import io
import logging
import re

from typing import List, Optional

import pytesseract

from pdf2image import convert_from_bytes
from PIL import Image, UnidentifiedImageError

from docscore.errors import ExtractionError, ExtractionErrorKind
from .pdf_text import ExtractedDoc

logger = logging.getLogger(__name__)

# psm 6 = Assume a uniform block of text (good default for essays and reports)
TESSERACT_CONFIG = "--psm 6"


def _clean_ocr_text(s: str) -> str:
    """
    OCR text tends to contain:
    - hyphenation at line breaks
    - uneven spacing
    Clean it lightly but keep paragraph breaks, the quality checks count them.
    """
    # Join hyphenated words split across lines: "inter-\nnational" -> "international"
    s = re.sub(r"-\n(\w)", r"\1", s)

    # Normalise spaces (keep newlines)
    s = re.sub(r"[ \t]+", " ", s)

    # Collapse excessive blank lines
    s = re.sub(r"\n{3,}", "\n\n", s)

    return s.strip()


def ocr_image(img: "Image.Image", *, lang: str = "eng") -> str:
    t = pytesseract.image_to_string(img, lang=lang, config=TESSERACT_CONFIG) or ""
    return _clean_ocr_text(t)


def load_image(data: bytes) -> "Image.Image":
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ExtractionError(ExtractionErrorKind.PARSE_FAILURE, "Failed to read image file") from e
    # Tesseract and PNG encoding both want a plain RGB/L image
    if img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    return img


def ocr_pdf(
    data: bytes,
    *,
    dpi: int = 220,
    lang: str = "eng",
    max_pages: Optional[int] = None,
    poppler_path: Optional[str] = None,
) -> ExtractedDoc:
    """
    OCR a PDF by rasterising pages and running Tesseract.

    Prerequisites (Debian/Ubuntu):
      sudo apt-get install -y tesseract-ocr poppler-utils

    Args:
        data: raw PDF bytes
        dpi: raster DPI (200-300 recommended; higher = slower)
        lang: Tesseract languages, e.g. "eng" or "eng+nld"
        max_pages: OCR only the first N pages
        poppler_path: optional path to poppler binaries
    """
    try:
        images = convert_from_bytes(
            data,
            dpi=dpi,
            poppler_path=poppler_path,
            first_page=1,
            last_page=max_pages,
        )
    except Exception as e:
        logger.warning("Rasterising PDF for OCR failed: %s", e)
        raise ExtractionError(ExtractionErrorKind.PARSE_FAILURE, "Failed to parse PDF file") from e

    page_texts: List[str] = [ocr_image(img, lang=lang) for img in images]

    return ExtractedDoc(
        text="\n\n".join(page_texts).strip(),
        pages=len(images),
        source="ocr",
        meta={
            "ocr_pages": len(images),
            "dpi": dpi,
            "lang": lang,
            "engine": "tesseract",
            "tesseract_config": TESSERACT_CONFIG,
        },
    )
