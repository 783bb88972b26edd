# docscore/extract/service.py
"""
Concrete extraction collaborator: bytes in, text (and image labels) out.

All heavy lifting (PyMuPDF, Tesseract, the vision endpoint) is blocking, so
each call runs in a worker thread and the batch loop stays responsive.
"""

from __future__ import annotations

import asyncio
import logging

from contextlib import contextmanager
from typing import Iterator, List, Optional

import pytesseract

from docscore.config import Settings
from docscore.errors import legacy_format, unsupported_type
from docscore.llm.vision_tags import VisionTagger
from . import Document, ExtractedContent
from .docx_text import extract_docx_text
from .filetype import FileType, classify_file, file_extension
from .ocr import load_image, ocr_image, ocr_pdf
from .pdf_text import ExtractedDoc, extract_pdf_text
from .quality import text_quality_ok

logger = logging.getLogger(__name__)


class ExtractionService:
    """
    Handle on the extraction resources (OCR settings, optional vision model).

    Build it through open_extraction_service() so the vision client is
    closed when the service shuts down.
    """

    def __init__(self, settings: Settings, *, tagger: Optional[VisionTagger] = None):
        self.settings = settings
        self.tagger = tagger

    # ---- sync workers ----------------------------------------------------

    def _pdf_text(self, data: bytes) -> ExtractedDoc:
        doc = extract_pdf_text(data)
        quality = text_quality_ok(doc.text)
        if quality.ok:
            return doc

        # Likely a scanned PDF: OCR the first pages instead
        logger.info("PDF text layer unusable (%s), falling back to OCR", quality.reason)
        ocr_doc = ocr_pdf(
            data,
            dpi=self.settings.ocr_dpi,
            lang=self.settings.ocr_lang,
            max_pages=self.settings.ocr_max_pages,
            poppler_path=self.settings.poppler_path,
        )
        # Keep whichever attempt produced more text
        return ocr_doc if len(ocr_doc.text) > len(doc.text) else doc

    def _text_sync(self, document: Document) -> str:
        ftype = classify_file(document.file_name, document.kind)
        if ftype is FileType.PDF:
            return self._pdf_text(document.content).text
        if ftype is FileType.DOCX:
            return extract_docx_text(document.content).text
        if ftype is FileType.DOC:
            raise legacy_format()
        raise unsupported_type(file_extension(document.file_name))

    def _image_sync(self, document: Document) -> ExtractedContent:
        img = load_image(document.content)
        text = ocr_image(img, lang=self.settings.ocr_lang)

        tags: List[str] = []
        if self.tagger is not None:
            tags = self.tagger.tags(img)

        return ExtractedContent(text=text, visual_tags=tags)

    # ---- async API -------------------------------------------------------

    async def extract_text(self, document: Document) -> str:
        return await asyncio.to_thread(self._text_sync, document)

    async def extract_image_signals(self, document: Document) -> ExtractedContent:
        ftype = classify_file(document.file_name, document.kind)
        if not ftype.is_image:
            raise unsupported_type(file_extension(document.file_name))
        return await asyncio.to_thread(self._image_sync, document)


@contextmanager
def open_extraction_service(settings: Settings) -> Iterator[ExtractionService]:
    """Acquire extraction resources for the lifetime of the block."""
    if settings.tesseract_cmd:
        # Useful when tesseract is not on PATH
        pytesseract.pytesseract.tesseract_cmd = settings.tesseract_cmd

    tagger: Optional[VisionTagger] = None
    if settings.vision_configured:
        tagger = VisionTagger(
            base_url=settings.vision_llm_base_url,
            api_key=settings.vision_llm_api_key,
            model=settings.vision_llm_model,
            max_labels=settings.vision_max_labels,
        )
        logger.info("Vision labels enabled (model=%s)", settings.vision_llm_model)

    try:
        yield ExtractionService(settings, tagger=tagger)
    finally:
        if tagger is not None:
            tagger.close()
