# docscore/errors.py

from __future__ import annotations

from enum import Enum


class DocScoreError(Exception):
    """Base class for scoring-engine failures."""


class ExtractionErrorKind(str, Enum):
    UNSUPPORTED_TYPE = "unsupported_type"
    LEGACY_FORMAT_UNSUPPORTED = "legacy_format_unsupported"
    PARSE_FAILURE = "parse_failure"


class ExtractionError(DocScoreError):
    """
    Raised when a document cannot be turned into text.
    Always terminal for that document: the batch scorer records the message
    and moves on.
    """

    def __init__(self, kind: ExtractionErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class TransientNetworkError(DocScoreError):
    """A remote collaborator was unreachable; worth retrying after a pause."""


LEGACY_DOC_MESSAGE = "Legacy .doc files are not supported. Please convert to .docx format."


def unsupported_type(ext: str) -> ExtractionError:
    label = f".{ext}" if ext else "(no extension)"
    return ExtractionError(ExtractionErrorKind.UNSUPPORTED_TYPE, f"Unsupported file type: {label}")


def legacy_format() -> ExtractionError:
    return ExtractionError(ExtractionErrorKind.LEGACY_FORMAT_UNSUPPORTED, LEGACY_DOC_MESSAGE)
