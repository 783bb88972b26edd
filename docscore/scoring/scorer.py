# docscore/scoring/scorer.py
"""
Per-document scoring: extraction -> rubric matching -> ScoringResult.

score_one never raises. Whatever goes wrong with one document ends up in
that document's error field so the rest of the batch carries on.
"""

from __future__ import annotations

import logging
import random

from typing import Any, List, Optional, Sequence

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from docscore.errors import ExtractionError, TransientNetworkError, legacy_format, unsupported_type
from docscore.extract import Document
from docscore.extract.filetype import FileType, classify_file, file_extension
from docscore.rubrics import CategoryScore, RubricItem, ScoringResult
from docscore.rubrics.matcher import score_image, score_text_rubrics
from .scheduler import AsyncioScheduler, Scheduler

logger = logging.getLogger(__name__)


DEFAULT_RETRY_ATTEMPTS = 2
DEFAULT_BACKOFF_SECONDS = 2.0
GENERIC_FAILURE = "Failed to score document"


class BatchScorer:
    """
    Scores one document at a time against a parsed rubric.

    Args:
        extractor: object with async extract_text(document) -> str and
            async extract_image_signals(document) -> ExtractedContent
        scheduler: timer for retry backoff
        rng: randomness source for the text-score jitter
        retry_attempts: retries allowed for transient network failures
        backoff_seconds: fixed wait before each retry
    """

    def __init__(
        self,
        extractor: Any,
        *,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        retry_attempts: int = DEFAULT_RETRY_ATTEMPTS,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
    ):
        self.extractor = extractor
        self.scheduler = scheduler or AsyncioScheduler()
        self.rng = rng or random.Random()
        self.retry_attempts = retry_attempts
        self.backoff_seconds = backoff_seconds

    async def _score(self, document: Document, rubrics: Sequence[RubricItem]) -> List[CategoryScore]:
        ftype = classify_file(document.file_name, document.kind)

        if ftype.is_image:
            content = await self.extractor.extract_image_signals(document)
            return score_image(content.text, content.visual_tags, rubrics)

        if ftype is FileType.DOC:
            raise legacy_format()
        if ftype is FileType.UNSUPPORTED:
            raise unsupported_type(file_extension(document.file_name))

        text = await self.extractor.extract_text(document)
        return score_text_rubrics(text, rubrics, rng=self.rng)

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts + 1),
            wait=wait_fixed(self.backoff_seconds),
            retry=retry_if_exception_type(TransientNetworkError),
            sleep=self.scheduler.sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    async def score_one(self, document: Document, rubrics: Sequence[RubricItem]) -> ScoringResult:
        try:
            scores = await self._retrying()(self._score, document, rubrics)

        except TransientNetworkError as e:
            logger.error("Giving up on %s after retries: %s", document.file_name, e)
            return ScoringResult.failed(document.file_name, str(e) or GENERIC_FAILURE)

        except ExtractionError as e:
            logger.warning("Could not extract %s: %s", document.file_name, e.message)
            return ScoringResult.failed(document.file_name, e.message or GENERIC_FAILURE)

        except Exception as e:
            logger.exception("Error scoring file %s", document.file_name)
            return ScoringResult.failed(document.file_name, str(e) or GENERIC_FAILURE)

        return ScoringResult.scored(document.file_name, scores)
