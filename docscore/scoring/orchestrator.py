# docscore/scoring/orchestrator.py

from __future__ import annotations

import logging

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from docscore.extract import Document
from docscore.rubrics import RubricItem, ScoringResult
from docscore.rubrics.parser import parse_rubrics
from .scheduler import AsyncioScheduler, Scheduler
from .scorer import BatchScorer

logger = logging.getLogger(__name__)


DEFAULT_PACING_SECONDS = 1.5
NO_RUBRICS_WARNING = (
    "No rubric items could be parsed from the scoring instructions. "
    "Use one rubric per line, e.g. 'Thesis (10 points) - Clear and arguable thesis'."
)

ProgressCallback = Callable[[int, str, int], None]
ResultCallback = Callable[[ScoringResult], None]
WarningCallback = Callable[[str], None]


@dataclass
class BatchState:
    """Live view of the batch in flight. Reset at the start of every run."""
    results: List[ScoringResult] = field(default_factory=list)
    current_index: int = 0
    current_file_name: str = ""
    is_processing: bool = False

    def reset(self) -> None:
        self.results = []
        self.current_index = 0
        self.current_file_name = ""
        self.is_processing = False


@dataclass
class BatchReport:
    results: List[ScoringResult] = field(default_factory=list)
    rubrics: List[RubricItem] = field(default_factory=list)
    no_rubrics_parsed: bool = False
    warnings: List[str] = field(default_factory=list)
    aborted: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "rubrics": [r.to_dict() for r in self.rubrics],
            "no_rubrics_parsed": self.no_rubrics_parsed,
            "warnings": list(self.warnings),
            "aborted": self.aborted,
        }


def progress_percent(index: int, total: int) -> int:
    return int(index / total * 100 + 0.5) if total else 100


class BatchOrchestrator:
    """
    Runs a batch strictly sequentially: score document i, record it, pause,
    move on to i+1. Results keep submission order.

    Overlapping batches are not guarded against here; callers must not start
    a run while state.is_processing is true.
    """

    def __init__(
        self,
        scorer: BatchScorer,
        *,
        scheduler: Optional[Scheduler] = None,
        pacing_seconds: float = DEFAULT_PACING_SECONDS,
        on_progress: Optional[ProgressCallback] = None,
        on_result: Optional[ResultCallback] = None,
        on_warning: Optional[WarningCallback] = None,
    ):
        self.scorer = scorer
        self.scheduler = scheduler or AsyncioScheduler()
        self.pacing_seconds = pacing_seconds
        self.on_progress = on_progress
        self.on_result = on_result
        self.on_warning = on_warning
        self.state = BatchState()

    def _progress(self, index: int, file_name: str, percent: int) -> None:
        if self.on_progress:
            self.on_progress(index, file_name, percent)

    def _warn(self, report: BatchReport, message: str) -> None:
        logger.warning(message)
        report.warnings.append(message)
        if self.on_warning:
            self.on_warning(message)

    async def run_batch(self, documents: Sequence[Document], rubric_text: str) -> BatchReport:
        report = BatchReport()
        if not documents:
            return report

        self.state.reset()
        self.state.is_processing = True

        report.rubrics = parse_rubrics(rubric_text)
        if not report.rubrics:
            report.no_rubrics_parsed = True
            self._warn(report, NO_RUBRICS_WARNING)

        total = len(documents)
        logger.info("Scoring %d document(s) against %d rubric item(s)", total, len(report.rubrics))

        try:
            for i, document in enumerate(documents):
                self.state.current_index = i
                self.state.current_file_name = document.file_name
                self._progress(i, document.file_name, progress_percent(i, total))

                result = await self.scorer.score_one(document, report.rubrics)
                self.state.results.append(result)
                report.results.append(result)
                if self.on_result:
                    self.on_result(result)

                if i < total - 1:
                    await self.scheduler.sleep(self.pacing_seconds)

            self._progress(total, "", 100)
        except Exception:
            logger.exception("Batch aborted after %d of %d document(s)", len(report.results), total)
            report.aborted = True
        finally:
            self.state.is_processing = False

        return report
