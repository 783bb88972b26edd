# tests/test_orchestrator.py

import random

import pytest

from conftest import ESSAY, SHORT_TEXT, FakeExtractor, doc

from docscore.errors import ExtractionError, ExtractionErrorKind
from docscore.rubrics import ScoringResult
from docscore.scoring.orchestrator import BatchOrchestrator, progress_percent
from docscore.scoring.scorer import BatchScorer


RUBRIC_TEXT = """
• Thesis (10 points) - Clear arguable thesis about climate policy
• Evidence (10 pts): Supporting evidence and examples
"""


def make_orchestrator(extractor, scheduler, **callbacks) -> BatchOrchestrator:
    scorer = BatchScorer(extractor, scheduler=scheduler, rng=random.Random(5))
    return BatchOrchestrator(scorer, scheduler=scheduler, **callbacks)


def test_progress_percent():
    assert [progress_percent(i, 3) for i in range(4)] == [0, 33, 67, 100]
    assert progress_percent(0, 0) == 100


@pytest.mark.asyncio
async def test_three_documents_end_to_end(scheduler):
    extractor = FakeExtractor({"a.pdf": ESSAY, "b.docx": SHORT_TEXT, "c.pdf": ""})
    progress, results = [], []
    orch = make_orchestrator(
        extractor, scheduler,
        on_progress=lambda *event: progress.append(event),
        on_result=results.append,
    )

    report = await orch.run_batch([doc("a.pdf"), doc("b.docx"), doc("c.pdf")], RUBRIC_TEXT)

    assert [r.file_name for r in report.results] == ["a.pdf", "b.docx", "c.pdf"]
    assert results == report.results
    assert not report.no_rubrics_parsed
    for r in report.results:
        assert r.error is None
        assert len(r.rubric_scores) == 2
        assert r.total_score == sum(s.score for s in r.rubric_scores)
        assert 17 <= r.total_score <= 20

    assert progress == [(0, "a.pdf", 0), (1, "b.docx", 33), (2, "c.pdf", 67), (3, "", 100)]
    # pacing between documents only, never after the last one
    assert scheduler.waits == [1.5, 1.5]
    assert orch.state.is_processing is False
    assert orch.state.results == report.results


@pytest.mark.asyncio
async def test_empty_batch_is_a_noop(scheduler):
    progress = []
    orch = make_orchestrator(FakeExtractor({}), scheduler, on_progress=lambda *e: progress.append(e))
    report = await orch.run_batch([], RUBRIC_TEXT)

    assert report.results == []
    assert report.rubrics == []
    assert progress == []
    assert scheduler.waits == []
    assert orch.state.is_processing is False


@pytest.mark.asyncio
async def test_no_rubrics_parsed_still_runs(scheduler):
    warnings = []
    orch = make_orchestrator(FakeExtractor({"a.pdf": ESSAY}), scheduler, on_warning=warnings.append)
    report = await orch.run_batch([doc("a.pdf")], "just some notes, no points anywhere")

    assert report.no_rubrics_parsed
    assert len(warnings) == 1
    assert report.warnings == warnings
    [r] = report.results
    assert r.rubric_scores == []
    assert r.total_score == 0
    assert r.error is None


@pytest.mark.asyncio
async def test_failures_are_isolated(scheduler):
    extractor = FakeExtractor({
        "a.pdf": ESSAY,
        "b.pdf": ExtractionError(ExtractionErrorKind.PARSE_FAILURE, "Failed to parse PDF file"),
        "c.pdf": ESSAY,
    })
    orch = make_orchestrator(extractor, scheduler)
    report = await orch.run_batch([doc("a.pdf"), doc("b.pdf"), doc("old.doc"), doc("c.pdf")], RUBRIC_TEXT)

    errors = [r.error for r in report.results]
    assert errors[0] is None
    assert errors[1] == "Failed to parse PDF file"
    assert "convert to .docx" in errors[2]
    assert errors[3] is None
    assert not report.aborted
    assert orch.state.is_processing is False


@pytest.mark.asyncio
async def test_processing_flag_during_batch(scheduler):
    seen = []
    orch = None

    def on_progress(index, name, percent):
        seen.append(orch.state.is_processing)

    orch = make_orchestrator(FakeExtractor({"a.pdf": ESSAY}), scheduler, on_progress=on_progress)
    await orch.run_batch([doc("a.pdf")], RUBRIC_TEXT)

    assert seen == [True, True]
    assert orch.state.is_processing is False


class ExplodingScorer:
    """Scores the first document, then fails outside the per-document guard."""

    def __init__(self):
        self.calls = 0

    async def score_one(self, document, rubrics):
        self.calls += 1
        if self.calls > 1:
            raise RuntimeError("scheduler died")
        return ScoringResult.scored(document.file_name, [])


@pytest.mark.asyncio
async def test_loop_failure_aborts_and_keeps_results(scheduler):
    orch = BatchOrchestrator(ExplodingScorer(), scheduler=scheduler)
    report = await orch.run_batch([doc("a.pdf"), doc("b.pdf"), doc("c.pdf")], RUBRIC_TEXT)

    assert report.aborted
    assert [r.file_name for r in report.results] == ["a.pdf"]
    assert orch.state.is_processing is False


@pytest.mark.asyncio
async def test_state_reset_between_batches(scheduler):
    orch = make_orchestrator(FakeExtractor({"a.pdf": ESSAY, "b.pdf": ESSAY}), scheduler)
    await orch.run_batch([doc("a.pdf"), doc("b.pdf")], RUBRIC_TEXT)
    assert len(orch.state.results) == 2

    report = await orch.run_batch([doc("b.pdf")], RUBRIC_TEXT)
    assert [r.file_name for r in orch.state.results] == ["b.pdf"]
    assert report.results == orch.state.results
