# tests/conftest.py

from __future__ import annotations

import random

from typing import Dict, List, Sequence, Union

import pytest

from docscore.errors import TransientNetworkError
from docscore.extract import Document, ExtractedContent
from docscore.scoring.scheduler import Scheduler


ESSAY = """Climate policy has become one of the defining questions of our time. In my view,
the debate is less about whether the climate is changing and more about who pays for the response.

When I first read the carbon pricing literature, I expected economists to agree. They mostly do,
but the politics are messy. A carbon tax puts a price on pollution because emitters otherwise
ignore the damage they cause. However, a tax that is too low changes little, and a tax that is
too high can hurt households who drive long distances for work.

Evidence from British Columbia suggests a revenue-neutral tax can cut emissions without slowing
growth. Therefore the design matters as much as the rate. Although critics argue that rebates
blunt the incentive, the data indicates that fuel use still fell after the rebate was paid.

We should also compare pricing with regulation. Standards for vehicles and power plants are
easier to explain, yet they often cost more per tonne avoided. My conclusion is that a mix of
both, with a visible dividend to citizens, gives the best chance of lasting public support.
"""

SHORT_TEXT = "Dogs are nice."

# Ten 8-word sentences, four AI-typical openers, six identical "The ..." sentences.
AI_TEXT = " ".join(
    [
        "In conclusion the results were very clear today.",
        "Furthermore the team worked hard on every task.",
        "Moreover the plan covered each part of work.",
        "Additionally the budget stayed well within the limits.",
    ]
    + ["The project team met again that same day."] * 6
)


class RecordingScheduler(Scheduler):
    """Returns immediately and remembers every requested wait."""

    def __init__(self) -> None:
        self.waits: List[float] = []

    async def sleep(self, seconds: float) -> None:
        self.waits.append(seconds)


Outcome = Union[str, ExtractedContent, Exception]


class FakeExtractor:
    """
    Scripted extraction collaborator.

    outcomes maps a file name to either one outcome or a list consumed one
    call at a time (the last entry repeats). Exceptions are raised.
    """

    def __init__(self, outcomes: Dict[str, Union[Outcome, Sequence[Outcome]]]):
        self.outcomes = outcomes
        self.calls: List[str] = []

    def _next(self, document: Document) -> Outcome:
        self.calls.append(document.file_name)
        outcome = self.outcomes[document.file_name]
        if isinstance(outcome, (list, tuple)):
            seen = self.calls.count(document.file_name)
            outcome = outcome[min(seen, len(outcome)) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def extract_text(self, document: Document) -> str:
        outcome = self._next(document)
        assert isinstance(outcome, str)
        return outcome

    async def extract_image_signals(self, document: Document) -> ExtractedContent:
        outcome = self._next(document)
        if isinstance(outcome, str):
            return ExtractedContent(text=outcome)
        return outcome


def doc(name: str) -> Document:
    return Document(file_name=name, content=b"%fake%")


@pytest.fixture
def scheduler() -> RecordingScheduler:
    return RecordingScheduler()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def flaky_network() -> List[Outcome]:
    return [TransientNetworkError("connection reset"), TransientNetworkError("connection reset"), ESSAY]
