#!/usr/bin/env python3
"""
Tests for the DocScore API with Basic Auth.

Covers auth, health, rubric parsing and batch scoring against a scripted
extractor (no OCR or PDF libraries are exercised here).
"""

import pytest

from fastapi.testclient import TestClient

from app import app
from docscore.config import Settings
from docscore.errors import TransientNetworkError
from docscore.extract import ExtractedContent
from docscore.scoring.scheduler import Scheduler


AUTH_USER = "grader"
AUTH_PASSWORD = "s3cret-pass"

ESSAY = (
    "Climate policy has become one of the defining questions of our time. "
    "A carbon tax puts a price on pollution because emitters otherwise ignore the damage. "
    "However, the design matters as much as the rate.\n\n"
    "Evidence from British Columbia suggests a revenue-neutral tax can cut emissions. "
    "Therefore I think a visible dividend is the best path to public support."
)

RUBRIC = "Thesis (10 points) - Clear thesis about climate policy\nEvidence (10 pts): Supporting evidence"


class ScriptedExtractor:
    def __init__(self):
        self.failures_left = {"flaky.pdf": 2}

    async def extract_text(self, document):
        left = self.failures_left.get(document.file_name, 0)
        if left:
            self.failures_left[document.file_name] = left - 1
            raise TransientNetworkError("connection reset")
        return ESSAY

    async def extract_image_signals(self, document):
        return ExtractedContent(text="Supporting evidence", visual_tags=["chart"])


class InstantScheduler(Scheduler):
    def __init__(self):
        self.waits = []

    async def sleep(self, seconds):
        self.waits.append(seconds)


@pytest.fixture
def client():
    app.state.settings = Settings(
        auth_users={AUTH_USER: AUTH_PASSWORD},
        score_seed=42,
    )
    app.state.extractor = ScriptedExtractor()
    app.state.scheduler = InstantScheduler()
    with TestClient(app) as c:
        yield c
    for attr in ("settings", "extractor", "scheduler"):
        delattr(app.state, attr)


def test_no_auth(client):
    """Endpoints reject requests without auth."""
    resp = client.get("/")
    assert resp.status_code == 401
    assert resp.headers.get("WWW-Authenticate", "").startswith("Basic")


def test_wrong_auth(client):
    """Endpoints reject requests with a wrong password."""
    resp = client.get("/", auth=(AUTH_USER, "wrongpassword"))
    assert resp.status_code == 401


def test_root_and_health(client):
    resp = client.get("/", auth=(AUTH_USER, AUTH_PASSWORD))
    assert resp.status_code == 200
    assert resp.json()["authenticated_user"] == AUTH_USER

    resp = client.get("/health", auth=(AUTH_USER, AUTH_PASSWORD))
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["batch_in_progress"] is False
    assert data["vision_llm"]["configured"] is False


def test_parse_rubrics(client):
    resp = client.post(
        "/rubrics/parse",
        data={"instructions": RUBRIC, "total_score": "25"},
        auth=(AUTH_USER, AUTH_PASSWORD),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert [r["category"] for r in data["rubrics"]] == ["Thesis", "Evidence"]
    assert data["total_points"] == 20
    assert len(data["warnings"]) == 1


def test_score_batch(client):
    files = [
        ("files", ("essay.pdf", b"%PDF-fake", "application/pdf")),
        ("files", ("flaky.pdf", b"%PDF-fake", "application/pdf")),
        ("files", ("legacy.doc", b"fake", "application/msword")),
        ("files", ("chart.png", b"fake", "image/png")),
    ]
    resp = client.post(
        "/score",
        files=files,
        data={"instructions": RUBRIC},
        auth=(AUTH_USER, AUTH_PASSWORD),
    )
    assert resp.status_code == 200
    data = resp.json()

    names = [r["file_name"] for r in data["results"]]
    assert names == ["essay.pdf", "flaky.pdf", "legacy.doc", "chart.png"]

    essay, flaky, legacy, chart = data["results"]
    for r in (essay, flaky):
        assert r["error"] is None
        assert 17 <= r["total_score"] <= 20
        assert r["total_score"] == sum(s["score"] for s in r["rubric_scores"])
    assert ".docx" in legacy["error"]
    assert legacy["rubric_scores"] == []
    assert chart["error"] is None

    assert [p["percent"] for p in data["progress"]] == [0, 25, 50, 75, 100]
    assert data["no_rubrics_parsed"] is False
    assert data["processing_info"]["failed"] == 1

    # two retry backoffs for flaky.pdf, three pauses between four documents
    assert sorted(app.state.scheduler.waits) == [1.5, 1.5, 1.5, 2.0, 2.0]


def test_score_without_parsable_rubric(client):
    resp = client.post(
        "/score",
        files=[("files", ("essay.pdf", b"%PDF-fake", "application/pdf"))],
        data={"instructions": "grade it fairly"},
        auth=(AUTH_USER, AUTH_PASSWORD),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["no_rubrics_parsed"] is True
    assert data["warnings"]
    assert data["results"][0]["total_score"] == 0


def test_score_rejects_blank_instructions(client):
    resp = client.post(
        "/score",
        files=[("files", ("essay.pdf", b"%PDF-fake", "application/pdf"))],
        data={"instructions": "   "},
        auth=(AUTH_USER, AUTH_PASSWORD),
    )
    assert resp.status_code == 400
