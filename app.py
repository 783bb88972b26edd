# app.py
"""
DocScore API - FastAPI application for rubric-based document scoring.

Upload documents (PDF, DOCX) or images (JPG, PNG) together with free-text
rubric instructions and get per-category scores with feedback.

Run with: uvicorn app:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import random
import secrets

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from docscore.config import Settings, configure_logging
from docscore.extract import Document
from docscore.extract.service import open_extraction_service
from docscore.rubrics.parser import parse_rubrics, rubric_total, total_mismatch_warning
from docscore.scoring.orchestrator import BatchOrchestrator
from docscore.scoring.scheduler import AsyncioScheduler
from docscore.scoring.scorer import BatchScorer

logger = logging.getLogger("docscore.api")

VERSION = "1.0.0"
REALM = 'Basic realm="DocScore API"'


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class RubricItemModel(BaseModel):
    category: str
    points: int = Field(..., gt=0)
    description: str


class RubricParseResponse(BaseModel):
    rubrics: List[RubricItemModel]
    total_points: int
    warnings: List[str]


class CategoryScoreModel(BaseModel):
    category: str
    score: int = Field(..., ge=0)
    max_points: int
    feedback: str


class ScoringResultModel(BaseModel):
    file_name: str
    total_score: int
    rubric_scores: List[CategoryScoreModel]
    error: Optional[str] = None


class ProgressEvent(BaseModel):
    index: int
    file_name: str
    percent: int = Field(..., ge=0, le=100)


class ScoreResponse(BaseModel):
    results: List[ScoringResultModel]
    rubrics: List[RubricItemModel]
    total_points: int
    no_rubrics_parsed: bool
    aborted: bool
    warnings: List[str]
    progress: List[ProgressEvent]
    processing_info: Dict[str, Any]


# =============================================================================
# FASTAPI APP
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = getattr(app.state, "settings", None) or Settings.from_env()
    configure_logging(settings.log_level)
    app.state.settings = settings
    app.state.batch_lock = asyncio.Lock()

    # Tests may pre-install a fake extractor
    if getattr(app.state, "extractor", None) is not None:
        yield
        return

    with open_extraction_service(settings) as extractor:
        app.state.extractor = extractor
        try:
            yield
        finally:
            app.state.extractor = None


app = FastAPI(
    title="DocScore API",
    description="""
    Rubric-based scoring of documents and images.

    ## Rubric format

    One rubric per line, optional leading bullet:

    * `Thesis Statement (10 points) - Clear and arguable thesis`
    * `Evidence (15 pts): Supporting facts and examples`
    * `Organization - 10 points - Logical structure and flow`
    * `Grammar: 5 pts - Proper spelling and grammar`

    ## Scoring

    Text documents are scored by keyword coverage of each rubric description,
    adjusted for writing quality and AI-likelihood heuristics. Scores are
    advisory and never drop below 85% of a category's points (75% for images).
    """,
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _settings(request: Request) -> Settings:
    return request.app.state.settings


def _check_basic_auth(header: Optional[str], users: Dict[str, str]) -> Optional[str]:
    """Return the username for a valid Basic header, otherwise None."""
    if not header or not header.startswith("Basic "):
        return None
    try:
        decoded = base64.b64decode(header.split(" ", 1)[1]).decode("utf-8")
        username, password = decoded.split(":", 1)
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None

    stored = users.get(username)
    if stored is None or not secrets.compare_digest(password, stored):
        return None
    return username


def _unauthorized(detail: str) -> JSONResponse:
    return JSONResponse(status_code=401, headers={"WWW-Authenticate": REALM}, content={"detail": detail})


def build_orchestrator(request: Request, progress: List[ProgressEvent]) -> BatchOrchestrator:
    settings = _settings(request)
    scheduler = getattr(request.app.state, "scheduler", None) or AsyncioScheduler()
    rng = random.Random(settings.score_seed) if settings.score_seed is not None else random.Random()

    scorer = BatchScorer(
        request.app.state.extractor,
        scheduler=scheduler,
        rng=rng,
        retry_attempts=settings.retry_attempts,
        backoff_seconds=settings.retry_backoff_seconds,
    )
    return BatchOrchestrator(
        scorer,
        scheduler=scheduler,
        pacing_seconds=settings.pacing_seconds,
        on_progress=lambda i, name, pct: progress.append(ProgressEvent(index=i, file_name=name, percent=pct)),
    )


# =============================================================================
# API ENDPOINTS
# =============================================================================

@app.middleware("http")
async def auth_middleware(request: Request, call_next):
    """
    Global Basic Auth when users are configured.
    Skips OPTIONS requests (CORS preflight).
    """
    users = _settings(request).auth_users
    if not users or request.method == "OPTIONS":
        return await call_next(request)

    if not request.headers.get("Authorization"):
        return _unauthorized("Authentication required")

    username = _check_basic_auth(request.headers.get("Authorization"), users)
    if username is None:
        return _unauthorized("Invalid credentials")

    request.state.username = username
    return await call_next(request)


@app.get("/")
async def root(request: Request):
    """Root endpoint with API info."""
    return {
        "name": "DocScore API",
        "version": VERSION,
        "authenticated_user": getattr(request.state, "username", "anonymous"),
        "auth_enabled": _settings(request).auth_enabled,
        "supported_types": ["pdf", "docx", "jpg", "jpeg", "png"],
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health(request: Request):
    """Health check endpoint."""

    def mask_url(url: str) -> Optional[str]:
        if not url:
            return None
        parsed = urlparse(url)
        return f"{parsed.scheme}://{parsed.netloc}"

    settings = _settings(request)
    lock: asyncio.Lock = request.app.state.batch_lock
    return {
        "status": "ok",
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "batch_in_progress": lock.locked(),
        "ocr": {"lang": settings.ocr_lang, "dpi": settings.ocr_dpi},
        "vision_llm": {
            "configured": settings.vision_configured,
            "model": settings.vision_llm_model if settings.vision_configured else None,
            "base_url": mask_url(settings.vision_llm_base_url),
        },
    }


@app.post("/rubrics/parse", response_model=RubricParseResponse)
async def parse_rubrics_endpoint(
    instructions: str = Form(..., description="Rubric text, one rubric per line"),
    total_score: Optional[int] = Form(None, ge=1, description="Expected total of all rubric points"),
):
    """Parse rubric text without scoring anything."""
    items = parse_rubrics(instructions)
    warnings: List[str] = []
    if not items:
        warnings.append("No rubric items could be parsed")
    mismatch = total_mismatch_warning(items, total_score)
    if mismatch:
        warnings.append(mismatch)

    return RubricParseResponse(
        rubrics=[RubricItemModel(**i.to_dict()) for i in items],
        total_points=rubric_total(items),
        warnings=warnings,
    )


@app.post("/score", response_model=ScoreResponse)
async def score_endpoint(
    request: Request,
    files: List[UploadFile] = File(..., description="Documents or images to score"),
    instructions: str = Form(..., description="Rubric text, one rubric per line"),
    total_score: Optional[int] = Form(None, ge=1, description="Expected total of all rubric points"),
):
    """Score a batch of files against the rubric, in upload order."""
    if not files:
        raise HTTPException(status_code=400, detail="No files uploaded")
    if not instructions.strip():
        raise HTTPException(status_code=400, detail="Scoring instructions are empty")

    documents: List[Document] = []
    for f in files:
        documents.append(Document(file_name=f.filename or "unknown", content=await f.read()))

    lock: asyncio.Lock = request.app.state.batch_lock
    if lock.locked():
        raise HTTPException(status_code=409, detail="A batch is already being scored")

    progress: List[ProgressEvent] = []
    started = datetime.now(timezone.utc)

    async with lock:
        orchestrator = build_orchestrator(request, progress)
        report = await orchestrator.run_batch(documents, instructions)

    warnings = list(report.warnings)
    mismatch = total_mismatch_warning(report.rubrics, total_score)
    if mismatch:
        warnings.append(mismatch)

    elapsed_ms = (datetime.now(timezone.utc) - started).total_seconds() * 1000
    logger.info("Scored %d file(s) in %.0fms", len(documents), elapsed_ms)
    return ScoreResponse(
        results=[ScoringResultModel(**r.to_dict()) for r in report.results],
        rubrics=[RubricItemModel(**i.to_dict()) for i in report.rubrics],
        total_points=rubric_total(report.rubrics),
        no_rubrics_parsed=report.no_rubrics_parsed,
        aborted=report.aborted,
        warnings=warnings,
        progress=progress,
        processing_info={
            "processing_time_ms": round(elapsed_ms, 2),
            "documents": len(documents),
            "failed": sum(1 for r in report.results if r.error),
        },
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
