# docscore/rubrics/matcher.py
"""
Rubric matching: how well a document addresses each rubric description.

Two scorers with intentionally different behaviour:
- score_text: keyword overlap, modulated by writing quality and AI-likelihood,
  jittered, and floored at 85% of the category's points.
- score_image: single-pass keyword ratio over OCR text + visual tags,
  floored at 75% by construction. No quality/AI adjustment, no jitter.
"""

from __future__ import annotations

import logging
import math
import random

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from docscore.features.ai_signals import AiSignals, detect_ai
from docscore.features.keywords import extract_keywords, tokenize
from docscore.features.writing_quality import QualityReport, analyze_quality, most_severe_issue
from . import CategoryScore, RubricItem

logger = logging.getLogger(__name__)


BASE_CONTENT_SCORE = 70.0      # used when a description has no usable keywords
CONTENT_FLOOR = 40.0
CONTENT_SPAN = 55.0
DIRECT_WEIGHT = 0.7
PARTIAL_WEIGHT = 0.3
AI_MAX_PENALTY = 0.4
JITTER_RANGE = (0.92, 1.08)
TEXT_MIN_RATIO = 0.85
IMAGE_MIN_RATIO = 0.75


@dataclass
class MatchScore:
    score: int
    feedback: str
    details: Dict[str, Any] = field(default_factory=dict)


def round_half_up(x: float) -> int:
    """Round .5 away from zero for positive values (2.5 -> 3), unlike round()."""
    return int(math.floor(x + 0.5))


def keyword_match_ratio(text_tokens: Sequence[str], keywords: Sequence[str]) -> Dict[str, float]:
    """
    Weighted overlap between rubric keywords and document tokens.

    direct: keyword appears verbatim as a token
    partial: keyword contains, or is contained in, some token
    """
    token_set = set(text_tokens)
    direct = sum(1 for kw in keywords if kw in token_set)
    partial = sum(
        1 for kw in keywords
        if any(kw in tok or tok in kw for tok in token_set)
    )
    n = len(keywords)
    ratio = DIRECT_WEIGHT * (direct / n) + PARTIAL_WEIGHT * (partial / n) if n else 0.0
    return {"direct": direct, "partial": partial, "ratio": ratio}


def _content_tier(content_score: float) -> str:
    if content_score >= 85:
        return "Excellent coverage of the criteria"
    if content_score >= 70:
        return "Good coverage of the criteria"
    if content_score >= 55:
        return "Partial coverage of the criteria"
    return "Limited coverage of the criteria"


def _ai_clause(ai: AiSignals) -> Optional[str]:
    if ai.confidence <= 40:
        return None
    if ai.confidence > 60:
        penalty = round_half_up(AI_MAX_PENALTY * ai.confidence)
        return f"Strong indicators of AI-generated content (approx. {penalty}% penalty applied)"
    return "Some writing patterns resemble AI-generated text"


def build_feedback(content_score: float, quality: QualityReport, ai: AiSignals) -> str:
    parts = [_content_tier(content_score)]
    issue = most_severe_issue(quality)
    if issue:
        parts.append(issue)
    clause = _ai_clause(ai)
    if clause:
        parts.append(clause)
    return " • ".join(parts)


def score_text(
    text: str,
    rubric_item: RubricItem,
    *,
    rng: Optional[random.Random] = None,
    ai: Optional[AiSignals] = None,
) -> MatchScore:
    """
    Score extracted document text against one rubric item.

    The result is always within [round(points * 0.85), points]: scores are
    advisory, so weak matches lose at most 15%.

    Args:
        text: extracted document text
        rubric_item: category being scored
        rng: randomness source for the jitter; pass a seeded Random for repeatable scores
        ai: precomputed AI signals for this text (they do not depend on the rubric)
    """
    rng = rng or random.Random()
    points = rubric_item.points

    keywords = extract_keywords(rubric_item.description)
    if keywords:
        match = keyword_match_ratio(tokenize(text), keywords)
        content_score = CONTENT_FLOOR + match["ratio"] * CONTENT_SPAN
    else:
        match = {"direct": 0, "partial": 0, "ratio": None}
        content_score = BASE_CONTENT_SCORE

    ai = ai if ai is not None else detect_ai(text)
    quality = analyze_quality(text, rubric_item)

    final = content_score * (quality.quality_score / 100.0)
    if ai.is_likely:
        final *= 1.0 - AI_MAX_PENALTY * (ai.confidence / 100.0)

    jitter = rng.uniform(*JITTER_RANGE)
    final *= jitter

    minimum = round_half_up(points * TEXT_MIN_RATIO)
    raw = round_half_up(final / 100.0 * points)
    score = max(minimum, min(points, raw))

    return MatchScore(
        score=score,
        feedback=build_feedback(content_score, quality, ai),
        details={
            "keywords": keywords,
            "direct_matches": match["direct"],
            "partial_matches": match["partial"],
            "match_ratio": match["ratio"],
            "content_score": round(content_score, 2),
            "quality_score": quality.quality_score,
            "ai_confidence": ai.confidence,
            "jitter": round(jitter, 4),
            "raw_points": raw,
        },
    )


def score_text_rubrics(
    text: str,
    rubric_items: Sequence[RubricItem],
    *,
    rng: Optional[random.Random] = None,
) -> List[CategoryScore]:
    """Score one document against every rubric item, running AI detection once."""
    if not rubric_items:
        return []
    ai = detect_ai(text)
    out: List[CategoryScore] = []
    for item in rubric_items:
        m = score_text(text, item, rng=rng, ai=ai)
        out.append(CategoryScore(category=item.category, score=m.score, max_points=item.points, feedback=m.feedback))
    return out


def _image_tier(ratio: float) -> str:
    if ratio >= 0.8:
        return "Excellent match with criteria"
    if ratio >= 0.6:
        return "Good match with most criteria"
    if ratio >= 0.4:
        return "Partially meets criteria"
    return "Limited match with criteria"


def score_image(text: str, visual_tags: Sequence[str], rubric_items: Sequence[RubricItem]) -> List[CategoryScore]:
    """
    Score OCR text plus visual labels of an image against every rubric item.
    Plain substring containment on the combined corpus; no stop-word filtering.
    """
    corpus = f"{text or ''} {' '.join(visual_tags)}".lower()

    out: List[CategoryScore] = []
    for item in rubric_items:
        keywords = item.description.lower().split()
        matches = sum(1 for kw in keywords if kw in corpus)
        ratio = matches / len(keywords) if keywords else 0.0
        adjusted = IMAGE_MIN_RATIO + ratio * (1.0 - IMAGE_MIN_RATIO)
        score = min(item.points, round_half_up(item.points * adjusted))
        out.append(CategoryScore(category=item.category, score=score, max_points=item.points, feedback=_image_tier(ratio)))
    return out
