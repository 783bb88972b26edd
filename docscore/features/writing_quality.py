# docscore/features/writing_quality.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from docscore.features.keywords import count_words, paragraphs, sentences, tokenize, words
from docscore.rubrics import RubricItem


@dataclass
class QualityReport:
    """
    Structural/lexical quality of a text, independent of topic.
    quality_score starts at 100; each issue records one deduction.
    """
    quality_score: int
    issues: List[str] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)


ANALYTICAL_WORDS = frozenset({
    "because", "therefore", "however", "although", "thus", "consequently",
    "whereas", "hence", "despite", "since", "implies", "suggests", "indicates",
    "demonstrates", "evidence", "compare", "contrast", "analysis", "analyze",
    "analyse", "evaluate", "conclude",
})

# (label, deduction) in the order checks are applied.
VERY_SHORT = ("Very short content", 30)
BRIEF = ("Brief content", 15)
CHOPPY = ("Choppy sentences", 10)
OVERLONG = ("Overly long sentences", 10)
POOR_PARAGRAPHS = ("Poor paragraph structure", 10)
LIMITED_VOCAB = ("Limited vocabulary", 15)
REPETITIVE_WORDS = ("Repetitive word choice", 8)
NO_ANALYSIS = ("Lacks analytical depth", 20)
LIMITED_ANALYSIS = ("Limited analysis", 10)


def analyze_quality(text: str, rubric_item: RubricItem) -> QualityReport:
    t = text or ""
    word_count = len(words(t))
    sentence_count = len(sentences(t))
    paragraph_count = len(paragraphs(t))
    tokens = tokenize(t)

    avg_sentence = word_count / sentence_count if sentence_count else 0.0
    diversity = len(set(tokens)) / len(tokens) if tokens else 0.0
    analytical = count_words(tokens, ANALYTICAL_WORDS)

    score = 100
    issues: List[str] = []

    def deduct(check) -> None:
        nonlocal score
        label, amount = check
        score -= amount
        issues.append(label)

    if word_count < 100:
        deduct(VERY_SHORT)
    elif word_count < 200:
        deduct(BRIEF)

    if avg_sentence < 8:
        deduct(CHOPPY)
    elif avg_sentence > 35:
        deduct(OVERLONG)

    if paragraph_count < 2 and word_count > 200:
        deduct(POOR_PARAGRAPHS)

    if diversity < 0.3:
        deduct(LIMITED_VOCAB)
    elif diversity < 0.4:
        deduct(REPETITIVE_WORDS)

    wants_analysis = "analysis" in (rubric_item.description or "").lower()
    if wants_analysis and analytical == 0:
        deduct(NO_ANALYSIS)
    elif analytical < 2 and word_count > 300:
        deduct(LIMITED_ANALYSIS)

    return QualityReport(
        quality_score=max(0, score),
        issues=issues,
        metrics={
            "words": word_count,
            "sentences": sentence_count,
            "paragraphs": paragraph_count,
            "avg_words_per_sentence": round(avg_sentence, 2),
            "vocabulary_diversity": round(diversity, 3),
            "analytical_words": analytical,
        },
    )


DEDUCTIONS: Dict[str, int] = dict([
    VERY_SHORT, BRIEF, CHOPPY, OVERLONG, POOR_PARAGRAPHS,
    LIMITED_VOCAB, REPETITIVE_WORDS, NO_ANALYSIS, LIMITED_ANALYSIS,
])


def most_severe_issue(report: QualityReport) -> Optional[str]:
    """Largest deduction wins; earlier checks win ties."""
    if not report.issues:
        return None
    return max(report.issues, key=lambda label: DEDUCTIONS.get(label, 0))
