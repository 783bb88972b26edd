# docscore/features/ai_signals.py
"""
Stylometric cues associated with machine-generated prose.

This is a proxy, not a detector: every signal here also fires on plenty of
careful human writing. The result only modulates content scores.
"""

from __future__ import annotations

import statistics

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List

from docscore.features.keywords import count_phrases, count_words, sentences, tokenize, words


AI_LIKELY_THRESHOLD = 40

# Transition and hedge phrases that language models lean on.
AI_PHRASES: List[str] = [
    "in conclusion",
    "in summary",
    "to summarize",
    "it is important to note",
    "it is worth noting",
    "it's important to note",
    "it's worth noting",
    "delve into",
    "delves into",
    "furthermore",
    "moreover",
    "additionally",
    "in today's world",
    "in today's fast-paced",
    "plays a crucial role",
    "plays a vital role",
    "a testament to",
    "navigate the complexities",
    "multifaceted",
    "overall,",
    "in essence",
    "ultimately,",
    "a myriad of",
    "the landscape of",
    "it can be argued",
    "on the other hand",
    "shed light on",
    "serves as a",
    "tapestry",
    "paramount",
]

FORMAL_WORDS = frozenset({
    "furthermore", "moreover", "additionally", "consequently", "nevertheless",
    "nonetheless", "thus", "hence", "therefore", "accordingly", "subsequently",
    "notably", "significantly", "ultimately", "essentially", "comprehensive",
    "crucial", "pivotal", "robust", "facilitate", "utilize", "leverage",
})

PERSONAL_WORDS = frozenset({
    "i", "me", "my", "mine", "myself", "we", "us", "our", "ours",
    "personally",
})

# Thresholds
_PHRASES_MANY = 3
_PHRASES_SOME = 2
_UNIFORM_MIN_SENTENCES = 8
_UNIFORM_MAX_STDEV = 4.0
_FORMAL_MIN = 5
_VOICE_MIN_WORDS = 200
_LONG_WORD_LEN = 15
_CLEAN_MIN_WORDS = 300
_OPENERS_SAMPLE = 10
_OPENERS_MAX_REPEAT = 3


@dataclass
class AiSignals:
    is_likely: bool
    confidence: int                      # 0..100
    reasons: List[str] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)


def _sentence_length_stdev(sents: List[str]) -> float:
    lengths = [len(s.split()) for s in sents]
    if len(lengths) < 2:
        return 0.0
    return statistics.pstdev(lengths)


def _max_opener_repeats(sents: List[str]) -> int:
    openers = [s.split()[0].lower() for s in sents[:_OPENERS_SAMPLE] if s.split()]
    if not openers:
        return 0
    return max(Counter(openers).values())


def detect_ai(text: str) -> AiSignals:
    """
    Accumulate a 0..100 likelihood score from independent cues.

    Signals (in evaluation order):
    - AI-typical phrases: more than 3 distinct -> +30, 2-3 -> +15
    - more than 8 sentences with near-constant length -> +20
    - formal connectives without any first-person words -> +15
    - no overlong words and no double spaces in a long text -> +10
    - repeated sentence openers among the first sentences -> +10
    """
    t = text or ""
    sents = sentences(t)
    raw_words = words(t)
    tokens = tokenize(t)
    word_count = len(raw_words)

    score = 0
    reasons: List[str] = []

    phrase_hits = count_phrases(t, AI_PHRASES)
    distinct_phrases = len(phrase_hits)
    if distinct_phrases > _PHRASES_MANY:
        score += 30
        reasons.append("Frequent use of AI-typical phrases")
    elif distinct_phrases >= _PHRASES_SOME:
        score += 15
        reasons.append("Some AI-typical phrases")

    stdev = _sentence_length_stdev(sents)
    if len(sents) > _UNIFORM_MIN_SENTENCES and stdev < _UNIFORM_MAX_STDEV:
        score += 20
        reasons.append("Uniform sentence structure")

    # Contractions like "I'm" tokenize to "i", so the bare pronouns suffice.
    formal = count_words(tokens, FORMAL_WORDS)
    personal = count_words(tokens, PERSONAL_WORDS)
    if formal > _FORMAL_MIN and personal == 0 and word_count > _VOICE_MIN_WORDS:
        score += 15
        reasons.append("Lacks personal voice")

    has_long_word = any(len(w) >= _LONG_WORD_LEN for w in raw_words)
    has_double_space = "  " in t
    if not has_long_word and not has_double_space and word_count > _CLEAN_MIN_WORDS:
        score += 10
        reasons.append("Unusually clean text (no typos)")

    opener_repeats = _max_opener_repeats(sents)
    if opener_repeats > _OPENERS_MAX_REPEAT:
        score += 10
        reasons.append("Repetitive sentence patterns")

    confidence = min(100, score)
    return AiSignals(
        is_likely=confidence > AI_LIKELY_THRESHOLD,
        confidence=confidence,
        reasons=reasons,
        metrics={
            "distinct_phrases": distinct_phrases,
            "sentences": len(sents),
            "sentence_length_stdev": round(stdev, 3),
            "formal_words": formal,
            "personal_words": personal,
            "words": word_count,
            "max_opener_repeats": opener_repeats,
        },
    )
