# docscore/features/keywords.py

from __future__ import annotations

import re

from typing import Dict, FrozenSet, Iterable, List


# Dropped from rubric descriptions before matching. Short words (<= 3 chars)
# are dropped anyway, so only longer fillers need listing here.
STOP_WORDS: FrozenSet[str] = frozenset({
    "about", "above", "after", "again", "against", "also", "among", "and",
    "any", "are", "been", "before", "being", "below", "between", "both",
    "but", "can", "could", "does", "doing", "down", "during", "each",
    "either", "every", "few", "for", "from", "further", "have", "having",
    "here", "into", "its", "itself", "just", "more", "most", "much", "must",
    "neither", "only", "other", "ought", "over", "same", "shall", "should",
    "some", "such", "than", "that", "their", "theirs", "them", "themselves",
    "then", "there", "these", "they", "this", "those", "through", "under",
    "until", "upon", "very", "well", "were", "what", "when", "where",
    "which", "while", "whom", "whose", "will", "with", "within", "without",
    "would", "your", "yours", "yourself", "include", "includes", "including",
    "using", "shows", "show", "demonstrate", "demonstrates", "provide",
    "provides", "clear", "clearly", "good", "effective", "effectively",
    "appropriate", "appropriately", "proper", "properly",
})

_PUNCT_RE = re.compile(r"[^\w\s]|_")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")


def normalize(text: str) -> str:
    """Lowercase and replace punctuation with spaces."""
    return _PUNCT_RE.sub(" ", (text or "").lower())


def tokenize(text: str) -> List[str]:
    return normalize(text).split()


def words(text: str) -> List[str]:
    """Raw whitespace-separated words, punctuation left attached."""
    return (text or "").split()


def sentences(text: str) -> List[str]:
    """Non-empty sentences split on . ! ?"""
    return [s.strip() for s in _SENTENCE_SPLIT_RE.split(text or "") if s.strip()]


def paragraphs(text: str) -> List[str]:
    return [p for p in _PARAGRAPH_SPLIT_RE.split(text or "") if p.strip()]


def extract_keywords(description: str, *, stop_words: FrozenSet[str] = STOP_WORDS) -> List[str]:
    """
    Content words of a rubric description: longer than 3 chars, not a stop word.
    Order of first appearance is kept; duplicates are counted once.
    """
    seen: Dict[str, None] = {}
    for tok in tokenize(description):
        if len(tok) > 3 and tok not in stop_words:
            seen.setdefault(tok, None)
    return list(seen)


def count_phrases(text: str, phrases: Iterable[str]) -> Dict[str, int]:
    """
    Case-insensitive substring counts for each phrase that occurs at least once.
    Substring semantics are deliberate: these are stylistic cues, not terms.
    """
    t = (text or "").lower()
    hits: Dict[str, int] = {}
    for phrase in phrases:
        c = t.count(phrase.lower())
        if c:
            hits[phrase] = c
    return hits


def count_words(tokens: Iterable[str], vocabulary: FrozenSet[str]) -> int:
    """Number of tokens (not distinct) that belong to the vocabulary."""
    return sum(1 for tok in tokens if tok in vocabulary)
