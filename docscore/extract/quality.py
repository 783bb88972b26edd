# docscore/extract/quality.py

from __future__ import annotations

import re

from dataclasses import dataclass
from typing import Dict, Any


@dataclass
class TextQuality:
    ok: bool
    reason: str
    metrics: Dict[str, Any]


_LETTER_RE = re.compile(r"[^\W\d_]")


def text_quality_ok(
    text: str,
    *,
    min_chars: int = 200,
    min_letter_ratio: float = 0.25,
) -> TextQuality:
    """
    Decide whether text pulled from a PDF's text layer is usable, or whether
    the PDF is probably scanned and should go through OCR.

    Heuristics:
    - Minimum character count
    - Letter ratio (any alphabet): mostly symbols/whitespace means a broken text layer
    """
    if not text or not text.strip():
        return TextQuality(ok=False, reason="empty_text", metrics={"chars": 0, "letter_ratio": 0.0})

    chars = len(text)
    letters = len(_LETTER_RE.findall(text))
    ratio = letters / max(1, chars)
    metrics = {"chars": chars, "letters": letters, "letter_ratio": round(ratio, 4)}

    if chars < min_chars:
        return TextQuality(ok=False, reason="too_short", metrics={**metrics, "min_chars": min_chars})

    if ratio < min_letter_ratio:
        return TextQuality(ok=False, reason="low_letter_ratio", metrics={**metrics, "min_letter_ratio": min_letter_ratio})

    return TextQuality(ok=True, reason="ok", metrics=metrics)
