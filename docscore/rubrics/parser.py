# docscore/rubrics/parser.py
"""
Rubric grammar: one rubric per line, free text, a handful of tolerated shapes.

    Thesis Statement (10 points) - Clear and arguable thesis
    Evidence (15 pts): Supporting facts and examples
    Organization - 10 points - Logical structure and flow
    Grammar: 5 pts - Proper spelling and grammar

A leading bullet (•, -, *) is optional. Lines that match none of the shapes
are dropped without complaint.
"""

from __future__ import annotations

import logging
import re

from typing import List, Optional, Pattern

from . import RubricItem

logger = logging.getLogger(__name__)


_BULLET = r"^\s*(?:[•\-*]\s*)?"
_UNIT = r"(?:points?|pts?)"

# Order matters: first match wins.
_RUBRIC_PATTERNS: List[Pattern] = [
    # Category (N points) - Description
    re.compile(_BULLET + rf"([^(]+?)\s*\(\s*(\d+)\s*{_UNIT}\s*\)\s*-\s*(.*?)\s*$", re.I),
    # Category (N points): Description   (description optional)
    re.compile(_BULLET + rf"([^(]+?)\s*\(\s*(\d+)\s*{_UNIT}\s*\)\s*(?::\s*(.*?))?\s*$", re.I),
    # Category - N points - Description
    re.compile(_BULLET + rf"(.+?)\s+-\s+(\d+)\s*{_UNIT}\s*-\s*(.*?)\s*$", re.I),
    # Category: N points - Description
    re.compile(_BULLET + rf"([^:]+?)\s*:\s*(\d+)\s*{_UNIT}\s*-\s*(.*?)\s*$", re.I),
]


def parse_rubric_line(line: str) -> Optional[RubricItem]:
    """Parse one line, or return None when no shape matches."""
    for pat in _RUBRIC_PATTERNS:
        m = pat.match(line)
        if not m:
            continue

        category = m.group(1).strip()
        points = int(m.group(2), 10)
        description = (m.group(3) or "").strip() or category

        if not category or points <= 0:
            # The line had the right shape but cannot be scored against.
            return None
        return RubricItem(category=category, points=points, description=description)

    return None


def parse_rubrics(instructions: str) -> List[RubricItem]:
    """
    Turn rubric text into an ordered list of RubricItem.

    Duplicated categories are kept and scored independently.
    An empty result is valid; callers decide whether to warn.
    """
    items: List[RubricItem] = []
    for ln in (instructions or "").splitlines():
        if not ln.strip():
            continue
        item = parse_rubric_line(ln)
        if item is None:
            logger.debug("Ignoring unrecognised rubric line: %r", ln)
            continue
        items.append(item)
    return items


def rubric_total(items: List[RubricItem]) -> int:
    return sum(i.points for i in items)


def total_mismatch_warning(items: List[RubricItem], declared_total: Optional[int]) -> Optional[str]:
    """
    Compare a caller-declared total score with the parsed rubric.
    Returns a warning string when they disagree, otherwise None.
    """
    if not declared_total or not items:
        return None
    total = rubric_total(items)
    if total == declared_total:
        return None
    return f"Rubric points add up to {total}, but the declared total score is {declared_total}"
