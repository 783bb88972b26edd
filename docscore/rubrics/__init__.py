# docscore/rubrics/__init__.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class RubricItem:
    """One scoring category: a point ceiling and the text documents are matched against."""
    category: str
    points: int
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "points": self.points, "description": self.description}


@dataclass(frozen=True)
class CategoryScore:
    category: str
    score: int
    max_points: int
    feedback: str

    def __post_init__(self) -> None:
        if not 0 <= self.score <= self.max_points:
            raise ValueError(f"score {self.score} outside [0, {self.max_points}] for {self.category!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "score": self.score,
            "max_points": self.max_points,
            "feedback": self.feedback,
        }


@dataclass(frozen=True)
class ScoringResult:
    """
    Outcome of scoring one document.

    Either rubric_scores carries one entry per rubric item, or error explains
    why the document could not be scored. A document scored against an empty
    rubric has neither (no scores, no error, total 0).
    """
    file_name: str
    total_score: int
    rubric_scores: List[CategoryScore] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def scored(cls, file_name: str, rubric_scores: List[CategoryScore]) -> "ScoringResult":
        return cls(
            file_name=file_name,
            total_score=sum(s.score for s in rubric_scores),
            rubric_scores=list(rubric_scores),
        )

    @classmethod
    def failed(cls, file_name: str, error: str) -> "ScoringResult":
        return cls(file_name=file_name, total_score=0, rubric_scores=[], error=error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_name": self.file_name,
            "total_score": self.total_score,
            "rubric_scores": [s.to_dict() for s in self.rubric_scores],
            "error": self.error,
        }
