"""Result contract returned by a ScoreEngine."""

from pydantic import BaseModel, Field


class CategoryResult(BaseModel):
    """Keyword coverage for one priority tier (critical / important / bonus)."""
    score: float = 0.0  # 0-100
    total_keywords: int = 0
    matched_count: int = 0
    matched_terms: list[str] = []  # optional, engines may leave it empty


class AtsScoreResult(BaseModel):
    """ATS compatibility of one resume against one job description.

    Only ``critical`` and ``important`` tiers feed the ground-truth label;
    other tiers in ``category_breakdown`` are carried through untouched.
    """
    final_score: float = Field(ge=0.0, le=100.0)
    score_interpretation: str = ""
    category_breakdown: dict[str, CategoryResult] = {}
    strengths: list[str] = []
    gaps: list[str] = []
