"""Training pairs and the ATS ground-truth label attached to them."""

from pydantic import BaseModel, Field

from ats_training.models.schemas.job_description import JobDescription
from ats_training.models.schemas.training_resume import TrainingResume

GOOD_MATCH_THRESHOLD = 70


class TrainingPair(BaseModel):
    """A resume matched with a job description, optionally labeled."""
    id: str
    resume: TrainingResume
    job_description: JobDescription

    # Ground truth for training
    expected_ats_score: float | None = Field(default=None, ge=0.0, le=100.0)
    human_rating: float | None = Field(default=None, ge=1.0, le=5.0)

    # Keyword matching ground truth
    matched_keywords: list[str] | None = None
    missing_keywords: list[str] | None = None

    # Quality flags
    is_good_match: bool | None = None
    notes: str | None = None


class GroundTruth(BaseModel):
    """Label derived from a ScoreEngine result. Never hand-edited."""
    pair_id: str
    resume_category: str
    jd_domain: str
    ats_score: float = Field(ge=0.0, le=100.0)
    keyword_coverage: float = Field(ge=0.0, le=1.0)
    critical_matched: int = 0
    critical_total: int = 0
    important_matched: int = 0
    important_total: int = 0
    matched_keywords: list[str] = []
    missing_keywords: list[str] = []
    is_good_match: bool = False  # ats_score >= GOOD_MATCH_THRESHOLD
    score_interpretation: str = ""


class GroundTruthPair(TrainingPair):
    ground_truth: GroundTruth
