"""Options and statistics shared by the loaders and the generator."""

from pydantic import BaseModel, Field

SCORE_BUCKETS = ("0-20", "21-40", "41-60", "61-80", "81-100")


class LoadOptions(BaseModel):
    limit: int = Field(default=1000, ge=0)
    offset: int = Field(default=0, ge=0)
    categories: list[str] | None = None
    min_quality_score: float = 0.0
    shuffle: bool = False  # explicit opt-in; default is registry order
    seed: int | None = None


class GenerationOptions(BaseModel):
    pairs_per_resume: int = Field(default=3, ge=1)
    min_score: float = 0.0
    max_score: float = 100.0
    delay_seconds: float = Field(default=0.1, ge=0.0)  # rate limiting between engine calls


class GenerationStats(BaseModel):
    """Summary of one generation run, written next to the pairs."""
    total_pairs: int = 0
    avg_score: float = 0.0
    score_distribution: dict[str, int] = Field(
        default_factory=lambda: {bucket: 0 for bucket in SCORE_BUCKETS}
    )
    good_match_count: int = 0
    processing_time_ms: float = 0.0
    # Skips that did not end up in the dataset
    scoring_failures: int = 0
    filtered_out: int = 0


class DatasetStats(BaseModel):
    total_records: int = 0
    category_counts: dict[str, int] = {}
    avg_quality_score: float = 0.0
