"""Job description record loaded from the job-posting datasets."""

from pydantic import BaseModel, ConfigDict, Field, ValidationError

MIN_DESCRIPTION_CHARS = 50


class JobDescription(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    company: str | None = None
    description: str = Field(min_length=MIN_DESCRIPTION_CHARS)

    # Extracted requirements
    required_skills: list[str] | None = None
    preferred_skills: list[str] | None = None
    experience_years: str | None = None
    education_level: str | None = None

    # Classification
    domain: str | None = None  # e.g. "FinTech", "Healthcare", "IT"
    level: str | None = None  # e.g. "Entry", "Mid", "Senior"

    # Metadata
    source: str | None = None
    published_date: str | None = None


def validate_job_description(data: object) -> JobDescription | None:
    """Validate arbitrary data as a JobDescription; None when invalid."""
    try:
        return JobDescription.model_validate(data)
    except ValidationError:
        return None
