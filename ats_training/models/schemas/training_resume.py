"""Structured resume record produced by the text transformer."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

Bullet = Annotated[str, Field(min_length=10)]


class Experience(BaseModel):
    """A single work experience entry, in document order."""
    model_config = ConfigDict(frozen=True)

    company: str
    title: str
    location: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    bullets: list[Bullet] = Field(min_length=1)


class Education(BaseModel):
    """A single education entry."""
    model_config = ConfigDict(frozen=True)

    institution: str
    degree: str | None = None
    field: str | None = None
    end_date: str | None = None
    gpa: str | None = None


class Certification(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    issuer: str | None = None
    date: str | None = None


class TrainingResume(BaseModel):
    """Canonical resume record used as training input.

    A resume must carry at least one experience entry or one skill;
    anything emptier is rejected upstream and never reaches the pools.
    """
    model_config = ConfigDict(frozen=True)

    summary: str | None = Field(default=None, min_length=50)
    experience: list[Experience] = []
    skills: list[str] = []
    education: list[Education] | None = None
    certifications: list[Certification] | None = None

    # Metadata
    source: str | None = None  # dataset source identifier
    category: str | None = None  # job category, e.g. "Accountant"
    quality_score: float | None = Field(default=None, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _require_content(self) -> "TrainingResume":
        if not self.experience and not self.skills:
            raise ValueError("resume has neither experience nor skills")
        return self


def validate_resume(data: object) -> TrainingResume | None:
    """Validate arbitrary data as a TrainingResume; None when invalid."""
    try:
        return TrainingResume.model_validate(data)
    except ValidationError:
        return None
