"""Pydantic contracts for the training-data pipeline."""

from ats_training.models.schemas.ats_result import AtsScoreResult, CategoryResult
from ats_training.models.schemas.job_description import JobDescription
from ats_training.models.schemas.registry import PageResponse, RegistryRow
from ats_training.models.schemas.stats import (
    DatasetStats,
    GenerationOptions,
    GenerationStats,
    LoadOptions,
)
from ats_training.models.schemas.training_pair import (
    GroundTruth,
    GroundTruthPair,
    TrainingPair,
)
from ats_training.models.schemas.training_resume import (
    Certification,
    Education,
    Experience,
    TrainingResume,
)

__all__ = [
    "AtsScoreResult",
    "CategoryResult",
    "Certification",
    "DatasetStats",
    "Education",
    "Experience",
    "GenerationOptions",
    "GenerationStats",
    "GroundTruth",
    "GroundTruthPair",
    "JobDescription",
    "LoadOptions",
    "PageResponse",
    "RegistryRow",
    "TrainingPair",
    "TrainingResume",
]
