"""Loaders, transformers and the ground-truth generator."""

from .dataset_loader import UnifiedDatasetLoader
from .fetch_client import ResilientFetchClient
from .ground_truth import AtsGroundTruthGenerator
from .pair_builder import TrainingPairBuilder
from .resume_transformer import ResumeTextTransformer, transform_resume_text
from .score_engine import KeywordScoreEngine, ScoreEngine
from .training_pipeline import TrainingDataPipeline

__all__ = [
    # fetching and loading
    "ResilientFetchClient",
    "TrainingDataPipeline",
    "UnifiedDatasetLoader",
    # transformation
    "ResumeTextTransformer",
    "transform_resume_text",
    # labeling
    "TrainingPairBuilder",
    "ScoreEngine",
    "KeywordScoreEngine",
    "AtsGroundTruthGenerator",
]
