"""Unified entry point over all resume and job-description sources."""

import logging
import random
from typing import Iterator

from ats_training.config import settings
from ats_training.models.schemas import JobDescription, LoadOptions, TrainingResume
from ats_training.services.training_pipeline import TrainingDataPipeline

logger = logging.getLogger(__name__)

# lang-uk has ~142k postings; past this NxtGen supplies the remainder
LANG_UK_MAX_RECORDS = 1000


class UnifiedDatasetLoader:
    """Streams resumes and job descriptions with filtering and optional shuffling.

    Each call issues a fresh pull starting at ``options.offset``; the
    returned generators are finite and cannot be restarted.
    """

    def __init__(self, pipeline: TrainingDataPipeline | None = None) -> None:
        self.pipeline = pipeline or TrainingDataPipeline()

    def load_resumes(self, options: LoadOptions | None = None) -> Iterator[TrainingResume]:
        options = options or LoadOptions()
        if options.shuffle:
            return self._load_resumes_shuffled(options)
        return self._load_resumes_streaming(options)

    def _filtered_resumes(self, options: LoadOptions, limit: int) -> Iterator[TrainingResume]:
        for resume in self.pipeline.load_inference_prince_resumes(
            limit=limit, offset=options.offset, categories=options.categories
        ):
            if options.min_quality_score > 0 and (resume.quality_score or 0.0) < options.min_quality_score:
                continue
            yield resume

    def _load_resumes_streaming(self, options: LoadOptions) -> Iterator[TrainingResume]:
        loaded = 0
        if options.limit <= 0:
            return
        for resume in self._filtered_resumes(options, options.limit):
            yield resume
            loaded += 1
            if loaded >= options.limit:
                break

    def _load_resumes_shuffled(self, options: LoadOptions) -> Iterator[TrainingResume]:
        # Oversample so the shuffle draws from more than the first page
        pool_size = options.limit * 2
        pool: list[TrainingResume] = []
        if pool_size > 0:
            for resume in self._filtered_resumes(options, pool_size):
                pool.append(resume)
                if len(pool) >= pool_size:
                    break

        random.Random(options.seed).shuffle(pool)
        logger.info("Shuffled %d resumes (seed=%s)", len(pool), options.seed)
        yield from pool[:options.limit]

    def load_job_descriptions(self, options: LoadOptions | None = None) -> Iterator[JobDescription]:
        """lang-uk first (up to 1000 records), then NxtGen until ``limit``."""
        options = options or LoadOptions()
        categories = options.categories if options.categories is not None else settings.default_categories
        limit = options.limit
        loaded = 0
        if limit <= 0:
            return

        for jd in self.pipeline.load_lang_uk_job_descriptions(
            limit=min(limit, LANG_UK_MAX_RECORDS), offset=options.offset, categories=categories
        ):
            yield jd
            loaded += 1
            if loaded >= limit:
                return

        if loaded < limit:
            logger.info("Topping up %d job descriptions from NxtGen", limit - loaded)
            for jd in self.pipeline.load_nxtgen_job_descriptions(limit=limit - loaded, categories=categories):
                yield jd
                loaded += 1
                if loaded >= limit:
                    return
