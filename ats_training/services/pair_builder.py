"""Builds unscored (resume, job description) training pairs."""

import logging
from typing import Callable, Iterable, Iterator

from ats_training.models.schemas import JobDescription, LoadOptions, TrainingPair, TrainingResume
from ats_training.services.dataset_loader import UnifiedDatasetLoader
from ats_training.services.matcher import select_matches

logger = logging.getLogger(__name__)

Matcher = Callable[[TrainingResume, list[JobDescription], int], list[JobDescription]]


class TrainingPairBuilder:
    def __init__(
        self,
        loader: UnifiedDatasetLoader | None = None,
        matcher: Matcher = select_matches,
    ) -> None:
        self.loader = loader or UnifiedDatasetLoader()
        self.matcher = matcher

    def build_pairs(
        self,
        resumes: Iterable[TrainingResume],
        job_descriptions: list[JobDescription],
        pairs_per_resume: int = 3,
    ) -> Iterator[TrainingPair]:
        """Pair each resume with its best-matching jobs.

        Ids are ``pair-1``, ``pair-2``, ... in emission order, so the same
        inputs always produce the same ids.
        """
        pair_id = 0
        for resume in resumes:
            for jd in self.matcher(resume, job_descriptions, pairs_per_resume):
                pair_id += 1
                yield TrainingPair(id=f"pair-{pair_id}", resume=resume, job_description=jd)
        logger.info("Created %d training pairs", pair_id)

    def create_training_pairs(
        self,
        resume_limit: int = 100,
        jd_limit: int = 500,
        pairs_per_resume: int = 3,
    ) -> Iterator[TrainingPair]:
        # The JD pool has to be complete before the first resume can be matched
        job_descriptions = list(self.loader.load_job_descriptions(LoadOptions(limit=jd_limit)))
        logger.info("Loaded %d JDs for pairing", len(job_descriptions))

        resumes = self.loader.load_resumes(LoadOptions(limit=resume_limit))
        yield from self.build_pairs(resumes, job_descriptions, pairs_per_resume)
