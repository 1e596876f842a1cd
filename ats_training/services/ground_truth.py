"""Label training pairs with ATS scores and write the ground-truth dataset.

Typical run::

    generator = AtsGroundTruthGenerator(score_engine=KeywordScoreEngine())
    generator.load_data(resume_limit=100, jd_limit=200)
    stats = generator.generate_dataset("training/data/ground-truth.json")
"""

import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterator

import numpy as np
from pydantic import BaseModel

from ats_training.config import settings
from ats_training.errors import CacheCorruptionError, DataNotLoadedError
from ats_training.models.schemas import (
    AtsScoreResult,
    GenerationOptions,
    GenerationStats,
    GroundTruth,
    GroundTruthPair,
    JobDescription,
    LoadOptions,
    TrainingResume,
)
from ats_training.models.schemas.stats import SCORE_BUCKETS
from ats_training.models.schemas.training_pair import GOOD_MATCH_THRESHOLD
from ats_training.services.cache import dump_records, read_cache, write_json_atomic
from ats_training.services.dataset_loader import UnifiedDatasetLoader
from ats_training.services.matcher import select_matches
from ats_training.services.pair_builder import Matcher, TrainingPairBuilder
from ats_training.services.score_engine import KeywordScoreEngine, ScoreEngine

logger = logging.getLogger(__name__)

RESUME_CACHE_FILE = "resumes.json"
JD_CACHE_FILE = "job-descriptions.json"
MAX_KEYWORDS = 10
PROGRESS_EVERY = 10

# Upper bound of each score bucket, paired with SCORE_BUCKETS
_BUCKET_EDGES = (20, 40, 60, 80)


def format_resume_for_ats(resume: TrainingResume) -> str:
    """Render a structured resume back into plain ATS-style text."""
    parts: list[str] = []

    if resume.summary:
        parts += ["PROFESSIONAL SUMMARY", resume.summary, ""]

    if resume.experience:
        parts.append("PROFESSIONAL EXPERIENCE")
        for exp in resume.experience:
            parts.append(f"{exp.title} | {exp.company}")
            if exp.location:
                parts.append(exp.location)
            if exp.start_date or exp.end_date:
                parts.append(f"{exp.start_date or ''} - {exp.end_date or 'Present'}")
            parts += [f"• {bullet}" for bullet in exp.bullets]
            parts.append("")

    if resume.skills:
        parts += ["SKILLS", ", ".join(resume.skills), ""]

    if resume.education:
        parts.append("EDUCATION")
        for edu in resume.education:
            degree = " in ".join(p for p in (edu.degree, edu.field) if p)
            parts.append(f"{degree} | {edu.institution}")
            if edu.end_date:
                parts.append(edu.end_date)
        parts.append("")

    if resume.certifications:
        parts.append("CERTIFICATIONS")
        for cert in resume.certifications:
            line = cert.name
            if cert.issuer:
                line += f" - {cert.issuer}"
            if cert.date:
                line += f" ({cert.date})"
            parts.append(line)

    return "\n".join(parts)


def extract_ground_truth(
    pair_id: str,
    resume: TrainingResume,
    jd: JobDescription,
    result: AtsScoreResult,
) -> GroundTruth:
    """Derive the training label from an engine result. Pure."""
    critical = result.category_breakdown.get("critical")
    important = result.category_breakdown.get("important")
    critical_matched = critical.matched_count if critical else 0
    critical_total = critical.total_keywords if critical else 0
    important_matched = important.matched_count if important else 0
    important_total = important.total_keywords if important else 0

    total = critical_total + important_total
    coverage = (critical_matched + important_matched) / total if total else 0.0

    matched: list[str] = []
    for tier in (critical, important):
        if tier is None:
            continue
        for term in tier.matched_terms:
            if term not in matched:
                matched.append(term)
    if not matched:
        # Engines that do not report terms still describe hits in their strengths
        matched = [s for s in result.strengths if "matched" in s or "found" in s]

    return GroundTruth(
        pair_id=pair_id,
        resume_category=resume.category or "Unknown",
        jd_domain=jd.domain or "Unknown",
        ats_score=result.final_score,
        keyword_coverage=min(coverage, 1.0),
        critical_matched=critical_matched,
        critical_total=critical_total,
        important_matched=important_matched,
        important_total=important_total,
        matched_keywords=matched[:MAX_KEYWORDS],
        missing_keywords=result.gaps[:MAX_KEYWORDS],
        is_good_match=result.final_score >= GOOD_MATCH_THRESHOLD,
        score_interpretation=result.score_interpretation,
    )


def score_bucket(score: float) -> str:
    for edge, bucket in zip(_BUCKET_EDGES, SCORE_BUCKETS):
        if score <= edge:
            return bucket
    return SCORE_BUCKETS[-1]


def calculate_stats(
    scores: list[float],
    good_match_count: int,
    processing_time_ms: float,
    scoring_failures: int = 0,
    filtered_out: int = 0,
) -> GenerationStats:
    distribution = {bucket: 0 for bucket in SCORE_BUCKETS}
    for score in scores:
        distribution[score_bucket(score)] += 1

    avg_score = round(float(np.mean(scores)), 2) if scores else 0.0

    return GenerationStats(
        total_pairs=len(scores),
        avg_score=avg_score,
        score_distribution=distribution,
        good_match_count=good_match_count,
        processing_time_ms=processing_time_ms,
        scoring_failures=scoring_failures,
        filtered_out=filtered_out,
    )


class AtsGroundTruthGenerator:
    """Loads resume/JD pools, scores matched pairs and writes the dataset.

    One instance per run. Concurrent runs should point at different
    ``cache_dir`` values.
    """

    def __init__(
        self,
        loader: UnifiedDatasetLoader | None = None,
        score_engine: ScoreEngine | None = None,
        cache_dir: str | Path | None = None,
        matcher: Matcher = select_matches,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.loader = loader or UnifiedDatasetLoader()
        self.score_engine = score_engine or KeywordScoreEngine()
        self.cache_dir = Path(cache_dir if cache_dir is not None else settings.cache_dir)
        self.pair_builder = TrainingPairBuilder(loader=self.loader, matcher=matcher)
        self._sleep = sleep

        self.resumes: list[TrainingResume] = []
        self.job_descriptions: list[JobDescription] = []

        # Skip counters of the most recent generate_ground_truth_pairs() run
        self.scoring_failures = 0
        self.filtered_out = 0

    @property
    def resume_cache_path(self) -> Path:
        return self.cache_dir / RESUME_CACHE_FILE

    @property
    def jd_cache_path(self) -> Path:
        return self.cache_dir / JD_CACHE_FILE

    def load_data(
        self,
        resume_limit: int | None = None,
        jd_limit: int | None = None,
    ) -> None:
        """Fill both pools from the cache files, fetching whatever is missing.

        Limits default to the current ``settings`` values. A corrupt cache
        file is deleted and refetched. This never writes the cache; call
        ``save_cache()`` for that.
        """
        if resume_limit is None:
            resume_limit = settings.resume_limit
        if jd_limit is None:
            jd_limit = settings.jd_limit
        self.resumes = self._load_pool(
            self.resume_cache_path,
            TrainingResume,
            resume_limit,
            lambda: self.loader.load_resumes(LoadOptions(limit=resume_limit)),
        )
        self.job_descriptions = self._load_pool(
            self.jd_cache_path,
            JobDescription,
            jd_limit,
            lambda: self.loader.load_job_descriptions(LoadOptions(limit=jd_limit)),
        )

    def _load_pool(
        self,
        path: Path,
        model: type[BaseModel],
        limit: int,
        fetch: Callable[[], Iterator],
    ) -> list:
        try:
            cached = read_cache(path, model)
        except CacheCorruptionError as e:
            logger.warning("%s; removing it and fetching fresh data", e)
            path.unlink(missing_ok=True)
            cached = None

        if cached is not None:
            records = cached[:limit]
            logger.info("Loaded %d records from cache %s", len(records), path)
            return records

        logger.info("Fetching %s records from Hugging Face...", model.__name__)
        records = list(fetch())
        logger.info("Fetched %d %s records", len(records), model.__name__)
        return records

    def save_cache(self) -> None:
        write_json_atomic(self.resume_cache_path, dump_records(self.resumes))
        write_json_atomic(self.jd_cache_path, dump_records(self.job_descriptions))
        logger.info(
            "Cached %d resumes and %d job descriptions in %s",
            len(self.resumes), len(self.job_descriptions), self.cache_dir,
        )

    def generate_ground_truth_pairs(
        self, options: GenerationOptions | None = None
    ) -> Iterator[GroundTruthPair]:
        """Score matched pairs lazily, yielding those inside the score window."""
        options = options or GenerationOptions()
        if not self.resumes or not self.job_descriptions:
            raise DataNotLoadedError("Data not loaded. Call load_data() first.")
        return self._generate(options)

    def _generate(self, options: GenerationOptions) -> Iterator[GroundTruthPair]:
        self.scoring_failures = 0
        self.filtered_out = 0
        engine_calls = 0

        usable = (r for r in self.resumes if r.experience or r.skills)
        pairs = self.pair_builder.build_pairs(usable, self.job_descriptions, options.pairs_per_resume)

        for pair in pairs:
            if engine_calls and options.delay_seconds > 0:
                self._sleep(options.delay_seconds)
            engine_calls += 1

            try:
                raw = self.score_engine.score(
                    pair.job_description.description,
                    format_resume_for_ats(pair.resume),
                    list(pair.resume.skills),
                )
                result = raw if isinstance(raw, AtsScoreResult) else AtsScoreResult.model_validate(raw)
            except Exception:
                logger.exception("Error scoring pair %s", pair.id)
                self.scoring_failures += 1
                continue

            ground_truth = extract_ground_truth(pair.id, pair.resume, pair.job_description, result)
            if not options.min_score <= ground_truth.ats_score <= options.max_score:
                self.filtered_out += 1
                continue

            yield GroundTruthPair(
                id=pair.id,
                resume=pair.resume,
                job_description=pair.job_description,
                expected_ats_score=ground_truth.ats_score,
                matched_keywords=ground_truth.matched_keywords,
                missing_keywords=ground_truth.missing_keywords,
                is_good_match=ground_truth.is_good_match,
                ground_truth=ground_truth,
            )

    def generate_dataset(
        self,
        output_path: str | Path,
        options: GenerationOptions | None = None,
    ) -> GenerationStats:
        """Drain the pair sequence and write ``{metadata, pairs}`` to ``output_path``."""
        start = time.perf_counter()
        pairs: list[GroundTruthPair] = []

        logger.info("Generating ground truth pairs...")
        for pair in self.generate_ground_truth_pairs(options):
            pairs.append(pair)
            if len(pairs) % PROGRESS_EVERY == 0:
                logger.info("Generated %d pairs...", len(pairs))

        stats = calculate_stats(
            [p.ground_truth.ats_score for p in pairs],
            sum(1 for p in pairs if p.ground_truth.is_good_match),
            round((time.perf_counter() - start) * 1000, 2),
            scoring_failures=self.scoring_failures,
            filtered_out=self.filtered_out,
        )

        write_json_atomic(output_path, {
            "metadata": {
                "generated_at": datetime.now(timezone.utc).isoformat(),
                "score_engine": {
                    "name": self.score_engine.engine_name,
                    "version": self.score_engine.version,
                },
                "stats": stats.model_dump(mode="json"),
            },
            "pairs": dump_records(pairs),
        })
        logger.info("Saved %d ground truth pairs to %s", len(pairs), output_path)
        return stats
