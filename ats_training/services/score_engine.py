"""ATS scoring engines used to label training pairs."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping

from ats_training.models.schemas import AtsScoreResult, CategoryResult
from ats_training.services.skill_extractor import (
    extract_skill_groups,
    extract_skills_pattern,
    mentions_skill,
    normalize_skill,
)

logger = logging.getLogger(__name__)

CATEGORY_WEIGHTS = {
    "critical": 0.40,
    "important": 0.35,
    "nice_to_have": 0.25,
}

# JD pattern groups that describe optional soft skills rather than hard requirements
BONUS_GROUPS = frozenset({"soft_skills"})

INTERPRETATION_BANDS = (
    (90, "Excellent Match (90-100%)"),
    (75, "Good Match (75-89%)"),
    (60, "Moderate Match (60-74%)"),
    (40, "Average Match (40-59%)"),
)
WEAK_INTERPRETATION = "Weak Match (<40%)"


class ScoreEngine(ABC):
    """Base class for ATS score engines.

    Subclasses must implement:
        - engine_name: identifier recorded alongside generated datasets
        - score(): rate a resume against a job description

    ``score`` may return an ``AtsScoreResult`` or a plain mapping with the
    same fields; callers validate it with ``AtsScoreResult.model_validate``.
    """

    engine_name: str = ""
    version: str = "0"

    @abstractmethod
    def score(
        self,
        job_description_text: str,
        resume_text: str,
        resume_skills: list[str],
    ) -> AtsScoreResult | Mapping[str, Any]:
        """Score one pair. May raise; the generator skips failed pairs."""


def interpret_score(final_score: float) -> str:
    for threshold, label in INTERPRETATION_BANDS:
        if final_score >= threshold:
            return label
    return WEAK_INTERPRETATION


def _category(terms: list[str], resume_lower: str, resume_skills: set[str]) -> CategoryResult:
    if not terms:
        return CategoryResult(score=100.0)
    matched = [
        t for t in terms
        if normalize_skill(t) in resume_skills or mentions_skill(resume_lower, t)
    ]
    return CategoryResult(
        score=round(len(matched) / len(terms) * 100, 2),
        total_keywords=len(terms),
        matched_count=len(matched),
        matched_terms=matched,
    )


class KeywordScoreEngine(ScoreEngine):
    """Deterministic keyword-coverage engine.

    Critical terms are the hard skills the JD patterns pick up, important
    terms are further vocabulary hits in the JD, and soft skills count as
    nice-to-have. Tiers without any terms are left out and the remaining
    weights are rescaled to sum to one.
    """

    engine_name = "keyword"
    version = "1.0"

    def score(
        self,
        job_description_text: str,
        resume_text: str,
        resume_skills: list[str],
    ) -> AtsScoreResult:
        groups = extract_skill_groups(job_description_text)

        critical_terms: list[str] = []
        bonus_terms: list[str] = []
        seen: set[str] = set()
        for group, hits in groups.items():
            target = bonus_terms if group in BONUS_GROUPS else critical_terms
            for term in hits:
                key = normalize_skill(term)
                if key not in seen:
                    seen.add(key)
                    target.append(term)

        important_terms = sorted(s for s in extract_skills_pattern(job_description_text) if s not in seen)

        resume_lower = (resume_text or "").lower()
        skill_set = {normalize_skill(s) for s in resume_skills}
        breakdown = {
            "critical": _category(critical_terms, resume_lower, skill_set),
            "important": _category(important_terms, resume_lower, skill_set),
            "nice_to_have": _category(bonus_terms, resume_lower, skill_set),
        }

        active = {name: w for name, w in CATEGORY_WEIGHTS.items() if breakdown[name].total_keywords}
        weight_sum = sum(active.values())
        if weight_sum:
            final_score = round(sum(breakdown[name].score * w for name, w in active.items()) / weight_sum)
        else:
            final_score = 0
        final_score = max(0, min(100, final_score))
        logger.debug(
            "Keyword score %d (critical %d/%d, important %d/%d)",
            final_score,
            breakdown["critical"].matched_count, breakdown["critical"].total_keywords,
            breakdown["important"].matched_count, breakdown["important"].total_keywords,
        )

        gaps = [t for t in critical_terms if t not in breakdown["critical"].matched_terms]
        gaps += [t for t in important_terms if t not in breakdown["important"].matched_terms]

        return AtsScoreResult(
            final_score=final_score,
            score_interpretation=interpret_score(final_score),
            category_breakdown=breakdown,
            strengths=_strengths(breakdown),
            gaps=gaps,
        )


def _strengths(breakdown: dict[str, CategoryResult]) -> list[str]:
    critical = breakdown["critical"]
    important = breakdown["important"]
    strengths: list[str] = []

    core = critical.matched_terms[:3]
    if len(core) >= 2:
        strengths.append(f"Strong coverage of core requirements: {', '.join(core)}")
    elif len(core) == 1:
        strengths.append(f"Demonstrates expertise in {core[0]}")

    if important.matched_terms:
        strengths.append(f"Also matches preferred qualifications: {', '.join(important.matched_terms[:2])}")

    if critical.total_keywords and critical.matched_count >= critical.total_keywords * 0.8:
        strengths.append("Excellent alignment with job requirements")

    if not strengths:
        strengths.append("Some relevant experience demonstrated")
    return strengths
