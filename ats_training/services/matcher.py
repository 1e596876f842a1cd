"""Heuristic resume to job-description matching used when building pairs."""

from ats_training.models.schemas import JobDescription, TrainingResume

CATEGORY_MATCH_POINTS = 10
SHARED_SKILL_POINTS = 2


def score_match(resume: TrainingResume, jd: JobDescription) -> int:
    """Category hit on domain or title, plus points per shared skill.

    A resume without a category matches every job (the empty string is a
    substring of anything), so uncategorised resumes compete on skills.
    """
    score = 0
    category = (resume.category or "").lower()

    domain = jd.domain.lower() if jd.domain else None
    title = jd.title.lower() if jd.title else None
    if (domain is not None and category in domain) or (title is not None and category in title):
        score += CATEGORY_MATCH_POINTS

    resume_skills = {s.lower() for s in resume.skills}
    jd_skills = {s.lower() for s in (jd.required_skills or [])}
    jd_skills.update(s.lower() for s in (jd.preferred_skills or []))
    score += SHARED_SKILL_POINTS * len(resume_skills & jd_skills)

    return score


def select_matches(
    resume: TrainingResume,
    job_descriptions: list[JobDescription],
    limit: int,
) -> list[JobDescription]:
    """Top ``limit`` jobs by match score; ties keep input order."""
    if limit <= 0:
        return []
    # sorted() is stable, so equal scores stay in pool order
    ranked = sorted(job_descriptions, key=lambda jd: score_match(resume, jd), reverse=True)
    return ranked[:limit]
