"""Raw resume text -> TrainingResume.

Pipeline: normalise -> segment into sections -> parse each section with
targeted regexes -> score quality. A resume with neither experience
entries nor skills is rejected (``None``), never yielded upstream.
"""

import logging
import re

from pydantic import ValidationError

from ats_training.models.schemas.training_resume import (
    Certification,
    Education,
    Experience,
    TrainingResume,
)
from ats_training.services.section_parser import (
    DATE_RANGE_RE,
    DURATION_RE,
    YEAR_RE,
    has_date,
    is_bullet,
    normalize_text,
    parse_sections,
    strip_bullet,
)

logger = logging.getLogger(__name__)

MIN_RESUME_CHARS = 100
MIN_SECTION_CHARS = 20
MIN_LIST_SECTION_CHARS = 10

MAX_BULLETS_PER_ENTRY = 8
MIN_BULLET_CHARS = 20
MIN_CONTINUATION_CHARS = 30  # unmarked lines longer than this count as bullets
MAX_ENTRY_HEADER_CHARS = 120

MIN_SKILL_CHARS = 2
MAX_SKILL_CHARS = 50
MAX_SKILLS = 60
MAX_CERTIFICATIONS = 10
MIN_CERTIFICATION_CHARS = 5
MIN_SUMMARY_CHARS = 50
MAX_SUMMARY_CHARS = 1000

UNKNOWN_COMPANY = "Unknown Company"
UNKNOWN_TITLE = "Unknown Title"

SKILL_STOP_WORDS = frozenset({"and", "or", "the", "with", "for", "to", "of", "in", "a", "an"})

# ---------------------------------------------------------------------------
# Experience header patterns
# ---------------------------------------------------------------------------

_TITLE_CASE_RE = re.compile(r"^[A-Z][a-z]+\s+[A-Z]")
_HEADER_TOKENS = ("Company Name", "City State", "City , State")
_HEADER_SPLIT_RE = re.compile(r"\s*[|,–—]\s*|\s+-\s+|\s+at\s+")
_ROLE_TITLE_RE = re.compile(
    r"^((?:[A-Za-z][A-Za-z\s/&.-]*?)?(?:Manager|Analyst|Developer|Engineer|Director|Lead|"
    r"Specialist|Associate|Coordinator|Consultant|Accountant|Administrator|Assistant|"
    r"Designer|Architect|Scientist|Officer|Representative|Supervisor|Intern|Advocate))\b",
    re.IGNORECASE,
)
_COMPANY_LABEL_RE = re.compile(r"Company\s*Name\s*[:\s]\s*([^,|\n]+)", re.IGNORECASE)
# ALL CAPS run such as "ACME CORP" (case-sensitive on purpose)
_CAPS_COMPANY_RE = re.compile(r"\b([A-Z][A-Z&.]+(?:\s+[A-Z][A-Z&.]+)*)\b")
_LOCATION_RE = re.compile(r"\b([A-Z][a-z]+(?:\s[A-Z][a-z]+)*,\s*[A-Z]{2})\b|City\s*,?\s*State")

# ---------------------------------------------------------------------------
# Education patterns
# ---------------------------------------------------------------------------

_DEGREE_RE = re.compile(
    r"\b(Bachelor'?s?|Master'?s?|Ph\.?D\.?|MBA|B\.?S\.?|M\.?S\.?|Associate'?s?|Doctorate)"
    r"(?![A-Za-z])(?:\s*(?:of|in)\s+)?\s*([A-Za-z][A-Za-z &]*)?",
    re.IGNORECASE,
)
_INSTITUTION_RE = re.compile(
    r"((?:[A-Z][\w&.'-]*\s+)*(?:University|College|Institute|School)"
    r"(?:\s+of(?:\s+[A-Z][\w&.'-]*)+)?)"
)
_DEGREE_QUALIFIER_RE = re.compile(
    r"^(Science|Arts|Engineering|Business Administration|Fine Arts)\s+in\s+(.+)$",
    re.IGNORECASE,
)
_INSTITUTION_WORD_RE = re.compile(r"\b(?:University|College|Institute|School)\b")
_GPA_RE = re.compile(r"\bGPA\s*[:\-]?\s*(\d\.\d{1,2})", re.IGNORECASE)

# ---------------------------------------------------------------------------
# Quality scoring
# ---------------------------------------------------------------------------

QUANTIFIED_BULLET_RE = re.compile(r"\d+%|\$\d+|\d+\+")
QUALITY_MAX_SCORE = 100


class ResumeTextTransformer:
    """Thin object wrapper so the transformer can be injected into loaders."""

    def transform(
        self,
        raw_text: str | None,
        category: str | None = None,
        source: str | None = None,
    ) -> TrainingResume | None:
        return transform_resume_text(raw_text, category=category, source=source)


def transform_resume_text(
    raw_text: str | None,
    category: str | None = None,
    source: str | None = None,
) -> TrainingResume | None:
    """Transform unstructured resume text into a TrainingResume.

    Returns None for inputs under MIN_RESUME_CHARS, for resumes with no
    experience and no skills, and when parsing fails unexpectedly.
    """
    if not raw_text or len(raw_text) < MIN_RESUME_CHARS:
        return None

    try:
        text = normalize_text(raw_text)
        sections = parse_sections(text)

        experience = parse_experience_section(sections["experience"])
        education = parse_education_section(sections["education"])
        skills = parse_skills_section(sections["skills"])
        certifications = parse_certifications_section(sections["certifications"])
        summary = parse_summary_section(sections["summary"])

        if not experience and not skills:
            return None

        return TrainingResume(
            summary=summary,
            experience=experience,
            skills=skills,
            education=education or None,
            certifications=certifications or None,
            category=category,
            source=source,
            quality_score=calculate_quality_score(experience, skills, education, summary),
        )
    except (ValidationError, ValueError, re.error) as e:
        logger.debug("Failed to transform resume text: %s", e)
        return None


# ---------------------------------------------------------------------------
# Experience
# ---------------------------------------------------------------------------


def _is_entry_header(line: str) -> bool:
    if is_bullet(line) or len(line) > MAX_ENTRY_HEADER_CHARS:
        return False
    return (
        has_date(line)
        or any(token in line for token in _HEADER_TOKENS)
        or bool(_TITLE_CASE_RE.match(line))
    )


def parse_experience_header(line: str, next_line: str | None = None) -> dict[str, str]:
    """Pull company/title/location/dates out of an entry header line.

    Only fields that were found are present in the returned dict. When no
    title is recognisable on the line itself, the next non-bullet line is
    used as the title.
    """
    fields: dict[str, str] = {}
    rest = line

    date_match = DATE_RANGE_RE.search(rest)
    if date_match:
        fields["start_date"] = date_match.group(1)
        fields["end_date"] = date_match.group(2)
        rest = rest[: date_match.start()] + " " + rest[date_match.end():]

    location_match = _LOCATION_RE.search(rest)
    if location_match:
        fields["location"] = (location_match.group(1) or location_match.group(0)).strip()
        rest = rest[: location_match.start()] + " " + rest[location_match.end():]

    label_match = _COMPANY_LABEL_RE.search(rest)
    if label_match:
        fields["company"] = label_match.group(1).strip()
        rest = rest[: label_match.start()] + " " + rest[label_match.end():]

    parts = [p.strip(" -:") for p in _HEADER_SPLIT_RE.split(rest)]
    parts = [p for p in parts if p and not YEAR_RE.fullmatch(p)]

    title_part = None
    for part in parts:
        title_match = _ROLE_TITLE_RE.match(part)
        if title_match:
            fields["title"] = title_match.group(1).strip()
            title_part = part
            break

    if "company" not in fields:
        caps = [m.group(1) for m in _CAPS_COMPANY_RE.finditer(rest) if len(m.group(1)) > 2]
        if caps:
            fields["company"] = caps[0].strip()
        else:
            others = [p for p in parts if p is not title_part]
            if others and ("title" in fields or len(others) > 1):
                fields["company"] = others[0] if "title" in fields else others[1]
                if "title" not in fields:
                    fields["title"] = others[0]

    if "title" not in fields and next_line and not is_bullet(next_line):
        candidate = re.split(r"[,|]", next_line.strip())[0].strip()
        if candidate:
            fields["title"] = candidate

    return fields


def _build_experience(header: dict[str, str], bullets: list[str]) -> Experience:
    return Experience(
        company=header.get("company") or UNKNOWN_COMPANY,
        title=header.get("title") or UNKNOWN_TITLE,
        location=header.get("location"),
        start_date=header.get("start_date"),
        end_date=header.get("end_date"),
        bullets=bullets[:MAX_BULLETS_PER_ENTRY],
    )


def parse_experience_section(text: str) -> list[Experience]:
    """Group experience lines into entries, in document order.

    A header-like line seen before the first bullet of an entry is merged
    into that entry when it only adds new fields (e.g. a date line under a
    "Title, Company" line). Entries that end up without bullets are dropped.
    """
    if not text or len(text.strip()) < MIN_SECTION_CHARS:
        return []

    lines = [line.strip() for line in text.split("\n") if line.strip()]
    experiences: list[Experience] = []
    header: dict[str, str] | None = None
    bullets: list[str] = []

    for i, line in enumerate(lines):
        next_line = lines[i + 1] if i + 1 < len(lines) else None

        if _is_entry_header(line):
            if header is not None and not bullets:
                own = parse_experience_header(line)
                if not own.keys() & header.keys():
                    header.update(own)
                    continue
            if header is not None and bullets:
                experiences.append(_build_experience(header, bullets))
            header = parse_experience_header(line, next_line)
            bullets = []
        elif is_bullet(line):
            bullet = strip_bullet(line)
            if len(bullet) >= MIN_BULLET_CHARS:
                bullets.append(bullet)
        elif header is not None and len(line) > MIN_CONTINUATION_CHARS:
            bullets.append(line)

    if header is not None and bullets:
        experiences.append(_build_experience(header, bullets))

    return experiences


# ---------------------------------------------------------------------------
# Education
# ---------------------------------------------------------------------------


def parse_education_section(text: str) -> list[Education]:
    """One entry per line that names a degree.

    Institution and year are taken from the degree line, or from the line
    right after it when the degree line has none.
    """
    if not text or len(text.strip()) < MIN_SECTION_CHARS:
        return []

    lines = [line.strip() for line in text.split("\n") if line.strip()]
    education: list[Education] = []

    for i, line in enumerate(lines):
        degree_match = _DEGREE_RE.search(line)
        if not degree_match:
            continue

        context = line
        next_line = lines[i + 1] if i + 1 < len(lines) else ""
        if next_line and not _DEGREE_RE.search(next_line):
            context = f"{line} | {next_line}"

        degree = degree_match.group(1)
        field = degree_match.group(2)
        if field:
            field = _INSTITUTION_WORD_RE.split(field)[0]
            field = re.split(r"\s+(?:from|at)\s+", field)[0].strip(" &") or None
        if field:
            # "Bachelor of Science in Computer Science"
            qualified = _DEGREE_QUALIFIER_RE.match(field)
            if qualified:
                degree = f"{degree} of {qualified.group(1)}"
                field = qualified.group(2).strip()

        institution_match = _INSTITUTION_RE.search(context)
        year_match = YEAR_RE.search(context)
        gpa_match = _GPA_RE.search(context)

        education.append(Education(
            institution=institution_match.group(1).strip() if institution_match else "",
            degree=degree,
            field=field or None,
            end_date=year_match.group(0) if year_match else None,
            gpa=gpa_match.group(1) if gpa_match else None,
        ))

    return education


# ---------------------------------------------------------------------------
# Skills, certifications, summary
# ---------------------------------------------------------------------------


def parse_skills_section(text: str) -> list[str]:
    if not text or len(text.strip()) < MIN_LIST_SECTION_CHARS:
        return []

    skills: list[str] = []
    seen: set[str] = set()

    for part in re.split(r"[,;|•●○▪\n]+", text):
        skill = re.sub(r"^\s*[-:]\s*", "", part.strip())
        skill = re.sub(r"\s+", " ", skill).strip()

        if not (MIN_SKILL_CHARS <= len(skill) <= MAX_SKILL_CHARS):
            continue
        if skill.isdigit() or skill.lower() in SKILL_STOP_WORDS:
            continue

        key = skill.lower()
        if key not in seen:
            seen.add(key)
            skills.append(skill)

    return skills[:MAX_SKILLS]


def parse_certifications_section(text: str) -> list[Certification]:
    if not text or len(text.strip()) < MIN_LIST_SECTION_CHARS:
        return []

    certifications: list[Certification] = []
    for line in text.split("\n"):
        line = strip_bullet(line.strip())
        if len(line) < MIN_CERTIFICATION_CHARS:
            continue

        name = re.sub(r"[\s(,-]*\d{4}\)?\s*$", "", line).strip()
        year_match = YEAR_RE.search(line)
        if len(name) >= MIN_CERTIFICATION_CHARS:
            certifications.append(Certification(
                name=name,
                date=year_match.group(0) if year_match else None,
            ))

    return certifications[:MAX_CERTIFICATIONS]


def parse_summary_section(text: str) -> str | None:
    if not text or len(text.strip()) < MIN_SUMMARY_CHARS:
        return None

    summary = re.sub(r"^(?:summary|objective|profile|about\s*me)[:\s]*", "", text.strip(), flags=re.IGNORECASE)
    summary = re.sub(r"\s+", " ", summary).strip()

    if len(summary) >= MIN_SUMMARY_CHARS and not is_bullet(summary):
        return summary[:MAX_SUMMARY_CHARS]
    return None


# ---------------------------------------------------------------------------
# Quality
# ---------------------------------------------------------------------------


def calculate_quality_score(
    experience: list[Experience],
    skills: list[str],
    education: list[Education],
    summary: str | None,
) -> float:
    """Weighted 0-1 completeness score.

    Experience up to 40 points (count 20, bullet density 10, quantified
    bullets 10), skills up to 25, education up to 15, summary up to 20.
    """
    score = 0.0

    if experience:
        score += min(20, len(experience) * 5)
        all_bullets = [b for exp in experience for b in exp.bullets]
        score += min(10, len(all_bullets) / len(experience) * 2)
        quantified = sum(1 for b in all_bullets if QUANTIFIED_BULLET_RE.search(b))
        score += min(10, quantified * 2)

    if skills:
        score += min(15, len(skills) / 2)
        score += 10 if len(skills) >= 10 else len(skills)

    if education:
        score += 10
        if any(e.degree for e in education):
            score += 5

    if summary:
        score += min(10, len(summary) / 50)
        if len(summary) >= 200:
            score += 5
        if DURATION_RE.search(summary):
            score += 5

    return round(max(0.0, min(1.0, score / QUALITY_MAX_SCORE)), 3)
