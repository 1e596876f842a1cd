"""Resume text normalisation and section segmentation.

Segmentation is a best-effort classifier over unstructured text: a short
line containing a section keyword opens a new section, everything else is
appended to the section currently open. All thresholds are module
constants so they can be tuned without touching the parsing code.
"""

import re

# Canonical section names, in the order headers are tested
SECTION_NAMES = ("summary", "experience", "education", "skills", "certifications")
FALLBACK_SECTION = "other"

# Lines at least this long are prose, never headers
MAX_HEADER_CHARS = 50

SECTION_PATTERNS: dict[str, list[str]] = {
    "summary": [
        r"summary",
        r"objective",
        r"profile",
        r"about\s*me",
    ],
    "experience": [
        r"experience",
        r"work\s*history",
        r"employment",
    ],
    "education": [
        r"education",
        r"academic",
        r"qualifications",
        r"degrees?",
    ],
    "skills": [
        r"skills",
        r"competencies",
        r"expertise",
        r"proficiencies",
    ],
    "certifications": [
        r"certifications?",
        r"licenses?",
        r"credentials?",
        r"certificates?",
    ],
}

_COMPILED: dict[str, re.Pattern] = {}
for _section, _patterns in SECTION_PATTERNS.items():
    _combined = "|".join(_patterns)
    _COMPILED[_section] = re.compile(rf"\b(?:{_combined})\b", re.IGNORECASE)

BULLET_MARKERS_RE = re.compile(r"^\s*[-•●○▪▸►◆★✓→*]\s*")

# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

_MONTHS = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|"
    r"Jul(?:y)?|Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)
MONTH_YEAR_RE = re.compile(rf"\b{_MONTHS}\.?\s*\d{{4}}\b", re.IGNORECASE)
YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")
PRESENT_RE = re.compile(r"\b(?:present|current|now)\b", re.IGNORECASE)
DATE_PATTERNS = (MONTH_YEAR_RE, YEAR_RE, PRESENT_RE)

# "Jan 2019 - Present", "2020 - 2023", "03/2018 to 11/2022"
_DATE_POINT = rf"(?:{_MONTHS}\.?\s*\d{{4}}|\d{{1,2}}/\d{{4}}|\d{{4}})"
DATE_RANGE_RE = re.compile(
    rf"({_DATE_POINT})\s*(?:-|–|—|to)\s*({_DATE_POINT}|present|current|now)",
    re.IGNORECASE,
)

# "5+ years", "18 months" -- used to spot duration claims in summaries
DURATION_RE = re.compile(r"\d+\+?\s*(?:years?|months?)", re.IGNORECASE)

# Whole-text fallbacks when no experience/skills header was found
_HEURISTIC_EXPERIENCE_RE = re.compile(
    r"(?:company\s*name|city\s*state|experience)[:\s]*([\s\S]*?)(?:education|skills|$)",
    re.IGNORECASE,
)
_HEURISTIC_SKILLS_RE = re.compile(
    r"skills[:\s]*([\s\S]*?)(?:education|experience|$)",
    re.IGNORECASE,
)


def normalize_text(text: str) -> str:
    """Unify line endings and collapse runs of spaces and blank lines."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def has_date(line: str) -> bool:
    return any(p.search(line) for p in DATE_PATTERNS)


def is_bullet(line: str) -> bool:
    return bool(BULLET_MARKERS_RE.match(line))


def strip_bullet(line: str) -> str:
    return BULLET_MARKERS_RE.sub("", line).strip()


def detect_header(line: str) -> str | None:
    """Return the section a line opens, or None if it is ordinary content."""
    stripped = line.strip()
    if not stripped or len(stripped) >= MAX_HEADER_CHARS or is_bullet(stripped):
        return None
    for section in SECTION_NAMES:
        if _COMPILED[section].search(stripped):
            return section
    return None


def _empty_sections() -> dict[str, str]:
    return {name: "" for name in (*SECTION_NAMES, FALLBACK_SECTION)}


def parse_sections(text: str) -> dict[str, str]:
    """Split normalised resume text into a tagged-section map.

    Always returns every canonical key plus ``other``; absent sections map
    to an empty string. Text before the first header lands in ``other``.
    """
    sections = _empty_sections()
    current = FALLBACK_SECTION
    buffer: list[str] = []

    for line in text.split("\n"):
        found = detect_header(line)
        if found:
            if buffer:
                sections[current] += "\n".join(buffer) + "\n"
                buffer = []
            current = found
        else:
            buffer.append(line)

    if buffer:
        sections[current] += "\n".join(buffer)

    if not sections["experience"].strip() and not sections["skills"].strip():
        return parse_sections_heuristic(text)

    return sections


def parse_sections_heuristic(text: str) -> dict[str, str]:
    """Looser pass over the whole text for resumes without usable headers."""
    sections = _empty_sections()
    sections[FALLBACK_SECTION] = text

    experience_match = _HEURISTIC_EXPERIENCE_RE.search(text)
    if experience_match:
        sections["experience"] = experience_match.group(1)

    skills_match = _HEURISTIC_SKILLS_RE.search(text)
    if skills_match:
        sections["skills"] = skills_match.group(1)

    return sections
