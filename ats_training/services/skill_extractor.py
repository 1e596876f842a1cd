"""Pattern-based skill extraction for job descriptions and resumes.

Two extractors:
1. ``extract_skills_from_jd`` -- a fixed set of keyword regex groups
   (languages/tools, data science, methodology, soft skills, office/BI)
   used to fill ``JobDescription.required_skills`` while loading.
2. ``extract_skills_pattern`` -- a broader vocabulary scan with word
   boundaries, used by the reference keyword score engine.
"""

import re

MAX_JD_SKILLS = 20

JD_SKILL_PATTERNS: dict[str, re.Pattern] = {
    "technical": re.compile(
        r"\b(python|java|javascript|typescript|sql|react|angular|vue|node\.?js"
        r"|aws|azure|gcp|docker|kubernetes)\b",
        re.IGNORECASE,
    ),
    "data_science": re.compile(
        r"\b(machine learning|deep learning|data science|nlp|computer vision)\b",
        re.IGNORECASE,
    ),
    "methodology": re.compile(
        r"\b(project management|agile|scrum|kanban|jira|confluence)\b",
        re.IGNORECASE,
    ),
    "soft_skills": re.compile(
        r"\b(communication|leadership|problem[ -]solving|analytical|teamwork)\b",
        re.IGNORECASE,
    ),
    "office_tools": re.compile(
        r"\b(excel|powerpoint|word|google sheets|tableau|power bi)\b",
        re.IGNORECASE,
    ),
}

# Broader vocabulary for keyword scoring. Covers the non-engineering
# categories of the resume datasets as well (finance, HR, sales, ...).
SKILL_VOCABULARY: frozenset[str] = frozenset({
    # Languages
    "python", "java", "javascript", "typescript", "c++", "c#", "go", "golang",
    "rust", "ruby", "php", "swift", "kotlin", "scala", "r", "matlab", "sql",
    "bash", "shell", "powershell",
    # Web and backend
    "react", "angular", "vue", "node.js", "django", "flask", "fastapi",
    "spring", ".net", "graphql", "rest", "html", "css",
    # Cloud and DevOps
    "aws", "azure", "gcp", "docker", "kubernetes", "terraform", "ansible",
    "jenkins", "ci/cd", "linux", "git",
    # Data
    "postgresql", "mysql", "mongodb", "redis", "kafka", "spark", "hadoop",
    "airflow", "snowflake", "pandas", "numpy", "tensorflow", "pytorch",
    "scikit-learn", "machine learning", "deep learning", "nlp", "data analysis",
    "tableau", "power bi", "excel",
    # Business and operations
    "accounting", "bookkeeping", "budgeting", "forecasting", "financial analysis",
    "auditing", "payroll", "quickbooks", "sap", "erp", "salesforce", "crm",
    "sales", "marketing", "seo", "customer service", "recruiting", "onboarding",
    "negotiation", "procurement", "supply chain", "inventory management",
    # Methodology
    "agile", "scrum", "kanban", "project management", "jira", "six sigma", "lean",
})

_VOCAB_PATTERNS: dict[str, re.Pattern] = {
    # Boundaries keep "java" out of "javascript" and "go" out of "good"
    skill: re.compile(rf"(?<![a-z0-9.#+]){re.escape(skill)}(?![a-z0-9+#])")
    for skill in SKILL_VOCABULARY
}


def normalize_skill(skill: str) -> str:
    """Normalize a skill string for comparison."""
    return re.sub(r"\s+", " ", skill.lower().strip().rstrip(".,:;"))


def extract_skill_groups(text: str) -> dict[str, list[str]]:
    """Run every JD pattern group; each group keeps first-seen spellings."""
    groups: dict[str, list[str]] = {}
    for group, pattern in JD_SKILL_PATTERNS.items():
        seen: set[str] = set()
        hits: list[str] = []
        for match in pattern.finditer(text or ""):
            key = match.group(0).lower()
            if key not in seen:
                seen.add(key)
                hits.append(match.group(0))
        groups[group] = hits
    return groups


def extract_skills_from_jd(description: str) -> list[str]:
    """Extract up to MAX_JD_SKILLS keyword skills from free text.

    De-duplicated case-insensitively across all pattern groups, keeping the
    spelling of the first occurrence.
    """
    skills: list[str] = []
    seen: set[str] = set()
    for hits in extract_skill_groups(description).values():
        for skill in hits:
            key = skill.lower()
            if key not in seen:
                seen.add(key)
                skills.append(skill)
    return skills[:MAX_JD_SKILLS]


def extract_skills_pattern(text: str) -> set[str]:
    """Return the vocabulary skills mentioned in ``text`` (lower-cased)."""
    text_lower = (text or "").lower()
    return {skill for skill, pattern in _VOCAB_PATTERNS.items() if pattern.search(text_lower)}


def mentions_skill(text_lower: str, skill: str) -> bool:
    """Boundary-aware containment check for an arbitrary skill term."""
    term = normalize_skill(skill)
    if not term:
        return False
    pattern = _VOCAB_PATTERNS.get(term)
    if pattern is None:
        pattern = re.compile(rf"(?<![a-z0-9.#+]){re.escape(term)}(?![a-z0-9+#])")
    return bool(pattern.search(text_lower))
