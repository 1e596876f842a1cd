"""Per-source loaders for the Hugging Face resume and job-posting datasets.

Every loader is a lazy generator over registry pages: nothing is fetched
until the caller pulls, and a page is only requested once the previous
one has been consumed. Row-level problems (unparseable resume text,
schema-invalid postings) are skipped; page-level fetch failures abort the
load with ``DatasetLoadError``.
"""

import logging
import re
from typing import Any, Callable, Iterator, TypeVar

from ats_training.errors import DatasetLoadError, FetchError
from ats_training.models.schemas import DatasetStats, JobDescription, TrainingResume
from ats_training.models.schemas.job_description import validate_job_description
from ats_training.services.fetch_client import MAX_PAGE_SIZE, ResilientFetchClient
from ats_training.services.resume_transformer import ResumeTextTransformer
from ats_training.services.skill_extractor import extract_skills_from_jd

logger = logging.getLogger(__name__)

T = TypeVar("T")

INFERENCE_PRINCE_DATASET = "InferencePrince555/Resume-Dataset"
LANG_UK_DATASET = "lang-uk/recruitment-dataset-job-descriptions-english"
NXTGEN_DATASET = "NxtGenIntern/job_titles_and_descriptions"

# "Generate a Resume for a Accountant Job" -> "Accountant"
_INSTRUCTION_CATEGORY_RE = re.compile(r"for\s+(?:a|an)\s+(.+?)\s+Job", re.IGNORECASE)


def source_id(dataset_id: str) -> str:
    return f"huggingface:{dataset_id}"


def matches_categories(value: str | None, categories: list[str] | None) -> bool:
    """Case-insensitive substring test of any requested category in ``value``.

    An empty or missing category list matches everything.
    """
    if not categories:
        return True
    value_lower = (value or "").lower()
    return any(c.lower() in value_lower for c in categories)


def extract_instruction_category(instruction: Any) -> str | None:
    if not isinstance(instruction, str):
        return None
    match = _INSTRUCTION_CATEGORY_RE.search(instruction)
    return match.group(1).strip() if match else None


class TrainingDataPipeline:
    """Fetches rows from the registry and maps them to domain records."""

    def __init__(
        self,
        client: ResilientFetchClient | None = None,
        transformer: ResumeTextTransformer | None = None,
    ) -> None:
        self.client = client or ResilientFetchClient()
        self.transformer = transformer or ResumeTextTransformer()

    def _paginate(
        self,
        dataset_id: str,
        convert: Callable[[dict[str, Any]], T | None],
        limit: int,
        offset: int,
    ) -> Iterator[T]:
        """Yield up to ``limit`` converted records starting at ``offset``.

        ``convert`` returns None for rows that should be skipped. The offset
        advances by the rows the server actually returned, so a short page
        never skips records.
        """
        loaded = 0
        current_offset = offset

        while loaded < limit:
            batch_size = min(MAX_PAGE_SIZE, limit - loaded)
            try:
                page = self.client.fetch_page(dataset_id, offset=current_offset, limit=batch_size)
            except FetchError as e:
                raise DatasetLoadError(dataset_id, current_offset) from e

            if not page.rows:
                break

            for registry_row in page.rows:
                record = convert(registry_row.row)
                if record is None:
                    logger.debug("Skipped row %s of %s", registry_row.row_idx, dataset_id)
                    continue
                yield record
                loaded += 1
                if loaded >= limit:
                    break

            current_offset += len(page.rows)
            if page.num_rows_total is not None and current_offset >= page.num_rows_total:
                break

        logger.info("Loaded %d records from %s", loaded, dataset_id)

    # ------------------------------------------------------------------
    # Resumes
    # ------------------------------------------------------------------

    def load_inference_prince_resumes(
        self,
        limit: int = 1000,
        offset: int = 0,
        categories: list[str] | None = None,
    ) -> Iterator[TrainingResume]:
        """Resumes from InferencePrince555/Resume-Dataset.

        Rows look like ``{"instruction", "input", "Resume_test"}``; the job
        category is parsed out of the instruction sentence.
        """
        source = source_id(INFERENCE_PRINCE_DATASET)

        def convert(row: dict[str, Any]) -> TrainingResume | None:
            text = row.get("Resume_test")
            if not isinstance(text, str):
                return None
            category = extract_instruction_category(row.get("instruction"))
            if not matches_categories(category, categories):
                return None
            return self.transformer.transform(text, category=category, source=source)

        return self._paginate(INFERENCE_PRINCE_DATASET, convert, limit, offset)

    def resume_dataset_stats(self, limit: int = 1000) -> DatasetStats:
        """Category histogram and mean quality over the first ``limit`` resumes."""
        category_counts: dict[str, int] = {}
        total_records = 0
        total_quality = 0.0

        for resume in self.load_inference_prince_resumes(limit=limit):
            total_records += 1
            total_quality += resume.quality_score or 0.0
            category = resume.category or "Unknown"
            category_counts[category] = category_counts.get(category, 0) + 1

        return DatasetStats(
            total_records=total_records,
            category_counts=category_counts,
            avg_quality_score=total_quality / total_records if total_records else 0.0,
        )

    # ------------------------------------------------------------------
    # Job descriptions
    # ------------------------------------------------------------------

    def load_lang_uk_job_descriptions(
        self,
        limit: int = 1000,
        offset: int = 0,
        categories: list[str] | None = None,
    ) -> Iterator[JobDescription]:
        """Postings from lang-uk/recruitment-dataset-job-descriptions-english."""
        source = source_id(LANG_UK_DATASET)

        def convert(row: dict[str, Any]) -> JobDescription | None:
            domain = row.get("Primary Keyword")
            if not matches_categories(domain, categories):
                return None
            description = row.get("Long Description") or ""
            return validate_job_description({
                "title": row.get("Position") or "Unknown",
                "company": row.get("Company Name"),
                "description": description,
                "experience_years": _as_text(row.get("Exp Years")),
                "domain": domain,
                "required_skills": extract_skills_from_jd(description),
                "source": source,
            })

        return self._paginate(LANG_UK_DATASET, convert, limit, offset)

    def load_nxtgen_job_descriptions(
        self,
        limit: int = 1000,
        offset: int = 0,
        categories: list[str] | None = None,
    ) -> Iterator[JobDescription]:
        """Postings from NxtGenIntern/job_titles_and_descriptions (all IT)."""
        source = source_id(NXTGEN_DATASET)

        def convert(row: dict[str, Any]) -> JobDescription | None:
            if not matches_categories("IT", categories):
                return None
            skills_raw = row.get("Required Skills") or ""
            return validate_job_description({
                "title": row.get("Job Title") or "Unknown",
                "description": row.get("Job Description") or "",
                "required_skills": [s.strip() for s in str(skills_raw).split(",") if s.strip()],
                "domain": "IT",
                "source": source,
            })

        return self._paginate(NXTGEN_DATASET, convert, limit, offset)


def _as_text(value: Any) -> str | None:
    # "Exp Years" arrives as either "3y" or a bare number depending on the row
    if value is None:
        return None
    return str(value)
