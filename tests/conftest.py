"""Shared test configuration, pytest markers and a fake dataset registry."""

import httpx
import pytest

from ats_training.models.schemas import JobDescription, TrainingResume
from ats_training.services.fetch_client import ResilientFetchClient


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "network: talks to the real Hugging Face datasets-server (slow)"
    )


SAMPLE_RESUME_TEXT = """PROFESSIONAL SUMMARY
Built systems.

EXPERIENCE
Senior Engineer, Acme Corp
Jan 2020 - Present
- Led a team of 5 engineers
- Reduced latency by 30%

SKILLS
Python, SQL, Leadership"""

# Scores about 0.5 on the quality scale
RICH_RESUME_TEXT = """Jordan Smith
Austin, TX

PROFESSIONAL SUMMARY
Financial analyst with 7+ years of experience building forecasting models and
leading monthly close for multi-entity organizations across retail and SaaS.

EXPERIENCE
Senior Financial Analyst | GLOBEX | Austin, TX | Mar 2019 - Present
• Built a driver-based forecasting model covering $40M in revenue
• Cut month-end close from 10 to 6 days by automating reconciliations
• Partnered with sales leadership on quarterly territory planning

Financial Analyst | INITECH | 2016 - 2019
• Produced weekly variance reports for 14 cost centers
• Migrated 200+ spreadsheets into a shared reporting database

EDUCATION
Bachelor of Science in Finance
University of Texas at Austin, 2016

SKILLS
Excel, SQL, Forecasting, Budgeting; Tableau | Financial Analysis, Excel

CERTIFICATIONS
Certified Management Accountant (CMA) 2021
"""


LONG_DESCRIPTION = (
    "We are hiring a backend developer to build data services in Python and SQL. "
    "Experience with Docker, AWS and agile delivery is expected, along with strong "
    "communication skills."
)


class FakeRegistry:
    """In-memory stand-in for the datasets-server ``/rows`` endpoint.

    ``datasets`` maps a dataset id to its full list of rows. Every request
    is recorded so tests can assert on pagination and laziness.
    """

    def __init__(self, datasets: dict[str, list[dict]], report_total: bool = True):
        self.datasets = datasets
        self.report_total = report_total
        self.requests: list[httpx.Request] = []
        self.fail_at_offset: dict[str, int] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        dataset = request.url.params["dataset"]
        offset = int(request.url.params["offset"])
        length = int(request.url.params["length"])

        if self.fail_at_offset.get(dataset) == offset:
            return httpx.Response(503)

        rows = self.datasets.get(dataset, [])
        page = rows[offset:offset + length]
        body = {
            "features": [],
            "rows": [{"row_idx": offset + i, "row": row} for i, row in enumerate(page)],
            "num_rows_per_page": length,
        }
        if self.report_total:
            body["num_rows_total"] = len(rows)
        return httpx.Response(200, json=body)

    def offsets(self, dataset: str) -> list[int]:
        return [
            int(r.url.params["offset"]) for r in self.requests
            if r.url.params["dataset"] == dataset
        ]

    def client(self, **kwargs) -> ResilientFetchClient:
        kwargs.setdefault("sleep", lambda _: None)
        kwargs.setdefault("max_attempts", 1)
        return ResilientFetchClient(
            api_token="",
            http_client=httpx.Client(transport=httpx.MockTransport(self.handler)),
            **kwargs,
        )


def resume_row(category: str, text: str = SAMPLE_RESUME_TEXT) -> dict:
    return {
        "instruction": f"Generate a Resume for a {category} Job",
        "input": "",
        "Resume_test": text,
    }


def lang_uk_row(position: str, domain: str, description: str = LONG_DESCRIPTION) -> dict:
    return {
        "Position": position,
        "Long Description": description,
        "Company Name": "Globex",
        "Exp Years": "3y",
        "Primary Keyword": domain,
        "English Level": "upper",
    }


def nxtgen_row(title: str, skills: str = "Python, SQL") -> dict:
    return {
        "Job Title": title,
        "Required Skills": skills,
        "Job Description": LONG_DESCRIPTION,
    }


@pytest.fixture
def sleeps():
    """Recorder to inject as ``sleep``; collects requested delays."""
    return []


@pytest.fixture
def make_resume():
    def _make(category: str | None = "Engineer", skills=("python", "sql"), with_experience=True, **kwargs):
        experience = []
        if with_experience:
            experience = [{
                "company": "Acme Corp",
                "title": "Senior Engineer",
                "bullets": ["Led a team of 5 engineers", "Reduced latency by 30%"],
            }]
        return TrainingResume.model_validate({
            "experience": experience,
            "skills": list(skills),
            "category": category,
            **kwargs,
        })
    return _make


@pytest.fixture
def make_jd():
    def _make(domain: str | None = "IT", required_skills=(), title: str = "Backend Developer", **kwargs):
        return JobDescription.model_validate({
            "title": title,
            "description": LONG_DESCRIPTION,
            "domain": domain,
            "required_skills": list(required_skills),
            **kwargs,
        })
    return _make
