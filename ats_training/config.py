import os

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


def _parse_categories() -> list[str] | None:
    """Parse DEFAULT_CATEGORIES env var as comma-separated string or JSON list."""
    raw = os.environ.get("DEFAULT_CATEGORIES")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [c.strip() for c in raw.split(",") if c.strip()]


class Settings(BaseSettings):
    hf_api_token: str = Field(
        default="",
        validation_alias=AliasChoices("HUGGINGFACE_API_TOKEN", "HF_API_TOKEN"),
    )
    datasets_api_base: str = "https://datasets-server.huggingface.co"

    # Fetch retry policy
    fetch_timeout_seconds: float = 30.0
    fetch_max_attempts: int = 3
    fetch_retry_on_429: bool = True

    # Ground-truth generation
    cache_dir: str = "training/cache"  # resumes.json / job-descriptions.json live here
    resume_limit: int = 100
    jd_limit: int = 200
    pairs_per_resume: int = 3
    score_delay_seconds: float = 0.1  # pause between ScoreEngine calls
    default_categories: list[str] = []

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


_categories_override = _parse_categories()
settings = Settings(**{"default_categories": _categories_override} if _categories_override else {})
