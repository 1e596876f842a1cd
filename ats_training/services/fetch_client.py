"""HTTP client for the Hugging Face datasets-server with bounded retries.

Every request is retried on transport errors, timeouts, 5xx, 408 and
(optionally) 429, using exponential backoff with up to 50% jitter.
Other 4xx responses fail immediately.
"""

import logging
import random
import time
from typing import Any, Callable

import httpx
from pydantic import ValidationError

from ats_training.config import settings
from ats_training.errors import FetchError, NonRetriableFetchError
from ats_training.models.schemas.registry import PageResponse

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100  # datasets-server rejects larger pages
BACKOFF_BASE_SECONDS = 0.1
BACKOFF_JITTER_RATIO = 0.5


def is_retriable_status(status_code: int, retry_on_429: bool = True) -> bool:
    """Whether a response status is worth another attempt."""
    if status_code >= 500 or status_code == 408:
        return True
    return status_code == 429 and retry_on_429


def base_delay(attempt: int) -> float:
    """Backoff before jitter for the zero-based ``attempt`` that just failed."""
    return (2 ** attempt) * BACKOFF_BASE_SECONDS


def backoff_delay(attempt: int, rng: random.Random | None = None) -> float:
    """Exponential backoff plus uniform jitter of up to half the base delay."""
    base = base_delay(attempt)
    jitter = (rng or random).uniform(0, BACKOFF_JITTER_RATIO * base)
    return base + jitter


class _RetriableStatus(Exception):
    """Internal marker for a retriable HTTP status."""

    def __init__(self, status_code: int, reason: str) -> None:
        super().__init__(f"HTTP {status_code} {reason}".strip())
        self.status_code = status_code


class ResilientFetchClient:
    """Authenticated, paginated reads against the dataset registry.

    The client holds no mutable state between calls besides the underlying
    connection pool. ``sleep`` and ``rng`` are injectable so retry timing
    can be observed in tests.
    """

    def __init__(
        self,
        api_token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_attempts: int | None = None,
        retry_on_429: bool | None = None,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self.api_token = api_token if api_token is not None else settings.hf_api_token
        self.base_url = (base_url or settings.datasets_api_base).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.fetch_timeout_seconds
        self.max_attempts = max_attempts if max_attempts is not None else settings.fetch_max_attempts
        self.retry_on_429 = retry_on_429 if retry_on_429 is not None else settings.fetch_retry_on_429
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client()
        self._sleep = sleep
        self._rng = rng

    def __enter__(self) -> "ResilientFetchClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    def fetch_page(
        self,
        dataset_id: str,
        split: str = "train",
        subset: str = "default",
        offset: int = 0,
        limit: int = MAX_PAGE_SIZE,
        *,
        timeout: float | None = None,
        max_attempts: int | None = None,
        retry_on_429: bool | None = None,
    ) -> PageResponse:
        """Fetch one page of rows, retrying transient failures."""
        params = {
            "dataset": dataset_id,
            "config": subset,
            "split": split,
            "offset": str(offset),
            "length": str(min(limit, MAX_PAGE_SIZE)),
        }
        return self._get_json(
            "/rows",
            params,
            dataset_id=dataset_id,
            timeout=timeout,
            max_attempts=max_attempts,
            retry_on_429=retry_on_429,
            parse=PageResponse.model_validate,
        )

    def get_dataset_info(self, dataset_id: str) -> int:
        """Return the number of rows in the train split (0 when unknown)."""
        data = self._get_json("/info", {"dataset": dataset_id}, dataset_id=dataset_id)
        if not isinstance(data, dict):
            return 0
        splits = (data.get("dataset_info") or {}).get("default", {}).get("splits", {})
        return int((splits.get("train") or {}).get("num_rows") or 0)

    def _get_json(
        self,
        path: str,
        params: dict[str, str],
        *,
        dataset_id: str,
        timeout: float | None = None,
        max_attempts: int | None = None,
        retry_on_429: bool | None = None,
        parse: Callable[[Any], Any] | None = None,
    ) -> Any:
        timeout = timeout if timeout is not None else self.timeout
        attempts = max(1, max_attempts if max_attempts is not None else self.max_attempts)
        retry_on_429 = retry_on_429 if retry_on_429 is not None else self.retry_on_429
        url = f"{self.base_url}{path}"

        last_error: Exception | None = None
        for attempt in range(attempts):
            try:
                response = self._client.get(
                    url, params=params, headers=self._headers(), timeout=timeout
                )
                status = response.status_code
                if status >= 400:
                    if not is_retriable_status(status, retry_on_429):
                        raise NonRetriableFetchError(
                            f"Registry error for {dataset_id}: HTTP {status} {response.reason_phrase}",
                            status_code=status,
                            dataset_id=dataset_id,
                        )
                    raise _RetriableStatus(status, response.reason_phrase)
                # Parsing stays inside the try so malformed payloads are retried
                data = response.json()
                return parse(data) if parse is not None else data
            except NonRetriableFetchError:
                raise
            # ValueError covers JSONDecodeError and UnicodeDecodeError from a bad body
            except (httpx.TransportError, httpx.DecodingError, _RetriableStatus, ValueError, ValidationError) as e:
                last_error = e
                if attempt + 1 >= attempts:
                    break
                delay = backoff_delay(attempt, self._rng)
                logger.warning(
                    "Fetch %s [%s] attempt %d/%d failed (%s); retrying in %.2fs",
                    path, dataset_id, attempt + 1, attempts, e, delay,
                )
                self._sleep(delay)

        raise FetchError(
            f"Registry request for {dataset_id} failed after {attempts} attempts: {last_error}",
            dataset_id=dataset_id,
            attempts=attempts,
        ) from last_error
