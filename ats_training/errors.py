"""Exception hierarchy for the training-data pipeline.

Only failures that would silently shrink a dataset are raised to the
caller. Per-record problems (transform rejections, schema-invalid rows,
per-pair scoring errors) are logged and skipped where they happen.
"""


class PipelineError(Exception):
    """Base class for all pipeline errors."""


class FetchError(PipelineError):
    """A registry request failed after exhausting its retry budget."""

    def __init__(self, message: str, dataset_id: str = "", attempts: int = 0) -> None:
        super().__init__(message)
        self.dataset_id = dataset_id
        self.attempts = attempts


class NonRetriableFetchError(FetchError):
    """The registry answered with a 4xx status that retrying cannot fix."""

    def __init__(self, message: str, status_code: int, dataset_id: str = "") -> None:
        super().__init__(message, dataset_id=dataset_id, attempts=1)
        self.status_code = status_code


class DatasetLoadError(PipelineError):
    """A page fetch failed mid-stream; the whole load is aborted."""

    def __init__(self, dataset_id: str, offset: int) -> None:
        super().__init__(f"Failed to load dataset {dataset_id!r} at offset {offset}")
        self.dataset_id = dataset_id
        self.offset = offset


class CacheCorruptionError(PipelineError):
    """A cache file exists but cannot be parsed into domain records."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Corrupt cache file {path}: {reason}")
        self.path = path
        self.reason = reason


class DataNotLoadedError(PipelineError):
    """Ground-truth generation was requested before load_data() filled the pools."""
