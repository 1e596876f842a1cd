"""JSON cache and artifact files.

Reads validate every record so a truncated or hand-edited file surfaces as
``CacheCorruptionError`` instead of bad data downstream. Writes go through
a temp file in the target directory and ``os.replace`` so readers only
ever see a complete file.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from ats_training.errors import CacheCorruptionError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def read_cache(path: str | Path, model: type[M]) -> list[M] | None:
    """Load a cached list of ``model`` records; None when the file is absent."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except UnicodeDecodeError as e:
        raise CacheCorruptionError(str(path), f"not UTF-8 text ({e})") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CacheCorruptionError(str(path), f"invalid JSON ({e})") from e
    if not isinstance(data, list):
        raise CacheCorruptionError(str(path), f"expected a list, got {type(data).__name__}")

    try:
        return TypeAdapter(list[model]).validate_python(data)
    except ValidationError as e:
        raise CacheCorruptionError(
            str(path), f"{e.error_count()} schema errors"
        ) from e


def dump_records(records: list[BaseModel]) -> list[dict[str, Any]]:
    return [r.model_dump(mode="json", exclude_none=True) for r in records]


def write_json_atomic(path: str | Path, data: Any) -> None:
    """Serialize ``data`` to ``path`` without exposing a partial file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug("Wrote %s", path)
