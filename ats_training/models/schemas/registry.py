"""Wire format of the datasets-server ``/rows`` endpoint."""

from typing import Any

from pydantic import BaseModel


class RegistryRow(BaseModel):
    row_idx: int | None = None
    row: dict[str, Any] = {}


class PageResponse(BaseModel):
    """One page of rows. ``features`` and other extra keys are ignored."""
    rows: list[RegistryRow]
    num_rows_total: int | None = None
    num_rows_per_page: int | None = None
