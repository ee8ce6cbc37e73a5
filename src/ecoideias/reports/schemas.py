"""Export request schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ExportFilters(BaseModel):
    """Export filters. Empty strings mean "no filter"."""

    model_config = ConfigDict(populate_by_name=True)

    status: str | None = None
    category: str | None = None
    start_date: str | None = Field(None, alias="startDate")
    end_date: str | None = Field(None, alias="endDate")


class ExportRequest(BaseModel):
    format: Literal["csv", "json"] = "csv"
    filters: ExportFilters = Field(default_factory=ExportFilters)
