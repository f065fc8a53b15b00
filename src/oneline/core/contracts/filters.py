"""User-selected view settings: the date-range filter and the sort direction."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DateFilterOption = Literal["all", "month", "halfYear", "year", "custom"]

#: Relative options and the number of calendar months they look back.
RELATIVE_MONTHS: dict[str, int] = {"month": 1, "halfYear": 6, "year": 12}


class SortDirection(str, Enum):
    """`asc` lists the oldest event first, `desc` the newest."""

    ASC = "asc"
    DESC = "desc"

    def toggled(self) -> SortDirection:
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


class DateFilterConfig(BaseModel):
    """Tagged date-range choice.

    ``start_date``/``end_date`` are only read for ``option="custom"``; either
    may be missing, leaving that side of the range open. Relative options
    derive their start bound from "today" at evaluation time.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    option: DateFilterOption = Field(default="all")
    start_date: date | None = Field(default=None, alias="startDate")
    end_date: date | None = Field(default=None, alias="endDate")

    @property
    def is_custom(self) -> bool:
        return self.option == "custom"

    @classmethod
    def custom(cls, start: date | None = None, end: date | None = None) -> DateFilterConfig:
        return cls(option="custom", start_date=start, end_date=end)


__all__ = ["DateFilterConfig", "DateFilterOption", "RELATIVE_MONTHS", "SortDirection"]
