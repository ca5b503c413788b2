"""Project and data set models read by the period lifecycle engine.

These are plain snapshots of platform metadata. The engine never persists them
directly: writes go through the metadata service.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class MissingProjectDataError(ValueError):
    """A lifecycle operation was invoked on a project lacking required metadata."""


class DataSetType(str, Enum):
    TARGET = "target"
    ACTUAL = "actual"

    @property
    def code(self) -> str:
        return self.value.upper()


@dataclass(frozen=True, slots=True)
class DataInputPeriod:
    period: str
    opening_date: datetime
    closing_date: datetime


@dataclass(frozen=True, slots=True)
class DataSetOpenAttributes:
    data_input_periods: tuple[DataInputPeriod, ...]
    open_future_periods: int
    expiry_days: int | None = 0

    def __post_init__(self) -> None:
        if self.open_future_periods < 0:
            raise ValueError("open_future_periods must be >= 0")
        if self.expiry_days is not None and self.expiry_days < 0:
            raise ValueError("expiry_days must be >= 0")
        _check_unique_periods(self.data_input_periods)


@dataclass(frozen=True, slots=True)
class DataSet:
    id: str
    data_input_periods: tuple[DataInputPeriod, ...]
    open_future_periods: int
    expiry_days: int | None = 0
    code: str | None = None

    def __post_init__(self) -> None:
        _check_unique_periods(self.data_input_periods)

    @property
    def open_attributes(self) -> DataSetOpenAttributes:
        return DataSetOpenAttributes(
            data_input_periods=self.data_input_periods,
            open_future_periods=self.open_future_periods,
            expiry_days=self.expiry_days,
        )

    def get_data_input_period(self, period: str) -> DataInputPeriod | None:
        for dip in self.data_input_periods:
            if dip.period == period:
                return dip
        return None


@dataclass(frozen=True, slots=True)
class OrganisationUnit:
    id: str
    path: str = ""
    name: str = ""


@dataclass(frozen=True, slots=True)
class Project:
    id: str
    name: str = ""
    start_date: datetime | None = None
    end_date: datetime | None = None
    org_unit: OrganisationUnit | None = None
    data_sets: dict[DataSetType, DataSet] = field(default_factory=dict)

    def get_dates(self) -> tuple[datetime, datetime]:
        if not self.start_date or not self.end_date:
            raise MissingProjectDataError("Missing dates")
        return self.start_date, self.end_date


@dataclass(frozen=True, slots=True)
class CategoryOption:
    """Attribute category option tagging a data set's values (Target / Actual)."""

    id: str
    category_option_combos: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class MonitoringConfig:
    """Pre-fetched metadata snapshot the engine reads instead of querying it."""

    category_options: dict[DataSetType, CategoryOption]
    new_recurring_category_combo_id: str | None = None
    new_category_option_id: str | None = None
    recurring_category_option_id: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "MonitoringConfig":
        options = raw.get("categoryOptions") or {}
        category_options: dict[DataSetType, CategoryOption] = {}
        for ds_type in DataSetType:
            opt = options.get(ds_type.value)
            if not isinstance(opt, dict):
                continue
            combos = [
                c["id"] if isinstance(c, dict) else str(c)
                for c in (opt.get("categoryOptionCombos") or [])
            ]
            category_options[ds_type] = CategoryOption(
                id=str(opt.get("id") or ""),
                category_option_combos=tuple(combos),
            )

        new_recurring = raw.get("newRecurring") or {}
        return cls(
            category_options=category_options,
            new_recurring_category_combo_id=new_recurring.get("categoryComboId"),
            new_category_option_id=new_recurring.get("newCategoryOptionId"),
            recurring_category_option_id=new_recurring.get("recurringCategoryOptionId"),
        )


@dataclass(frozen=True, slots=True)
class DataValue:
    """A single submitted value; `period` is stamped by the validator when unset."""

    data_element_id: str
    org_unit_id: str
    value: str
    category_option_combo_id: str
    attribute_option_combo_id: str | None = None
    period: str | None = None


def _check_unique_periods(dips: tuple[DataInputPeriod, ...]) -> None:
    seen: set[str] = set()
    for dip in dips:
        if dip.period in seen:
            raise ValueError(f"Duplicate data input period: {dip.period}")
        seen.add(dip.period)
