"""Rule sets applied to a submitted data value.

Each rule set is built in two phases: `await RuleSet.build(...)` fetches the
reference data it needs (and fails if it cannot), then `validate(data_value)`
returns zero or more `(category, message)` issues. Issues are data, not errors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Awaitable, Protocol, Union

from src.monitoring.common.models.project import (
    DataSet,
    DataSetType,
    DataValue,
    MissingProjectDataError,
    MonitoringConfig,
    Project,
)
from src.monitoring.common.utils.dates import add_months, date_from_period, end_of_month
from src.monitoring.integrations.d2_client import D2Client
from src.monitoring.integrations.data_value_sets import get_data_values, parse_number

ValidationIssue = tuple[str, str]

ACTUAL_TARGET_CATEGORY = "actual-target"
RECURRING_CATEGORY = "recurring"


class RuleSet(Protocol):
    category: str

    def validate(
        self, data_value: DataValue
    ) -> Union[list[ValidationIssue], Awaitable[list[ValidationIssue]]]: ...


def _require_data_set(project: Project, data_set_type: DataSetType) -> DataSet:
    data_set = project.data_sets.get(data_set_type)
    if not data_set:
        raise MissingProjectDataError("No dataset")
    return data_set


def _require_org_unit_id(project: Project) -> str:
    if not project.org_unit:
        raise MissingProjectDataError("No org unit")
    return project.org_unit.id


@dataclass(slots=True)
class ActualRuleSet:
    """Actual values must not exceed the target set for the same period."""

    targets: dict[tuple[str, str], Decimal] = field(default_factory=dict)
    category: str = ACTUAL_TARGET_CATEGORY

    @classmethod
    async def build(
        cls,
        api: D2Client,
        project: Project,
        data_set_type: DataSetType,
        period: str,
        config: MonitoringConfig,
    ) -> "ActualRuleSet":
        if data_set_type is not DataSetType.ACTUAL:
            return cls()

        target_data_set = _require_data_set(project, DataSetType.TARGET)
        org_unit_id = _require_org_unit_id(project)
        target_option = config.category_options.get(DataSetType.TARGET)
        target_aocs = set(target_option.category_option_combos) if target_option else set()

        values = await get_data_values(
            api, data_set_id=target_data_set.id, org_unit_id=org_unit_id, period=period
        )
        targets: dict[tuple[str, str], Decimal] = {}
        for dv in values:
            if target_aocs and dv.attribute_option_combo_id not in target_aocs:
                continue
            amount = parse_number(dv.value)
            if amount is None:
                continue
            key = (dv.data_element_id, dv.category_option_combo_id)
            targets[key] = targets.get(key, Decimal(0)) + amount
        return cls(targets=targets)

    def validate(self, data_value: DataValue) -> list[ValidationIssue]:
        actual = parse_number(data_value.value)
        if actual is None:
            return []
        target = self.targets.get(
            (data_value.data_element_id, data_value.category_option_combo_id)
        )
        if target is None or actual <= target:
            return []
        return [
            (
                self.category,
                f"Actual value ({actual}) should not be greater than target value ({target})",
            )
        ]


@dataclass(slots=True)
class RecurringRuleSet:
    """Recurring beneficiaries cannot outnumber the new ones of past periods."""

    api: D2Client | None = None
    data_set_id: str = ""
    org_unit_id: str = ""
    period: str = ""
    start_date: datetime | None = None
    new_option_id: str | None = None
    recurring_option_id: str | None = None
    combo_options: dict[str, frozenset[str]] = field(default_factory=dict)
    category: str = RECURRING_CATEGORY

    @classmethod
    async def build(
        cls,
        api: D2Client,
        project: Project,
        data_set_type: DataSetType,
        period: str,
        config: MonitoringConfig,
    ) -> "RecurringRuleSet":
        data_set = _require_data_set(project, data_set_type)
        org_unit_id = _require_org_unit_id(project)
        start_date, _end_date = project.get_dates()

        combo_id = config.new_recurring_category_combo_id
        if not combo_id or not config.new_category_option_id or not config.recurring_category_option_id:
            return cls(period=period)

        raw = await api.get(
            f"/categoryCombos/{combo_id}",
            params={"fields": "categoryOptionCombos[id,categoryOptions[id]]"},
        )
        combo_options: dict[str, frozenset[str]] = {}
        for coc in (raw or {}).get("categoryOptionCombos") or []:
            options = frozenset(str(co["id"]) for co in coc.get("categoryOptions") or [])
            combo_options[str(coc["id"])] = options

        return cls(
            api=api,
            data_set_id=data_set.id,
            org_unit_id=org_unit_id,
            period=period,
            start_date=start_date,
            new_option_id=config.new_category_option_id,
            recurring_option_id=config.recurring_category_option_id,
            combo_options=combo_options,
        )

    def _new_combo_for(self, recurring_options: frozenset[str]) -> str | None:
        wanted = (recurring_options - {self.recurring_option_id}) | {self.new_option_id}
        for coc_id, options in self.combo_options.items():
            if options == wanted:
                return coc_id
        return None

    async def _sum_past_new_values(self, data_value: DataValue, new_coc_id: str) -> Decimal:
        period = data_value.period or self.period
        previous_end = end_of_month(add_months(date_from_period(period), -1))
        if self.api is None or self.start_date is None or previous_end < self.start_date:
            return Decimal(0)

        values = await get_data_values(
            self.api,
            data_set_id=self.data_set_id,
            org_unit_id=self.org_unit_id,
            start_date=self.start_date,
            end_date=previous_end,
        )
        total = Decimal(0)
        for dv in values:
            if dv.data_element_id != data_value.data_element_id:
                continue
            if dv.category_option_combo_id != new_coc_id or dv.period >= period:
                continue
            if data_value.attribute_option_combo_id and (
                dv.attribute_option_combo_id != data_value.attribute_option_combo_id
            ):
                continue
            total += parse_number(dv.value) or Decimal(0)
        return total

    async def validate(self, data_value: DataValue) -> list[ValidationIssue]:
        options = self.combo_options.get(data_value.category_option_combo_id)
        if not options or self.recurring_option_id not in options:
            return []
        recurring = parse_number(data_value.value)
        if recurring is None:
            return []
        new_coc_id = self._new_combo_for(options)
        if new_coc_id is None:
            return []

        past_new = await self._sum_past_new_values(data_value, new_coc_id)
        if recurring <= past_new:
            return []
        return [
            (
                self.category,
                f"Recurring value ({recurring}) cannot be greater than the sum of "
                f"new values for past periods ({past_new})",
            )
        ]
