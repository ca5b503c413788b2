"""Reporting-period lifecycle of a project's data set (reopen / reset / open info).

A data set is "reopened" when its open attributes diverge from the defaults
computed from the project dates. Approval state is tracked remotely per
period and is orthogonal to that: `reopen` un-approves only the requested
period, `reset` never touches approvals.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from src.monitoring.common.models.project import (
    DataInputPeriod,
    DataSet,
    DataSetOpenAttributes,
    DataSetType,
    MissingProjectDataError,
    MonitoringConfig,
    OrganisationUnit,
    Project,
)
from src.monitoring.common.utils.dates import (
    add_months,
    end_of_day,
    end_of_month,
    iter_months,
    period_from_date,
    start_of_day,
    start_of_month,
    whole_month_diff,
)
from src.monitoring.integrations.approval_gateway import ApprovalGateway
from src.monitoring.integrations.metadata_service import MetadataService
from src.monitoring.use_cases import period_openness

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Actual values for a month can be entered until this day of the next month.
ACTUAL_CLOSING_DAY = 6


@dataclass(frozen=True, slots=True)
class DataSetOpenInfo:
    is_period_open: bool
    is_data_set_reopened: bool


def get_default_open_attributes(
    project: Project, data_set_type: DataSetType, now: datetime
) -> DataSetOpenAttributes:
    """Open attributes a data set gets when its project is saved."""

    start_date, end_date = project.get_dates()
    months = list(iter_months(start_date, end_date))

    if data_set_type is DataSetType.TARGET:
        dips = tuple(
            DataInputPeriod(
                period=period_from_date(month),
                opening_date=start_of_month(start_date),
                closing_date=end_of_month(end_date),
            )
            for month in months
        )
        open_future_periods = max(whole_month_diff(end_date, now) + 1, 0)
    else:
        dips = tuple(
            DataInputPeriod(
                period=period_from_date(month),
                opening_date=month,
                closing_date=add_months(month, 1).replace(day=ACTUAL_CLOSING_DAY),
            )
            for month in months
        )
        open_future_periods = 1

    return DataSetOpenAttributes(
        data_input_periods=dips,
        open_future_periods=open_future_periods,
        expiry_days=0,
    )


def expand_data_input_period(dip: DataInputPeriod, now: datetime) -> DataInputPeriod:
    return DataInputPeriod(
        period=dip.period,
        opening_date=min(dip.opening_date, start_of_day(now)),
        closing_date=max(dip.closing_date, end_of_day(now)),
    )


def are_data_input_periods_equal(
    dips1: tuple[DataInputPeriod, ...] | list[DataInputPeriod],
    dips2: tuple[DataInputPeriod, ...] | list[DataInputPeriod],
) -> bool:
    """Compare ignoring order and time of day."""

    def _process(dips):
        return [
            (dip.period, dip.opening_date.date(), dip.closing_date.date())
            for dip in sorted(dips, key=lambda d: d.period)
        ]

    return _process(dips1) == _process(dips2)


def are_open_attributes_equivalent(
    default: DataSetOpenAttributes, current: DataSetOpenAttributes | DataSet
) -> bool:
    """`current` may be a stored data set, whose counts are not range-checked."""

    return (
        # openFuturePeriods depends on the date defaults were computed at, so
        # only require the current value to be at least the expected one.
        default.open_future_periods <= current.open_future_periods
        and default.expiry_days == current.expiry_days
        and are_data_input_periods_equal(default.data_input_periods, current.data_input_periods)
    )


class ProjectDataSet:
    """Lifecycle operations on one data set (target or actual) of a project."""

    def __init__(
        self,
        project: Project,
        data_set_type: DataSetType,
        *,
        config: MonitoringConfig,
        approvals: ApprovalGateway,
        metadata: MetadataService,
        clock: Clock = datetime.now,
    ) -> None:
        self.project = project
        self.data_set_type = data_set_type
        self.config = config
        self._approvals = approvals
        self._metadata = metadata
        self._clock = clock
        self.data_set: DataSet | None = project.data_sets.get(data_set_type)

    def get_data_set(self) -> DataSet:
        if not self.data_set:
            raise MissingProjectDataError("No dataset")
        return self.data_set

    def get_org_unit(self) -> OrganisationUnit:
        if not self.project.org_unit:
            raise MissingProjectDataError("No org unit")
        return self.project.org_unit

    def get_attribute_option_combo_id(self) -> str:
        category_option = self.config.category_options.get(self.data_set_type)
        if not category_option or not category_option.category_option_combos:
            raise MissingProjectDataError("Cannot get attribute option combo")
        return category_option.category_option_combos[0]

    def get_default_open_attributes(self, now: datetime | None = None) -> DataSetOpenAttributes:
        return get_default_open_attributes(self.project, self.data_set_type, now or self._clock())

    async def reopen(self, period: str, now: datetime | None = None) -> Project:
        """Open every period of the data set and un-approve only `period`."""

        data_set = self.get_data_set()
        self.get_org_unit()
        self.get_attribute_option_combo_id()
        now = now or self._clock()
        start_date, end_date = self.project.get_dates()
        default = self.get_default_open_attributes(now)

        open_attributes = DataSetOpenAttributes(
            data_input_periods=tuple(
                expand_data_input_period(dip, now) for dip in default.data_input_periods
            ),
            open_future_periods=max(whole_month_diff(end_date, start_date), 0) + 1,
            expiry_days=0,
        )
        logger.info(
            "Reopening %s data set %s of project %s (period %s)",
            self.data_set_type.value,
            data_set.id,
            self.project.id,
            period,
        )
        await self._metadata.update_data_set(data_set, open_attributes)
        await self.set_approval_state(period, False)
        return await self._metadata.get_project(self.project.id)

    async def reset(self, now: datetime | None = None) -> Project:
        """Restore the default open attributes; approvals stay as they are."""

        data_set = self.get_data_set()
        self.get_org_unit()
        default = self.get_default_open_attributes(now)
        logger.info(
            "Resetting %s data set %s of project %s",
            self.data_set_type.value,
            data_set.id,
            self.project.id,
        )
        await self._metadata.update_data_set(data_set, default)
        return await self._metadata.get_project(self.project.id)

    async def set_approval_state(self, period: str, approve: bool) -> None:
        await self._approvals.set_approval_state(
            data_set_id=self.get_data_set().id,
            period=period,
            org_unit_id=self.get_org_unit().id,
            attribute_option_combo_id=self.get_attribute_option_combo_id(),
            approve=approve,
        )

    async def has_approved_data(self, period: str) -> bool:
        return await self._approvals.is_accepted(
            data_set_id=self.get_data_set().id,
            period=period,
            org_unit_id=self.get_org_unit().id,
            attribute_option_combo_id=self.get_attribute_option_combo_id(),
        )

    async def is_open(self, date: datetime, now: datetime | None = None) -> bool:
        data_set = self.get_data_set()
        self.get_org_unit()
        return await period_openness.is_open(
            data_set,
            date,
            now=now or self._clock(),
            approval_lookup=self.has_approved_data,
        )

    def is_reopened(self, now: datetime | None = None) -> bool:
        default = self.get_default_open_attributes(now)
        return not are_open_attributes_equivalent(default, self.get_data_set())

    async def get_open_info(self, date: datetime, now: datetime | None = None) -> DataSetOpenInfo:
        now = now or self._clock()
        is_period_open = await self.is_open(date, now)
        return DataSetOpenInfo(
            is_period_open=is_period_open,
            is_data_set_reopened=self.is_reopened(now),
        )
