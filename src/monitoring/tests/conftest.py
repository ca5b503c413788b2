"""Shared fixtures for engine tests."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

import httpx
import pytest

from src.monitoring.common.models.project import (
    CategoryOption,
    DataSet,
    DataSetType,
    MonitoringConfig,
    OrganisationUnit,
    Project,
)
from src.monitoring.integrations.d2_client import D2Client

BASE_URL = "https://d2.example.org/api"

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def make_api() -> Callable[[Handler], D2Client]:
    def _make(handler: Handler) -> D2Client:
        return D2Client(
            base_url=BASE_URL,
            auth=("admin", "district"),
            transport=httpx.MockTransport(handler),
        )

    return _make


@pytest.fixture
def config() -> MonitoringConfig:
    return MonitoringConfig(
        category_options={
            DataSetType.TARGET: CategoryOption(id="co-target", category_option_combos=("aoc-target",)),
            DataSetType.ACTUAL: CategoryOption(id="co-actual", category_option_combos=("aoc-actual",)),
        },
        new_recurring_category_combo_id="cc-new-recurring",
        new_category_option_id="opt-new",
        recurring_category_option_id="opt-recurring",
    )


@pytest.fixture
def project() -> Project:
    """Six-month project (Jan-Jun 2024) with empty data sets."""

    return Project(
        id="project1",
        name="Project 1",
        start_date=datetime(2024, 1, 1),
        end_date=datetime(2024, 6, 30, 23, 59, 59),
        org_unit=OrganisationUnit(id="project1", path="/root1/country1/project1"),
        data_sets={
            DataSetType.TARGET: DataSet(id="dsTarget", data_input_periods=(), open_future_periods=0),
            DataSetType.ACTUAL: DataSet(id="dsActual", data_input_periods=(), open_future_periods=0),
        },
    )
