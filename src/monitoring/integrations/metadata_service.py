"""Metadata read/write adapter for projects and their data sets.

A project is stored in the platform as an organisation unit (opening/closed
dates = project dates) with two data sets whose codes end in `_TARGET` and
`_ACTUAL`.
"""

from __future__ import annotations

import logging
from typing import Any

from src.monitoring.common.models.project import (
    DataInputPeriod,
    DataSet,
    DataSetOpenAttributes,
    DataSetType,
    OrganisationUnit,
    Project,
)
from src.monitoring.common.utils.dates import parse_iso_datetime, to_iso_string
from src.monitoring.integrations.d2_client import D2Client

logger = logging.getLogger(__name__)

DATA_SET_FIELDS = (
    "id,code,openFuturePeriods,expiryDays,"
    "dataInputPeriods[period[id],openingDate,closingDate]"
)
ORG_UNIT_FIELDS = "id,name,path,openingDate,closedDate"


def data_input_period_from_payload(raw: dict[str, Any]) -> DataInputPeriod:
    period = raw.get("period")
    period_id = period.get("id") if isinstance(period, dict) else period
    return DataInputPeriod(
        period=str(period_id),
        opening_date=parse_iso_datetime(raw["openingDate"]),
        closing_date=parse_iso_datetime(raw["closingDate"]),
    )


def data_input_period_to_payload(dip: DataInputPeriod) -> dict[str, Any]:
    return {
        "period": {"id": dip.period},
        "openingDate": to_iso_string(dip.opening_date),
        "closingDate": to_iso_string(dip.closing_date),
    }


def data_set_from_payload(raw: dict[str, Any]) -> DataSet:
    dips = raw.get("dataInputPeriods") or []
    return DataSet(
        id=str(raw["id"]),
        code=raw.get("code"),
        data_input_periods=tuple(data_input_period_from_payload(d) for d in dips),
        open_future_periods=int(raw.get("openFuturePeriods") or 0),
        expiry_days=raw.get("expiryDays"),
    )


def data_set_type_from_code(code: str | None) -> DataSetType | None:
    for ds_type in DataSetType:
        if (code or "").upper().endswith(f"_{ds_type.code}"):
            return ds_type
    return None


class MetadataService:
    def __init__(self, api: D2Client) -> None:
        self._api = api

    async def update_data_set(self, data_set: DataSet, attributes: DataSetOpenAttributes) -> None:
        """Persist new open attributes, keeping every other data set property."""

        path = f"/dataSets/{data_set.id}"
        current = await self._api.get(path, params={"fields": ":owner"}) or {}
        updated = {
            **current,
            "openFuturePeriods": attributes.open_future_periods,
            "expiryDays": attributes.expiry_days,
            "dataInputPeriods": [
                data_input_period_to_payload(dip) for dip in attributes.data_input_periods
            ],
        }
        logger.info(
            "Updating data set %s: openFuturePeriods=%s expiryDays=%s periods=%d",
            data_set.id,
            attributes.open_future_periods,
            attributes.expiry_days,
            len(attributes.data_input_periods),
        )
        await self._api.put(path, json=updated)

    async def get_project(self, project_id: str) -> Project:
        org_unit_raw = await self._api.get(
            f"/organisationUnits/{project_id}", params={"fields": ORG_UNIT_FIELDS}
        )
        data_sets_raw = await self._api.get(
            "/dataSets",
            params={
                "filter": f"organisationUnits.id:eq:{project_id}",
                "fields": DATA_SET_FIELDS,
                "paging": "false",
            },
        )

        data_sets: dict[DataSetType, DataSet] = {}
        for raw in (data_sets_raw or {}).get("dataSets") or []:
            ds_type = data_set_type_from_code(raw.get("code"))
            if ds_type is None:
                logger.warning("Ignoring data set %s with unknown code %r", raw.get("id"), raw.get("code"))
                continue
            data_sets[ds_type] = data_set_from_payload(raw)

        opening = org_unit_raw.get("openingDate")
        closed = org_unit_raw.get("closedDate")
        return Project(
            id=str(org_unit_raw["id"]),
            name=str(org_unit_raw.get("name") or ""),
            start_date=parse_iso_datetime(opening) if opening else None,
            end_date=parse_iso_datetime(closed) if closed else None,
            org_unit=OrganisationUnit(
                id=str(org_unit_raw["id"]),
                path=str(org_unit_raw.get("path") or ""),
                name=str(org_unit_raw.get("name") or ""),
            ),
            data_sets=data_sets,
        )
