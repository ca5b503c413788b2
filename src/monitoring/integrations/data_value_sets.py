"""Read-only access to stored data values (`/dataValueSets`)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from src.monitoring.integrations.d2_client import D2Client


@dataclass(frozen=True, slots=True)
class StoredDataValue:
    data_element_id: str
    period: str
    org_unit_id: str
    category_option_combo_id: str
    attribute_option_combo_id: str | None
    value: str


def parse_number(value: str | None) -> Decimal | None:
    """Parse a numeric data value; blank or non-numeric values yield None."""

    s = (value or "").strip()
    if not s:
        return None
    try:
        return Decimal(s)
    except InvalidOperation:
        return None


async def get_data_values(
    api: D2Client,
    *,
    data_set_id: str,
    org_unit_id: str,
    period: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> list[StoredDataValue]:
    """Fetch values for one data set and org unit, by period or date range."""

    params: dict[str, Any] = {"dataSet": data_set_id, "orgUnit": org_unit_id}
    if period:
        params["period"] = period
    if start_date:
        params["startDate"] = start_date.strftime("%Y-%m-%d")
    if end_date:
        params["endDate"] = end_date.strftime("%Y-%m-%d")
    if "period" not in params and ("startDate" not in params or "endDate" not in params):
        raise ValueError("Either period or start_date/end_date is required")

    raw = await api.get("/dataValueSets", params=params) or {}
    out: list[StoredDataValue] = []
    for dv in raw.get("dataValues") or []:
        if not isinstance(dv, dict):
            continue
        out.append(
            StoredDataValue(
                data_element_id=str(dv.get("dataElement") or ""),
                period=str(dv.get("period") or ""),
                org_unit_id=str(dv.get("orgUnit") or ""),
                category_option_combo_id=str(dv.get("categoryOptionCombo") or ""),
                attribute_option_combo_id=dv.get("attributeOptionCombo"),
                value=str(dv.get("value") or ""),
            )
        )
    return out
