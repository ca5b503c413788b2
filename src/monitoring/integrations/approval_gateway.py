"""Data approval connector.

Approval state lives in the platform; nothing is cached here, so every call
reflects the current remote truth. Failures propagate unchanged.
"""

from __future__ import annotations

import logging

from src.monitoring.common.models.approvals import ApprovalCommand, ApprovalRecord
from src.monitoring.integrations.d2_client import D2ApiError, D2Client

logger = logging.getLogger(__name__)

APPROVALS_PATH = "/dataApprovals/categoryOptionCombos"
APPROVE_PATH = "/dataApprovals/approvals"
UNAPPROVE_PATH = "/dataApprovals/unapprovals"


class ApprovalGateway:
    def __init__(self, api: D2Client) -> None:
        self._api = api

    async def get_approvals(
        self, *, data_set_id: str, period: str, org_unit_id: str
    ) -> list[ApprovalRecord]:
        params = {"ds": data_set_id, "pe": period, "ou": org_unit_id}
        raw = await self._api.get(APPROVALS_PATH, params=params)
        if not isinstance(raw, list):
            raise ValueError(f"Unexpected approvals payload: {raw!r}")
        return [ApprovalRecord.model_validate(item) for item in raw]

    async def is_accepted(
        self,
        *,
        data_set_id: str,
        period: str,
        org_unit_id: str,
        attribute_option_combo_id: str,
    ) -> bool:
        """True when the record for this org unit and AOC exists and is accepted."""

        approvals = await self.get_approvals(
            data_set_id=data_set_id, period=period, org_unit_id=org_unit_id
        )
        for record in approvals:
            if record.matches(org_unit_id, attribute_option_combo_id):
                return record.accepted
        return False

    async def set_approval_state(
        self,
        *,
        data_set_id: str,
        period: str,
        org_unit_id: str,
        attribute_option_combo_id: str,
        approve: bool,
    ) -> None:
        path = APPROVE_PATH if approve else UNAPPROVE_PATH
        command = ApprovalCommand.for_single(
            data_set_id, period, org_unit_id, attribute_option_combo_id
        )
        logger.info(
            "%s data set %s period %s (ou=%s, aoc=%s)",
            "Approving" if approve else "Unapproving",
            data_set_id,
            period,
            org_unit_id,
            attribute_option_combo_id,
        )
        try:
            await self._api.post(path, json=command.to_payload())
        except D2ApiError as e:
            # 409: the tuple is already in the requested state.
            if e.status_code != 409:
                raise
            logger.info("Approval state already set for %s/%s: %s", data_set_id, period, e.text)
