"""Data approval records as returned by the platform approvals API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApprovalPermissions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    may_approve: bool = Field(default=False, alias="mayApprove")
    may_unapprove: bool = Field(default=False, alias="mayUnapprove")
    may_accept: bool = Field(default=False, alias="mayAccept")
    may_unaccept: bool = Field(default=False, alias="mayUnaccept")
    may_read_data: bool = Field(default=False, alias="mayReadData")


class ApprovalRecord(BaseModel):
    """Approval state of one (data set, period, org unit, attribute option combo).

    `id` is the attribute option combo id; `level` is empty when the tuple has
    not been approved at any level.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    org_unit: str = Field(alias="ou")
    org_unit_name: Optional[str] = Field(default=None, alias="ouName")
    accepted: bool = False
    level: Dict[str, Any] = Field(default_factory=dict)
    permissions: ApprovalPermissions = Field(default_factory=ApprovalPermissions)

    def matches(self, org_unit_id: str, attribute_option_combo_id: str) -> bool:
        return self.org_unit == org_unit_id and self.id == attribute_option_combo_id


class ApprovalCommand(BaseModel):
    """Request body for the approve / unapprove endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    data_sets: List[str] = Field(alias="ds")
    periods: List[str] = Field(alias="pe")
    approvals: List[Dict[str, str]]

    @classmethod
    def for_single(
        cls, data_set_id: str, period: str, org_unit_id: str, attribute_option_combo_id: str
    ) -> "ApprovalCommand":
        return cls(
            ds=[data_set_id],
            pe=[period],
            approvals=[{"ou": org_unit_id, "aoc": attribute_option_combo_id}],
        )

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
