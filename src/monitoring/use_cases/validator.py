"""Data value validator: runs every rule set for a bound (project, data set, period)."""

from __future__ import annotations

import dataclasses
import inspect
import logging
from typing import Sequence

from src.monitoring.common.models.project import (
    DataSetType,
    DataValue,
    MonitoringConfig,
    Project,
)
from src.monitoring.integrations.d2_client import D2Client
from src.monitoring.use_cases.validation_rules import (
    ActualRuleSet,
    RecurringRuleSet,
    RuleSet,
    ValidationIssue,
)

logger = logging.getLogger(__name__)

ValidationResult = dict[str, list[str]]


def group_issues(issues: Sequence[ValidationIssue]) -> ValidationResult:
    result: ValidationResult = {}
    for category, message in issues:
        result.setdefault(category, []).append(message)
    return result


class Validator:
    def __init__(self, period: str, rule_sets: Sequence[RuleSet]) -> None:
        self.period = period
        self.rule_sets = tuple(rule_sets)

    @classmethod
    async def build(
        cls,
        api: D2Client,
        project: Project,
        data_set_type: DataSetType,
        period: str,
        config: MonitoringConfig,
    ) -> "Validator":
        rule_sets = (
            await ActualRuleSet.build(api, project, data_set_type, period, config),
            await RecurringRuleSet.build(api, project, data_set_type, period, config),
        )
        logger.debug(
            "Validator built for project %s (%s, %s)", project.id, data_set_type.value, period
        )
        return cls(period, rule_sets)

    async def validate_data_value(self, data_value: DataValue) -> ValidationResult:
        """Validate a value for the bound period; an empty dict means no issues."""

        data_value = dataclasses.replace(data_value, period=self.period)
        issues: list[ValidationIssue] = []
        for rule_set in self.rule_sets:
            out = rule_set.validate(data_value)
            if inspect.isawaitable(out):
                out = await out
            issues.extend(out)
        return group_issues(issues)
