"""Probe: print the open info of a project's data set for one period.

Env vars:
- D2_BASE_URL
- D2_USERNAME / D2_PASSWORD
- D2_HTTP_TIMEOUT_SECONDS (optional) [default: 30]

The monitoring config snapshot (attribute category options per data set type)
is read from a JSON file, by default `monitoring_config.json`.

Run:
  python scripts/data_set_open_info_probe.py <project_id> 202401 --type actual
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os

from src.monitoring.common.models.project import DataSetType, MonitoringConfig
from src.monitoring.common.utils.dates import date_from_period
from src.monitoring.integrations.approval_gateway import ApprovalGateway
from src.monitoring.integrations.d2_client import D2Client
from src.monitoring.integrations.metadata_service import MetadataService
from src.monitoring.use_cases.project_data_set import ProjectDataSet


def _parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    p.add_argument("project_id")
    p.add_argument("period", help="YYYYMM")
    p.add_argument("--type", choices=[t.value for t in DataSetType], default="actual")
    p.add_argument(
        "--config",
        default=os.environ.get("MONITORING_CONFIG_PATH", "monitoring_config.json"),
    )
    p.add_argument("--debug", action="store_true")
    return p.parse_args()


async def _run(args: argparse.Namespace) -> None:
    if not os.path.exists(args.config):
        raise SystemExit(f"Config file not found: {args.config}")
    with open(args.config, "r", encoding="utf-8") as f:
        config = MonitoringConfig.from_dict(json.load(f))

    async with D2Client.from_env() as api:
        metadata = MetadataService(api)
        project = await metadata.get_project(args.project_id)
        project_data_set = ProjectDataSet(
            project,
            DataSetType(args.type),
            config=config,
            approvals=ApprovalGateway(api),
            metadata=metadata,
        )
        info = await project_data_set.get_open_info(date_from_period(args.period))

    print(
        json.dumps(
            {
                "project": project.id,
                "data_set_type": args.type,
                "period": args.period,
                "is_period_open": info.is_period_open,
                "is_data_set_reopened": info.is_data_set_reopened,
            },
            indent=2,
        )
    )


def main() -> None:
    args = _parse_args()
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)
    asyncio.run(_run(args))


if __name__ == "__main__":
    main()
