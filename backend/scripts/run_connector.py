# scripts/run_connector.py
"""
One-shot connector run from the shell (same path as POST /api/connectors/{id}/run).

    python scripts/run_connector.py <connector_id>
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from leadhub.db import init_models
from leadhub.domain.errors import LeadHubError
from leadhub.service_layer.bootstrap import build_services


async def main(connector_id: str) -> int:
    await init_models()
    services = build_services()
    try:
        report = await services.runner.run(connector_id)
    except LeadHubError as e:
        print(json.dumps({"ok": False, "error": e.message, "kind": e.kind}))
        return 1
    print(json.dumps(report.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")
    ap = argparse.ArgumentParser()
    ap.add_argument("connector_id")
    args = ap.parse_args()
    sys.exit(asyncio.run(main(args.connector_id)))
