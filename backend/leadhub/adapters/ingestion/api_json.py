# leadhub/adapters/ingestion/api_json.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ...domain.errors import TransportError
from ...domain.parsing import get_nested
from ...domain.types import ApiJsonConfig
from ..clients.http import HttpGet

log = logging.getLogger(__name__)


def extract_records(payload: Any, records_path: str | None) -> list[Any]:
    """
    Accept either:
      - {"data": {"items": [...]}} with records_path="data.items"
      - a top-level list
    Anything else yields [] so a wrong path degrades to an empty run.
    """
    if records_path:
        found = get_nested(payload, records_path)
        if isinstance(found, list):
            return found
    if isinstance(payload, list):
        return payload
    return []


@dataclass
class ApiJsonAdapter:
    http_get: HttpGet

    async def fetch(self, config: ApiJsonConfig) -> list[Any]:
        resp = await self.http_get(config.url, headers=config.headers)
        try:
            payload = resp.json()
        except ValueError as e:
            raise TransportError(f"invalid JSON from {config.url}") from e

        records = extract_records(payload, config.records_path)
        if not records and config.records_path:
            log.info("api_json: recordsPath=%r matched nothing at %s", config.records_path, config.url)
        return records
