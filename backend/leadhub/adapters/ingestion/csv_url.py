# leadhub/adapters/ingestion/csv_url.py
from __future__ import annotations

from dataclasses import dataclass

from ...domain.types import CsvUrlConfig
from ..clients.http import HttpGet
from .base import RawRecord, records_from_csv_text


@dataclass
class CsvUrlAdapter:
    """Flat CSV file served over HTTP(S)."""

    http_get: HttpGet

    async def fetch(self, config: CsvUrlConfig) -> list[RawRecord]:
        resp = await self.http_get(config.url, headers=config.headers)
        return records_from_csv_text(resp.text)
