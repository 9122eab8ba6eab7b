# leadhub/adapters/ingestion/dispatch.py
from __future__ import annotations

from typing import Any, Callable

from ...domain.types import ApiJsonConfig, Connector, CsvUrlConfig, SftpCsvConfig
from ..clients.http import HttpGet, HttpxGet
from ..clients.sftp import AsyncsshSftpClient, SftpClient
from .api_json import ApiJsonAdapter
from .base import SourceAdapter
from .csv_url import CsvUrlAdapter
from .sftp_csv import SftpCsvAdapter


class SourceFetcher:
    """
    Picks the adapter for a connector's type and runs it.

    The typed config is resolved first, so an unknown type or a malformed
    config fails with ConfigurationError before any I/O.
    """

    def __init__(
        self,
        *,
        http_get: HttpGet | None = None,
        sftp_client_factory: Callable[[], SftpClient] | None = None,
    ) -> None:
        http = http_get or HttpxGet.from_settings()
        self.csv_url: SourceAdapter[CsvUrlConfig] = CsvUrlAdapter(http_get=http)
        self.api_json: SourceAdapter[ApiJsonConfig] = ApiJsonAdapter(http_get=http)
        self.sftp_csv: SourceAdapter[SftpCsvConfig] = SftpCsvAdapter(client_factory=sftp_client_factory or AsyncsshSftpClient)

    async def fetch(self, connector: Connector) -> list[Any]:
        config = connector.source_config()

        if isinstance(config, CsvUrlConfig):
            return await self.csv_url.fetch(config)
        if isinstance(config, ApiJsonConfig):
            return await self.api_json.fetch(config)
        if isinstance(config, SftpCsvConfig):
            return await self.sftp_csv.fetch(config)

        raise AssertionError(f"unhandled config variant: {type(config).__name__}")
