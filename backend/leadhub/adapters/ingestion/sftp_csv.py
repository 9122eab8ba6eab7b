# leadhub/adapters/ingestion/sftp_csv.py
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from ...domain.errors import TransportError
from ...domain.types import SftpCsvConfig
from ..clients.sftp import SftpClient
from .base import RawRecord, decode_text, records_from_csv_text


@dataclass
class SftpCsvAdapter:
    """
    CSV file pulled over SFTP.

    config.local_mock_path (offline/dev) always wins over the remote host.
    """

    client_factory: Callable[[], SftpClient]

    async def fetch(self, config: SftpCsvConfig) -> list[RawRecord]:
        if config.local_mock_path:
            text = await self._read_local(Path(config.local_mock_path))
        else:
            text = await self._read_remote(config)
        return records_from_csv_text(text)

    @staticmethod
    async def _read_local(path: Path) -> str:
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8", errors="replace")
        except OSError as e:
            raise TransportError(f"cannot read {path}: {e.strerror or e}") from e

    async def _read_remote(self, config: SftpCsvConfig) -> str:
        client = self.client_factory()
        try:
            await client.connect(
                host=config.host,
                port=config.port,
                username=config.username,
                password=config.password,
                private_key=config.private_key,
            )
            data = await client.get(config.remote_path)
        finally:
            await client.close()
        return decode_text(data)
