# leadhub/adapters/clients/sftp.py
from __future__ import annotations

from typing import Protocol

import asyncssh

from ...config import settings
from ...domain.errors import TransportError


class SftpClient(Protocol):
    async def connect(
        self,
        *,
        host: str,
        port: int,
        username: str,
        password: str | None = None,
        private_key: str | None = None,
    ) -> None: ...

    async def get(self, remote_path: str) -> bytes: ...

    async def close(self) -> None: ...


class AsyncsshSftpClient:
    """
    One SFTP session per instance: connect -> get -> close.

    close() is safe to call on a client that never connected.
    """

    def __init__(self, *, verify_host_keys: bool | None = None) -> None:
        self._verify = settings.SFTP_VERIFY_HOST_KEYS if verify_host_keys is None else verify_host_keys
        self._conn: asyncssh.SSHClientConnection | None = None
        self._sftp: asyncssh.SFTPClient | None = None

    async def connect(
        self,
        *,
        host: str,
        port: int,
        username: str,
        password: str | None = None,
        private_key: str | None = None,
    ) -> None:
        options: dict[str, object] = {"port": port, "username": username}
        if password:
            options["password"] = password
        if private_key:
            try:
                options["client_keys"] = [asyncssh.import_private_key(private_key)]
            except asyncssh.KeyImportError as e:
                raise TransportError(f"sftp private key for {host} is unreadable: {e}") from e
        if not self._verify:
            options["known_hosts"] = None

        try:
            self._conn = await asyncssh.connect(host, **options)
            self._sftp = await self._conn.start_sftp_client()
        except (asyncssh.Error, OSError) as e:
            raise TransportError(f"sftp connect to {host}:{port} failed: {e}") from e

    async def get(self, remote_path: str) -> bytes:
        if self._sftp is None:
            raise TransportError("sftp client is not connected")
        try:
            async with self._sftp.open(remote_path, "rb") as f:
                return await f.read()
        except (asyncssh.Error, OSError) as e:
            raise TransportError(f"sftp get {remote_path} failed: {e}") from e

    async def close(self) -> None:
        if self._sftp is not None:
            self._sftp.exit()
            self._sftp = None
        if self._conn is not None:
            self._conn.close()
            await self._conn.wait_closed()
            self._conn = None
