# leadhub/service_layer/unit_of_work.py
from __future__ import annotations

import asyncio

from ..adapters.repos.store import LeadStore


class UnitOfWork:
    """
    Serializes read-merge-write cycles against a whole-collection store.

    Plain reads go straight to `uow.store`; anything that loads a collection,
    changes it and saves it back runs inside `async with uow as store:`.
    One lock covers both collections, so two connector runs (or a run and a
    connector edit) can never interleave their writes.
    """

    def __init__(self, store: LeadStore) -> None:
        self.store = store
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> LeadStore:
        await self._lock.acquire()
        return self.store

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self._lock.release()