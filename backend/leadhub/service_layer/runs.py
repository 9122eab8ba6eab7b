# leadhub/service_layer/runs.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from ..adapters.ingestion.dispatch import SourceFetcher
from ..adapters.repos.store import LeadStore
from ..domain.dedup import import_batch, merge_imported
from ..domain.errors import AlreadyRunningError, NotFoundError
from ..domain.types import Connector, RunStatus, RunSummary, utcnow
from .unit_of_work import UnitOfWork

log = logging.getLogger(__name__)

TRIGGER_MANUAL = "manual"
TRIGGER_SCHEDULED = "scheduled"


@dataclass(frozen=True)
class RunReport:
    connector_id: str
    fetched: int
    imported: int
    duplicates: int
    invalid: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": True,
            "connectorId": self.connector_id,
            "fetched": self.fetched,
            "imported": self.imported,
            "duplicates": self.duplicates,
            "invalid": self.invalid,
        }


class ConnectorRunner:
    """
    Runs one connector end to end: fetch -> transform/dedup -> merge -> bookkeeping.

    At most one run per connector id is in flight at any time; a second
    request fails fast with AlreadyRunningError and touches nothing. The merge
    and the bookkeeping write go through the shared UnitOfWork lock, so runs
    of different connectors never lose each other's updates.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        fetcher: SourceFetcher,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.uow = uow
        self.fetcher = fetcher
        self.clock = clock
        self._running: set[str] = set()

    def is_running(self, connector_id: str) -> bool:
        return connector_id in self._running

    async def run(self, connector_id: str, trigger: str = TRIGGER_MANUAL) -> RunReport:
        if connector_id in self._running:
            log.info("connector %s already running; %s run rejected", connector_id, trigger)
            raise AlreadyRunningError(connector_id)

        # claim the slot before the first await
        self._running.add(connector_id)
        try:
            connector = await self._load(connector_id)
            try:
                return await self._run(connector, trigger)
            except Exception as e:
                await self._record_failure(connector_id, e)
                raise
        finally:
            self._running.discard(connector_id)

    async def _load(self, connector_id: str) -> Connector:
        for c in await self.uow.store.load_connectors():
            if c.id == connector_id:
                return c
        raise NotFoundError("connector not found")

    async def _run(self, connector: Connector, trigger: str) -> RunReport:
        log.info("connector run start id=%s name=%r type=%s trigger=%s", connector.id, connector.name, connector.type, trigger)

        raw_records = await self.fetcher.fetch(connector)

        async with self.uow as store:
            now = self.clock()
            leads = await store.load_leads()
            result = import_batch(connector, leads, raw_records, now=now)
            if result.imported:
                await store.save_leads(merge_imported(leads, result.imported))

            summary = RunSummary(
                trigger=trigger,
                fetched=len(raw_records),
                imported=len(result.imported),
                duplicates=result.duplicates,
                invalid=result.invalid,
            )
            await self._record(store, connector.id, now, RunStatus.ok, summary=summary, error="")

        log.info(
            "connector run ok id=%s fetched=%d imported=%d duplicates=%d invalid=%d",
            connector.id,
            summary.fetched,
            summary.imported,
            summary.duplicates,
            summary.invalid,
        )
        return RunReport(
            connector_id=connector.id,
            fetched=summary.fetched,
            imported=summary.imported,
            duplicates=summary.duplicates,
            invalid=summary.invalid,
        )

    async def _record_failure(self, connector_id: str, err: Exception) -> None:
        msg = str(err) or type(err).__name__
        log.warning("connector run failed id=%s: %s", connector_id, msg)
        async with self.uow as store:
            await self._record(store, connector_id, self.clock(), RunStatus.error, error=msg)

    @staticmethod
    async def _record(
        store: LeadStore,
        connector_id: str,
        when: datetime,
        status: RunStatus,
        *,
        summary: RunSummary | None = None,
        error: str,
    ) -> None:
        # Re-read under the lock: the connector may have been edited (or
        # deleted) while the fetch was in flight.
        connectors = await store.load_connectors()
        current = next((c for c in connectors if c.id == connector_id), None)
        if current is None:
            return

        current.last_run_at = when
        current.last_run_status = status
        current.last_run_error = error
        if summary is not None:
            current.last_run_summary = summary

        await store.save_connectors(connectors)
