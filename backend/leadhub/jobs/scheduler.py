# leadhub/jobs/scheduler.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ..config import settings
from ..domain.errors import AlreadyRunningError, LeadHubError
from ..domain.types import Connector, utcnow
from ..service_layer.runs import TRIGGER_SCHEDULED, ConnectorRunner

log = logging.getLogger(__name__)

TICK_JOB_ID = "connector-tick"


def is_due(connector: Connector, now: datetime) -> bool:
    """
    Enabled, on a positive schedule, and never run or last run at least
    `schedule_minutes` ago.
    """
    if not connector.enabled:
        return False
    if connector.schedule_minutes <= 0:
        return False
    if connector.last_run_at is None:
        return True
    return now - connector.last_run_at >= timedelta(minutes=connector.schedule_minutes)


class ConnectorScheduler:
    """
    Periodic due-connector check on an APScheduler interval job.

    Usage:
        async with ConnectorScheduler(runner):
            ...  # ticks every CONNECTOR_TICK_SECONDS until the block exits
    """

    def __init__(
        self,
        runner: ConnectorRunner,
        *,
        tick_seconds: int | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.runner = runner
        self.tick_seconds = tick_seconds or settings.CONNECTOR_TICK_SECONDS
        self.clock = clock
        self._sched: AsyncIOScheduler | None = None

    async def tick(self) -> dict[str, str]:
        """
        Run every due connector, one at a time, in stored order.

        A failing connector is logged and recorded by the runner; it never
        stops the rest of the tick. Returns {connector_id: outcome}.
        """
        now = self.clock()
        connectors = await self.runner.uow.store.load_connectors()
        due = [c for c in connectors if is_due(c, now)]

        outcomes: dict[str, str] = {}
        for connector in due:
            try:
                await self.runner.run(connector.id, trigger=TRIGGER_SCHEDULED)
                outcomes[connector.id] = "ok"
            except AlreadyRunningError:
                outcomes[connector.id] = AlreadyRunningError.kind
            except LeadHubError as e:
                log.warning("scheduled run failed id=%s kind=%s: %s", connector.id, e.kind, e)
                outcomes[connector.id] = e.kind
            except Exception:
                log.exception("scheduled run crashed id=%s", connector.id)
                outcomes[connector.id] = "error"

        if due:
            log.info("scheduler tick: due=%d outcomes=%s", len(due), outcomes)
        return outcomes

    @property
    def running(self) -> bool:
        return self._sched is not None and self._sched.running

    def start(self) -> None:
        if self.running:
            return
        sched = AsyncIOScheduler()
        # one tick at a time; a late tick is folded into the next one
        sched.add_job(
            self.tick,
            "interval",
            seconds=self.tick_seconds,
            id=TICK_JOB_ID,
            max_instances=1,
            coalesce=True,
        )
        sched.start()
        self._sched = sched
        log.info("connector scheduler started tick=%ss", self.tick_seconds)

    def shutdown(self) -> None:
        if self._sched is None:
            return
        if self._sched.running:
            self._sched.shutdown(wait=False)
        self._sched = None
        log.info("connector scheduler stopped")

    async def __aenter__(self) -> "ConnectorScheduler":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
