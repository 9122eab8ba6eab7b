# leadhub/service_layer/bootstrap.py
from __future__ import annotations

from dataclasses import dataclass

from ..adapters.ingestion.dispatch import SourceFetcher
from ..adapters.repos.store import LeadStore, SqlAlchemyStore
from ..db import AsyncSessionLocal
from ..jobs.scheduler import ConnectorScheduler
from .runs import ConnectorRunner
from .unit_of_work import UnitOfWork


@dataclass
class Services:
    """Everything a request handler or the scheduler process needs, wired once per process."""

    uow: UnitOfWork
    runner: ConnectorRunner
    scheduler: ConnectorScheduler


def build_services(
    *,
    store: LeadStore | None = None,
    fetcher: SourceFetcher | None = None,
    tick_seconds: int | None = None,
) -> Services:
    uow = UnitOfWork(store or SqlAlchemyStore(AsyncSessionLocal))
    runner = ConnectorRunner(uow, fetcher or SourceFetcher())
    scheduler = ConnectorScheduler(runner, tick_seconds=tick_seconds)
    return Services(uow=uow, runner=runner, scheduler=scheduler)
