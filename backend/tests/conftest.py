# tests/conftest.py
from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from leadhub.adapters.repos.store import InMemoryStore, SqlAlchemyStore
from leadhub.domain.types import Connector, FieldMapping, Lead
from leadhub.models import Base
from leadhub.service_layer.runs import ConnectorRunner
from leadhub.service_layer.unit_of_work import UnitOfWork

NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)

CSV_MAPPING = {
    "fullName": "Name",
    "street": "Address",
    "unit": "Unit",
    "city": "City",
    "state": "State",
    "zip": "Zip",
    "county": "County",
    "phone": "Phone",
    "dob": "DOB",
}


def make_connector(**overrides: Any) -> Connector:
    base: dict[str, Any] = {
        "id": "c-1",
        "name": "County Feed",
        "type": "csv_url",
        "config": {"url": "https://feeds.example.com/leads.csv"},
        "mapping": FieldMapping.from_dict(CSV_MAPPING),
        "schedule_minutes": 60,
        "enabled": True,
    }
    base.update(overrides)
    return Connector(**base)


def make_lead(**overrides: Any) -> Lead:
    base: dict[str, Any] = {
        "id": "lead-1",
        "full_name": "A B",
        "street": "1 Main",
        "city": "X",
        "state": "OH",
        "zip": "44011",
        "stage": "READY",
        "imported_at": NOW,
    }
    base.update(overrides)
    return Lead(**base)


class FakeFetcher:
    """
    Stands in for SourceFetcher. Returns canned records per connector id, or
    raises the configured exception. `gate` lets a test hold a fetch in flight.
    """

    def __init__(self, records: dict[str, list[Any]] | None = None) -> None:
        self.records = records or {}
        self.errors: dict[str, Exception] = {}
        self.calls: list[str] = []
        self.gate: asyncio.Event | None = None
        self.entered = asyncio.Event()

    async def fetch(self, connector: Connector) -> list[Any]:
        self.calls.append(connector.id)
        self.entered.set()
        if self.gate is not None:
            await self.gate.wait()
        if connector.id in self.errors:
            raise self.errors[connector.id]
        return list(self.records.get(connector.id, []))


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow(store) -> UnitOfWork:
    return UnitOfWork(store)


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def runner(uow, fetcher) -> ConnectorRunner:
    return ConnectorRunner(uow, fetcher, clock=lambda: NOW)


@pytest.fixture
async def engine():
    """
    Fresh in-memory DB per test. StaticPool makes all connections share the same
    in-memory database for the lifetime of this engine fixture.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def async_session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=True)


@pytest.fixture
def sql_store(async_session_maker) -> SqlAlchemyStore:
    return SqlAlchemyStore(async_session_maker)
