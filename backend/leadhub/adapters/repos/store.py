# leadhub/adapters/repos/store.py
from __future__ import annotations

import copy
import json
from datetime import timezone
from typing import Protocol, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ...domain.types import Connector, FieldMapping, Lead, RunStatus, RunSummary
from ...models import ConnectorRow, LeadRow


class LeadStore(Protocol):
    """
    Whole-collection persistence: every save replaces the stored set.
    Last writer wins; callers serialize their own read-merge-write.
    """

    async def load_leads(self) -> list[Lead]: ...
    async def save_leads(self, leads: Sequence[Lead]) -> None: ...
    async def load_connectors(self) -> list[Connector]: ...
    async def save_connectors(self, connectors: Sequence[Connector]) -> None: ...


class InMemoryStore:
    """Process-local store. Copies in and out so callers never share mutable state with it."""

    def __init__(self, *, leads: Sequence[Lead] = (), connectors: Sequence[Connector] = ()) -> None:
        self._leads: list[Lead] = copy.deepcopy(list(leads))
        self._connectors: list[Connector] = copy.deepcopy(list(connectors))

    async def load_leads(self) -> list[Lead]:
        return copy.deepcopy(self._leads)

    async def save_leads(self, leads: Sequence[Lead]) -> None:
        self._leads = copy.deepcopy(list(leads))

    async def load_connectors(self) -> list[Connector]:
        return copy.deepcopy(self._connectors)

    async def save_connectors(self, connectors: Sequence[Connector]) -> None:
        self._connectors = copy.deepcopy(list(connectors))


def _utc(dt):
    # sqlite hands back naive datetimes
    if dt is None or dt.tzinfo is not None:
        return dt
    return dt.replace(tzinfo=timezone.utc)


def _lead_to_row(lead: Lead, position: int) -> LeadRow:
    return LeadRow(
        id=lead.id,
        position=position,
        full_name=lead.full_name,
        street=lead.street,
        unit=lead.unit,
        city=lead.city,
        state=lead.state,
        zip=lead.zip,
        county=lead.county,
        phone=lead.phone,
        dob=lead.dob,
        lead_source=lead.lead_source,
        provider=lead.provider,
        connector_id=lead.connector_id,
        stage=lead.stage,
        imported_at=lead.imported_at,
    )


def _row_to_lead(row: LeadRow) -> Lead:
    return Lead(
        id=row.id,
        full_name=row.full_name,
        street=row.street,
        unit=row.unit or "",
        city=row.city,
        state=row.state,
        zip=row.zip,
        county=row.county or "",
        phone=row.phone or "",
        dob=row.dob or "",
        lead_source=row.lead_source or "",
        provider=row.provider or "",
        connector_id=row.connector_id or "",
        stage=row.stage,
        imported_at=_utc(row.imported_at),
    )


def _connector_to_row(c: Connector, position: int) -> ConnectorRow:
    return ConnectorRow(
        id=c.id,
        position=position,
        name=c.name,
        type=c.type,
        config_json=json.dumps(c.config),
        mapping_json=json.dumps(c.mapping.to_dict()),
        schedule_minutes=c.schedule_minutes,
        enabled=c.enabled,
        created_at=c.created_at,
        last_run_at=c.last_run_at,
        last_run_status=c.last_run_status.value,
        summary_json=json.dumps(c.last_run_summary.to_dict()) if c.last_run_summary else None,
        last_run_error=c.last_run_error,
    )


def _row_to_connector(row: ConnectorRow) -> Connector:
    try:
        status = RunStatus(row.last_run_status or "none")
    except ValueError:
        status = RunStatus.none
    return Connector(
        id=row.id,
        name=row.name,
        type=row.type,
        config=json.loads(row.config_json or "{}"),
        mapping=FieldMapping.from_dict(json.loads(row.mapping_json or "{}")),
        schedule_minutes=row.schedule_minutes or 0,
        enabled=bool(row.enabled),
        created_at=_utc(row.created_at),
        last_run_at=_utc(row.last_run_at),
        last_run_status=status,
        last_run_summary=RunSummary.from_dict(json.loads(row.summary_json)) if row.summary_json else None,
        last_run_error=row.last_run_error or "",
    )


class SqlAlchemyStore:
    """
    LeadStore over two SQLAlchemy tables. Each save is a single transaction
    (delete all, insert all), so readers see either the old or the new set.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self.session_maker = session_maker

    async def load_leads(self) -> list[Lead]:
        async with self.session_maker() as session:
            rows = (await session.execute(select(LeadRow).order_by(LeadRow.position.asc()))).scalars().all()
            return [_row_to_lead(r) for r in rows]

    async def save_leads(self, leads: Sequence[Lead]) -> None:
        async with self.session_maker() as session:
            async with session.begin():
                await session.execute(delete(LeadRow))
                session.add_all([_lead_to_row(lead, i) for i, lead in enumerate(leads)])

    async def load_connectors(self) -> list[Connector]:
        async with self.session_maker() as session:
            rows = (
                (await session.execute(select(ConnectorRow).order_by(ConnectorRow.position.asc())))
                .scalars()
                .all()
            )
            return [_row_to_connector(r) for r in rows]

    async def save_connectors(self, connectors: Sequence[Connector]) -> None:
        async with self.session_maker() as session:
            async with session.begin():
                await session.execute(delete(ConnectorRow))
                session.add_all([_connector_to_row(c, i) for i, c in enumerate(connectors)])
