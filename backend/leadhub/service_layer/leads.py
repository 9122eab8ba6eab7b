# leadhub/service_layer/leads.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

from ..config import settings
from ..domain.csv_codec import parse_csv, to_csv
from ..domain.dedup import import_batch, manual_import_connector, merge_imported
from ..domain.errors import ConfigurationError
from ..domain.query import EXPORT_HEADERS, LeadFilters, filter_leads, lead_to_csv_row, paginate
from ..domain.types import FieldMapping, Lead, LeadStage, utcnow
from .unit_of_work import UnitOfWork

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeadQueryResult:
    total_stored: int
    total_filtered: int
    batch_size: int
    batch_number: int
    items: list[Lead]


@dataclass(frozen=True)
class CsvImportReport:
    fetched: int
    imported: int
    duplicates: int
    invalid: int


async def query_leads(
    uow: UnitOfWork,
    filters: LeadFilters,
    *,
    batch_size: int | None = None,
    batch_number: int = 1,
    now: datetime | None = None,
) -> LeadQueryResult:
    size = max(1, batch_size if batch_size is not None else settings.DEFAULT_BATCH_SIZE)
    page = max(1, batch_number)
    leads = await uow.store.load_leads()
    filtered = filter_leads(leads, filters, now)
    return LeadQueryResult(
        total_stored=len(leads),
        total_filtered=len(filtered),
        batch_size=size,
        batch_number=page,
        items=paginate(filtered, size, page),
    )


def leads_to_csv(leads: Iterable[Lead], now: datetime | None = None) -> str:
    return to_csv(EXPORT_HEADERS, (lead_to_csv_row(lead, now) for lead in leads))


async def export_leads_csv(
    uow: UnitOfWork,
    filters: LeadFilters,
    *,
    batch_size: int | None = None,
    batch_number: int = 1,
    now: datetime | None = None,
) -> str:
    result = await query_leads(uow, filters, batch_size=batch_size, batch_number=batch_number, now=now)
    return leads_to_csv(result.items, now)


async def mark_mailed(uow: UnitOfWork, lead_ids: Iterable[str]) -> int:
    """READY -> MAILED for the given ids; other stages are left alone. Returns the number changed."""
    wanted = {str(i) for i in lead_ids}
    if not wanted:
        raise ConfigurationError("leadIds array is required")

    async with uow as store:
        leads = await store.load_leads()
        updated = 0
        for idx, lead in enumerate(leads):
            if lead.id in wanted and lead.stage == LeadStage.READY.value:
                leads[idx] = lead.with_stage(LeadStage.MAILED)
                updated += 1
        if updated:
            await store.save_leads(leads)

    log.info("mark-mailed requested=%d updated=%d", len(wanted), updated)
    return updated


async def import_csv_text(
    uow: UnitOfWork,
    csv_text: str,
    mapping: dict[str, Any] | None,
    *,
    provider_name: str | None = None,
) -> CsvImportReport:
    """
    Operator-pasted CSV through the same transform/dedup path as a connector run.
    """
    field_mapping = FieldMapping.from_dict(mapping) if mapping is not None else FieldMapping()
    field_mapping.require_complete()
    if not csv_text:
        raise ConfigurationError("csvText is required")

    connector = manual_import_connector((provider_name or "").strip() or settings.MANUAL_IMPORT_PROVIDER, field_mapping)
    raw_records = parse_csv(csv_text).records

    async with uow as store:
        leads = await store.load_leads()
        result = import_batch(connector, leads, raw_records, now=utcnow())
        if result.imported:
            await store.save_leads(merge_imported(leads, result.imported))

    report = CsvImportReport(
        fetched=len(raw_records),
        imported=len(result.imported),
        duplicates=result.duplicates,
        invalid=result.invalid,
    )
    log.info("manual csv import provider=%r %s", connector.name, report)
    return report
