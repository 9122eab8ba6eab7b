# leadhub/domain/dedup.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable

from .normalize import normalize_dob, normalize_state, normalize_zip
from .parsing import source_value
from .types import Connector, ConnectorType, FieldMapping, Lead, LeadStage, new_id, utcnow

MANUAL_IMPORT_CONNECTOR_ID = "manual-import"


@dataclass
class ImportResult:
    imported: list[Lead] = field(default_factory=list)
    duplicates: int = 0
    invalid: int = 0


def fingerprint(lead: Lead) -> str:
    """Dedup identity: same person at the same address, regardless of source or id."""
    return "|".join(
        [
            lead.full_name.lower(),
            lead.street.lower(),
            lead.city.lower(),
            lead.state,
            lead.zip,
        ]
    )


def transform_record(record: dict[str, Any], connector: Connector, now: datetime | None = None) -> Lead | None:
    """
    Map one raw record through the connector's field mapping.

    Returns None when any required field is empty after normalization.
    """
    m = connector.mapping

    lead = Lead(
        id=new_id(),
        full_name=source_value(record, m.full_name),
        street=source_value(record, m.street),
        unit=source_value(record, m.unit),
        city=source_value(record, m.city),
        state=normalize_state(source_value(record, m.state)),
        zip=normalize_zip(source_value(record, m.zip)),
        county=source_value(record, m.county),
        phone=source_value(record, m.phone),
        dob=normalize_dob(source_value(record, m.dob)),
        lead_source=source_value(record, m.lead_source) or connector.name,
        provider=connector.name,
        connector_id=connector.id,
        stage=LeadStage.READY.value,
        imported_at=now or utcnow(),
    )

    if not (lead.full_name and lead.street and lead.city and lead.state and lead.zip):
        return None
    return lead


def import_batch(
    connector: Connector,
    existing: Iterable[Lead],
    raw_records: Iterable[Any],
    now: datetime | None = None,
) -> ImportResult:
    """
    Transform + dedup a fetched batch against `existing`.

    Pure: nothing is persisted here. `imported` keeps fetch order.
    """
    seen = {fingerprint(lead) for lead in existing}
    ts = now or utcnow()
    out = ImportResult()

    for record in raw_records:
        if not isinstance(record, dict):
            out.invalid += 1
            continue

        lead = transform_record(record, connector, now=ts)
        if lead is None:
            out.invalid += 1
            continue

        key = fingerprint(lead)
        if key in seen:
            out.duplicates += 1
            continue

        seen.add(key)
        out.imported.append(lead)

    return out


def merge_imported(existing: list[Lead], imported: list[Lead]) -> list[Lead]:
    # newest import first
    return [*imported, *existing]


def manual_import_connector(provider_name: str, mapping: FieldMapping) -> Connector:
    """Synthetic csv_url-shaped connector for operator-pasted CSV (never fetched)."""
    return Connector(
        id=MANUAL_IMPORT_CONNECTOR_ID,
        name=provider_name,
        type=ConnectorType.csv_url.value,
        mapping=mapping,
    )
