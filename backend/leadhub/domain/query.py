# leadhub/domain/query.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from .normalize import calc_age
from .types import Lead

STAGE_ALL = "ALL"

EXPORT_HEADERS: tuple[str, ...] = (
    "Full Name",
    "Street",
    "Unit",
    "City",
    "State",
    "ZIP",
    "County",
    "Phone",
    "DOB",
    "Age",
    "Provider",
    "Stage",
    "Imported At",
)


@dataclass(frozen=True)
class LeadFilters:
    stage: str = STAGE_ALL
    state: str = ""
    county: str = ""
    zip_prefix: str = ""
    min_age: int = 0
    max_age: int = 999


def matches(lead: Lead, f: LeadFilters, now: datetime | None = None) -> bool:
    stage = (f.stage or STAGE_ALL).strip()
    if stage != STAGE_ALL and lead.stage != stage:
        return False

    state = f.state.strip().upper()
    if state and lead.state.upper() != state:
        return False

    county = f.county.strip().lower()
    if county and county not in (lead.county or "").lower():
        return False

    zip_prefix = f.zip_prefix.strip()
    if zip_prefix and not (lead.zip or "").startswith(zip_prefix):
        return False

    # Unknown age (empty / unparseable dob) always passes the age bounds.
    age = calc_age(lead.dob, now)
    if age is not None and (age < f.min_age or age > f.max_age):
        return False

    return True


def filter_leads(leads: Sequence[Lead], f: LeadFilters, now: datetime | None = None) -> list[Lead]:
    return [lead for lead in leads if matches(lead, f, now)]


def paginate(leads: Sequence[Lead], batch_size: int, batch_number: int) -> list[Lead]:
    """1-indexed page of at most `batch_size` leads; out of range => []."""
    size = max(1, int(batch_size or 1))
    page = max(1, int(batch_number or 1))
    start = (page - 1) * size
    return list(leads[start : start + size])


def lead_to_csv_row(lead: Lead, now: datetime | None = None) -> list[str]:
    age = calc_age(lead.dob, now)
    return [
        lead.full_name,
        lead.street,
        lead.unit,
        lead.city,
        lead.state,
        lead.zip,
        lead.county,
        lead.phone,
        lead.dob,
        "" if age is None else str(age),
        lead.provider,
        lead.stage,
        lead.imported_at.isoformat() if lead.imported_at else "",
    ]
