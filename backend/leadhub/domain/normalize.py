# leadhub/domain/normalize.py
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from dateutil import parser as date_parser

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SLASH_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_NON_DIGITS = re.compile(r"[^0-9]")
_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2001, 2, 2)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_state(value: Any) -> str:
    return _text(value).upper()[:2]


def normalize_zip(value: Any) -> str:
    """
    Canonical ZIP: 5 digits, or ZIP+4 as "12345-6789".

    Non-digits are dropped; digits beyond the 9th are discarded.
    """
    digits = _NON_DIGITS.sub("", _text(value))
    if not digits:
        return ""
    if len(digits) <= 5:
        return digits
    return f"{digits[:5]}-{digits[5:9]}"


def normalize_dob(value: Any) -> str:
    """
    Best-effort date-of-birth -> ISO "YYYY-MM-DD".

    Accepts ISO as-is, US "M/D/YYYY", then any complete date dateutil can read.
    Unparseable input returns "" (never raises).
    """
    raw = _text(value)
    if not raw:
        return ""

    if _ISO_DATE.match(raw):
        return raw

    m = _SLASH_DATE.match(raw)
    if m:
        mm, dd, yyyy = m.groups()
        return f"{yyyy}-{int(mm):02d}-{int(dd):02d}"

    # dateutil fills missing parts from `default`; two different defaults
    # expose a partial date ("May", "1958", "12").
    try:
        first = date_parser.parse(raw, default=_DEFAULT_A)
        second = date_parser.parse(raw, default=_DEFAULT_B)
    except (ValueError, OverflowError):
        return ""
    if first.date() != second.date():
        return ""
    return first.date().isoformat()


def _parse_iso_date(dob: str) -> date | None:
    try:
        return date.fromisoformat(dob)
    except ValueError:
        return None


def calc_age(dob: str | None, now: datetime | date | None = None) -> int | None:
    """
    Whole years between `dob` and `now`; None means unknown age.
    """
    if not dob:
        return None
    birth = _parse_iso_date(str(dob).strip())
    if birth is None:
        return None

    if now is None:
        today = date.today()
    elif isinstance(now, datetime):
        today = now.date()
    else:
        today = now

    age = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        age -= 1
    return age
