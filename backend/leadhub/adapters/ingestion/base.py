# leadhub/adapters/ingestion/base.py
from __future__ import annotations

from typing import Any, Protocol, TypeVar

from ...domain.csv_codec import parse_csv

RawRecord = dict[str, Any]

C = TypeVar("C", contravariant=True)


class SourceAdapter(Protocol[C]):
    async def fetch(self, config: C) -> list[Any]:
        """Return raw records in source order. Must not touch shared state."""
        ...


def records_from_csv_text(text: str) -> list[RawRecord]:
    return list(parse_csv(text).records)


def decode_text(data: bytes | str) -> str:
    if isinstance(data, str):
        return data
    return data.decode("utf-8", errors="replace")
