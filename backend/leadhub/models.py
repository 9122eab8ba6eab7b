# leadhub/models.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# -----------------------------
# Models
# -----------------------------
# Both tables are written as whole collections (delete + insert in one
# transaction); `position` preserves the caller's ordering.
class ConnectorRow(Base):
    __tablename__ = "connectors"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, index=True)

    name: Mapped[str] = mapped_column(String(120))
    type: Mapped[str] = mapped_column(String(20))

    # {"url": ..., "headers": {...}} / {"host": ..., "remotePath": ...}
    config_json: Mapped[str] = mapped_column(Text, default="{}")
    # {"fullName": "Name", "street": "Address1", ...}
    mapping_json: Mapped[str] = mapped_column(Text, default="{}")

    schedule_minutes: Mapped[int] = mapped_column(Integer, default=0)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_run_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    last_run_status: Mapped[str] = mapped_column(String(16), default="none")
    summary_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_run_error: Mapped[str] = mapped_column(Text, default="")


class LeadRow(Base):
    __tablename__ = "leads"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, index=True)

    full_name: Mapped[str] = mapped_column(String(255))
    street: Mapped[str] = mapped_column(String(255))
    unit: Mapped[str] = mapped_column(String(80), default="")
    city: Mapped[str] = mapped_column(String(120))
    state: Mapped[str] = mapped_column(String(2), index=True)
    zip: Mapped[str] = mapped_column(String(10), index=True)
    county: Mapped[str] = mapped_column(String(120), default="")
    phone: Mapped[str] = mapped_column(String(40), default="")
    dob: Mapped[str] = mapped_column(String(10), default="")

    lead_source: Mapped[str] = mapped_column(String(120), default="")
    provider: Mapped[str] = mapped_column(String(120), default="")
    connector_id: Mapped[str] = mapped_column(String(64), default="", index=True)

    stage: Mapped[str] = mapped_column(String(20), default="READY", index=True)
    imported_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
