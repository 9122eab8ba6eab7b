# leadhub/domain/types.py
from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from .errors import ConfigurationError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def _iso(dt: datetime | None) -> str:
    return dt.isoformat() if dt is not None else ""


# -----------------------------
# Core enums
# -----------------------------
class ConnectorType(str, enum.Enum):
    csv_url = "csv_url"
    api_json = "api_json"
    sftp_csv = "sftp_csv"


class LeadStage(str, enum.Enum):
    READY = "READY"
    MAILED = "MAILED"


class RunStatus(str, enum.Enum):
    none = "none"
    ok = "ok"
    error = "error"


REQUIRED_FIELDS: tuple[str, ...] = ("fullName", "street", "city", "state", "zip")


# -----------------------------
# Field mapping
# -----------------------------
@dataclass(frozen=True)
class FieldMapping:
    """
    Canonical lead field -> source key (or dotted path) for one connector.

    Wire/persisted shape is camelCase ({"fullName": "Name", ...}); empty or
    missing entries are None.
    """

    full_name: str | None = None
    street: str | None = None
    unit: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    county: str | None = None
    phone: str | None = None
    dob: str | None = None
    lead_source: str | None = None

    _KEYS = {
        "fullName": "full_name",
        "street": "street",
        "unit": "unit",
        "city": "city",
        "state": "state",
        "zip": "zip",
        "county": "county",
        "phone": "phone",
        "dob": "dob",
        "leadSource": "lead_source",
    }

    @classmethod
    def from_dict(cls, raw: Any) -> "FieldMapping":
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ConfigurationError("mapping object is required")
        kwargs: dict[str, str | None] = {}
        for key, attr in cls._KEYS.items():
            v = raw.get(key)
            kwargs[attr] = (str(v).strip() or None) if v is not None else None
        return cls(**kwargs)

    def to_dict(self) -> dict[str, str]:
        return {key: getattr(self, attr) for key, attr in self._KEYS.items() if getattr(self, attr)}

    def source_for(self, canonical: str) -> str | None:
        return getattr(self, self._KEYS[canonical])

    def missing_required(self) -> list[str]:
        return [k for k in REQUIRED_FIELDS if not self.source_for(k)]

    def require_complete(self) -> None:
        missing = self.missing_required()
        if missing:
            raise ConfigurationError(f"missing mapping for {missing[0]}")


# -----------------------------
# Source config (one variant per connector type)
# -----------------------------
@dataclass(frozen=True)
class CsvUrlConfig:
    url: str
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ApiJsonConfig:
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    records_path: str | None = None


@dataclass(frozen=True)
class SftpCsvConfig:
    remote_path: str = ""
    host: str = ""
    port: int = 22
    username: str = ""
    password: str | None = None
    private_key: str | None = None
    local_mock_path: str | None = None


SourceConfig = CsvUrlConfig | ApiJsonConfig | SftpCsvConfig


def _headers(raw: Any) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError("config.headers must be an object")
    return {str(k): str(v) for k, v in raw.items()}


def _opt_str(raw: Any) -> str | None:
    if raw is None:
        return None
    s = str(raw).strip()
    return s or None


def parse_source_config(connector_type: str, raw: dict[str, Any] | None) -> SourceConfig:
    """
    Resolve a persisted config dict into the typed config for `connector_type`.
    Raises ConfigurationError for unknown types or missing transport fields.
    """
    cfg = raw or {}
    if not isinstance(cfg, dict):
        raise ConfigurationError("config must be an object")

    if connector_type == ConnectorType.csv_url.value:
        url = _opt_str(cfg.get("url"))
        if not url:
            raise ConfigurationError("config.url is required for csv_url")
        return CsvUrlConfig(url=url, headers=_headers(cfg.get("headers")))

    if connector_type == ConnectorType.api_json.value:
        url = _opt_str(cfg.get("url"))
        if not url:
            raise ConfigurationError("config.url is required for api_json")
        return ApiJsonConfig(
            url=url,
            headers=_headers(cfg.get("headers")),
            records_path=_opt_str(cfg.get("recordsPath")),
        )

    if connector_type == ConnectorType.sftp_csv.value:
        local_mock_path = _opt_str(cfg.get("localMockPath"))
        remote_path = _opt_str(cfg.get("remotePath")) or ""
        host = _opt_str(cfg.get("host")) or ""
        if not local_mock_path and not (host and remote_path):
            raise ConfigurationError("config.host and config.remotePath are required for sftp_csv")
        try:
            port = int(cfg.get("port") or 22)
        except (TypeError, ValueError):
            raise ConfigurationError("config.port must be a number") from None
        return SftpCsvConfig(
            remote_path=remote_path,
            host=host,
            port=port,
            username=_opt_str(cfg.get("username")) or "",
            password=_opt_str(cfg.get("password")),
            private_key=_opt_str(cfg.get("privateKey")),
            local_mock_path=local_mock_path,
        )

    raise ConfigurationError(f"Unsupported connector type: {connector_type}")


# -----------------------------
# Entities
# -----------------------------
@dataclass
class RunSummary:
    trigger: str
    fetched: int
    imported: int
    duplicates: int
    invalid: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "trigger": self.trigger,
            "fetched": self.fetched,
            "imported": self.imported,
            "duplicates": self.duplicates,
            "invalid": self.invalid,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> "RunSummary | None":
        if not isinstance(raw, dict):
            return None
        return cls(
            trigger=str(raw.get("trigger") or ""),
            fetched=int(raw.get("fetched") or 0),
            imported=int(raw.get("imported") or 0),
            duplicates=int(raw.get("duplicates") or 0),
            invalid=int(raw.get("invalid") or 0),
        )


@dataclass
class Connector:
    id: str
    name: str
    type: str
    config: dict[str, Any] = field(default_factory=dict)
    mapping: FieldMapping = field(default_factory=FieldMapping)
    schedule_minutes: int = 0
    enabled: bool = True
    created_at: datetime | None = None
    last_run_at: datetime | None = None
    last_run_status: RunStatus = RunStatus.none
    last_run_summary: RunSummary | None = None
    last_run_error: str = ""

    def source_config(self) -> SourceConfig:
        return parse_source_config(self.type, self.config)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "config": dict(self.config),
            "mapping": self.mapping.to_dict(),
            "scheduleMinutes": self.schedule_minutes,
            "enabled": self.enabled,
            "createdAt": _iso(self.created_at),
            "lastRunAt": _iso(self.last_run_at),
            "lastRunStatus": self.last_run_status.value,
            "lastRunSummary": self.last_run_summary.to_dict() if self.last_run_summary else None,
            "lastRunError": self.last_run_error,
        }


@dataclass
class Lead:
    id: str
    full_name: str
    street: str
    city: str
    state: str
    zip: str
    unit: str = ""
    county: str = ""
    phone: str = ""
    dob: str = ""
    lead_source: str = ""
    provider: str = ""
    connector_id: str = ""
    stage: str = LeadStage.READY.value
    imported_at: datetime | None = None

    def with_stage(self, stage: LeadStage) -> "Lead":
        return replace(self, stage=stage.value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "fullName": self.full_name,
            "street": self.street,
            "unit": self.unit,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
            "county": self.county,
            "phone": self.phone,
            "dob": self.dob,
            "leadSource": self.lead_source,
            "provider": self.provider,
            "connectorId": self.connector_id,
            "stage": self.stage,
            "importedAt": _iso(self.imported_at),
        }
