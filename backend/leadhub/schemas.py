from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _Wire(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(populate_by_name=True)


# ----- Connectors -----

class ConnectorCreate(_Wire):
    name: str = ""
    type: str = ""
    config: dict[str, Any] | None = None
    mapping: dict[str, Any] | None = None
    schedule_minutes: int = Field(0, alias="scheduleMinutes")
    enabled: bool = True


class ConnectorUpdate(_Wire):
    name: str | None = None
    type: str | None = None
    config: dict[str, Any] | None = None
    mapping: dict[str, Any] | None = None
    schedule_minutes: int | None = Field(None, alias="scheduleMinutes")
    enabled: bool | None = None


class RunSummaryOut(BaseModel):
    trigger: str
    fetched: int
    imported: int
    duplicates: int
    invalid: int


class ConnectorOut(_Wire):
    id: str
    name: str
    type: str
    config: dict[str, Any]
    mapping: dict[str, str]
    schedule_minutes: int = Field(..., alias="scheduleMinutes")
    enabled: bool
    created_at: str = Field("", alias="createdAt")
    last_run_at: str = Field("", alias="lastRunAt")
    last_run_status: str = Field("none", alias="lastRunStatus")
    last_run_summary: RunSummaryOut | None = Field(None, alias="lastRunSummary")
    last_run_error: str = Field("", alias="lastRunError")


class ConnectorList(BaseModel):
    items: list[ConnectorOut]


class RunResult(_Wire):
    ok: bool = True
    connector_id: str = Field(..., alias="connectorId")
    fetched: int = Field(..., ge=0)
    imported: int = Field(..., ge=0)
    duplicates: int = Field(..., ge=0)
    invalid: int = Field(..., ge=0)


class ErrorOut(BaseModel):
    ok: bool = False
    error: str
    kind: str


# ----- Leads -----

class LeadOut(_Wire):
    id: str
    full_name: str = Field(..., alias="fullName")
    street: str
    unit: str = ""
    city: str
    state: str
    zip: str
    county: str = ""
    phone: str = ""
    dob: str = ""
    lead_source: str = Field("", alias="leadSource")
    provider: str = ""
    connector_id: str = Field("", alias="connectorId")
    stage: str
    imported_at: str = Field("", alias="importedAt")


class LeadQueryOut(_Wire):
    total_stored: int = Field(..., alias="totalStored")
    total_filtered: int = Field(..., alias="totalFiltered")
    batch_size: int = Field(..., alias="batchSize")
    batch_number: int = Field(..., alias="batchNumber")
    items: list[LeadOut]


class MarkMailedIn(_Wire):
    lead_ids: list[str] = Field(default_factory=list, alias="leadIds")


class MarkMailedOut(BaseModel):
    ok: bool = True
    updated: int


class CsvImportIn(_Wire):
    csv_text: str = Field("", alias="csvText")
    mapping: dict[str, Any] | None = None
    provider_name: str | None = Field(None, alias="providerName")


class CsvImportOut(BaseModel):
    ok: bool = True
    fetched: int = Field(..., ge=0)
    imported: int = Field(..., ge=0)
    duplicates: int = Field(..., ge=0)
    invalid: int = Field(..., ge=0)
