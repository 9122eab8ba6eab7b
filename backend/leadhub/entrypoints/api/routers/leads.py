# leadhub/entrypoints/api/routers/leads.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from ..deps import get_services, require_api_key
from ....domain.query import STAGE_ALL, LeadFilters
from ....schemas import CsvImportIn, CsvImportOut, ErrorOut, LeadOut, LeadQueryOut, MarkMailedIn, MarkMailedOut
from ....service_layer import leads as lead_service
from ....service_layer.bootstrap import Services

router = APIRouter(prefix="/api/leads", tags=["leads"], dependencies=[Depends(require_api_key)])


class LeadQueryParams:
    def __init__(
        self,
        stage: str = Query(STAGE_ALL),
        state: str = Query(""),
        county: str = Query(""),
        zip_prefix: str = Query("", alias="zipPrefix"),
        min_age: int = Query(0, alias="minAge"),
        max_age: int = Query(999, alias="maxAge"),
        batch_size: int | None = Query(None, alias="batchSize"),
        batch_number: int = Query(1, alias="batchNumber"),
    ) -> None:
        self.filters = LeadFilters(
            stage=stage or STAGE_ALL,
            state=state,
            county=county,
            zip_prefix=zip_prefix,
            min_age=min_age,
            max_age=max_age,
        )
        self.batch_size = batch_size
        self.batch_number = batch_number


@router.get("", response_model=LeadQueryOut)
async def query_leads(
    params: LeadQueryParams = Depends(),
    services: Services = Depends(get_services),
) -> LeadQueryOut:
    result = await lead_service.query_leads(
        services.uow,
        params.filters,
        batch_size=params.batch_size,
        batch_number=params.batch_number,
    )
    return LeadQueryOut(
        total_stored=result.total_stored,
        total_filtered=result.total_filtered,
        batch_size=result.batch_size,
        batch_number=result.batch_number,
        items=[LeadOut.model_validate(lead.to_dict()) for lead in result.items],
    )


@router.get("/export.csv")
async def export_leads(
    params: LeadQueryParams = Depends(),
    services: Services = Depends(get_services),
) -> Response:
    text = await lead_service.export_leads_csv(
        services.uow,
        params.filters,
        batch_size=params.batch_size,
        batch_number=params.batch_number,
    )
    return Response(content=text, media_type="text/csv; charset=utf-8")


@router.post("/mark-mailed", response_model=MarkMailedOut, responses={400: {"model": ErrorOut}})
async def mark_mailed(
    body: MarkMailedIn,
    services: Services = Depends(get_services),
) -> MarkMailedOut:
    updated = await lead_service.mark_mailed(services.uow, body.lead_ids)
    return MarkMailedOut(updated=updated)


@router.post("/import-csv", response_model=CsvImportOut, responses={400: {"model": ErrorOut}})
async def import_csv(
    body: CsvImportIn,
    services: Services = Depends(get_services),
) -> CsvImportOut:
    report = await lead_service.import_csv_text(
        services.uow,
        body.csv_text,
        body.mapping,
        provider_name=body.provider_name,
    )
    return CsvImportOut(
        fetched=report.fetched,
        imported=report.imported,
        duplicates=report.duplicates,
        invalid=report.invalid,
    )
