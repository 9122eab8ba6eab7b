# leadhub/entrypoints/api/routers/connectors.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from ..deps import get_services, require_api_key
from ....schemas import ConnectorCreate, ConnectorList, ConnectorOut, ConnectorUpdate, ErrorOut, RunResult
from ....service_layer import connectors as connector_service
from ....service_layer.bootstrap import Services
from ....service_layer.runs import TRIGGER_MANUAL

router = APIRouter(prefix="/api/connectors", tags=["connectors"], dependencies=[Depends(require_api_key)])

_ERRORS = {
    400: {"model": ErrorOut},
    404: {"model": ErrorOut},
}


@router.get("", response_model=ConnectorList)
async def list_connectors(services: Services = Depends(get_services)) -> ConnectorList:
    rows = await connector_service.list_connectors(services.uow)
    return ConnectorList(items=[ConnectorOut.model_validate(c.to_dict()) for c in rows])


@router.post("", response_model=ConnectorOut, status_code=201, responses={400: {"model": ErrorOut}})
async def create_connector(
    body: ConnectorCreate,
    services: Services = Depends(get_services),
) -> ConnectorOut:
    connector = await connector_service.create_connector(services.uow, body.model_dump(by_alias=True))
    return ConnectorOut.model_validate(connector.to_dict())


@router.get("/{connector_id}", response_model=ConnectorOut, responses={404: {"model": ErrorOut}})
async def get_connector(
    connector_id: str,
    services: Services = Depends(get_services),
) -> ConnectorOut:
    connector = await connector_service.get_connector(services.uow, connector_id)
    return ConnectorOut.model_validate(connector.to_dict())


@router.patch("/{connector_id}", response_model=ConnectorOut, responses=_ERRORS)
async def update_connector(
    connector_id: str,
    body: ConnectorUpdate,
    services: Services = Depends(get_services),
) -> ConnectorOut:
    patch = body.model_dump(by_alias=True, exclude_unset=True)
    connector = await connector_service.update_connector(services.uow, connector_id, patch)
    return ConnectorOut.model_validate(connector.to_dict())


@router.delete("/{connector_id}", responses={404: {"model": ErrorOut}})
async def delete_connector(
    connector_id: str,
    services: Services = Depends(get_services),
) -> dict[str, Any]:
    await connector_service.delete_connector(services.uow, connector_id)
    return {"ok": True}


@router.post(
    "/{connector_id}/run",
    response_model=RunResult,
    responses={**_ERRORS, 409: {"model": ErrorOut}},
)
async def run_connector(
    connector_id: str,
    services: Services = Depends(get_services),
) -> RunResult:
    report = await services.runner.run(connector_id, trigger=TRIGGER_MANUAL)
    return RunResult.model_validate(report.to_dict())
