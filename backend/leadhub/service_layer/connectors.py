# leadhub/service_layer/connectors.py
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from ..domain.errors import ConfigurationError, NotFoundError
from ..domain.types import Connector, ConnectorType, FieldMapping, new_id, parse_source_config, utcnow
from .unit_of_work import UnitOfWork

log = logging.getLogger(__name__)

ALLOWED_TYPES = {t.value for t in ConnectorType}


def validate_connector(connector: Connector) -> None:
    """
    Reject a connector that could never run: unknown type, a mapping missing
    a required field, or transport config that doesn't fit the type.
    """
    if not connector.name.strip():
        raise ConfigurationError("name is required")
    if connector.type not in ALLOWED_TYPES:
        raise ConfigurationError("type must be csv_url, api_json, or sftp_csv")
    connector.mapping.require_complete()
    parse_source_config(connector.type, connector.config)
    if connector.schedule_minutes < 0:
        raise ConfigurationError("scheduleMinutes must be >= 0")


def _schedule_minutes(raw: Any) -> int:
    try:
        return int(raw or 0)
    except (TypeError, ValueError):
        raise ConfigurationError("scheduleMinutes must be a number") from None


def _config(raw: Any) -> dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError("config must be an object")
    return dict(raw)


def _find(connectors: list[Connector], connector_id: str) -> int:
    for idx, c in enumerate(connectors):
        if c.id == connector_id:
            return idx
    raise NotFoundError("connector not found")


async def list_connectors(uow: UnitOfWork) -> list[Connector]:
    return await uow.store.load_connectors()


async def get_connector(uow: UnitOfWork, connector_id: str) -> Connector:
    connectors = await uow.store.load_connectors()
    return connectors[_find(connectors, connector_id)]


async def create_connector(uow: UnitOfWork, body: dict[str, Any]) -> Connector:
    if body.get("mapping") is None:
        raise ConfigurationError("mapping object is required")

    connector = Connector(
        id=new_id(),
        name=str(body.get("name") or "").strip(),
        type=str(body.get("type") or ""),
        config=_config(body.get("config")),
        mapping=FieldMapping.from_dict(body.get("mapping")),
        schedule_minutes=_schedule_minutes(body.get("scheduleMinutes")),
        enabled=body.get("enabled") is not False,
        created_at=utcnow(),
    )
    validate_connector(connector)

    async with uow as store:
        connectors = await store.load_connectors()
        connectors.append(connector)
        await store.save_connectors(connectors)

    log.info("connector created id=%s name=%r type=%s", connector.id, connector.name, connector.type)
    return connector


async def update_connector(uow: UnitOfWork, connector_id: str, patch: dict[str, Any]) -> Connector:
    """
    Shallow-merge `patch` (wire keys) over the stored connector and revalidate.
    Run bookkeeping (lastRun*) and id are not editable here.
    """
    async with uow as store:
        connectors = await store.load_connectors()
        idx = _find(connectors, connector_id)
        current = connectors[idx]

        changes: dict[str, Any] = {}
        if "name" in patch:
            changes["name"] = str(patch["name"] or "").strip()
        if "type" in patch:
            changes["type"] = str(patch["type"] or "")
        if "config" in patch:
            changes["config"] = _config(patch["config"])
        if "mapping" in patch:
            if patch["mapping"] is None:
                raise ConfigurationError("mapping object is required")
            changes["mapping"] = FieldMapping.from_dict(patch["mapping"])
        if "scheduleMinutes" in patch:
            changes["schedule_minutes"] = _schedule_minutes(patch["scheduleMinutes"])
        if "enabled" in patch:
            changes["enabled"] = bool(patch["enabled"])

        updated = replace(current, **changes)
        validate_connector(updated)

        connectors[idx] = updated
        await store.save_connectors(connectors)

    log.info("connector updated id=%s fields=%s", connector_id, sorted(changes))
    return updated


async def delete_connector(uow: UnitOfWork, connector_id: str) -> None:
    async with uow as store:
        connectors = await store.load_connectors()
        idx = _find(connectors, connector_id)
        del connectors[idx]
        await store.save_connectors(connectors)

    log.info("connector deleted id=%s", connector_id)
