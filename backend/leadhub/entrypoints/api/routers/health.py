# leadhub/entrypoints/api/routers/health.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from ..deps import get_services
from ....config import settings
from ....service_layer.bootstrap import Services

router = APIRouter(tags=["health"])


@router.get("/api/health")
def health(services: Services = Depends(get_services)) -> dict[str, Any]:
    return {
        "ok": True,
        "env": settings.ENV,
        "scheduler": "running" if services.scheduler.running else "stopped",
    }
