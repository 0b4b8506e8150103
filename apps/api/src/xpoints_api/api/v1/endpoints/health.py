from __future__ import annotations

from typing import Dict, Literal

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from xpoints_api.core.settings import settings
from xpoints_api.db.session import get_session
from xpoints_api.domain.programs import POINT_VALUES
from xpoints_api.models.exchange_rate import ExchangeRate


router = APIRouter()


class ComponentStatus(BaseModel):
    status: Literal["ready", "starting", "disabled", "error", "degraded"]
    detail: str | None = Field(default=None, description="Human readable status detail")


class ReadinessPayload(BaseModel):
    status: Literal["ready", "degraded", "error"]
    components: Dict[str, ComponentStatus]


@router.get("/healthz", summary="Service health check")
async def service_health() -> dict[str, str]:
    return {"status": "ok", "environment": settings.environment}


@router.get("/readyz", summary="Service readiness", response_model=ReadinessPayload)
async def service_readiness(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> ReadinessPayload:
    components: Dict[str, ComponentStatus] = {}
    status: Literal["ready", "degraded", "error"] = "ready"

    try:
        await session.execute(text("SELECT 1"))
        published = (await session.execute(select(func.count(ExchangeRate.id)))).scalar_one()
    except SQLAlchemyError as exc:
        components["database"] = ComponentStatus(status="error", detail=f"Database unavailable ({exc.__class__.__name__})")
        components["exchange_rates"] = ComponentStatus(status="error", detail="Published rates could not be read")
        return ReadinessPayload(status="error", components=components)

    components["database"] = ComponentStatus(status="ready")

    expected = len(POINT_VALUES) ** 2
    if published >= expected:
        components["exchange_rates"] = ComponentStatus(status="ready", detail=f"{published} pairs published")
    else:
        components["exchange_rates"] = ComponentStatus(
            status="degraded",
            detail=f"{published} of {expected} pairs published",
        )
        status = "degraded"

    worker = getattr(request.app.state, "exchange_rate_sync_worker", None)
    if settings.exchange_rate_sync_worker_enabled and worker is not None:
        running = bool(getattr(worker, "is_running", False))
        worker_status: Literal["ready", "starting"] = "ready" if running else "starting"
        detail = None if running else "Exchange rate sync worker not running"
        if not running and status == "ready":
            status = "degraded"
        components["exchange_rate_sync"] = ComponentStatus(status=worker_status, detail=detail)
    else:
        components["exchange_rate_sync"] = ComponentStatus(
            status="disabled",
            detail="Exchange rate sync worker disabled via settings",
        )

    return ReadinessPayload(status=status, components=components)
