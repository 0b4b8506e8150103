"""Observability endpoints for conversion telemetry and Prometheus metrics."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from xpoints_api.api.dependencies.security import require_admin_api_key
from xpoints_api.observability.conversions import get_conversion_store


router = APIRouter(prefix="/observability", tags=["Observability"])


@router.get(
    "/conversions",
    dependencies=[Depends(require_admin_api_key)],
    summary="Conversion observability snapshot",
)
async def get_conversion_snapshot() -> dict[str, object]:
    """Aggregated conversion metrics (requires admin API key)."""
    return get_conversion_store().snapshot().as_dict()


def _format_metric(
    name: str,
    description: str,
    value: int | float,
    labels: dict[str, str] | None = None,
    metric_type: str = "counter",
) -> list[str]:
    label_fragment = ""
    if labels:
        formatted = ",".join(f'{key}="{val}"' for key, val in sorted(labels.items()))
        label_fragment = f"{{{formatted}}}"
    return [
        f"# HELP {name} {description}",
        f"# TYPE {name} {metric_type}",
        f"{name}{label_fragment} {value}",
    ]


@router.get(
    "/prometheus",
    dependencies=[Depends(require_admin_api_key)],
    summary="Prometheus-formatted observability metrics",
    response_class=PlainTextResponse,
)
async def get_prometheus_metrics() -> PlainTextResponse:
    snapshot = get_conversion_store().snapshot().as_dict()
    totals = snapshot.get("totals", {})

    lines: list[str] = []
    lines.extend(_format_metric("xpoints_conversion_previews_total", "Conversion quotes served", totals.get("previews", 0)))
    lines.extend(_format_metric("xpoints_conversions_total", "Conversions committed", totals.get("commits", 0)))
    lines.extend(
        _format_metric("xpoints_conversion_rejections_total", "Conversions rejected", totals.get("rejections", 0))
    )
    lines.extend(
        _format_metric("xpoints_points_debited_total", "Source points debited by conversions", totals.get("points_debited", 0))
    )
    lines.extend(
        _format_metric(
            "xpoints_points_credited_total",
            "Destination points credited by conversions",
            totals.get("points_credited", 0),
        )
    )
    lines.extend(
        _format_metric("xpoints_conversion_fees_total", "Fee points collected", totals.get("fees_collected", 0))
    )

    for reason, value in snapshot.get("rejections", {}).items():
        lines.extend(
            _format_metric(
                "xpoints_conversion_rejections_by_reason_total",
                "Conversions rejected grouped by reason",
                value,
                labels={"reason": reason},
            )
        )

    pairs = snapshot.get("pairs", {})
    for pair, value in pairs.get("commits", {}).items():
        lines.extend(
            _format_metric(
                "xpoints_conversions_by_pair_total",
                "Conversions committed grouped by program pair",
                value,
                labels={"pair": pair},
            )
        )

    rate_sync = snapshot.get("rate_sync", {})
    lines.extend(_format_metric("xpoints_rate_sync_runs_total", "Exchange rate sync runs", rate_sync.get("runs", 0)))
    lines.extend(
        _format_metric("xpoints_rate_sync_failures_total", "Exchange rate sync failures", rate_sync.get("failures", 0))
    )

    return PlainTextResponse("\n".join(lines) + "\n")
