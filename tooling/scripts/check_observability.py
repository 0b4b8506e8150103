#!/usr/bin/env python3
"""Quick health check for xPoints conversion observability.

Usage:
    python tooling/scripts/check_observability.py \
        --base-url https://staging-api.example.com \
        --api-key "$ADMIN_API_KEY"

The script validates:
  * Readiness: the service reports every published rate pair.
  * Conversion telemetry: rejections stay within the allowed ratio.
  * Rate sync telemetry: no sync failures have been recorded.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any, Dict, Optional

import httpx


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="xPoints observability checker")
    parser.add_argument(
        "--base-url",
        default="http://localhost:8000",
        help="Base URL of the xPoints API service.",
    )
    parser.add_argument(
        "--api-key",
        default=None,
        help="Admin API key for the observability endpoints.",
    )
    parser.add_argument(
        "--max-rejection-rate",
        type=float,
        default=0.25,
        help="Maximum ratio (0-1) of rejected to attempted conversions (default: 0.25).",
    )
    parser.add_argument(
        "--min-sample-size",
        type=int,
        default=20,
        help="Minimum conversion attempts before enforcing the rejection ratio (default: 20).",
    )
    parser.add_argument(
        "--max-rate-sync-failures",
        type=int,
        default=0,
        help="Maximum allowed exchange rate sync failures (default: 0).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="HTTP request timeout in seconds.",
    )
    return parser.parse_args()


async def _get_json(
    client: httpx.AsyncClient,
    path: str,
    *,
    headers: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    response = await client.get(path, headers=headers)
    response.raise_for_status()
    return response.json()


def _fail(message: str) -> None:
    print(f"[check-observability] ❌ {message}")
    sys.exit(1)


def _log_ok(message: str) -> None:
    print(f"[check-observability] ✅ {message}")


async def validate_readiness(client: httpx.AsyncClient) -> None:
    payload = await _get_json(client, "/api/v1/readyz")
    rates = payload.get("components", {}).get("exchange_rates", {})
    if rates.get("status") != "ready":
        _fail(f"Published exchange rates not ready ({rates.get('detail', 'no detail')})")
    _log_ok(f"Readiness OK ({rates.get('detail', 'rates published')})")


async def validate_conversions(
    client: httpx.AsyncClient,
    api_key: Optional[str],
    max_rejection_rate: float,
    min_sample_size: int,
    max_rate_sync_failures: int,
) -> None:
    headers = {"X-API-Key": api_key} if api_key else None
    payload = await _get_json(client, "/api/v1/observability/conversions", headers=headers)

    totals = payload.get("totals", {})
    commits = int(totals.get("commits", 0))
    rejections = int(totals.get("rejections", 0))
    attempts = commits + rejections

    sync_failures = int(payload.get("rate_sync", {}).get("failures", 0))
    if sync_failures > max_rate_sync_failures:
        _fail(f"Exchange rate sync failures {sync_failures} exceed threshold {max_rate_sync_failures}")

    if attempts < min_sample_size:
        _log_ok(
            f"Conversion sample size below threshold ({attempts}/{min_sample_size}); "
            "skipping rejection-rate check"
        )
        return

    rejection_rate = rejections / attempts
    if rejection_rate > max_rejection_rate:
        reasons = payload.get("rejections", {}) or {}
        top_reason = max(reasons.items(), key=lambda item: item[1])[0] if reasons else "n/a"
        _fail(
            "Conversion rejection rate {:.1%} exceeds threshold {:.1%} (top reason={})".format(
                rejection_rate, max_rejection_rate, top_reason
            )
        )

    _log_ok(
        f"Conversion observability OK (commits={commits}, rejections={rejections}, "
        f"rejection_rate={rejection_rate:.1%})"
    )


async def main() -> None:
    args = parse_args()

    async with httpx.AsyncClient(base_url=args.base_url, timeout=args.timeout) as client:
        await validate_readiness(client)
        await validate_conversions(
            client,
            api_key=args.api_key,
            max_rejection_rate=args.max_rejection_rate,
            min_sample_size=args.min_sample_size,
            max_rate_sync_failures=args.max_rate_sync_failures,
        )

    _log_ok("Observability checks completed successfully")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except httpx.HTTPStatusError as exc:
        _fail(f"HTTP {exc.response.status_code} while calling {exc.request.url}")
    except Exception as exc:  # pragma: no cover - best-effort logging
        _fail(f"Unexpected error: {exc}")
