#!/usr/bin/env python3
"""Republish exchange rates from the rate table once, for cron/CI workflows."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise published exchange rates")
    parser.add_argument(
        "--create-schema",
        action="store_true",
        help="Create missing tables before syncing.",
    )
    return parser.parse_args()


async def _run_once(create_schema: bool) -> int:
    repo_root = Path(__file__).resolve().parents[2]
    api_src = repo_root / "apps" / "api" / "src"
    if str(api_src) not in sys.path:
        sys.path.insert(0, str(api_src))

    from xpoints_api.db.session import async_session, create_schema as ensure_schema  # type: ignore import-position
    from xpoints_api.jobs import sync_exchange_rates  # type: ignore import-position

    if create_schema:
        await ensure_schema()

    summary = await sync_exchange_rates(session_factory=async_session)
    logger.info("Exchange rate sync complete", pairs=summary["pairs"], synced_at=summary["synced_at"])
    return summary["pairs"]


def main() -> int:
    args = parse_args()
    try:
        pairs = asyncio.run(_run_once(args.create_schema))
    except Exception as exc:
        logger.exception("Exchange rate sync failed", error=str(exc))
        return 1
    logger.success("Published {pairs} exchange rate pairs", pairs=pairs)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
