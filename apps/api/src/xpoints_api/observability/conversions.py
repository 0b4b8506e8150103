from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from threading import Lock
from typing import Dict


@dataclass
class ConversionSnapshot:
    totals: Dict[str, int]
    rejections: Dict[str, int]
    pairs: Dict[str, Dict[str, int]]
    rate_sync: Dict[str, int]

    def as_dict(self) -> Dict[str, object]:
        return {
            "totals": dict(self.totals),
            "rejections": dict(self.rejections),
            "pairs": {key: dict(value) for key, value in self.pairs.items()},
            "rate_sync": dict(self.rate_sync),
        }


class ConversionObservabilityStore:
    """Collect conversion and rate-sync telemetry for dashboards and alerting."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._totals: Dict[str, int] = defaultdict(int)
        self._rejections: Dict[str, int] = defaultdict(int)
        self._pair_points_in: Dict[str, int] = defaultdict(int)
        self._pair_points_out: Dict[str, int] = defaultdict(int)
        self._pair_commits: Dict[str, int] = defaultdict(int)
        self._pair_previews: Dict[str, int] = defaultdict(int)
        self._rate_sync: Dict[str, int] = defaultdict(int)

    @staticmethod
    def _pair_key(from_program: str, to_program: str) -> str:
        return f"{from_program}->{to_program}"

    def record_preview(self, from_program: str, to_program: str) -> None:
        key = self._pair_key(from_program, to_program)
        with self._lock:
            self._totals["previews"] += 1
            self._pair_previews[key] += 1

    def record_commit(self, from_program: str, to_program: str, amount_from: int, amount_to: int, fee: int = 0) -> None:
        key = self._pair_key(from_program, to_program)
        with self._lock:
            self._totals["commits"] += 1
            self._totals["points_debited"] += amount_from
            self._totals["points_credited"] += amount_to
            self._totals["fees_collected"] += fee
            self._pair_commits[key] += 1
            self._pair_points_in[key] += amount_from
            self._pair_points_out[key] += amount_to

    def record_rejection(self, reason: str) -> None:
        with self._lock:
            self._totals["rejections"] += 1
            self._rejections[reason or "unknown"] += 1

    def record_rate_sync(self, pairs_written: int, *, failed: bool = False) -> None:
        with self._lock:
            if failed:
                self._rate_sync["failures"] += 1
                return
            self._rate_sync["runs"] += 1
            self._rate_sync["pairs_written"] += pairs_written

    def snapshot(self) -> ConversionSnapshot:
        with self._lock:
            totals = dict(self._totals)
            rejections = dict(self._rejections)
            pairs = {
                "previews": dict(self._pair_previews),
                "commits": dict(self._pair_commits),
                "points_in": dict(self._pair_points_in),
                "points_out": dict(self._pair_points_out),
            }
            rate_sync = dict(self._rate_sync)
        return ConversionSnapshot(totals=totals, rejections=rejections, pairs=pairs, rate_sync=rate_sync)

    def reset(self) -> None:
        with self._lock:
            self._totals.clear()
            self._rejections.clear()
            self._pair_points_in.clear()
            self._pair_points_out.clear()
            self._pair_commits.clear()
            self._pair_previews.clear()
            self._rate_sync.clear()


_STORE = ConversionObservabilityStore()


def get_conversion_store() -> ConversionObservabilityStore:
    return _STORE


__all__ = ["get_conversion_store", "ConversionObservabilityStore", "ConversionSnapshot"]
