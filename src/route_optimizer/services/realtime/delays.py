"""Latest delay reported per route."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True, slots=True)
class DelayReport:
    route_id: int
    delay_minutes: int
    reason: str
    reported_at: datetime


class DelayBoard:
    """Keeps the most recent delay report for each route.

    Reports replace each other wholesale, so readers never see a partially
    updated entry.
    """

    def __init__(self) -> None:
        self._reports: dict[int, DelayReport] = {}

    def record(self, route_id: int, delay_minutes: int, reason: str = "") -> DelayReport:
        report = DelayReport(
            route_id=route_id,
            delay_minutes=max(0, delay_minutes),
            reason=reason,
            reported_at=datetime.now(timezone.utc),
        )
        self._reports[route_id] = report
        return report

    def get(self, route_id: int) -> Optional[DelayReport]:
        return self._reports.get(route_id)

    def delay_for(self, route_id: int) -> int:
        report = self._reports.get(route_id)
        return report.delay_minutes if report else 0

    def clear(self, route_id: int | None = None) -> None:
        if route_id is None:
            self._reports.clear()
        else:
            self._reports.pop(route_id, None)


delay_board = DelayBoard()
