"""Application-level DTOs for dashboard queries."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from activity_metrics.domain.models import ActivityCollections, ScopeId
from activity_metrics.domain.periods import PeriodSpec, Window
from activity_metrics.domain.results import AggregateResult


@dataclass(slots=True, frozen=True)
class DashboardRequest:
    period: PeriodSpec | str | None = None
    scope: ScopeId | None = None
    opening_cash: Decimal | None = None
    today: date | None = None


@dataclass(slots=True, frozen=True)
class DashboardResponse:
    result: AggregateResult
    window: Window
    filtered: ActivityCollections

    def to_dict(self) -> dict:
        payload = self.result.to_dict()
        payload["filtered_counts"] = self.filtered.sizes()
        return payload
