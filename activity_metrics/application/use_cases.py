"""Application services orchestrating one dashboard query cycle."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Callable

from activity_metrics.application.dto import DashboardRequest, DashboardResponse
from activity_metrics.domain.models import ActivityCollections
from activity_metrics.domain.periods import resolve_period
from activity_metrics.domain.repositories import ActivityRepository, LoadOutcome
from activity_metrics.domain.services import MetricsAggregator


class DataUnavailableError(RuntimeError):
    def __init__(self, outcome: LoadOutcome) -> None:
        super().__init__(outcome.message or str(outcome.error))
        self.outcome = outcome


@dataclass(slots=True)
class DashboardContext:
    repository: ActivityRepository
    aggregator: MetricsAggregator = field(default_factory=MetricsAggregator)
    clock: Callable[[], date] = date.today


class BuildDashboardUseCase:
    def __init__(self, context: DashboardContext) -> None:
        self._context = context

    def execute(self, request: DashboardRequest) -> DashboardResponse:
        outcome = self._context.repository.load()
        if not outcome.ok:
            raise DataUnavailableError(outcome)
        return self.run(outcome.collections, request)

    def run(self, collections: ActivityCollections, request: DashboardRequest) -> DashboardResponse:
        # today is read once per cycle and passed down explicitly
        today = request.today or self._context.clock()
        window = resolve_period(request.period, today)
        result, filtered = self._context.aggregator.aggregate_with_subsets(
            collections,
            window,
            today,
            scope=request.scope,
            opening_cash=request.opening_cash,
        )
        return DashboardResponse(result=result, window=window, filtered=filtered)
