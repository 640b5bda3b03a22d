"""Period-aware aggregation engine for point-of-sale dashboards."""
from activity_metrics.application.use_cases import BuildDashboardUseCase, DashboardContext
from activity_metrics.domain.filtering import filter_records, normalize_scope
from activity_metrics.domain.periods import UNBOUNDED, PeriodSpec, ResolvedPeriod, resolve_period
from activity_metrics.domain.services import MetricsAggregator
from activity_metrics.domain.trend import trend_percentage
from activity_metrics.infrastructure.parsing.dates import normalize_date
from activity_metrics.infrastructure.repositories.json_repository import (
    InMemoryActivityRepository,
    JsonActivityRepository,
)

__all__ = [
    "BuildDashboardUseCase",
    "DashboardContext",
    "MetricsAggregator",
    "PeriodSpec",
    "ResolvedPeriod",
    "UNBOUNDED",
    "resolve_period",
    "filter_records",
    "normalize_scope",
    "normalize_date",
    "trend_percentage",
    "JsonActivityRepository",
    "InMemoryActivityRepository",
]
