"""Python client for the AgriInsight API and its dashboard controller."""
from .api import AgriInsightClient, ApiError
from .dashboard import DashboardController, DashboardFilters, DashboardSnapshot, RegionStatus

__all__ = [
    "AgriInsightClient",
    "ApiError",
    "DashboardController",
    "DashboardFilters",
    "DashboardSnapshot",
    "RegionStatus",
]
