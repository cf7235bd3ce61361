"""Usage statistics exports."""

from .models import PERIODS, HourlyCount, MonthlyCount, StatusCount, TopDownload, UsageStats
from .service import ReportService

__all__ = [
    "HourlyCount",
    "MonthlyCount",
    "PERIODS",
    "ReportService",
    "StatusCount",
    "TopDownload",
    "UsageStats",
]
