"""Value objects for the admin usage statistics."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

# 统计窗口，单位：天
PERIODS = {"7d": 7, "30d": 30, "90d": 90}
DEFAULT_PERIOD = "30d"


@dataclass(frozen=True, slots=True)
class MonthlyCount:
    year: int
    month: int
    count: int


@dataclass(frozen=True, slots=True)
class HourlyCount:
    date: str
    hour: int
    count: int


@dataclass(frozen=True, slots=True)
class StatusCount:
    is_active: bool
    count: int


@dataclass(frozen=True, slots=True)
class TopDownload:
    catalogue_id: str
    catalogue_name: str | None
    count: int


@dataclass(slots=True)
class UsageStats:
    period: str
    since: datetime
    user_growth: list[MonthlyCount] = field(default_factory=list)
    user_status: list[StatusCount] = field(default_factory=list)
    downloads_over_time: list[MonthlyCount] = field(default_factory=list)
    login_frequency: list[HourlyCount] = field(default_factory=list)
    top_downloads: list[TopDownload] = field(default_factory=list)
