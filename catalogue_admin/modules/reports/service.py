"""Usage statistics for the admin console."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from catalogue_admin.core.errors import ValidationFailedError
from catalogue_admin.db.models import utcnow
from catalogue_admin.modules.activities.models import ActivityKind

from .models import DEFAULT_PERIOD, PERIODS, HourlyCount, MonthlyCount, UsageStats
from .repository import ReportRepository

TOP_DOWNLOADS_LIMIT = 10


def _aware(value: datetime) -> datetime:
    # SQLite 返回的时间不带时区
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _by_month(timestamps: Iterable[datetime]) -> list[MonthlyCount]:
    buckets = Counter((_aware(ts).year, _aware(ts).month) for ts in timestamps)
    return [MonthlyCount(year=year, month=month, count=count) for (year, month), count in sorted(buckets.items())]


def _by_hour(timestamps: Iterable[datetime]) -> list[HourlyCount]:
    buckets = Counter((_aware(ts).date().isoformat(), _aware(ts).hour) for ts in timestamps)
    return [HourlyCount(date=day, hour=hour, count=count) for (day, hour), count in sorted(buckets.items())]


@dataclass(slots=True)
class ReportService:
    repository: ReportRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "ReportService":
        from catalogue_admin.infrastructure.database.repositories.report_repository import (
            SqlReportRepository,
        )

        return cls(SqlReportRepository(session))

    async def usage(self, period: str | None = None, *, now: datetime | None = None) -> UsageStats:
        """Aggregate sign-ups, downloads and logins over the trailing ``period``.

        Timestamps are bucketed in Python; ``user_status`` covers all live accounts.
        """
        period = period or DEFAULT_PERIOD
        if period not in PERIODS:
            raise ValidationFailedError(
                "invalid_period", f"Period must be one of: {', '.join(PERIODS)}"
            )
        since = (now or utcnow()) - timedelta(days=PERIODS[period])

        repo = self.repository
        return UsageStats(
            period=period,
            since=since,
            user_growth=_by_month(await repo.account_created_since(since)),
            user_status=list(await repo.account_status_counts()),
            downloads_over_time=_by_month(await repo.download_timestamps_since(since)),
            login_frequency=_by_hour(await repo.activity_timestamps_since(ActivityKind.LOGIN.value, since)),
            top_downloads=list(await repo.top_downloads_since(since, TOP_DOWNLOADS_LIMIT)),
        )
