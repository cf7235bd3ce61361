"""Download tracking exports."""

from .models import DownloadEvent, DownloadRecord, LegacyDownloadItem, LegacyTrackingResult
from .service import DownloadQueryService, DownloadTracker

__all__ = [
    "DownloadEvent",
    "DownloadQueryService",
    "DownloadRecord",
    "DownloadTracker",
    "LegacyDownloadItem",
    "LegacyTrackingResult",
]
