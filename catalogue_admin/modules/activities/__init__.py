"""Activity log exports."""

from .models import ActivityEntry, ActivityKind
from .service import ActivityService, log_activity

__all__ = ["ActivityEntry", "ActivityKind", "ActivityService", "log_activity"]
