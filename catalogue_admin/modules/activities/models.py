"""Activity log domain model."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from catalogue_admin.db import models as orm


class ActivityKind(str, Enum):
    LOGIN = "login"
    ADMIN_LOGIN = "admin_login"
    USER_REGISTER = "user_register"
    CATALOGUE_DOWNLOAD = "catalogue_download"
    PRODUCT_CATALOGUES_DOWNLOAD = "product_catalogues_download"
    CATALOGUE_EMAIL_REQUEST = "catalogue_email_request"
    CATALOGUE_DOWNLOAD_TRACKED = "catalogue_download_tracked"
    ADMIN_UPLOAD_CATALOGUE = "admin_upload_catalogue"
    ADMIN_UPDATE_CATALOGUE = "admin_update_catalogue"
    ADMIN_DELETE_CATALOGUE = "admin_delete_catalogue"
    ADMIN_CREATE_USER = "admin_create_user"
    ADMIN_UPDATE_USER = "admin_update_user"
    ADMIN_CHANGE_USER_STATUS = "admin_change_user_status"
    ADMIN_DELETE_USER = "admin_delete_user"
    NEWSLETTER_SUBSCRIBE = "newsletter_subscribe"
    NEWSLETTER_UNSUBSCRIBE = "newsletter_unsubscribe"
    ADMIN_CHANGE_SUBSCRIBER_STATUS = "admin_change_subscriber_status"


@dataclass(slots=True)
class ActivityEntry:
    id: int
    type: str
    user_id: Optional[str]
    admin_id: Optional[str]
    details: dict[str, Any]
    ip_address: Optional[str]
    user_agent: Optional[str]
    timestamp: datetime

    @classmethod
    def from_orm(cls, instance: orm.Activity) -> "ActivityEntry":
        details: dict[str, Any] = {}
        if instance.details:
            try:
                details = json.loads(instance.details)
            except json.JSONDecodeError:
                details = {}
        return cls(
            id=int(instance.id),
            type=instance.type,
            user_id=instance.user_id,
            admin_id=instance.admin_id,
            details=details,
            ip_address=instance.ip_address,
            user_agent=instance.user_agent,
            timestamp=instance.timestamp,
        )
