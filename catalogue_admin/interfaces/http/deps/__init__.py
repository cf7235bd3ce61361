"""Reusable FastAPI dependencies."""

from .database import get_db_session
from .account import get_account_service, get_newsletter_service, get_report_service
from .catalogue import (
    get_access_service,
    get_app_container,
    get_catalogue_service,
    get_download_tracker,
    get_mailer,
    get_request_origin,
    get_side_effect_dispatcher,
)

__all__ = [
    "get_db_session",
    "get_account_service",
    "get_newsletter_service",
    "get_report_service",
    "get_access_service",
    "get_app_container",
    "get_catalogue_service",
    "get_download_tracker",
    "get_mailer",
    "get_request_origin",
    "get_side_effect_dispatcher",
]
