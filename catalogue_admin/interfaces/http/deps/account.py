"""Account, newsletter and reporting service providers."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from catalogue_admin.modules.accounts import AccountService
from catalogue_admin.modules.newsletter import NewsletterService
from catalogue_admin.modules.reports import ReportService

from .database import get_db_session


def get_account_service(db: AsyncSession = Depends(get_db_session)) -> AccountService:
    return AccountService.with_session(db)


def get_newsletter_service(db: AsyncSession = Depends(get_db_session)) -> NewsletterService:
    return NewsletterService.with_session(db)


def get_report_service(db: AsyncSession = Depends(get_db_session)) -> ReportService:
    return ReportService.with_session(db)


__all__ = [
    "get_account_service",
    "get_newsletter_service",
    "get_report_service",
]
