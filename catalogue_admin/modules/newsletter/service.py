"""Newsletter subscriptions: public sign-up and unsubscribe, admin listing and export."""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from catalogue_admin.core.crypto import random_token
from catalogue_admin.core.errors import NotFoundError, ValidationFailedError
from catalogue_admin.db.models import utcnow
from catalogue_admin.modules.catalogues.models import Page, Pagination

from .models import SUBSCRIPTION_SOURCES, SubscribeInput, SubscribeOutcome, Subscriber
from .repository import SubscriberRepository

logger = logging.getLogger(__name__)

EXPORT_FIELDS = (
    "email",
    "name",
    "companyName",
    "phoneNumber",
    "city",
    "source",
    "isActive",
    "subscribedAt",
    "unsubscribedAt",
    "emailCount",
)


@dataclass(slots=True)
class NewsletterService:
    repository: SubscriberRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "NewsletterService":
        from catalogue_admin.infrastructure.database.repositories.newsletter_repository import (
            SqlSubscriberRepository,
        )

        return cls(SqlSubscriberRepository(session))

    async def subscribe(self, payload: SubscribeInput) -> SubscribeOutcome:
        """Create a subscription, or reactivate a lapsed one for the same address.

        An address that is already active is rejected.  On reactivation the
        profile fields are only overwritten by values that were supplied.
        """
        email = payload.email.strip().lower()
        source = payload.source or "app"
        if source not in SUBSCRIPTION_SOURCES:
            raise ValidationFailedError("validation_failed", f"Unknown subscription source: {source}")

        existing = await self.repository.get_by_email(email)
        if existing is not None:
            if existing.is_active:
                raise ValidationFailedError("already_subscribed", "Email is already subscribed to newsletter")
            changes = {
                "is_active": True,
                "unsubscribed_at": None,
                "name": payload.name or existing.name,
                "company_name": payload.company_name or existing.company_name,
                "phone_number": payload.phone_number or existing.phone_number,
                "city": payload.city or existing.city,
                "source": payload.source or existing.source,
            }
            if not existing.unsubscribe_token:
                changes["unsubscribe_token"] = random_token()
            subscriber = await self.repository.update(existing.id, changes)
            assert subscriber is not None
            logger.info("Newsletter subscription reactivated for %s", email)
            return SubscribeOutcome(subscriber=subscriber, created=False)

        subscriber = await self.repository.create(
            email=email,
            name=payload.name,
            company_name=payload.company_name,
            phone_number=payload.phone_number,
            city=payload.city,
            source=source,
            is_active=True,
            subscribed_at=utcnow(),
            unsubscribe_token=random_token(),
        )
        logger.info("Newsletter subscription created for %s", email)
        return SubscribeOutcome(subscriber=subscriber, created=True)

    async def unsubscribe(self, token: str) -> Subscriber:
        subscriber = await self.repository.get_by_token(token)
        if subscriber is None:
            raise NotFoundError("invalid_unsubscribe_token", "Invalid unsubscribe token")
        updated = await self.repository.update(
            subscriber.id,
            {"is_active": False, "unsubscribed_at": utcnow()},
        )
        assert updated is not None
        return updated

    async def set_status(self, subscriber_id: str, is_active: bool) -> Subscriber:
        changes: dict = {"is_active": is_active}
        changes["unsubscribed_at"] = None if is_active else utcnow()
        subscriber = await self.repository.update(subscriber_id, changes)
        if subscriber is None:
            raise NotFoundError("subscriber_not_found", "Subscriber not found")
        return subscriber

    async def list_subscribers(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Page[Subscriber]:
        page = max(page, 1)
        limit = max(limit, 1)
        subscribers, total = await self.repository.list_subscribers(
            skip=(page - 1) * limit,
            limit=limit,
            search=search or None,
            is_active=is_active,
        )
        return Page(items=subscribers, pagination=Pagination.build(page, limit, total))

    async def count(self, *, active_only: bool = False) -> int:
        return await self.repository.count(active_only=active_only)

    async def export_csv(self) -> str:
        subscribers, _ = await self.repository.list_subscribers(skip=None, limit=None)
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=EXPORT_FIELDS)
        writer.writeheader()
        for subscriber in subscribers:
            writer.writerow(
                {
                    "email": subscriber.email,
                    "name": subscriber.name or "",
                    "companyName": subscriber.company_name or "",
                    "phoneNumber": subscriber.phone_number or "",
                    "city": subscriber.city or "",
                    "source": subscriber.source,
                    "isActive": str(subscriber.is_active).lower(),
                    "subscribedAt": subscriber.subscribed_at.isoformat() if subscriber.subscribed_at else "",
                    "unsubscribedAt": subscriber.unsubscribed_at.isoformat() if subscriber.unsubscribed_at else "",
                    "emailCount": subscriber.email_count,
                }
            )
        return buffer.getvalue()
