"""Newsletter subscriber domain model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from catalogue_admin.db import models as orm

SUBSCRIPTION_SOURCES = ("website", "app", "admin", "other")


@dataclass(slots=True)
class Subscriber:
    id: str
    email: str
    is_active: bool
    source: str
    subscribed_at: datetime
    name: Optional[str] = None
    company_name: Optional[str] = None
    phone_number: Optional[str] = None
    city: Optional[str] = None
    unsubscribed_at: Optional[datetime] = None
    unsubscribe_token: Optional[str] = None
    last_email_sent: Optional[datetime] = None
    email_count: int = 0

    @classmethod
    def from_orm(cls, instance: orm.NewsletterSubscriber) -> "Subscriber":
        return cls(
            id=str(instance.id),
            email=instance.email,
            is_active=bool(instance.is_active),
            source=instance.source or "app",
            subscribed_at=instance.subscribed_at,
            name=instance.name,
            company_name=instance.company_name,
            phone_number=instance.phone_number,
            city=instance.city,
            unsubscribed_at=instance.unsubscribed_at,
            unsubscribe_token=instance.unsubscribe_token,
            last_email_sent=instance.last_email_sent,
            email_count=int(instance.email_count or 0),
        )


@dataclass(slots=True)
class SubscribeInput:
    email: str
    name: Optional[str] = None
    company_name: Optional[str] = None
    phone_number: Optional[str] = None
    city: Optional[str] = None
    source: Optional[str] = None


@dataclass(frozen=True, slots=True)
class SubscribeOutcome:
    subscriber: Subscriber
    created: bool
