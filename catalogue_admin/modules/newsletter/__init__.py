"""Newsletter subscription exports."""

from .models import SUBSCRIPTION_SOURCES, SubscribeInput, SubscribeOutcome, Subscriber
from .service import NewsletterService

__all__ = [
    "NewsletterService",
    "SUBSCRIPTION_SOURCES",
    "SubscribeInput",
    "SubscribeOutcome",
    "Subscriber",
]
