"""Outbound mail and post-access side effects."""

from .dispatcher import SideEffectDispatcher, render_operator_email
from .mailer import Mailer
from .models import Attachment, OutboundMessage, SendResult

__all__ = [
    "Attachment",
    "Mailer",
    "OutboundMessage",
    "SendResult",
    "SideEffectDispatcher",
    "render_operator_email",
]
