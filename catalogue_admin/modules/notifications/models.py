"""Outbound mail value objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence


@dataclass(frozen=True, slots=True)
class Attachment:
    filename: str
    path: Path
    mime_type: str = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class OutboundMessage:
    subject: str
    body_html: str
    recipients: Sequence[str]
    attachments: Sequence[Attachment] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class SendResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
    attempts: int = 0
