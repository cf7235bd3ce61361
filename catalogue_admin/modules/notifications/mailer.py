"""SMTP delivery via aiosmtplib."""

from __future__ import annotations

import asyncio
import logging
from email.message import EmailMessage
from email.utils import make_msgid

import aiosmtplib
import anyio
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from catalogue_admin.core.config import MailSettings

from .models import OutboundMessage, SendResult

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError)


class Mailer:
    """Sends HTML mail with optional file attachments.

    Each attempt tries the implicit TLS port first and then STARTTLS on the
    fallback port.  Failed attempts are retried with exponential backoff up
    to ``settings.retries`` times.  ``send`` never raises; the outcome is
    reported through ``SendResult``.
    """

    def __init__(self, settings: MailSettings) -> None:
        self._settings = settings

    @property
    def enabled(self) -> bool:
        return self._settings.enabled

    async def build_message(self, message: OutboundMessage) -> EmailMessage:
        settings = self._settings
        email = EmailMessage()
        subject = message.subject
        if settings.subject_prefix:
            subject = f"{settings.subject_prefix} {subject}"
        email["Subject"] = subject
        email["From"] = settings.sender
        email["To"] = ", ".join(message.recipients)
        email["Message-ID"] = make_msgid(domain=settings.sender.rsplit("@", 1)[-1] or None)
        email.set_content("This message requires an HTML capable mail client.")
        email.add_alternative(message.body_html, subtype="html")
        for attachment in message.attachments:
            data = await anyio.Path(attachment.path).read_bytes()
            maintype, _, subtype = attachment.mime_type.partition("/")
            email.add_attachment(
                data,
                maintype=maintype or "application",
                subtype=subtype or "octet-stream",
                filename=attachment.filename,
            )
        return email

    async def send(self, message: OutboundMessage) -> SendResult:
        settings = self._settings
        if not message.recipients:
            logger.warning("Mail '%s' has no recipients, skipped", message.subject)
            return SendResult(success=False, error="no recipients")
        if not settings.enabled:
            logger.info("Mail disabled, not sending '%s' to %s", message.subject, list(message.recipients))
            return SendResult(success=False, error="mail disabled")

        try:
            email = await self.build_message(message)
        except OSError as exc:
            logger.error("Could not read attachment for '%s': %s", message.subject, exc)
            return SendResult(success=False, error=str(exc))

        attempts = max(settings.retries, 1)
        retrying = AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=settings.retry_backoff_seconds),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            reraise=True,
        )
        attempt_number = 0
        try:
            async for attempt in retrying:
                with attempt:
                    attempt_number = attempt.retry_state.attempt_number
                    await self._deliver_once(email, attempt_number, attempts)
        except TRANSIENT_ERRORS as exc:
            error = str(exc) or exc.__class__.__name__
            logger.error("Mail '%s' failed after %s attempts: %s", message.subject, attempt_number, error)
            return SendResult(success=False, error=error, attempts=attempt_number)

        logger.info("Mail '%s' sent to %s", message.subject, list(message.recipients))
        return SendResult(success=True, message_id=email["Message-ID"], attempts=attempt_number)

    async def _deliver_once(self, email: EmailMessage, attempt: int, attempts: int) -> None:
        """One attempt: implicit TLS first, then STARTTLS on the fallback port."""
        settings = self._settings
        routes = ((settings.port, True), (settings.fallback_port, False))
        for index, (port, implicit_tls) in enumerate(routes):
            try:
                await aiosmtplib.send(
                    email,
                    hostname=settings.host,
                    port=port,
                    username=settings.username,
                    password=settings.password,
                    use_tls=implicit_tls,
                    start_tls=not implicit_tls,
                    timeout=settings.timeout,
                )
                return
            except TRANSIENT_ERRORS as exc:
                logger.warning(
                    "Mail attempt %s/%s via %s:%s failed: %s",
                    attempt,
                    attempts,
                    settings.host,
                    port,
                    str(exc) or exc.__class__.__name__,
                )
                if index == len(routes) - 1:
                    raise
