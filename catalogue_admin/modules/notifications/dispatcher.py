"""Fire-and-forget side effects that follow a catalogue access."""

from __future__ import annotations

import asyncio
import html
import logging
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalogue_admin.core.errors import NotificationFailedError
from catalogue_admin.modules.activities import ActivityKind, log_activity
from catalogue_admin.modules.common import RequestOrigin

from .mailer import Mailer
from .models import OutboundMessage

logger = logging.getLogger(__name__)

_SUBJECTS = {
    ActivityKind.CATALOGUE_DOWNLOAD: "Catalogue downloaded",
    ActivityKind.PRODUCT_CATALOGUES_DOWNLOAD: "Product catalogues downloaded",
    ActivityKind.CATALOGUE_EMAIL_REQUEST: "Catalogue requested by email",
    ActivityKind.CATALOGUE_DOWNLOAD_TRACKED: "Catalogue download tracked",
    ActivityKind.NEWSLETTER_SUBSCRIBE: "New newsletter subscription",
}


def render_operator_email(kind: ActivityKind, payload: Mapping[str, Any]) -> str:
    rows = "".join(
        f"<tr><th align=\"left\">{html.escape(str(key))}</th><td>{html.escape(_format_value(value))}</td></tr>"
        for key, value in payload.items()
    )
    title = html.escape(_SUBJECTS.get(kind, kind.value))
    return f"<h2>{title}</h2><table>{rows}</table>"


def _format_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    return "" if value is None else str(value)


class SideEffectDispatcher:
    """Spawns the activity log entry and operator email for an access event.

    Both tasks are independent and best-effort.  Pending tasks are held in
    ``tasks`` so that shutdown can wait for them via ``drain``.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        mailer: Mailer,
        recipients: Sequence[str],
        tasks: Optional[set[asyncio.Task]] = None,
    ) -> None:
        self._session_factory = session_factory
        self._mailer = mailer
        self._recipients = list(recipients)
        self._tasks = tasks if tasks is not None else set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def notify(
        self,
        kind: ActivityKind,
        payload: Mapping[str, Any],
        *,
        user_id: Optional[str] = None,
        admin_id: Optional[str] = None,
        origin: Optional[RequestOrigin] = None,
    ) -> None:
        details = dict(payload)
        self._spawn(self._log(kind, details, user_id, admin_id, origin), f"activity:{kind.value}")
        if self._recipients:
            self._spawn(self._email(kind, details), f"email:{kind.value}")

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _spawn(self, coro, name: str) -> None:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _log(
        self,
        kind: ActivityKind,
        details: dict[str, Any],
        user_id: Optional[str],
        admin_id: Optional[str],
        origin: Optional[RequestOrigin],
    ) -> None:
        entry = await log_activity(
            self._session_factory,
            kind,
            user_id=user_id,
            admin_id=admin_id,
            details=details,
            origin=origin,
        )
        if entry is None:
            logger.warning("Activity %s was not recorded", kind.value)

    async def _email(self, kind: ActivityKind, details: dict[str, Any]) -> None:
        try:
            await self._deliver(kind, details)
        except NotificationFailedError as exc:
            logger.warning("Operator notification for %s not sent: %s", kind.value, exc)

    async def _deliver(self, kind: ActivityKind, details: dict[str, Any]) -> None:
        message = OutboundMessage(
            subject=_SUBJECTS.get(kind, kind.value),
            body_html=render_operator_email(kind, details),
            recipients=self._recipients,
        )
        try:
            result = await self._mailer.send(message)
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Mailer crashed while notifying operators about %s", kind.value)
            raise NotificationFailedError(str(exc)) from exc
        if not result.success:
            raise NotificationFailedError(result.error or "unknown error")
