import aiosmtplib
import pytest

from catalogue_admin.core.config import MailSettings
from catalogue_admin.core.errors import NotFoundError, TransferFailedError
from catalogue_admin.modules.access import transfer
from catalogue_admin.modules.activities import ActivityKind, ActivityService
from catalogue_admin.modules.common import RequestOrigin
from catalogue_admin.modules.notifications import (
    Attachment,
    Mailer,
    OutboundMessage,
    SideEffectDispatcher,
    render_operator_email,
)
from tests.helpers import FakeMailer


def _mail_settings(**overrides) -> MailSettings:
    values = {
        "enabled": True,
        "host": "smtp.example.com",
        "sender": "catalogues@example.com",
        "retries": 2,
        "retry_backoff_seconds": 0,
    }
    values.update(overrides)
    return MailSettings(**values)


async def test_disabled_mailer_reports_not_sent(monkeypatch):
    calls = []

    async def fake_send(*args, **kwargs):
        calls.append(kwargs)

    monkeypatch.setattr(aiosmtplib, "send", fake_send)
    mailer = Mailer(_mail_settings(enabled=False))

    result = await mailer.send(OutboundMessage(subject="Hi", body_html="<p>Hi</p>", recipients=["a@example.com"]))

    assert result.success is False
    assert calls == []


async def test_mailer_falls_back_to_starttls(monkeypatch):
    calls = []

    async def fake_send(message, **kwargs):
        calls.append(kwargs)
        if kwargs["use_tls"]:
            raise OSError("connection refused")

    monkeypatch.setattr(aiosmtplib, "send", fake_send)
    mailer = Mailer(_mail_settings())

    result = await mailer.send(OutboundMessage(subject="Hi", body_html="<p>Hi</p>", recipients=["a@example.com"]))

    assert result.success is True
    assert result.message_id
    assert [(call["port"], call["use_tls"], call["start_tls"]) for call in calls] == [
        (465, True, False),
        (587, False, True),
    ]


async def test_mailer_retries_then_gives_up(monkeypatch):
    attempts = []

    async def fake_send(message, **kwargs):
        attempts.append(kwargs["port"])
        raise aiosmtplib.SMTPException("server said no")

    monkeypatch.setattr(aiosmtplib, "send", fake_send)
    mailer = Mailer(_mail_settings(retries=3))

    result = await mailer.send(OutboundMessage(subject="Hi", body_html="<p>Hi</p>", recipients=["a@example.com"]))

    assert result.success is False
    assert result.attempts == 3
    assert "server said no" in result.error
    assert attempts == [465, 587] * 3


async def test_message_carries_attachments(tmp_path):
    pdf = tmp_path / "brochure.pdf"
    pdf.write_bytes(b"%PDF-1.4 attachment")
    mailer = Mailer(_mail_settings(subject_prefix="[Catalogues]"))

    email = await mailer.build_message(
        OutboundMessage(
            subject="Your catalogues",
            body_html="<p>Attached</p>",
            recipients=["a@example.com"],
            attachments=[Attachment(filename="Extruders.pdf", path=pdf, mime_type="application/pdf")],
        )
    )

    assert email["Subject"] == "[Catalogues] Your catalogues"
    attachments = list(email.iter_attachments())
    assert [part.get_filename() for part in attachments] == ["Extruders.pdf"]
    assert attachments[0].get_content() == b"%PDF-1.4 attachment"


def test_operator_email_escapes_values():
    body = render_operator_email(ActivityKind.CATALOGUE_EMAIL_REQUEST, {"name": "<script>", "files": ["a.pdf", "b.pdf"]})

    assert "&lt;script&gt;" in body
    assert "a.pdf, b.pdf" in body


async def test_dispatcher_logs_activity_and_notifies_operators(session_factory):
    mailer = FakeMailer()
    dispatcher = SideEffectDispatcher(session_factory, mailer, ["ops@example.com"])
    origin = RequestOrigin(address="203.0.113.7", client="pytest")

    dispatcher.notify(ActivityKind.CATALOGUE_DOWNLOAD, {"fileName": "Extruders.pdf"}, user_id="user-1", origin=origin)
    await dispatcher.drain()

    assert dispatcher.pending == 0
    async with session_factory() as session:
        page = await ActivityService.with_session(session).list_activities(kind="catalogue_download")
    assert page.pagination.total == 1
    entry = page.items[0]
    assert entry.user_id == "user-1"
    assert entry.details == {"fileName": "Extruders.pdf"}
    assert entry.ip_address == "203.0.113.7"
    assert len(mailer.sent_to("ops@example.com")) == 1


async def test_dispatcher_survives_mailer_crash(session_factory):
    class ExplodingMailer(FakeMailer):
        async def send(self, message):
            raise RuntimeError("boom")

    dispatcher = SideEffectDispatcher(session_factory, ExplodingMailer(), ["ops@example.com"])

    dispatcher.notify(ActivityKind.PRODUCT_CATALOGUES_DOWNLOAD, {"product": "company-profile"})
    await dispatcher.drain()

    async with session_factory() as session:
        assert await ActivityService.with_session(session).count() == 1


async def test_dispatcher_without_recipients_only_logs(session_factory):
    mailer = FakeMailer()
    dispatcher = SideEffectDispatcher(session_factory, mailer, [])

    dispatcher.notify(ActivityKind.CATALOGUE_DOWNLOAD_TRACKED, {"recorded": 1})
    await dispatcher.drain()

    assert mailer.sent == []


async def test_attach_skips_missing_blobs(add_catalogue):
    present = await add_catalogue("Twin Screw Extruders.pdf")
    missing = await add_catalogue("Twin Screw Spare Parts.pdf", with_blob=False)
    mailer = FakeMailer()

    delivery = await transfer.attach(
        [present, missing],
        destination="buyer@example.com",
        subject="Catalogues",
        body_html="<p>Attached</p>",
        mailer=mailer,
    )

    assert [entry.id for entry in delivery.entries] == [present.id]
    (message,) = mailer.sent
    assert [attachment.filename for attachment in message.attachments] == ["Twin Screw Extruders.pdf"]


async def test_attach_without_any_blob(add_catalogue):
    missing = await add_catalogue("Company Profile.pdf", with_blob=False)

    with pytest.raises(NotFoundError) as exc_info:
        await transfer.attach(
            [missing], destination="buyer@example.com", subject="x", body_html="x", mailer=FakeMailer()
        )

    assert exc_info.value.error == "no_files_available"


async def test_attach_send_failure(add_catalogue):
    entry = await add_catalogue("Company Profile.pdf")
    mailer = FakeMailer()
    mailer.fail = True

    with pytest.raises(TransferFailedError) as exc_info:
        await transfer.attach([entry], destination="buyer@example.com", subject="x", body_html="x", mailer=mailer)

    assert exc_info.value.error == "email_send_failed"
    assert exc_info.value.status_code == 502
