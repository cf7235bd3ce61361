"""Test doubles and small helpers shared by the test modules."""

from fastapi.testclient import TestClient

from catalogue_admin.modules.accounts import Account
from catalogue_admin.modules.notifications import OutboundMessage, SendResult

USER = Account(
    id="user-1",
    username="buyer",
    name="Jordan Buyer",
    email="buyer@example.com",
    role="user",
    is_active=True,
    password_hash="",
)
ADMIN = Account(
    id="admin-1",
    username="admin",
    name="Site Admin",
    email="admin@example.com",
    role="super_admin",
    is_active=True,
    password_hash="",
)

PRODUCT_MAP = {
    "products": {
        "twin-screw-extruders": ["Twin Screw Extruders.pdf", "Twin Screw Spare Parts.pdf"],
        "pipe-extrusion-lines": ["Pipe Extrusion Lines.pdf"],
        "company-profile": ["Company Profile.pdf"],
    },
    "aliases": {"1": "twin-screw-extruders", "2": "pipe-extrusion-lines", "6": "company-profile"},
}


class FakeMailer:
    """Records outgoing messages instead of talking to an SMTP server."""

    def __init__(self) -> None:
        self.sent: list[OutboundMessage] = []
        self.fail = False

    @property
    def enabled(self) -> bool:
        return True

    async def send(self, message: OutboundMessage) -> SendResult:
        if self.fail:
            return SendResult(success=False, error="smtp unavailable", attempts=3)
        self.sent.append(message)
        return SendResult(success=True, message_id=f"<fake-{len(self.sent)}@test>", attempts=1)

    def sent_to(self, address: str) -> list[OutboundMessage]:
        return [message for message in self.sent if address in message.recipients]


def upload_pdf(client: TestClient, name: str, content: bytes = b"%PDF-1.4 brochure", **form) -> dict:
    response = client.post(
        "/api/catalogue/upload",
        files={"catalogue": (name, content, "application/pdf")},
        data=form,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]["catalogue"]
