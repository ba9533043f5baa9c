from datetime import datetime, timezone

import pytest

from dispatcher import InquiryDispatcher
from errors import TransportError

FIXED_NOW = datetime(2026, 10, 19, 14, 5, tzinfo=timezone.utc)
OPERATOR = "owner@designx.test"


class FakeTransport:
    """Records messages; raises TransportError for recipients in ``fail_for``."""

    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    async def send_mail(self, message):
        self.sent.append(message)
        if str(message["To"]) in self.fail_for:
            raise TransportError(f"relay refused {message['To']}")
        return f"<{len(self.sent)}@fake.test>"


def make_dispatcher(transport, **kwargs) -> InquiryDispatcher:
    kwargs.setdefault("brand_name", "DesignX")
    return InquiryDispatcher(transport, operator_email=OPERATOR, clock=lambda: FIXED_NOW, **kwargs)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def valid_payload():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "service": "Branding",
        "message": "Need a logo",
    }
