import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from emails import build_business_email, build_client_email
from errors import TransportError, ValidationError
from models.dispatch_result import DeliveryIds, DispatchResult
from models.inquiry import InquiryPayload

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InquiryDispatcher:
    """
    Validates an inquiry and relays it as a business notification plus an
    optional client acknowledgement.

    Both sends run concurrently and the outcome is all-or-nothing: the first
    failure is raised as TransportError and the other send is ignored.
    Nothing is retried.
    """

    def __init__(
        self,
        transport,
        operator_email: str,
        sender: Optional[str] = None,
        brand_name: str = "DesignX",
        send_confirmation: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.transport = transport
        self.operator_email = operator_email
        self.sender = sender or operator_email
        self.brand_name = brand_name
        self.send_confirmation = send_confirmation
        self.clock = clock

    async def _send(self, kind: str, message) -> str:
        try:
            message_id = await self.transport.send_mail(message)
        except TransportError:
            log.error("%s email to %s failed", kind, message["To"])
            raise
        except Exception as e:
            log.error("%s email to %s failed: %s", kind, message["To"], e)
            raise TransportError(str(e)) from e
        log.info("%s email sent to %s (id=%s)", kind, message["To"], message_id)
        return message_id

    async def dispatch(self, payload: InquiryPayload) -> DispatchResult:
        missing = payload.missing_fields()
        if missing:
            log.warning("Rejected inquiry, missing fields: %s", ", ".join(missing))
            raise ValidationError(missing)

        now = self.clock()
        sends = [
            self._send(
                "Business",
                build_business_email(payload, self.sender, self.operator_email, self.brand_name, now),
            )
        ]
        if self.send_confirmation:
            sends.append(
                self._send("Client", build_client_email(payload, self.sender, self.brand_name, now))
            )

        ids = await asyncio.gather(*sends)

        return DispatchResult(
            success=True,
            message="Emails sent successfully" if len(ids) > 1 else "Email sent successfully",
            data=DeliveryIds(
                business_email_id=ids[0],
                client_email_id=ids[1] if len(ids) > 1 else None,
            ),
        )
