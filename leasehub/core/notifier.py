"""
Account notifications dispatched after the response has been sent.

Registration hands the notifier to FastAPI ``BackgroundTasks``; whatever happens
inside ``send_welcome`` is logged here and never reaches the request.
"""
import logging
from typing import Protocol

from leasehub.core.email import mail_enabled, send_welcome_email

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def send_welcome(self, email: str, name: str) -> bool:
        ...


class EmailNotifier:
    """
    Notifier backed by SMTP.

    ``skipped_count`` covers sends while mail is not configured; ``failed_count``
    only counts attempted deliveries that did not go through.
    """

    def __init__(self):
        self.sent_count = 0
        self.skipped_count = 0
        self.failed_count = 0

    async def send_welcome(self, email: str, name: str) -> bool:
        if not mail_enabled():
            self.skipped_count += 1
            logger.debug("Mail not configured; welcome notification for %s skipped", email)
            return False

        try:
            sent = await send_welcome_email(to_email=email, to_name=name)
        except Exception:
            logger.exception("Welcome notification crashed for %s", email)
            sent = False
        if sent:
            self.sent_count += 1
        else:
            self.failed_count += 1
            logger.warning("Welcome notification not delivered to %s (failures so far: %d)", email, self.failed_count)
        return sent
