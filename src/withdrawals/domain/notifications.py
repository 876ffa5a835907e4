"""Notification collaborator interface.

The workflow engine calls ``notify(kind, ref_number)`` after a successful
create/approve/reject/disburse. Delivery is fire-and-forget: a failing
notifier never fails the underlying operation.
"""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, kind: str, ref_number: str) -> None: ...


class LoggingNotifier:
    """Notifier that writes notifications to the log."""

    MESSAGES = {
        "created": "Withdrawal request {ref} has been created",
        "submitted": "Withdrawal request {ref} was submitted for technical review",
        "approved": "Withdrawal request {ref} has been approved",
        "rejected": "Withdrawal request {ref} has been rejected",
        "disbursed": "Withdrawal request {ref} has been disbursed",
    }

    def notify(self, kind: str, ref_number: str) -> None:
        template = self.MESSAGES.get(kind, "Withdrawal request {ref}: " + kind)
        logger.info(template.format(ref=ref_number))

