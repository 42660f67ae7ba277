"""
Simulated email delivery for notification echoes.

Nothing leaves the process. Each "sent" email is logged on the
"notifications" logger and kept in memory, so the HTTP adapter and tests can
see what the shop owner would have received.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from shared.models import AppNotification, NotificationType
from shared.templates import email_subject_for

logger = logging.getLogger("notifications")


DEFAULT_SENDER = "notifications@pos-pro.local"


@dataclass
class EmailMessage:
    recipient: str
    subject: str
    body: str
    sender: str = DEFAULT_SENDER
    notification_type: Optional[NotificationType] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        return f"{self.subject} -> {self.recipient}"


class EmailChannel:
    """Records simulated emails instead of sending them."""

    def __init__(self, sender: str = DEFAULT_SENDER):
        self.sender = sender
        self.sent_messages: list[EmailMessage] = []

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        notification_type: Optional[NotificationType] = None,
    ) -> EmailMessage:
        """Record one email and log it."""
        message = EmailMessage(
            recipient=to,
            subject=subject,
            body=body,
            sender=self.sender,
            notification_type=notification_type,
        )
        logger.info(f"[EMAIL] To: {to} | Subject: {subject}")
        logger.debug(f"[EMAIL BODY] {body}")
        self.sent_messages.append(message)
        return message

    def alert(self, notification: AppNotification, to: str) -> EmailMessage:
        """
        Email a notification to the shop owner.

        The subject depends on the notification type; the body is the
        notification message unchanged.
        """
        return self.send(
            to=to,
            subject=email_subject_for(notification.type),
            body=notification.message,
            notification_type=notification.type,
        )

    def get_sent_count(self) -> int:
        return len(self.sent_messages)

    def clear_history(self) -> None:
        self.sent_messages.clear()

    def find_message_to(self, recipient: str) -> Optional[EmailMessage]:
        """First email sent to recipient, or None."""
        return next((m for m in self.sent_messages if m.recipient == recipient), None)
