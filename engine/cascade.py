"""
Notification cascade.

Turns one engine outcome event into the notifications the user should see.
This is the only place that decides which notifications an operation produces.

Rules:
- Each event type maps to zero or more base notifications (see _RULES)
- A recorded sale adds a stock follow-up: warning when 0 < stock <= 10,
  error when stock == 0
- Every error or warning is followed by an email echo (an info notification
  naming the configured address) when settings.notification_email is set

Notifications come back in generation order. The caller prepends them one by
one, so the last generated ends up first in the list.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import uuid4

from engine.event_bus import Event
from engine.events import EventTypes
from shared.channels import EmailChannel
from shared.models import AppNotification, AppSettings, NotificationType
from shared.templates import MessageKey, render_message

logger = logging.getLogger("notification_cascade")


LOW_STOCK_THRESHOLD = 10
OUT_OF_STOCK_LEVEL = 0

# A rule returns the (message key, template context) pairs for an event
Rule = Callable[[dict], list[tuple[MessageKey, dict]]]


def _stock_follow_up(new_stock: int) -> Optional[MessageKey]:
    if new_stock == OUT_OF_STOCK_LEVEL:
        return MessageKey.OUT_OF_STOCK
    if OUT_OF_STOCK_LEVEL < new_stock <= LOW_STOCK_THRESHOLD:
        return MessageKey.LOW_STOCK
    return None


def _sale_recorded(payload: dict) -> list[tuple[MessageKey, dict]]:
    messages = [(MessageKey.SALE_RECORDED, payload)]
    follow_up = _stock_follow_up(payload["new_stock"])
    if follow_up is not None:
        messages.append((follow_up, {**payload, "stock": payload["new_stock"]}))
    return messages


def _single(key: MessageKey) -> Rule:
    return lambda payload: [(key, payload)]


_RULES: dict[str, Rule] = {
    EventTypes.CATEGORY_CREATED: _single(MessageKey.CATEGORY_ADDED),
    EventTypes.CATEGORY_DELETE_BLOCKED: _single(MessageKey.CATEGORY_IN_USE),
    EventTypes.CATEGORY_DELETED: _single(MessageKey.CATEGORY_DELETED),
    EventTypes.CATEGORY_NOT_FOUND: _single(MessageKey.CATEGORY_NOT_FOUND),
    EventTypes.PRODUCT_CREATED: _single(MessageKey.PRODUCT_ADDED),
    EventTypes.PRODUCT_UPDATED: _single(MessageKey.PRODUCT_UPDATED),
    EventTypes.PRODUCT_UPDATE_NOT_FOUND: _single(MessageKey.PRODUCT_NOT_FOUND),
    EventTypes.PRODUCT_DELETED: _single(MessageKey.PRODUCT_DELETED),
    # Deleting a missing product is silent
    EventTypes.PRODUCT_DELETE_NOT_FOUND: lambda payload: [],
    EventTypes.SALE_PRODUCT_NOT_FOUND: _single(MessageKey.SALE_PRODUCT_NOT_FOUND),
    EventTypes.SALE_INSUFFICIENT_STOCK: _single(MessageKey.SALE_INSUFFICIENT_STOCK),
    EventTypes.SALE_RECORDED: _sale_recorded,
    EventTypes.SETTINGS_UPDATED: _single(MessageKey.SETTINGS_UPDATED),
}


class NotificationCascade:
    """
    Derives notifications from engine outcome events.

    Ids and timestamps come from injectable factories so tests can pin them.
    Timestamps never go backwards within one cascade, so an echo is never
    older than the notification it echoes.
    """

    def __init__(
        self,
        id_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.id_factory = id_factory or (lambda: str(uuid4()))
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self._last_timestamp: Optional[datetime] = None

    # =========================================================================
    # Derivation
    # =========================================================================

    def derive(self, event: Event, settings: AppSettings) -> list[AppNotification]:
        """
        Build the notifications for one event, in generation order.

        Args:
            event: Outcome event from the state engine
            settings: Settings in force (for the email echo)

        Returns:
            Notifications to prepend, oldest first
        """
        if event.event_type == EventTypes.NOTIFICATION_REQUESTED:
            base = [(NotificationType(event.payload["type"]), event.payload["message"])]
        else:
            rule = _RULES.get(event.event_type)
            if rule is None:
                logger.debug(f"No notification rule for {event.event_type}")
                return []
            base = [render_message(key, **context) for key, context in rule(event.payload)]

        notifications = []
        for notification_type, message in base:
            notification = self._make(message, notification_type)
            notifications.append(notification)
            echo = self._echo_for(notification, settings)
            if echo is not None:
                notifications.append(echo)

        logger.debug(f"{event.event_type} -> {len(notifications)} notification(s)")
        return notifications

    def _echo_for(self, notification: AppNotification, settings: AppSettings) -> Optional[AppNotification]:
        email = settings.notification_email
        if not email or not notification.is_email_eligible:
            return None
        _, message = render_message(MessageKey.EMAIL_ECHO, email=email, message=notification.message)
        return self._make(message, NotificationType.INFO)

    def _make(self, message: str, notification_type: NotificationType) -> AppNotification:
        timestamp = self.clock()
        if self._last_timestamp is not None and timestamp < self._last_timestamp:
            timestamp = self._last_timestamp
        self._last_timestamp = timestamp
        return AppNotification(
            id=self.id_factory(),
            message=message,
            type=notification_type,
            timestamp=timestamp,
        )

    # =========================================================================
    # Simulated delivery
    # =========================================================================

    @staticmethod
    def deliver_echoes(
        notifications: list[AppNotification],
        settings: AppSettings,
        channel: EmailChannel,
    ) -> int:
        """
        Hand every echoed notification to the mock email channel.

        Returns:
            Number of emails "sent"
        """
        email = settings.notification_email
        if not email:
            return 0
        sent = 0
        for notification in notifications:
            if notification.is_email_eligible:
                channel.alert(notification, to=email)
                sent += 1
        return sent
