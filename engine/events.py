"""
Outcome events produced by the state engine.

Each engine operation yields exactly one of these, success or rejection. The
notification cascade turns them into notifications and the event bus hands
them to observers.

Design decisions:
- Events are named in past tense (SaleRecorded, not RecordSale)
- Events carry every value the cascade needs, so it never reads engine state
- Helper functions build properly structured Event objects
"""

from typing import Any

from engine.event_bus import Event


# =============================================================================
# Event Type Constants
# =============================================================================

class EventTypes:
    """Constants for event type names."""
    # Category events
    CATEGORY_CREATED = "CategoryCreated"
    CATEGORY_DELETED = "CategoryDeleted"
    CATEGORY_DELETE_BLOCKED = "CategoryDeleteBlocked"
    CATEGORY_NOT_FOUND = "CategoryNotFound"

    # Product events
    PRODUCT_CREATED = "ProductCreated"
    PRODUCT_UPDATED = "ProductUpdated"
    PRODUCT_UPDATE_NOT_FOUND = "ProductUpdateNotFound"
    PRODUCT_DELETED = "ProductDeleted"
    PRODUCT_DELETE_NOT_FOUND = "ProductDeleteNotFound"

    # Sale events
    SALE_RECORDED = "SaleRecorded"
    SALE_PRODUCT_NOT_FOUND = "SaleProductNotFound"
    SALE_INSUFFICIENT_STOCK = "SaleInsufficientStock"

    # Settings / manual
    SETTINGS_UPDATED = "SettingsUpdated"
    NOTIFICATION_REQUESTED = "NotificationRequested"


# =============================================================================
# Category Events
# =============================================================================

def category_created(category_id: str, category_name: str) -> Event:
    return Event(
        event_type=EventTypes.CATEGORY_CREATED,
        payload={"category_id": category_id, "category_name": category_name},
    )


def category_deleted(category_id: str, category_name: str) -> Event:
    return Event(
        event_type=EventTypes.CATEGORY_DELETED,
        payload={"category_id": category_id, "category_name": category_name},
    )


def category_delete_blocked(category_id: str, category_name: str, product_ids: list[str]) -> Event:
    """
    Published when a category still has products pointing at it.

    product_ids lists the referencing products, for observers.
    """
    return Event(
        event_type=EventTypes.CATEGORY_DELETE_BLOCKED,
        payload={
            "category_id": category_id,
            "category_name": category_name,
            "product_ids": product_ids,
        },
    )


def category_not_found(category_id: str) -> Event:
    return Event(
        event_type=EventTypes.CATEGORY_NOT_FOUND,
        payload={"category_id": category_id},
    )


# =============================================================================
# Product Events
# =============================================================================

def product_created(product_id: str, product_name: str) -> Event:
    return Event(
        event_type=EventTypes.PRODUCT_CREATED,
        payload={"product_id": product_id, "product_name": product_name},
    )


def product_updated(product_id: str, product_name: str, changes: dict[str, Any]) -> Event:
    """
    Published after a product record was replaced.

    changes maps each modified field to its (old, new) pair.
    """
    return Event(
        event_type=EventTypes.PRODUCT_UPDATED,
        payload={
            "product_id": product_id,
            "product_name": product_name,
            "changes": changes,
        },
    )


def product_update_not_found(product_id: str, product_name: str) -> Event:
    return Event(
        event_type=EventTypes.PRODUCT_UPDATE_NOT_FOUND,
        payload={"product_id": product_id, "product_name": product_name},
    )


def product_deleted(product_id: str, product_name: str) -> Event:
    return Event(
        event_type=EventTypes.PRODUCT_DELETED,
        payload={"product_id": product_id, "product_name": product_name},
    )


def product_delete_not_found(product_id: str) -> Event:
    return Event(
        event_type=EventTypes.PRODUCT_DELETE_NOT_FOUND,
        payload={"product_id": product_id},
    )


# =============================================================================
# Sale Events
# =============================================================================

def sale_recorded(
    sale_id: str,
    product_id: str,
    product_name: str,
    quantity: int,
    total: float,
    new_stock: int,
) -> Event:
    """
    Published when a sale was stored and stock decremented.

    new_stock drives the low-stock / out-of-stock follow-up.
    """
    return Event(
        event_type=EventTypes.SALE_RECORDED,
        payload={
            "sale_id": sale_id,
            "product_id": product_id,
            "product_name": product_name,
            "quantity": quantity,
            "total": total,
            "new_stock": new_stock,
        },
    )


def sale_product_not_found(product_id: str, quantity: int) -> Event:
    return Event(
        event_type=EventTypes.SALE_PRODUCT_NOT_FOUND,
        payload={"product_id": product_id, "quantity": quantity},
    )


def sale_insufficient_stock(product_id: str, product_name: str, quantity: int, stock: int) -> Event:
    return Event(
        event_type=EventTypes.SALE_INSUFFICIENT_STOCK,
        payload={
            "product_id": product_id,
            "product_name": product_name,
            "quantity": quantity,
            "stock": stock,
        },
    )


# =============================================================================
# Settings / manual notifications
# =============================================================================

def settings_updated(notification_email: str) -> Event:
    return Event(
        event_type=EventTypes.SETTINGS_UPDATED,
        payload={"notification_email": notification_email},
    )


def notification_requested(message: str, notification_type: str) -> Event:
    return Event(
        event_type=EventTypes.NOTIFICATION_REQUESTED,
        payload={"message": message, "type": notification_type},
        source="manual",
    )
