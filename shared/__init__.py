"""
Shared building blocks for the point-of-sale engine.

This package contains:
- Domain models (Category, Product, Sale, AppNotification, AppSettings)
- Key-value persistence backends (memory and JSON files)
- The mock email channel used for the simulated alert echo
- Message templates and currency formatting
"""

from shared.models import (
    Category,
    Product,
    Sale,
    AppNotification,
    AppSettings,
    NotificationType,
)
from shared.storage import StateStore, MemoryStore, JsonFileStore, StorageKeys
from shared.channels import EmailChannel, EmailMessage
from shared.formatting import format_currency

__all__ = [
    "Category",
    "Product",
    "Sale",
    "AppNotification",
    "AppSettings",
    "NotificationType",
    "StateStore",
    "MemoryStore",
    "JsonFileStore",
    "StorageKeys",
    "EmailChannel",
    "EmailMessage",
    "format_currency",
]
