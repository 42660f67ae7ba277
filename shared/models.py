"""
Domain models for the point-of-sale state engine.

These are the five persisted record types: categories, products, sales,
notifications and the settings record.

Design decisions:
- Using Pydantic for validation and serialization
- Every model is frozen; the engine produces new records with model_copy()
- Python names are snake_case, the stored JSON keeps camelCase aliases
  (categoryId, salePrice, ...) so documents match the browser storage shape
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


class RecordModel(BaseModel):
    """Base for persisted records: immutable, camelCase on the wire."""
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# Enums
# =============================================================================

class NotificationType(str, Enum):
    """Severity of a user-facing notification."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


# Types that are echoed to the configured notification email
EMAIL_ELIGIBLE_TYPES = frozenset({NotificationType.ERROR, NotificationType.WARNING})


# =============================================================================
# Catalog
# =============================================================================

class Category(RecordModel):
    """A product category. The id never changes once created."""
    id: str = Field(..., description="Unique category identifier")
    name: str = Field(..., description="Display name")
    icon: str = Field(default="", description="Emoji shown next to the name")


class Product(RecordModel):
    """
    A sellable product.

    category_id is checked by nobody at creation time; deleting a category is
    refused while any product still points at it.
    """
    id: str = Field(..., description="Unique product identifier")
    name: str = Field(..., description="Display name")
    category_id: str = Field(..., description="Reference to category")
    stock: int = Field(..., ge=0, description="Units currently available")
    sale_price: float = Field(..., ge=0, description="Current selling price")
    purchase_price: float = Field(..., ge=0, description="Current purchase cost")
    total_sales: int = Field(default=0, ge=0, description="Cumulative units sold")

    @property
    def unit_margin(self) -> float:
        return self.sale_price - self.purchase_price


# =============================================================================
# Sales
# =============================================================================

class Sale(RecordModel):
    """
    A recorded sale.

    Price fields are a snapshot taken at sale time. Later catalog edits never
    change them.
    """
    id: str
    product_id: str
    product_name: str
    quantity: int = Field(..., gt=0)
    unit_price: float = Field(..., ge=0)
    total: float
    profit: float
    date: datetime = Field(default_factory=utcnow)


# =============================================================================
# Notifications & settings
# =============================================================================

class AppNotification(RecordModel):
    """A user-facing alert. Never edited after creation."""
    id: str
    message: str
    type: NotificationType
    timestamp: datetime = Field(default_factory=utcnow)

    @property
    def is_email_eligible(self) -> bool:
        return self.type in EMAIL_ELIGIBLE_TYPES


class AppSettings(RecordModel):
    """Single settings record, replaced wholesale on update."""
    notification_email: str = Field(
        default="",
        description="Address that error/warning notifications are echoed to; empty disables it",
    )


# =============================================================================
# Operation inputs
# =============================================================================

class NewCategory(RecordModel):
    """Input for add_category."""
    name: str = Field(..., min_length=1)
    icon: str = ""


class NewProduct(RecordModel):
    """Input for add_product (no id, no total_sales)."""
    name: str = Field(..., min_length=1)
    category_id: str
    stock: int = Field(..., ge=0)
    sale_price: float = Field(..., ge=0)
    purchase_price: float = Field(..., ge=0)


class SaleRequest(RecordModel):
    """Input for add_sale."""
    product_id: str
    quantity: int = Field(..., gt=0)


class NotificationRequest(RecordModel):
    """Input for direct notification injection."""
    message: str = Field(..., min_length=1)
    type: NotificationType = NotificationType.INFO
