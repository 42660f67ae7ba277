"""
State engine for the point of sale.

Owns the five collections (categories, products, sales, notifications,
settings) and is the only thing allowed to change them. Every mutation goes
through one of the operations below, each of which:

1. Validates its input shape (pydantic raises ValidationError on bad shapes)
2. Checks domain rules and either applies the whole change or none of it
3. Saves the collections it changed
4. Runs the notification cascade and prepends the results
5. Publishes the outcome event on the event bus

Domain rejections (unknown id, category in use, not enough stock) are not
exceptions. They come back as an OperationResult with success=False plus an
error notification, and state is left untouched.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional, Union
from uuid import uuid4

from pydantic import Field

from engine import events
from engine.cascade import NotificationCascade
from engine.event_bus import Event, EventBus
from shared.channels import EmailChannel
from shared.formatting import format_currency
from shared.models import (
    AppNotification,
    AppSettings,
    Category,
    NewCategory,
    NewProduct,
    NotificationRequest,
    NotificationType,
    Product,
    RecordModel,
    Sale,
    SaleRequest,
)
from shared.seed import DEFAULT_SETTINGS, INITIAL_CATEGORIES, INITIAL_PRODUCTS
from shared.storage import StateStore, StorageKeys

logger = logging.getLogger("state_engine")


class ErrorKind(str, Enum):
    """Why an operation was declined."""
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INSUFFICIENT_STOCK = "insufficient_stock"


class OperationResult(RecordModel):
    """
    What an engine operation did.

    notifications are in generation order (the last one is now the newest
    entry of the notification list).
    """
    success: bool
    event_type: str
    error: Optional[ErrorKind] = None
    record: Optional[Union[Sale, Product, Category, AppSettings, AppNotification]] = None
    notifications: list[AppNotification] = Field(default_factory=list)


class StateSnapshot(RecordModel):
    """Read-only copy of the whole state, for presentation code."""
    categories: list[Category]
    products: list[Product]
    sales: list[Sale]
    notifications: list[AppNotification]
    settings: AppSettings


@dataclass(frozen=True)
class StateDefaults:
    """Per-collection values used when the store has nothing saved."""
    categories: tuple[Category, ...] = tuple(INITIAL_CATEGORIES)
    products: tuple[Product, ...] = tuple(INITIAL_PRODUCTS)
    sales: tuple[Sale, ...] = ()
    notifications: tuple[AppNotification, ...] = ()
    settings: AppSettings = field(default_factory=lambda: DEFAULT_SETTINGS)


# key -> schema used to (de)serialize the slot
_SCHEMAS: dict[str, Any] = {
    StorageKeys.CATEGORIES: list[Category],
    StorageKeys.PRODUCTS: list[Product],
    StorageKeys.SALES: list[Sale],
    StorageKeys.NOTIFICATIONS: list[AppNotification],
    StorageKeys.SETTINGS: AppSettings,
}


class StateEngine:
    """
    Single owner of the point-of-sale state.

    Example:
        engine = StateEngine(MemoryStore())
        result = engine.add_sale("p3", 3)
        result.success               # True
        engine.get_product("p3").stock   # 5
        engine.notifications[0].type     # warning (stock is low)
    """

    def __init__(
        self,
        store: StateStore,
        event_bus: Optional[EventBus] = None,
        email_channel: Optional[EmailChannel] = None,
        id_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        defaults: Optional[StateDefaults] = None,
    ):
        """
        Initialize the engine and load every collection from the store.

        Args:
            store: Persistence backend
            event_bus: Bus to publish outcome events on (defaults to a new one)
            email_channel: Mock channel receiving echoed alerts (defaults to a new one)
            id_factory: Produces fresh record ids (defaults to uuid4 strings)
            clock: Produces timestamps (defaults to UTC now)
            defaults: Values for slots the store does not have
        """
        self.store = store
        self.event_bus = event_bus or EventBus()
        self.email_channel = email_channel or EmailChannel()
        self.id_factory = id_factory or (lambda: str(uuid4()))
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.cascade = NotificationCascade(id_factory=self.id_factory, clock=self.clock)

        defaults = defaults or StateDefaults()
        self._categories: list[Category] = list(
            self._load(StorageKeys.CATEGORIES, list(defaults.categories))
        )
        self._products: list[Product] = list(
            self._load(StorageKeys.PRODUCTS, list(defaults.products))
        )
        self._sales: list[Sale] = list(self._load(StorageKeys.SALES, list(defaults.sales)))
        self._notifications: list[AppNotification] = list(
            self._load(StorageKeys.NOTIFICATIONS, list(defaults.notifications))
        )
        self._settings: AppSettings = self._load(StorageKeys.SETTINGS, defaults.settings)

        logger.info(
            f"State loaded: {len(self._categories)} categories, {len(self._products)} products, "
            f"{len(self._sales)} sales, {len(self._notifications)} notifications"
        )

    # =========================================================================
    # Read-only views
    # =========================================================================

    @property
    def categories(self) -> tuple[Category, ...]:
        return tuple(self._categories)

    @property
    def products(self) -> tuple[Product, ...]:
        return tuple(self._products)

    @property
    def sales(self) -> tuple[Sale, ...]:
        """Sales, most recent first."""
        return tuple(self._sales)

    @property
    def notifications(self) -> tuple[AppNotification, ...]:
        """Notifications, most recent first."""
        return tuple(self._notifications)

    @property
    def settings(self) -> AppSettings:
        return self._settings

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            categories=self._categories,
            products=self._products,
            sales=self._sales,
            notifications=self._notifications,
            settings=self._settings,
        )

    def get_category(self, category_id: str) -> Optional[Category]:
        for category in self._categories:
            if category.id == category_id:
                return category
        return None

    def get_product(self, product_id: str) -> Optional[Product]:
        for product in self._products:
            if product.id == product_id:
                return product
        return None

    def products_in_category(self, category_id: str) -> list[Product]:
        return [p for p in self._products if p.category_id == category_id]

    @staticmethod
    def format_currency(amount: float) -> str:
        """Format an amount in Haitian gourdes."""
        return format_currency(amount)

    # =========================================================================
    # Categories
    # =========================================================================

    def add_category(self, name: str, icon: str = "") -> OperationResult:
        """Create a category. Always succeeds."""
        data = NewCategory(name=name, icon=icon)
        category = Category(id=self.id_factory(), name=data.name, icon=data.icon)

        self._categories.append(category)
        logger.info(f"Category added: {category.id} ({category.name})")

        return self._finish(
            events.category_created(category.id, category.name),
            changed=(StorageKeys.CATEGORIES,),
            record=category,
        )

    def delete_category(self, category_id: str) -> OperationResult:
        """
        Delete a category.

        Declined with CONFLICT while any product references it, and with
        NOT_FOUND if no category has this id.
        """
        category = self.get_category(category_id)
        if category is None:
            logger.warning(f"Cannot delete category {category_id}: not found")
            return self._finish(
                events.category_not_found(category_id),
                error=ErrorKind.NOT_FOUND,
            )

        in_use = self.products_in_category(category_id)
        if in_use:
            logger.warning(
                f"Cannot delete category {category_id}: used by {len(in_use)} product(s)"
            )
            return self._finish(
                events.category_delete_blocked(category.id, category.name, [p.id for p in in_use]),
                error=ErrorKind.CONFLICT,
                record=category,
            )

        self._categories = [c for c in self._categories if c.id != category_id]
        logger.info(f"Category deleted: {category_id}")

        return self._finish(
            events.category_deleted(category.id, category.name),
            changed=(StorageKeys.CATEGORIES,),
            record=category,
        )

    # =========================================================================
    # Products
    # =========================================================================

    def add_product(
        self,
        name: str,
        category_id: str,
        stock: int,
        sale_price: float,
        purchase_price: float,
    ) -> OperationResult:
        """
        Create a product with total_sales = 0. Always succeeds.

        The category is not checked; callers pick it from the live list.
        """
        data = NewProduct(
            name=name,
            category_id=category_id,
            stock=stock,
            sale_price=sale_price,
            purchase_price=purchase_price,
        )
        product = Product(id=self.id_factory(), total_sales=0, **data.model_dump())

        self._products.append(product)
        logger.info(f"Product added: {product.id} ({product.name}), stock={product.stock}")

        return self._finish(
            events.product_created(product.id, product.name),
            changed=(StorageKeys.PRODUCTS,),
            record=product,
        )

    def update_product(self, product: Union[Product, dict]) -> OperationResult:
        """
        Replace a product record wholesale (matched by id).

        Declined with NOT_FOUND if no product has this id.
        """
        # model_copy skips validation, so instances are checked again
        if isinstance(product, Product):
            product = product.model_dump()
        updated = Product.model_validate(product)

        current = self.get_product(updated.id)
        if current is None:
            logger.warning(f"Cannot update product {updated.id}: not found")
            return self._finish(
                events.product_update_not_found(updated.id, updated.name),
                error=ErrorKind.NOT_FOUND,
            )

        self._replace_product(updated)
        changes = {
            name: (getattr(current, name), getattr(updated, name))
            for name in Product.model_fields
            if getattr(current, name) != getattr(updated, name)
        }
        logger.info(f"Product updated: {updated.id} ({', '.join(changes) or 'no changes'})")

        return self._finish(
            events.product_updated(updated.id, updated.name, changes),
            changed=(StorageKeys.PRODUCTS,),
            record=updated,
        )

    def delete_product(self, product_id: str) -> OperationResult:
        """
        Delete a product. A missing id is a silent no-op.

        Past sales keep their product_name snapshot.
        """
        product = self.get_product(product_id)
        if product is None:
            logger.debug(f"Delete of unknown product {product_id} ignored")
            return self._finish(
                events.product_delete_not_found(product_id),
                error=ErrorKind.NOT_FOUND,
            )

        self._products = [p for p in self._products if p.id != product_id]
        logger.info(f"Product deleted: {product_id}")

        return self._finish(
            events.product_deleted(product.id, product.name),
            changed=(StorageKeys.PRODUCTS,),
            record=product,
        )

    # =========================================================================
    # Sales
    # =========================================================================

    def add_sale(self, product_id: str, quantity: int) -> OperationResult:
        """
        Record a sale and take the units out of stock.

        All-or-nothing: when the product is unknown (NOT_FOUND) or has fewer
        units than requested (INSUFFICIENT_STOCK), no sale is stored and no
        product changes.
        """
        request = SaleRequest(product_id=product_id, quantity=quantity)

        product = self.get_product(request.product_id)
        if product is None:
            logger.warning(f"Sale declined: product {request.product_id} not found")
            return self._finish(
                events.sale_product_not_found(request.product_id, request.quantity),
                error=ErrorKind.NOT_FOUND,
            )

        if product.stock < request.quantity:
            logger.warning(
                f"Sale declined: {request.quantity}x {product.id} requested, {product.stock} in stock"
            )
            return self._finish(
                events.sale_insufficient_stock(
                    product.id, product.name, request.quantity, product.stock
                ),
                error=ErrorKind.INSUFFICIENT_STOCK,
            )

        # Build both records before touching either list
        sale = Sale(
            id=self.id_factory(),
            product_id=product.id,
            product_name=product.name,
            quantity=request.quantity,
            unit_price=product.sale_price,
            total=product.sale_price * request.quantity,
            profit=product.unit_margin * request.quantity,
            date=self.clock(),
        )
        updated_product = product.model_copy(update={
            "stock": product.stock - request.quantity,
            "total_sales": product.total_sales + request.quantity,
        })

        self._sales.insert(0, sale)
        self._replace_product(updated_product)
        logger.info(
            f"Sale {sale.id}: {sale.quantity}x {product.id} for {format_currency(sale.total)}, "
            f"stock {product.stock} -> {updated_product.stock}"
        )

        return self._finish(
            events.sale_recorded(
                sale_id=sale.id,
                product_id=product.id,
                product_name=product.name,
                quantity=sale.quantity,
                total=sale.total,
                new_stock=updated_product.stock,
            ),
            changed=(StorageKeys.SALES, StorageKeys.PRODUCTS),
            record=sale,
        )

    # =========================================================================
    # Settings & notifications
    # =========================================================================

    def update_settings(self, settings: Union[AppSettings, dict]) -> OperationResult:
        """Replace the settings record. Always succeeds."""
        if isinstance(settings, AppSettings):
            settings = settings.model_dump()
        new_settings = AppSettings.model_validate(settings)

        self._settings = new_settings
        logger.info("Settings updated")

        return self._finish(
            events.settings_updated(new_settings.notification_email),
            changed=(StorageKeys.SETTINGS,),
            record=new_settings,
        )

    def add_notification(
        self,
        message: str,
        notification_type: Union[NotificationType, str] = NotificationType.INFO,
    ) -> OperationResult:
        """
        Add a notification directly, without going through the rule table.

        Errors and warnings are still echoed to the notification email.
        """
        request = NotificationRequest(message=message, type=notification_type)
        result = self._finish(events.notification_requested(request.message, request.type.value))
        return result.model_copy(update={"record": result.notifications[0]})

    # =========================================================================
    # Internals
    # =========================================================================

    def _replace_product(self, product: Product) -> None:
        self._products = [product if p.id == product.id else p for p in self._products]

    def _finish(
        self,
        event: Event,
        changed: tuple[str, ...] = (),
        error: Optional[ErrorKind] = None,
        record: Any = None,
    ) -> OperationResult:
        """Persist, run the cascade, publish. State changes are already applied."""
        for key in changed:
            self._persist(key)

        notifications = self.cascade.derive(event, self._settings)
        for notification in notifications:
            self._notifications.insert(0, notification)
        if notifications:
            self._persist(StorageKeys.NOTIFICATIONS)
            self.cascade.deliver_echoes(notifications, self._settings, self.email_channel)

        self.event_bus.publish(event)

        return OperationResult(
            success=error is None,
            event_type=event.event_type,
            error=error,
            record=record,
            notifications=notifications,
        )

    def _load(self, key: str, default: Any) -> Any:
        return self.store.load(key, default, _SCHEMAS[key])

    def _current(self, key: str) -> Any:
        return {
            StorageKeys.CATEGORIES: self._categories,
            StorageKeys.PRODUCTS: self._products,
            StorageKeys.SALES: self._sales,
            StorageKeys.NOTIFICATIONS: self._notifications,
            StorageKeys.SETTINGS: self._settings,
        }[key]

    def _persist(self, key: str) -> None:
        # Saving is best effort; a failed write never undoes the operation
        try:
            self.store.save(key, self._current(key), _SCHEMAS[key])
        except (OSError, ValueError) as e:
            logger.error(f"Failed to save '{key}': {e}")
