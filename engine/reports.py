"""
Dashboard figures derived from state snapshots.

Pure functions: they take the tuples the engine exposes and never touch the
engine itself.
"""

from collections import defaultdict
from typing import Iterable

from pydantic import BaseModel

from engine.cascade import LOW_STOCK_THRESHOLD
from shared.models import Category, Product, Sale


class SalesSummary(BaseModel):
    sale_count: int
    units_sold: int
    revenue: float
    profit: float


class InventoryValue(BaseModel):
    units: int
    at_purchase_price: float
    at_sale_price: float


def sales_summary(sales: Iterable[Sale]) -> SalesSummary:
    """Totals over recorded sales."""
    count = units = 0
    revenue = profit = 0.0
    for sale in sales:
        count += 1
        units += sale.quantity
        revenue += sale.total
        profit += sale.profit
    return SalesSummary(sale_count=count, units_sold=units, revenue=revenue, profit=profit)


def low_stock_products(products: Iterable[Product], threshold: int = LOW_STOCK_THRESHOLD) -> list[Product]:
    """Products that are running low but not yet out (0 < stock <= threshold)."""
    return [p for p in products if 0 < p.stock <= threshold]


def out_of_stock_products(products: Iterable[Product]) -> list[Product]:
    return [p for p in products if p.stock == 0]


def inventory_value(products: Iterable[Product]) -> InventoryValue:
    units = 0
    at_purchase = at_sale = 0.0
    for product in products:
        units += product.stock
        at_purchase += product.stock * product.purchase_price
        at_sale += product.stock * product.sale_price
    return InventoryValue(units=units, at_purchase_price=at_purchase, at_sale_price=at_sale)


def top_selling_products(products: Iterable[Product], limit: int = 5) -> list[Product]:
    """Best sellers by cumulative units sold; ties keep catalog order."""
    return sorted(products, key=lambda p: p.total_sales, reverse=True)[:limit]


def sales_by_category(
    sales: Iterable[Sale],
    products: Iterable[Product],
    categories: Iterable[Category],
) -> dict[str, float]:
    """
    Revenue per category name.

    Sales are attributed through the product's current category. Sales of
    deleted products, or products whose category is gone, fall under "".
    """
    category_of = {p.id: p.category_id for p in products}
    name_of = {c.id: c.name for c in categories}

    totals: dict[str, float] = defaultdict(float)
    for sale in sales:
        name = name_of.get(category_of.get(sale.product_id, ""), "")
        totals[name] += sale.total
    return dict(totals)
