"""
Report accumulators and the folds that fill them

Each report folds fetched rows into explicit accumulator dataclasses. Day
buckets are pre-initialised by the caller; rows whose day key falls outside
them are skipped. Folds only mutate the accumulators handed to them.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Set, TypeVar
from uuid import UUID
from zoneinfo import ZoneInfo
import re

from backoffice.models import Order, OrderItem, PaymentStatus, ProductSKU
from backoffice.utils.time_buckets import HOURS_IN_DAY, day_key, hour_of_day
from .metrics import item_cost

ZERO = Decimal("0")
A = TypeVar("A")


@dataclass
class DayTotals:
    orders: int = 0
    revenue: Decimal = ZERO
    products: int = 0


@dataclass
class CategoryDayTotals:
    category_id: UUID
    category_name: str
    order_ids: Set[UUID] = field(default_factory=set)
    revenue: Decimal = ZERO
    products: int = 0

    @property
    def category_key(self) -> str:
        return category_key(self.category_name)

    @property
    def orders(self) -> int:
        return len(self.order_ids)


@dataclass
class CashTotals:
    orders: int = 0
    total_cash: Decimal = ZERO
    items_sold: int = 0
    completed_payments: Decimal = ZERO
    pending_payments: Decimal = ZERO


@dataclass
class ProfitDayTotals:
    orders: int = 0
    revenue: Decimal = ZERO
    cost: Decimal = ZERO

    @property
    def gross_profit(self) -> Decimal:
        return self.revenue - self.cost


@dataclass
class NamedProductTotals:
    quantity: int = 0
    revenue: Decimal = ZERO


@dataclass
class ProductSalesTotals:
    product_id: UUID
    product_name: str
    cover_image: Optional[str]
    current_stock: int
    units_sold: int = 0
    revenue: Decimal = ZERO
    order_ids: Set[UUID] = field(default_factory=set)
    unit_prices: List[Decimal] = field(default_factory=list)


@dataclass
class HourTotals:
    orders: int = 0
    revenue: Decimal = ZERO
    items: int = 0


@dataclass
class CategoryStockTotals:
    category_id: UUID
    category_name: str
    total_stock: int = 0
    stock_value: Decimal = ZERO
    product_ids: Set[UUID] = field(default_factory=set)


@dataclass
class ProductStockTotals:
    product_id: UUID
    product_name: str
    cover_image: Optional[str]
    total_stock: int = 0
    prices: List[Decimal] = field(default_factory=list)
    variants_count: int = 0


@dataclass
class InventoryTotals:
    stock_value: Decimal = ZERO
    units: int = 0
    skus: int = 0
    product_ids: Set[UUID] = field(default_factory=set)
    low_stock_value: Decimal = ZERO
    out_of_stock_value: Decimal = ZERO


@dataclass
class WeekTotals:
    orders: int = 0
    revenue: Decimal = ZERO
    items_sold: int = 0
    customer_phones: Set[str] = field(default_factory=set)


def category_key(name: str) -> str:
    """Lower-cased category name with all whitespace removed"""
    return re.sub(r"\s+", "", name.lower())


def init_daily_buckets(keys: Iterable[str], factory: Callable[[], A]) -> Dict[str, A]:
    """Zero-filled accumulator per day key"""
    return {key: factory() for key in keys}


def items_quantity(order: Order) -> int:
    return sum(item.quantity for item in order.items)


def fold_chart_orders(orders: Iterable[Order], buckets: Dict[str, DayTotals], tz: ZoneInfo) -> int:
    """Returns how many orders landed in a bucket"""
    folded = 0
    for order in orders:
        totals = buckets.get(day_key(order.created_at, tz))
        if totals is None:
            continue
        totals.orders += 1
        totals.revenue += order.total_amount
        totals.products += items_quantity(order)
        folded += 1
    return folded


def fold_category_items(
    items: Iterable[OrderItem],
    buckets: Dict[str, Dict[UUID, CategoryDayTotals]],
    tz: ZoneInfo,
) -> int:
    """Attribute each line to its product's first category on the order's day"""
    folded = 0
    for item in items:
        day = buckets.get(day_key(item.order.created_at, tz))
        if day is None:
            continue

        category = item.sku.variant.product.primary_category
        if category is None:
            continue

        totals = day.get(category.id)
        if totals is None:
            # Inactive categories have no bucket
            continue

        totals.products += item.quantity
        totals.revenue += item.total_price
        totals.order_ids.add(item.order_id)
        folded += 1
    return folded


def fold_cash_orders(orders: Iterable[Order], totals: CashTotals) -> CashTotals:
    for order in orders:
        totals.orders += 1
        totals.total_cash += order.total_amount
        totals.items_sold += items_quantity(order)

        for payment in order.payments:
            if payment.status == PaymentStatus.COMPLETED:
                totals.completed_payments += payment.amount
            elif payment.status == PaymentStatus.PENDING:
                totals.pending_payments += payment.amount
    return totals


def fold_profit_orders(orders: Iterable[Order], buckets: Dict[str, ProfitDayTotals], tz: ZoneInfo) -> int:
    folded = 0
    for order in orders:
        totals = buckets.get(day_key(order.created_at, tz))
        if totals is None:
            continue
        totals.orders += 1
        totals.revenue += order.total_amount
        for item in order.items:
            cost_basis = item.sku.init_price if item.sku is not None else None
            totals.cost += item_cost(item.unit_price, item.quantity, cost_basis)
        folded += 1
    return folded


def fold_named_products(items: Iterable[OrderItem]) -> Dict[str, NamedProductTotals]:
    """Group lines by their denormalised product name"""
    totals: Dict[str, NamedProductTotals] = defaultdict(NamedProductTotals)
    for item in items:
        entry = totals[item.product_name]
        entry.quantity += item.quantity
        entry.revenue += item.total_price
    return dict(totals)


def fold_product_sales(items: Iterable[OrderItem]) -> Dict[UUID, ProductSalesTotals]:
    products: Dict[UUID, ProductSalesTotals] = {}
    for item in items:
        product = item.sku.variant.product
        entry = products.get(product.id)
        if entry is None:
            entry = products[product.id] = ProductSalesTotals(
                product_id=product.id,
                product_name=product.name,
                cover_image=product.cover_image,
                current_stock=sum(sku.stock for variant in product.variants for sku in variant.skus),
            )

        entry.units_sold += item.quantity
        entry.revenue += item.total_price
        entry.order_ids.add(item.order_id)
        entry.unit_prices.append(item.unit_price)
    return products


def init_hour_buckets() -> Dict[int, HourTotals]:
    return {hour: HourTotals() for hour in range(HOURS_IN_DAY)}


def fold_hourly_orders(orders: Iterable[Order], buckets: Dict[int, HourTotals], tz: ZoneInfo) -> int:
    """Merge every day of the period into 24 hour-of-day buckets"""
    folded = 0
    for order in orders:
        totals = buckets[hour_of_day(order.created_at, tz)]
        totals.orders += 1
        totals.revenue += order.total_amount
        totals.items += items_quantity(order)
        folded += 1
    return folded


def fold_inventory(skus: Iterable[ProductSKU], totals: InventoryTotals) -> InventoryTotals:
    for sku in skus:
        value = sku.price * sku.stock
        totals.stock_value += value
        totals.units += sku.stock
        totals.skus += 1
        totals.product_ids.add(sku.variant.product_id)
        if sku.stock <= sku.low_stock_alert:
            totals.low_stock_value += value
        if sku.stock == 0:
            totals.out_of_stock_value += value
    return totals


def fold_stock_by_category(skus: Iterable[ProductSKU]) -> Dict[UUID, CategoryStockTotals]:
    """Stock value per first category; uncategorised products are left out"""
    categories: Dict[UUID, CategoryStockTotals] = {}
    for sku in skus:
        product = sku.variant.product
        category = product.primary_category
        if category is None:
            continue

        entry = categories.get(category.id)
        if entry is None:
            entry = categories[category.id] = CategoryStockTotals(
                category_id=category.id,
                category_name=category.name,
            )

        entry.total_stock += sku.stock
        entry.stock_value += sku.price * sku.stock
        entry.product_ids.add(product.id)
    return categories


def fold_stock_by_product(skus: Iterable[ProductSKU]) -> Dict[UUID, ProductStockTotals]:
    products: Dict[UUID, ProductStockTotals] = {}
    for sku in skus:
        product = sku.variant.product
        entry = products.get(product.id)
        if entry is None:
            entry = products[product.id] = ProductStockTotals(
                product_id=product.id,
                product_name=product.name,
                cover_image=product.cover_image,
            )

        entry.total_stock += sku.stock
        entry.prices.append(sku.price)
        entry.variants_count += 1
    return products


def fold_week_orders(orders: Iterable[Order]) -> WeekTotals:
    totals = WeekTotals()
    for order in orders:
        totals.orders += 1
        totals.revenue += order.total_amount
        totals.items_sold += items_quantity(order)
        totals.customer_phones.add(order.customer_phone)
    return totals
