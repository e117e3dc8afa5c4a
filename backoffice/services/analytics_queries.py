"""Read-side queries feeding the analytics reports"""

from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload, contains_eager

from backoffice.models import (
    Category,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Product,
    ProductSKU,
    ProductVariant,
    User,
)
from backoffice.utils.time_buckets import TimeWindow, to_utc

logger = logging.getLogger(__name__)


class AnalyticsQueries:
    """Fetches orders, order items, SKUs and categories for report building"""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _window_clauses(column, window: TimeWindow) -> list:
        clauses = [column >= to_utc(window.start)]
        if window.end is not None:
            end = to_utc(window.end)
            clauses.append(column <= end if window.closed else column < end)
        return clauses

    # Aggregates

    async def count_orders(self, window: TimeWindow, exclude_cancelled: bool = True) -> int:
        query = select(func.count(Order.id)).where(*self._window_clauses(Order.created_at, window))
        if exclude_cancelled:
            query = query.where(Order.status != OrderStatus.CANCELLED)

        result = await self.db.execute(query)
        return result.scalar_one()

    async def sum_order_revenue(self, window: TimeWindow) -> Decimal:
        query = select(func.coalesce(func.sum(Order.total_amount), 0)).where(
            *self._window_clauses(Order.created_at, window),
            Order.status != OrderStatus.CANCELLED,
        )
        result = await self.db.execute(query)
        return Decimal(result.scalar_one())

    async def sum_items_sold(self, window: TimeWindow) -> int:
        query = (
            select(func.coalesce(func.sum(OrderItem.quantity), 0))
            .select_from(OrderItem)
            .join(OrderItem.order)
            .where(
                *self._window_clauses(Order.created_at, window),
                Order.status != OrderStatus.CANCELLED,
            )
        )
        result = await self.db.execute(query)
        return int(result.scalar_one())

    async def count_active_users(self, window: TimeWindow) -> int:
        query = select(func.count(User.id)).where(
            *self._window_clauses(User.last_login_at, window),
            User.is_active.is_(True),
        )
        result = await self.db.execute(query)
        return result.scalar_one()

    async def top_product_quantities(self, window: TimeWindow, limit: int = 10) -> List[Tuple[str, int]]:
        """Summed quantity per product name, largest first"""
        total_ordered = func.sum(OrderItem.quantity).label("total_ordered")
        query = (
            select(OrderItem.product_name, total_ordered)
            .join(OrderItem.order)
            .where(
                *self._window_clauses(Order.created_at, window),
                Order.status != OrderStatus.CANCELLED,
            )
            .group_by(OrderItem.product_name)
            .order_by(total_ordered.desc(), OrderItem.product_name)
            .limit(limit)
        )
        result = await self.db.execute(query)
        return [(row.product_name, int(row.total_ordered or 0)) for row in result.all()]

    # Record sets

    async def fetch_orders(
        self,
        window: TimeWindow,
        *,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
        exclude_cancelled: bool = True,
        include_items: bool = False,
        include_payments: bool = False,
        include_item_skus: bool = False,
    ) -> List[Order]:
        query = select(Order).where(*self._window_clauses(Order.created_at, window))

        if status is not None:
            query = query.where(Order.status == status)
        elif exclude_cancelled:
            query = query.where(Order.status != OrderStatus.CANCELLED)

        if payment_status is not None:
            query = query.where(Order.payment_status == payment_status)

        if include_item_skus:
            query = query.options(selectinload(Order.items).selectinload(OrderItem.sku))
        elif include_items:
            query = query.options(selectinload(Order.items))

        if include_payments:
            query = query.options(selectinload(Order.payments))

        query = query.order_by(Order.created_at, Order.id)
        result = await self.db.execute(query)
        orders = list(result.scalars().all())

        logger.debug(f"Fetched {len(orders)} orders from {window.start.isoformat()}")
        return orders

    async def fetch_order_items(
        self,
        window: TimeWindow,
        *,
        exclude_cancelled: bool = True,
        include_catalog: bool = False,
        include_product_stock: bool = False,
    ) -> List[OrderItem]:
        """
        Order lines whose parent order falls in the window.

        include_catalog loads SKU -> variant -> product -> categories;
        include_product_stock also loads every SKU of each product.
        """
        query = (
            select(OrderItem)
            .join(OrderItem.order)
            .options(contains_eager(OrderItem.order))
            .where(*self._window_clauses(Order.created_at, window))
        )
        if exclude_cancelled:
            query = query.where(Order.status != OrderStatus.CANCELLED)

        if include_catalog or include_product_stock:
            product_path = (
                selectinload(OrderItem.sku)
                .selectinload(ProductSKU.variant)
                .selectinload(ProductVariant.product)
            )
            query = query.options(product_path.selectinload(Product.categories))
            if include_product_stock:
                query = query.options(
                    product_path.selectinload(Product.variants).selectinload(ProductVariant.skus)
                )

        query = query.order_by(Order.created_at, OrderItem.order_id, OrderItem.id)
        result = await self.db.execute(query)
        items = list(result.scalars().all())

        logger.debug(f"Fetched {len(items)} order items from {window.start.isoformat()}")
        return items

    async def fetch_skus(
        self,
        *,
        threshold: Optional[int] = None,
        low_stock_only: bool = False,
    ) -> List[ProductSKU]:
        """
        Active SKUs with variant, product and categories loaded, lowest stock first.

        With low_stock_only, a SKU qualifies when its stock is at or below
        `threshold`, or at or below its own low_stock_alert when no
        threshold is given.
        """
        query = select(ProductSKU).where(ProductSKU.is_active.is_(True))

        if low_stock_only:
            if threshold is not None:
                query = query.where(ProductSKU.stock <= threshold)
            else:
                query = query.where(ProductSKU.stock <= ProductSKU.low_stock_alert)

        query = query.options(
            selectinload(ProductSKU.variant)
            .selectinload(ProductVariant.product)
            .selectinload(Product.categories)
        ).order_by(ProductSKU.stock, ProductSKU.sku)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def fetch_active_categories(self) -> List[Tuple[UUID, str]]:
        query = (
            select(Category.id, Category.name)
            .where(Category.is_active.is_(True))
            .order_by(Category.name, Category.id)
        )
        result = await self.db.execute(query)
        return [(row.id, row.name) for row in result.all()]
