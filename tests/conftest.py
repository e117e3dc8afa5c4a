"""
Test Suite Configuration
"""
import itertools
import os
from datetime import datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator, Dict, Iterable, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///./test-backoffice.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("ANALYTICS_TIMEZONE", "UTC")
os.environ.setdefault("LOG_FILE", "")

import pytest
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from backoffice.api.v1.analytics.services import AnalyticsService
from backoffice.models import (
    Base,
    Category,
    Order,
    OrderItem,
    OrderStatus,
    Payment,
    PaymentStatus,
    Product,
    ProductSKU,
    ProductVariant,
    User,
    product_categories,
)

UTC = timezone.utc

# Thursday; the current week runs Mon 2026-03-09 to Sun 2026-03-15
NOW = datetime(2026, 3, 12, 15, 30, tzinfo=UTC)


class Seeder:
    """Builds catalogue, user and order rows for report tests"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._sequence = itertools.count(1)
        self._variants: Dict[Tuple[str, str], ProductVariant] = {}
        self._product_names: Dict[object, str] = {}

    async def commit(self):
        await self.session.commit()

    async def category(self, name: str, is_active: bool = True) -> Category:
        category = Category(name=name, slug=f"category-{next(self._sequence)}", is_active=is_active)
        self.session.add(category)
        await self.session.flush()
        return category

    async def product(
        self,
        name: str,
        categories: Sequence[Category] = (),
        cover_image: Optional[str] = None
    ) -> Product:
        product = Product(name=name, cover_image=cover_image)
        self.session.add(product)
        await self.session.flush()

        for position, category in enumerate(categories):
            await self.session.execute(
                insert(product_categories).values(
                    product_id=product.id,
                    category_id=category.id,
                    position=position,
                )
            )
        return product

    async def sku(
        self,
        product: Product,
        *,
        stock: int,
        price: str,
        init_price: Optional[str] = None,
        low_stock_alert: int = 5,
        is_active: bool = True,
        variant_name: Optional[str] = None,
        cover_image: Optional[str] = None,
    ) -> ProductSKU:
        number = next(self._sequence)
        variant_name = variant_name or f"Variant {number}"

        variant = self._variants.get((str(product.id), variant_name))
        if variant is None:
            variant = ProductVariant(product_id=product.id, name=variant_name)
            self.session.add(variant)
            await self.session.flush()
            self._variants[(str(product.id), variant_name)] = variant

        sku = ProductSKU(
            variant_id=variant.id,
            sku=f"SKU-{number:04d}",
            stock=stock,
            price=Decimal(price),
            init_price=Decimal(init_price) if init_price is not None else None,
            low_stock_alert=low_stock_alert,
            is_active=is_active,
            cover_image=cover_image,
        )
        self.session.add(sku)
        await self.session.flush()
        self._product_names[sku.id] = product.name
        return sku

    async def order(
        self,
        created_at: datetime,
        lines: Iterable[Tuple] = (),
        *,
        total: Optional[str] = None,
        status: OrderStatus = OrderStatus.DELIVERED,
        payment_status: PaymentStatus = PaymentStatus.COMPLETED,
        customer_phone: str = "0700000001",
        payments: Iterable[Tuple[str, PaymentStatus]] = (),
    ) -> Order:
        """
        lines are (sku, quantity) or (sku, quantity, unit_price); the total
        defaults to the sum of line totals
        """
        items = []
        for line in lines:
            sku, quantity = line[0], line[1]
            unit_price = Decimal(line[2]) if len(line) > 2 else sku.price
            items.append((sku, quantity, unit_price))

        line_total = sum((unit_price * quantity for _, quantity, unit_price in items), Decimal("0"))
        order = Order(
            order_number=f"ORD-{next(self._sequence):05d}",
            customer_name="Test Customer",
            customer_phone=customer_phone,
            status=status,
            payment_status=payment_status,
            total_amount=Decimal(total) if total is not None else line_total,
            created_at=created_at,
        )
        self.session.add(order)
        await self.session.flush()

        for sku, quantity, unit_price in items:
            self.session.add(OrderItem(
                order_id=order.id,
                sku_id=sku.id,
                product_name=self._product_names[sku.id],
                quantity=quantity,
                unit_price=unit_price,
                total_price=unit_price * quantity,
            ))

        for amount, payment_status_value in payments:
            self.session.add(Payment(order_id=order.id, amount=Decimal(amount), status=payment_status_value))

        await self.session.flush()
        return order

    async def user(self, last_login_at: Optional[datetime], is_active: bool = True) -> User:
        number = next(self._sequence)
        user = User(
            name=f"User {number}",
            email=f"user{number}@example.com",
            is_active=is_active,
            last_login_at=last_login_at,
        )
        self.session.add(user)
        await self.session.flush()
        return user


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite database per test"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'analytics.db'}",
        echo=False,
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def seeder(session_factory) -> AsyncGenerator[Seeder, None]:
    """Writes test data through its own session"""
    async with session_factory() as session:
        yield Seeder(session)


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Fresh session for reading reports"""
    async with session_factory() as session:
        yield session


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def service(db) -> AnalyticsService:
    return AnalyticsService(db, tz=ZoneInfo("UTC"))
