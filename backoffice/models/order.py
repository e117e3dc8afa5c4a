"""Order and order item models"""

from sqlalchemy import Column, String, Numeric, Integer, Enum, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship
import enum

from .base import Base, TimestampedModel, UUIDModel


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class Order(Base, TimestampedModel, UUIDModel):
    """Customer order"""

    __tablename__ = "orders"

    order_number = Column(String(50), unique=True, nullable=False, index=True)

    # Customer
    customer_id = Column(ForeignKey("users.id"), nullable=True)
    customer_name = Column(String(200), nullable=False)
    customer_phone = Column(String(20), nullable=False, index=True)

    # Status
    status = Column(Enum(OrderStatus, name="order_status"), default=OrderStatus.PENDING, nullable=False, index=True)
    payment_status = Column(Enum(PaymentStatus, name="payment_status"), default=PaymentStatus.PENDING, nullable=False)

    # Amounts
    total_amount = Column(Numeric(12, 2), nullable=False)

    # Relationships
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id"
    )
    payments = relationship(
        "Payment",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="Payment.id"
    )

    __table_args__ = (
        Index("ix_orders_status_created_at", "status", "created_at"),
    )


class OrderItem(Base, UUIDModel):
    """Line item; product name is denormalised at order time"""

    __tablename__ = "order_items"

    order_id = Column(ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    sku_id = Column(ForeignKey("product_skus.id"), nullable=False, index=True)

    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    sku = relationship("ProductSKU")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )
