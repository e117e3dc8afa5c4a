"""Payment model"""

from sqlalchemy import Column, String, Numeric, Enum, ForeignKey
from sqlalchemy.orm import relationship

from .base import Base, TimestampedModel, UUIDModel
from .order import PaymentStatus


class Payment(Base, TimestampedModel, UUIDModel):
    """Payment captured against an order"""

    __tablename__ = "payments"

    order_id = Column(ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(Enum(PaymentStatus, name="payment_status"), default=PaymentStatus.PENDING, nullable=False)
    method = Column(String(50), nullable=False, default="cash")
    transaction_id = Column(String(200), nullable=True)

    order = relationship("Order", back_populates="payments")
