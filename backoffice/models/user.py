"""Back-office user model"""

from sqlalchemy import Column, String, Boolean, DateTime

from .base import Base, TimestampedModel, UUIDModel


class User(Base, TimestampedModel, UUIDModel):
    """Staff or customer account; only login activity is read by analytics"""

    __tablename__ = "users"

    name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login_at = Column(DateTime(timezone=True), nullable=True, index=True)
