"""Database models"""

from .base import Base
from .user import User
from .category import Category, product_categories
from .product import Product, ProductVariant, ProductSKU
from .order import Order, OrderItem, OrderStatus, PaymentStatus
from .payment import Payment

__all__ = [
    "Base",
    "User",
    "Category",
    "product_categories",
    "Product",
    "ProductVariant",
    "ProductSKU",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "Payment",
]
