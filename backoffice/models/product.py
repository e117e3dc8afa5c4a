"""Product catalogue: products, variants and stock keeping units"""

from sqlalchemy import Column, String, Text, Numeric, Integer, Boolean, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from .base import Base, TimestampedModel, UUIDModel
from .category import product_categories


class Product(Base, TimestampedModel, UUIDModel):
    """Sellable product grouping one or more variants"""

    __tablename__ = "products"

    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    cover_image = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    variants = relationship(
        "ProductVariant",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductVariant.name"
    )
    categories = relationship(
        "Category",
        secondary=product_categories,
        order_by=[product_categories.c.position, product_categories.c.category_id]
    )

    @property
    def primary_category(self):
        """First category in association order, or None"""
        return self.categories[0] if self.categories else None


class ProductVariant(Base, TimestampedModel, UUIDModel):
    """Variant of a product (size, colour, pack)"""

    __tablename__ = "product_variants"

    product_id = Column(ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    product = relationship("Product", back_populates="variants")
    skus = relationship(
        "ProductSKU",
        back_populates="variant",
        cascade="all, delete-orphan",
        order_by="ProductSKU.sku"
    )


class ProductSKU(Base, TimestampedModel, UUIDModel):
    """Stock keeping unit with its own stock, price and cost basis"""

    __tablename__ = "product_skus"

    variant_id = Column(ForeignKey("product_variants.id", ondelete="CASCADE"), nullable=False, index=True)
    sku = Column(String(100), unique=True, nullable=False)
    stock = Column(Integer, default=0, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    init_price = Column(Numeric(12, 2), nullable=True)
    low_stock_alert = Column(Integer, default=5, nullable=False)
    cover_image = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    variant = relationship("ProductVariant", back_populates="skus")

    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_product_skus_stock_non_negative"),
        Index("ix_product_skus_active_stock", "is_active", "stock"),
    )
