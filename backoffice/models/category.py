"""Category model and product association table"""

from sqlalchemy import Column, String, Boolean, Integer, ForeignKey, Table

from .base import Base, TimestampedModel, UUIDModel

# Association order matters: a product is attributed to its lowest-position category
product_categories = Table(
    "product_categories",
    Base.metadata,
    Column("product_id", ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
    Column("position", Integer, nullable=False, default=0),
)


class Category(Base, TimestampedModel, UUIDModel):
    """Product category"""

    __tablename__ = "categories"

    name = Column(String(100), nullable=False)
    slug = Column(String(120), unique=True, nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
