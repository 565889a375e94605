"""Store catalog models: categories and products."""

from typing import Optional

from libs.db.base import Base
from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship


class Category(Base):
    """Product categories (e.g. 'Пицца', 'Напитки')."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stores.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true"
    )

    store = relationship("Store", back_populates="categories")
    # Deleting a category leaves its products uncategorized (FK SET NULL)
    products = relationship("Product", back_populates="category", passive_deletes=True)

    def __repr__(self):
        return f"<Category {self.name}>"


class Product(Base):
    """Sellable item. Prices are whole tenge."""

    __tablename__ = "products"
    __table_args__ = (Index("ix_products_store_sort", "store_id", "sort_order"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("stores.id", ondelete="CASCADE")
    )
    category_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_price: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true"
    )
    sort_order: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    image_urls: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    store = relationship("Store", back_populates="products")
    category = relationship("Category", back_populates="products")

    @property
    def effective_price(self) -> int:
        """Price a customer pays: the sale price when one is set."""
        if self.discount_price is not None and self.discount_price < self.price:
            return self.discount_price
        return self.price

    def __repr__(self):
        return f"<Product {self.name}>"
