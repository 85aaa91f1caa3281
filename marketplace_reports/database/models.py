"""
Database Models - Marketplace Tables

Read-side mappings of the marketplace data store. The reporting service only
issues SELECT queries against these tables:

- orders: Order transactions (shop, buyer, total price)
- buyers: Registered buyers
- shops: Registered seller shops
- products: Product catalog with category and stock
- admin: Dashboard administrators (export credential check)

Column types are kept portable so the same models map PostgreSQL in
production and SQLite in tests.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


class Buyer(Base):
    """Marketplace buyer account"""
    __tablename__ = "buyers"

    buyer_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(200))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_buyers_created_at", "created_at"),
    )


class Shop(Base):
    """Seller shop"""
    __tablename__ = "shops"

    shop_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    shop_name: Mapped[Optional[str]] = mapped_column(String(200))
    nickname: Mapped[Optional[str]] = mapped_column(String(100))
    profile_photo: Mapped[Optional[str]] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_shops_created_at", "created_at"),
    )


class Product(Base):
    """Catalog product listed by a shop"""
    __tablename__ = "products"

    product_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    shop_id: Mapped[Optional[str]] = mapped_column(String(64), ForeignKey("shops.shop_id"))
    name: Mapped[Optional[str]] = mapped_column(String(300))
    category: Mapped[Optional[str]] = mapped_column(String(100))
    price: Mapped[Optional[float]] = mapped_column(Float)
    stock: Mapped[Optional[int]] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Order(Base):
    """Order placed by a buyer with a shop"""
    __tablename__ = "orders"

    order_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    shop_id: Mapped[Optional[str]] = mapped_column(String(64), ForeignKey("shops.shop_id"))
    buyer_id: Mapped[Optional[str]] = mapped_column(String(64), ForeignKey("buyers.buyer_id"))
    total_price: Mapped[Optional[float]] = mapped_column(Float)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_orders_created_at", "created_at"),
        Index("idx_orders_shop", "shop_id"),
    )


class Admin(Base):
    """
    Dashboard administrator.

    password_hash holds a PBKDF2 string produced by
    marketplace_reports.reporting.credentials.hash_password.
    """
    __tablename__ = "admin"

    admin_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
