"""
Report Repository

Read-only SELECT queries against the marketplace data store. Every call
opens its own session so independent metric groups can run concurrently.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketplace_reports.database.models import Admin, Buyer, Order, Product, Shop

logger = structlog.get_logger(__name__)


class ReportRepository:
    """
    Query façade over the marketplace tables.

    Example:
        repo = ReportRepository(get_session_factory())
        orders = await repo.fetch_orders(since=start)
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def _rows(self, stmt) -> List[Dict[str, Any]]:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return [dict(row) for row in result.mappings().all()]

    async def _scalar(self, stmt) -> Any:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar_one()

    async def _scalars(self, stmt) -> List[Any]:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    async def fetch_orders(self, since: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Orders (shop_id, total_price, created_at) ascending by creation time."""
        stmt = select(Order.shop_id, Order.total_price, Order.created_at).order_by(Order.created_at)
        if since is not None:
            stmt = stmt.where(Order.created_at >= since)
        rows = await self._rows(stmt)
        logger.debug("Fetched orders", count=len(rows), since=str(since) if since else None)
        return rows

    async def fetch_order_shop_ids(self) -> List[Optional[str]]:
        return await self._scalars(select(Order.shop_id))

    async def count_orders(self) -> int:
        return await self._scalar(select(func.count()).select_from(Order))

    # ------------------------------------------------------------------
    # Buyers / shops
    # ------------------------------------------------------------------

    async def count_buyers(self) -> int:
        return await self._scalar(select(func.count(Buyer.buyer_id)))

    async def count_shops(self) -> int:
        return await self._scalar(select(func.count(Shop.shop_id)))

    async def fetch_buyer_created_at(self) -> List[datetime]:
        return await self._scalars(select(Buyer.created_at).order_by(Buyer.created_at))

    async def fetch_shop_created_at(self) -> List[datetime]:
        return await self._scalars(select(Shop.created_at).order_by(Shop.created_at))

    async def fetch_shops(self, shop_ids: Sequence[str]) -> List[Dict[str, Any]]:
        """Display fields for the given shops."""
        if not shop_ids:
            return []
        stmt = select(
            Shop.shop_id, Shop.shop_name, Shop.profile_photo, Shop.nickname
        ).where(Shop.shop_id.in_(list(shop_ids)))
        return await self._rows(stmt)

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    async def count_products(self, min_stock_exclusive: Optional[int] = None) -> int:
        """Count products, optionally only those with stock above a threshold."""
        stmt = select(func.count(Product.product_id))
        if min_stock_exclusive is not None:
            stmt = stmt.where(Product.stock > min_stock_exclusive)
        return await self._scalar(stmt)

    async def fetch_product_stock(self) -> List[Dict[str, Any]]:
        """(category, stock) for every product."""
        return await self._rows(select(Product.category, Product.stock))

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    async def fetch_admin_password_hash(self, email: str) -> Optional[str]:
        stmt = select(Admin.password_hash).where(Admin.email == email)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()
