"""
Test Suite Configuration
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from marketplace_reports.config import Settings
from marketplace_reports.database.models import Admin, Base, Buyer, Order, Product, Shop
from marketplace_reports.reporting.credentials import hash_password

NOW = datetime(2024, 3, 14, 12, 0, tzinfo=timezone.utc)
ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "s3cret-pass"


class FakeReportRepository:
    """
    In-memory stand-in for ReportRepository.

    Method names listed in ``fail_on`` raise instead of returning data.
    """

    def __init__(
        self,
        orders: Optional[List[Dict[str, Any]]] = None,
        buyers: Optional[List[Dict[str, Any]]] = None,
        shops: Optional[List[Dict[str, Any]]] = None,
        products: Optional[List[Dict[str, Any]]] = None,
        admins: Optional[Dict[str, str]] = None,
    ):
        self.orders = orders or []
        self.buyers = buyers or []
        self.shops = shops or []
        self.products = products or []
        self.admins = admins or {}
        self.fail_on: set = set()

    def _check(self, name: str) -> None:
        if name in self.fail_on:
            raise ConnectionError(f"{name} unavailable")

    async def fetch_orders(self, since: Optional[datetime] = None) -> List[Dict[str, Any]]:
        self._check("fetch_orders")
        rows = sorted(self.orders, key=lambda o: o["created_at"])
        if since is not None:
            rows = [o for o in rows if o["created_at"] >= since]
        return [dict(o) for o in rows]

    async def fetch_order_shop_ids(self) -> List[Optional[str]]:
        self._check("fetch_order_shop_ids")
        return [o.get("shop_id") for o in self.orders]

    async def count_orders(self) -> int:
        self._check("count_orders")
        return len(self.orders)

    async def count_buyers(self) -> int:
        self._check("count_buyers")
        return len(self.buyers)

    async def count_shops(self) -> int:
        self._check("count_shops")
        return len(self.shops)

    async def fetch_buyer_created_at(self) -> List[datetime]:
        self._check("fetch_buyer_created_at")
        return sorted(b["created_at"] for b in self.buyers)

    async def fetch_shop_created_at(self) -> List[datetime]:
        self._check("fetch_shop_created_at")
        return sorted(s["created_at"] for s in self.shops)

    async def fetch_shops(self, shop_ids: Sequence[str]) -> List[Dict[str, Any]]:
        self._check("fetch_shops")
        return [dict(s) for s in self.shops if s["shop_id"] in shop_ids]

    async def count_products(self, min_stock_exclusive: Optional[int] = None) -> int:
        self._check("count_products")
        if min_stock_exclusive is None:
            return len(self.products)
        return sum(1 for p in self.products if (p.get("stock") or 0) > min_stock_exclusive)

    async def fetch_product_stock(self) -> List[Dict[str, Any]]:
        self._check("fetch_product_stock")
        return [{"category": p.get("category"), "stock": p.get("stock")} for p in self.products]

    async def fetch_admin_password_hash(self, email: str) -> Optional[str]:
        self._check("fetch_admin_password_hash")
        return self.admins.get(email)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
def now() -> datetime:
    """Fixed report clock; sample orders fall within its last 24 hours"""
    return NOW


@pytest.fixture
def admin_credentials() -> Dict[str, str]:
    return {"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}


@pytest.fixture(scope="session")
def admin_hash() -> str:
    """Admin password hash with few iterations to keep tests fast"""
    return hash_password(ADMIN_PASSWORD, iterations=1000)


@pytest.fixture
def sample_orders() -> List[Dict[str, Any]]:
    """Three orders across two shops, all within the last day of NOW"""
    return [
        {"shop_id": "s1", "total_price": 100.0, "created_at": NOW - timedelta(hours=5)},
        {"shop_id": "s1", "total_price": 50.0, "created_at": NOW - timedelta(hours=3)},
        {"shop_id": "s2", "total_price": 25.0, "created_at": NOW - timedelta(hours=1)},
    ]


@pytest.fixture
def sample_buyers() -> List[Dict[str, Any]]:
    return [
        {"buyer_id": "b1", "created_at": datetime(2024, 1, 5, tzinfo=timezone.utc)},
        {"buyer_id": "b2", "created_at": datetime(2024, 2, 20, tzinfo=timezone.utc)},
    ]


@pytest.fixture
def sample_shops() -> List[Dict[str, Any]]:
    return [
        {"shop_id": "s1", "shop_name": "Linen House", "nickname": "linen", "profile_photo": "s1.png",
         "created_at": datetime(2024, 1, 2, tzinfo=timezone.utc)},
        {"shop_id": "s2", "shop_name": "Denim Lab", "nickname": "denim", "profile_photo": "",
         "created_at": datetime(2024, 1, 10, tzinfo=timezone.utc)},
        {"shop_id": "s3", "shop_name": "Silk Road", "nickname": "silk", "profile_photo": "",
         "created_at": datetime(2024, 2, 1, tzinfo=timezone.utc)},
        {"shop_id": "s4", "shop_name": "Knit Corner", "nickname": "knit", "profile_photo": "",
         "created_at": datetime(2024, 3, 1, tzinfo=timezone.utc)},
    ]


@pytest.fixture
def sample_products() -> List[Dict[str, Any]]:
    return [
        {"category": "Dresses", "stock": 20},
        {"category": "Shirts", "stock": 10},
        {"category": "Dresses", "stock": 10},
        {"category": "Shoes", "stock": 0},
        {"category": None, "stock": 5},
    ]


@pytest.fixture
def fake_repository(sample_orders, sample_buyers, sample_shops, sample_products, admin_hash) -> FakeReportRepository:
    return FakeReportRepository(
        orders=sample_orders,
        buyers=sample_buyers,
        shops=sample_shops,
        products=sample_products,
        admins={ADMIN_EMAIL: admin_hash},
    )


@pytest.fixture
async def session_factory(tmp_path):
    """Session factory over a fresh SQLite database file"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'reports.db'}",
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def seeded_session_factory(
    session_factory, sample_orders, sample_buyers, sample_shops, sample_products, admin_hash
):
    """SQLite database loaded with the sample rows"""
    async with session_factory() as session:
        session.add_all([Shop(**shop) for shop in sample_shops])
        session.add_all([Buyer(**buyer) for buyer in sample_buyers])
        session.add_all([
            Order(order_id=f"o{i}", **order) for i, order in enumerate(sample_orders, start=1)
        ])
        session.add_all([Product(**product) for product in sample_products])
        session.add(Admin(email=ADMIN_EMAIL, password_hash=admin_hash))
        await session.commit()

    return session_factory
