"""
测试公共夹具：每个测试独立的临时 SQLite 库、测试用户、ASGI 客户端
"""
from decimal import Decimal
from typing import List, Optional, Tuple

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import oms.models  # noqa: F401  注册所有表
from oms.core.database import Base, get_db
from oms.models.order import Order, OrderStatus, utcnow
from oms.models.user import User
from oms.schemas.order import OrderItemRequest, OrderRequest


@pytest.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def _create_user(session_factory, username: str) -> int:
    async with session_factory() as session:
        user = User(username=username, email=f"{username}@example.com", password_hash="not-used")
        session.add(user)
        await session.commit()
        return user.id


@pytest.fixture
async def alice(session_factory) -> int:
    return await _create_user(session_factory, "alice")


@pytest.fixture
async def bob(session_factory) -> int:
    return await _create_user(session_factory, "bob")


def make_request(
    items: Optional[List[Tuple[str, int, Optional[str]]]] = None,
    **fields,
) -> OrderRequest:
    """items 为 (price, quantity, discount) 列表，默认即示例订单：10.00×2 + (5.00×1 - 1.00)"""
    if items is None:
        items = [("10.00", 2, None), ("5.00", 1, "1.00")]
    fields.setdefault("shipping_address", "上海市浦东新区世纪大道 1 号")
    fields.setdefault("billing_address", "上海市浦东新区世纪大道 1 号")
    fields.setdefault("payment_method", "alipay")
    return OrderRequest(
        items=[
            OrderItemRequest(
                product_name=f"商品{i}",
                product_code=f"SKU-{i}",
                quantity=qty,
                price=Decimal(price),
                discount=Decimal(discount) if discount is not None else None,
            )
            for i, (price, qty, discount) in enumerate(items)
        ],
        **fields,
    )


async def force_status(session_factory, order_id: int, status: OrderStatus) -> None:
    """绕过服务层直接改状态，用于构造已确认、已送达等订单"""
    async with session_factory() as session:
        order = await session.get(Order, order_id)
        order.status = status
        order.cancelled_at = utcnow() if status == OrderStatus.CANCELLED else None
        await session.commit()


@pytest.fixture
async def client(session_factory, engine, monkeypatch):
    from oms.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    monkeypatch.setattr("oms.core.database.engine", engine)
    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
