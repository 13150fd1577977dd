"""
订单仓储：订单聚合的持久化读写
只负责 flush，不提交事务；提交由服务层的 unit_of_work 统一完成
"""
from typing import List, Optional

from sqlalchemy import select, func, exists
from sqlalchemy.ext.asyncio import AsyncSession

from oms.models.order import Order, OrderStatus


class OrderRepository:
    """订单仓储类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def save(self, order: Order) -> Order:
        """保存订单（含明细），flush 后可取到自增 id；订单号重复时 flush 抛 IntegrityError"""
        self.db.add(order)
        await self.db.flush()
        return order

    async def find_by_id(self, order_id: int) -> Optional[Order]:
        result = await self.db.execute(select(Order).where(Order.id == order_id))
        return result.unique().scalar_one_or_none()

    async def find_by_user(
        self,
        user_id: int,
        status: Optional[OrderStatus] = None
    ) -> List[Order]:
        """用户的订单，按创建时间倒序（最新在前）"""
        stmt = select(Order).where(Order.user_id == user_id)
        if status is not None:
            stmt = stmt.where(Order.status == OrderStatus(status))
        stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc())
        result = await self.db.execute(stmt)
        return list(result.unique().scalars().all())

    async def find_by_order_number(self, order_number: str) -> Optional[Order]:
        result = await self.db.execute(select(Order).where(Order.order_number == order_number))
        return result.unique().scalar_one_or_none()

    async def exists_by_order_number(self, order_number: str) -> bool:
        return bool(await self.db.scalar(select(exists().where(Order.order_number == order_number))))

    async def count_by_user(self, user_id: int) -> int:
        count = await self.db.scalar(
            select(func.count()).select_from(Order).where(Order.user_id == user_id)
        )
        return count or 0
