"""
订单服务：下单、查询、修改、取消

每个操作显式接收当前用户 id；读写均在一个会话内完成，写操作包在 unit_of_work 中，
要么整体提交，要么整体回滚。
"""
import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from oms.core.database import unit_of_work
from oms.core.exceptions import NotFoundError, OrderValidationError, UnauthorizedError
from oms.models.order import Order, OrderItem, OrderStatus, utcnow
from oms.models.user import User
from oms.repositories.order_repository import OrderRepository
from oms.schemas.order import OrderItemRequest, OrderRequest, OrderResponse
from oms.services import order_lifecycle
from oms.services.order_number import generate_order_number
from oms.services.user_service import UserService

logger = logging.getLogger(__name__)


def build_items(item_requests: Iterable[OrderItemRequest]) -> List[OrderItem]:
    """由请求构造明细，未传折扣按 0 处理"""
    return [
        OrderItem(
            product_name=it.product_name,
            product_code=it.product_code,
            quantity=it.quantity,
            price=it.price,
            discount=it.discount if it.discount is not None else Decimal("0"),
            description=it.description,
        )
        for it in item_requests
    ]


class OrderService:
    """订单服务类"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.orders = OrderRepository(db)
        self.users = UserService(db)

    async def create_order(self, order_data: OrderRequest, user_id: int) -> OrderResponse:
        """创建订单"""
        user = await self.users.resolve_user(user_id)
        self._ensure_has_items(order_data)
        logger.info("用户 %s 创建订单", user.username)

        async with unit_of_work(self.db):
            now = utcnow()
            order = Order(
                order_number=generate_order_number(),
                user=user,
                status=OrderStatus.PENDING,
                shipping_address=order_data.shipping_address,
                billing_address=order_data.billing_address,
                payment_method=order_data.payment_method,
                notes=order_data.notes,
                created_at=now,
                updated_at=now,
            )
            for item in build_items(order_data.items):
                order.add_item(item)
            order.recalculate_total()
            await self.orders.save(order)

        logger.info("订单创建成功: %s，总额 %s", order.order_number, order.total_amount)
        return OrderResponse.from_entity(order)

    async def list_my_orders(
        self,
        user_id: int,
        status: Optional[OrderStatus] = None
    ) -> List[OrderResponse]:
        """当前用户的订单列表，最新在前"""
        user = await self.users.resolve_user(user_id)
        logger.info("查询用户 %s 的订单", user.username)
        orders = await self.orders.find_by_user(user.id, status)
        return [OrderResponse.from_entity(o) for o in orders]

    async def count_my_orders(self, user_id: int) -> int:
        """当前用户的订单数量"""
        user = await self.users.resolve_user(user_id)
        return await self.orders.count_by_user(user.id)

    async def get_order(self, order_id: int, user_id: int) -> OrderResponse:
        """获取订单详情"""
        user = await self.users.resolve_user(user_id)
        order = await self._get_owned_order(order_id, user, "查看")
        return OrderResponse.from_entity(order)

    async def get_order_by_number(self, order_number: str, user_id: int) -> OrderResponse:
        """按订单号获取订单详情"""
        user = await self.users.resolve_user(user_id)
        order = await self.orders.find_by_order_number(order_number)
        if order is None:
            raise NotFoundError(f"订单不存在: {order_number}")
        self._ensure_owner(order, user, "查看")
        return OrderResponse.from_entity(order)

    async def update_order(self, order_id: int, order_data: OrderRequest, user_id: int) -> OrderResponse:
        """修改订单：仅待处理订单可改，明细整体替换"""
        user = await self.users.resolve_user(user_id)
        self._ensure_has_items(order_data)

        async with unit_of_work(self.db):
            order = await self._get_owned_order(order_id, user, "修改")
            order_lifecycle.ensure_editable(order)
            logger.info("修改订单: %s", order.order_number)

            order.replace_items(build_items(order_data.items))
            order.shipping_address = order_data.shipping_address
            order.billing_address = order_data.billing_address
            order.payment_method = order_data.payment_method
            order.notes = order_data.notes
            order.recalculate_total()
            order.updated_at = max(utcnow(), order.created_at)
            await self.orders.save(order)

        logger.info("订单修改成功: %s", order.order_number)
        return OrderResponse.from_entity(order)

    async def cancel_order(self, order_id: int, user_id: int) -> OrderResponse:
        """取消订单"""
        user = await self.users.resolve_user(user_id)

        async with unit_of_work(self.db):
            order = await self._get_owned_order(order_id, user, "取消")
            order_lifecycle.ensure_cancellable(order)
            logger.info("取消订单: %s", order.order_number)

            now = max(utcnow(), order.created_at)
            order_lifecycle.transition(order, OrderStatus.CANCELLED, at=now)
            order.updated_at = now
            await self.orders.save(order)

        logger.info("订单取消成功: %s", order.order_number)
        return OrderResponse.from_entity(order)

    async def _get_owned_order(self, order_id: int, user: User, action: str) -> Order:
        """取订单并校验归属：不存在抛 NotFoundError，非本人抛 UnauthorizedError"""
        order = await self.orders.find_by_id(order_id)
        if order is None:
            raise NotFoundError(f"订单不存在: {order_id}")
        self._ensure_owner(order, user, action)
        return order

    @staticmethod
    def _ensure_owner(order: Order, user: User, action: str) -> None:
        if order.user_id != user.id:
            logger.warning("用户 %s 无权%s订单 %s", user.username, action, order.order_number)
            raise UnauthorizedError(f"无权{action}该订单")

    @staticmethod
    def _ensure_has_items(order_data: OrderRequest) -> None:
        if not order_data.items:
            raise OrderValidationError("订单至少需要包含一个商品")
