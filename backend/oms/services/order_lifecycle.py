"""
订单状态机：合法状态流转与修改/取消前置校验

PENDING -> CONFIRMED -> PROCESSING -> SHIPPED -> DELIVERED
PENDING / CONFIRMED / PROCESSING / SHIPPED -> CANCELLED
DELIVERED、CANCELLED 为终态
"""
from datetime import datetime
from typing import Dict, FrozenSet, Optional

from oms.core.exceptions import InvalidStateError
from oms.models.order import Order, OrderStatus, utcnow

ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATES = frozenset(s for s, targets in ALLOWED_TRANSITIONS.items() if not targets)


def is_terminal(status: OrderStatus) -> bool:
    return OrderStatus(status) in TERMINAL_STATES


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """current -> target 是否为合法流转"""
    return OrderStatus(target) in ALLOWED_TRANSITIONS[OrderStatus(current)]


def transition(order: Order, target: OrderStatus, at: Optional[datetime] = None) -> Order:
    """
    校验并执行状态流转，非法流转抛 InvalidStateError。
    进入 CANCELLED 时写入 cancelled_at。
    """
    current = OrderStatus(order.status)
    target = OrderStatus(target)
    if not can_transition(current, target):
        raise InvalidStateError(f"订单状态不允许从 {current.value} 变更为 {target.value}")
    order.status = target
    if target == OrderStatus.CANCELLED:
        order.cancelled_at = at or utcnow()
    return order


def ensure_editable(order: Order) -> None:
    """只有待处理（PENDING）的订单可以修改"""
    if OrderStatus(order.status) != OrderStatus.PENDING:
        raise InvalidStateError("只有待处理的订单可以修改")


def ensure_cancellable(order: Order) -> None:
    """已取消、已送达的订单不能取消"""
    status = OrderStatus(order.status)
    if status == OrderStatus.CANCELLED:
        raise InvalidStateError("订单已取消")
    if status == OrderStatus.DELIVERED:
        raise InvalidStateError("已送达的订单无法取消")
