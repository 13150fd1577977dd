# Database models
from oms.models.user import User
from oms.models.order import Order, OrderItem, OrderStatus
from oms.models.audit_log import AuditLog

__all__ = [
    "User",
    "Order",
    "OrderItem",
    "OrderStatus",
    "AuditLog",
]
