"""
订单模型：订单聚合（订单 + 明细）
"""
import enum
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship

from oms.core.database import Base


def utcnow() -> datetime:
    """当前 UTC 时间（不带时区，统一按 UTC 存储）"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class OrderStatus(str, enum.Enum):
    """订单状态"""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class Order(Base):
    """订单表"""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(50), unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(
        Enum(OrderStatus, native_enum=False, length=20, validate_strings=True),
        nullable=False,
        default=OrderStatus.PENDING,
    )
    total_amount = Column(Numeric(10, 2), nullable=False, default=0)
    shipping_address = Column(String(500), nullable=True)
    billing_address = Column(String(500), nullable=True)
    payment_method = Column(String(50), nullable=True)
    notes = Column(String(1000), nullable=True)
    # 时间由服务层在变更时写入，不使用数据库默认值
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
    cancelled_at = Column(DateTime, nullable=True)

    # 关系
    user = relationship("User", back_populates="orders", lazy="joined")
    # 明细只能通过 add_item / remove_item 挂接或摘除；摘除的明细随之从库中删除
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
        lazy="selectin",
    )

    def add_item(self, item: "OrderItem") -> None:
        """追加一条明细（同一商品可出现多行）"""
        self.items.append(item)
        item.order = self

    def remove_item(self, item: "OrderItem") -> None:
        """摘除一条明细"""
        self.items.remove(item)
        item.order = None

    def replace_items(self, items) -> None:
        """整体替换明细，原明细全部摘除"""
        for item in list(self.items):
            self.remove_item(item)
        for item in items:
            self.add_item(item)

    def recalculate_total(self) -> Decimal:
        """
        重新计算订单总额：各明细小计之和。
        不会随明细变化自动触发，每次修改明细后、保存前必须调用。
        """
        self.total_amount = sum((item.subtotal for item in self.items), Decimal("0"))
        return self.total_amount


class OrderItem(Base):
    """订单明细表"""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_name = Column(String(200), nullable=False)
    product_code = Column(String(50), nullable=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    discount = Column(Numeric(10, 2), default=0)  # 整行立减金额，非单价折扣
    description = Column(String(500), nullable=True)

    order = relationship("Order", back_populates="items")

    @property
    def subtotal(self) -> Decimal:
        """小计 = 单价 × 数量，折扣为正时整行减去折扣（不截断为 0，可为负）"""
        subtotal = Decimal(str(self.price)) * self.quantity
        if self.discount is not None and Decimal(str(self.discount)) > 0:
            subtotal -= Decimal(str(self.discount))
        return subtotal
