"""
订单相关Schema：下单/修改请求与订单只读视图
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from oms.models.order import Order, OrderStatus


class OrderItemRequest(BaseModel):
    """订单明细请求"""
    product_name: str = Field(..., min_length=1, max_length=200)
    product_code: Optional[str] = Field(None, max_length=50)
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    discount: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    description: Optional[str] = Field(None, max_length=500)


class OrderRequest(BaseModel):
    """下单 / 修改订单请求（修改时整体替换明细）"""
    shipping_address: Optional[str] = Field(None, max_length=500)
    billing_address: Optional[str] = Field(None, max_length=500)
    payment_method: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=1000)
    items: List[OrderItemRequest] = Field(..., min_length=1)


class OrderItemResponse(BaseModel):
    """订单明细响应"""
    id: Optional[int] = None
    product_name: str
    product_code: Optional[str] = None
    quantity: int
    price: Decimal
    discount: Optional[Decimal] = None
    subtotal: Decimal
    description: Optional[str] = None

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    """订单响应"""
    id: int
    order_number: str
    user_id: int
    username: str
    items: List[OrderItemResponse]
    status: str
    total_amount: Decimal
    shipping_address: Optional[str] = None
    billing_address: Optional[str] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    cancelled_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, order: Order) -> "OrderResponse":
        """由订单聚合投影为只读视图"""
        return cls(
            id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            username=order.user.username,
            items=[OrderItemResponse.model_validate(item) for item in order.items],
            status=OrderStatus(order.status).value,
            total_amount=order.total_amount,
            shipping_address=order.shipping_address,
            billing_address=order.billing_address,
            payment_method=order.payment_method,
            notes=order.notes,
            created_at=order.created_at,
            updated_at=order.updated_at,
            cancelled_at=order.cancelled_at,
        )


class OrderCountResponse(BaseModel):
    """订单数量统计"""
    total: int
