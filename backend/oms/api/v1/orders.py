"""
订单相关API
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from oms.api.deps import get_client_ip, get_current_active_user
from oms.core.database import get_db
from oms.models.order import OrderStatus
from oms.schemas.auth import UserResponse
from oms.schemas.order import OrderCountResponse, OrderRequest, OrderResponse
from oms.schemas.audit import AuditLogListResponse
from oms.services.audit_service import ORDER_RESOURCE, list_audit_logs, log_audit
from oms.services.order_service import OrderService

router = APIRouter()


async def _audit(db: AsyncSession, request: Request, user_id: int, action: str, order: OrderResponse) -> None:
    await log_audit(
        db,
        user_id,
        action,
        ORDER_RESOURCE,
        str(order.id),
        {"order_number": order.order_number, "status": order.status, "total_amount": order.total_amount},
        get_client_ip(request),
        getattr(request.state, "request_id", None),
    )


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderRequest,
    request: Request,
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """创建订单"""
    order_service = OrderService(db)
    order = await order_service.create_order(order_data, current_user.id)
    await _audit(db, request, current_user.id, "create_order", order)
    return order


@router.get("", response_model=List[OrderResponse])
async def list_my_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status", description="按订单状态筛选"),
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """我的订单列表（最新在前）"""
    order_service = OrderService(db)
    return await order_service.list_my_orders(current_user.id, status_filter)


@router.get("/count", response_model=OrderCountResponse)
async def count_my_orders(
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """我的订单数量"""
    order_service = OrderService(db)
    return {"total": await order_service.count_my_orders(current_user.id)}


@router.get("/by-number/{order_number}", response_model=OrderResponse)
async def get_order_by_number(
    order_number: str,
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """按订单号获取订单"""
    order_service = OrderService(db)
    return await order_service.get_order_by_number(order_number, current_user.id)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: int,
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """获取订单详情"""
    order_service = OrderService(db)
    return await order_service.get_order(order_id, current_user.id)


@router.get("/{order_id}/history", response_model=AuditLogListResponse)
async def get_order_history(
    order_id: int,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """订单操作历史（先校验订单归属）"""
    order_service = OrderService(db)
    await order_service.get_order(order_id, current_user.id)
    return await list_audit_logs(
        db, current_user.id, page, page_size,
        resource_type=ORDER_RESOURCE, resource_id=str(order_id),
    )


@router.put("/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: int,
    order_data: OrderRequest,
    request: Request,
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """修改订单（仅待处理订单，明细整体替换）"""
    order_service = OrderService(db)
    order = await order_service.update_order(order_id, order_data, current_user.id)
    await _audit(db, request, current_user.id, "update_order", order)
    return order


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: int,
    request: Request,
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """取消订单"""
    order_service = OrderService(db)
    order = await order_service.cancel_order(order_id, current_user.id)
    await _audit(db, request, current_user.id, "cancel_order", order)
    return order
