"""操作审计 API"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from oms.api.deps import get_current_active_user
from oms.core.database import get_db
from oms.schemas.audit import AuditLogListResponse
from oms.schemas.auth import UserResponse
from oms.services.audit_service import list_audit_logs

router = APIRouter()


@router.get("", response_model=AuditLogListResponse)
async def get_audit_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    action: str = Query(None, description="create_order / update_order / cancel_order"),
    resource_type: str = Query(None, description="资源类型，如 order"),
    resource_id: str = Query(None, description="资源 id，配合 resource_type=order 查单个订单的历史"),
    current_user: UserResponse = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
):
    """我的操作记录"""
    return await list_audit_logs(db, current_user.id, page, page_size, action, resource_type, resource_id)
