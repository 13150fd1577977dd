"""
操作审计服务：记录下单、修改、取消等关键操作，并按订单查询操作历史
"""
import json
import logging
from typing import Any, Optional

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from oms.core.config import settings
from oms.models.audit_log import AuditLog
from oms.schemas.audit import AuditLogItem, AuditLogListResponse

logger = logging.getLogger(__name__)

ORDER_RESOURCE = "order"


async def log_audit(
    db: AsyncSession,
    user_id: int,
    action: str,
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None,
    detail: Optional[dict[str, Any]] = None,
    ip: Optional[str] = None,
    request_id: Optional[str] = None,
) -> None:
    """写入一条审计日志。订单变更已提交，这里写失败只记告警，不回滚订单。"""
    if not getattr(settings, "AUDIT_LOG_ENABLED", True):
        return
    try:
        db.add(AuditLog(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            detail=json.dumps(detail, ensure_ascii=False, default=str) if detail else None,
            ip=ip,
            request_id=request_id,
        ))
        await db.commit()
    except SQLAlchemyError as e:
        logger.warning("审计日志写入失败 action=%s resource=%s/%s: %s", action, resource_type, resource_id, e)
        await db.rollback()


async def list_audit_logs(
    db: AsyncSession,
    user_id: int,
    page: int = 1,
    page_size: int = 20,
    action: Optional[str] = None,
    resource_type: Optional[str] = None,
    resource_id: Optional[str] = None,
) -> AuditLogListResponse:
    """当前用户的操作记录，最新在前；传 resource_type=order 与 resource_id 即为单个订单的历史"""
    conditions = [AuditLog.user_id == user_id]
    if action:
        conditions.append(AuditLog.action == action)
    if resource_type:
        conditions.append(AuditLog.resource_type == resource_type)
    if resource_id:
        conditions.append(AuditLog.resource_id == resource_id)

    total = await db.scalar(select(func.count()).select_from(AuditLog).where(*conditions)) or 0
    result = await db.execute(
        select(AuditLog)
        .where(*conditions)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return AuditLogListResponse(
        items=[AuditLogItem.model_validate(x) for x in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size,
    )
