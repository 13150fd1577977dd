"""审计日志 Schema"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel


class AuditLogItem(BaseModel):
    """一条操作记录；detail 为 JSON 字符串，订单操作含 order_number、status、total_amount"""
    id: int
    action: str
    resource_type: Optional[str] = None
    resource_id: Optional[str] = None
    detail: Optional[str] = None
    ip: Optional[str] = None
    request_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AuditLogListResponse(BaseModel):
    items: List[AuditLogItem]
    total: int
    page: int
    page_size: int
