"""
操作审计日志：下单、修改订单、取消订单等关键操作
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from oms.core.database import Base


class AuditLog(Base):
    """审计日志表"""
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    action = Column(String(64), nullable=False, index=True)  # create_order, update_order, cancel_order
    resource_type = Column(String(32), nullable=True, index=True)  # order
    resource_id = Column(String(64), nullable=True)  # 订单 id
    detail = Column(Text, nullable=True)  # JSON，如订单号、总额
    ip = Column(String(64), nullable=True)
    request_id = Column(String(64), nullable=True, index=True)  # 链路追踪，与 X-Request-ID 一致
    created_at = Column(DateTime(timezone=True), server_default=func.now())
