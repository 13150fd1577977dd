"""
订单号生成：ORD-<毫秒时间戳>-<8位大写随机串>
唯一性由时间戳 + 随机串保证到极高概率，最终以数据库唯一约束兜底（冲突抛 ConflictError）
"""
import time
import uuid

from oms.core.config import settings


def generate_order_number(prefix: str = None) -> str:
    """生成订单号"""
    prefix = prefix or settings.ORDER_NUMBER_PREFIX
    millis = int(time.time() * 1000)
    return f"{prefix}-{millis}-{uuid.uuid4().hex[:8].upper()}"
