"""
健康检查：数据库连通性
"""
import logging
from typing import Tuple

from sqlalchemy import text

from oms.core.config import settings

logger = logging.getLogger(__name__)


async def check_db() -> Tuple[bool, str]:
    """检查数据库连通性"""
    if not getattr(settings, "DATABASE_URL", None) or not settings.DATABASE_URL.strip():
        return False, "DATABASE_URL 未配置"
    try:
        from oms.core.database import engine
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True, "ok"
    except Exception as e:
        logger.warning("健康检查 DB 失败: %s", e)
        return False, str(e)
