"""
数据库：异步引擎、会话工厂与事务单元
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from oms.core.config import settings
from oms.core.exceptions import ConflictError

logger = logging.getLogger(__name__)

engine = create_async_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

# 约束列名（SQLite 报 users.username，PostgreSQL 报 ix_users_username）-> 冲突提示
UNIQUE_CONFLICT_MESSAGES = {
    "order_number": "订单号已存在，请重新提交",
    "username": "用户名已存在",
    "email": "邮箱已存在",
}

# 提交后不过期对象，接口层可直接读取已加载的订单与明细
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_db() -> AsyncIterator[AsyncSession]:
    """每个请求一个会话"""
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def unit_of_work(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    事务单元：块内所有修改要么全部提交，要么全部回滚。
    唯一约束冲突转为 ConflictError，其余异常回滚后原样抛出。
    """
    try:
        yield db
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning("唯一约束冲突，已回滚: %s", e.orig)
        for column, message in UNIQUE_CONFLICT_MESSAGES.items():
            if column in str(e.orig):
                raise ConflictError(message) from e
        raise ConflictError("数据冲突，请重新提交") from e
    except Exception:
        await db.rollback()
        raise
