"""
用户服务：按 id / 用户名解析当前用户
"""
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from oms.core.exceptions import NotFoundError
from oms.models.user import User


class UserService:
    """用户服务类"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: int) -> Optional[User]:
        """获取用户"""
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_username(self, username: str) -> Optional[User]:
        """根据用户名获取用户"""
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """根据邮箱获取用户"""
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def resolve_user(self, user_id: int) -> User:
        """解析当前用户，不存在抛 NotFoundError"""
        user = await self.get_user(user_id)
        if user is None:
            raise NotFoundError(f"用户不存在: {user_id}")
        return user
