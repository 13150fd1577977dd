"""
认证服务（直接使用 bcrypt，避免 passlib 与 bcrypt 版本不兼容）
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
import bcrypt
from jose import jwt, JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from oms.core.config import settings
from oms.core.database import unit_of_work
from oms.core.exceptions import ConflictError, NotFoundError
from oms.models.user import User
from oms.schemas.auth import UserCreate
from oms.services.user_service import UserService

# bcrypt 最多 72 字节，超长密码需截断（与注册/登录一致）
BCRYPT_MAX_BYTES = 72


class InvalidCredentialsError(Exception):
    """令牌无效或已过期"""


def _truncate_password_72(password: str) -> bytes:
    """将密码截断为 72 字节（UTF-8），返回 bytes 供 bcrypt 使用"""
    b = password.encode("utf-8")
    if len(b) <= BCRYPT_MAX_BYTES:
        return b
    return b[:BCRYPT_MAX_BYTES]


class AuthService:
    """认证服务类"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserService(db)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """验证密码"""
        try:
            return bcrypt.checkpw(
                _truncate_password_72(plain_password),
                hashed_password.encode("utf-8"),
            )
        except ValueError:
            return False

    def get_password_hash(self, password: str) -> str:
        """生成密码哈希"""
        return bcrypt.hashpw(
            _truncate_password_72(password),
            bcrypt.gensalt(),
        ).decode("utf-8")

    def create_access_token(self, data: dict, expires_delta: Optional[timedelta] = None) -> str:
        """创建访问令牌"""
        to_encode = data.copy()
        if expires_delta:
            expire = datetime.now(timezone.utc) + expires_delta
        else:
            expire = datetime.now(timezone.utc) + timedelta(minutes=15)
        to_encode.update({"exp": expire})
        encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
        return encoded_jwt

    async def authenticate_user(self, username: str, password: str) -> Optional[User]:
        """验证用户"""
        user = await self.users.get_user_by_username(username)
        if not user:
            return None
        if not (user.password_hash and user.password_hash.strip()):
            return None
        if not self.verify_password(password, user.password_hash):
            return None
        return user

    async def register_user(self, user_data: UserCreate) -> User:
        """注册用户"""
        # 检查用户名是否已存在
        if await self.users.get_user_by_username(user_data.username):
            raise ConflictError("用户名已存在")

        # 检查邮箱是否已存在
        if await self.users.get_user_by_email(user_data.email):
            raise ConflictError("邮箱已存在")

        user = User(
            username=user_data.username,
            email=user_data.email,
            password_hash=self.get_password_hash(user_data.password),
        )
        # 并发注册同名用户时，后提交者由唯一约束兜底，unit_of_work 转为 ConflictError
        async with unit_of_work(self.db):
            self.db.add(user)
            await self.db.flush()
        await self.db.refresh(user)
        return user

    async def get_current_user(self, token: str) -> User:
        """
        由令牌解析当前用户。
        令牌无效抛 InvalidCredentialsError；令牌有效但用户不存在抛 NotFoundError。
        """
        try:
            payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        except JWTError as e:
            raise InvalidCredentialsError("无效的认证凭据") from e
        username: str = payload.get("sub")
        if username is None:
            raise InvalidCredentialsError("无效的认证凭据")

        user = await self.users.get_user_by_username(username)
        if user is None:
            raise NotFoundError(f"用户不存在: {username}")
        return user
