"""
通用依赖：当前用户、客户端 IP
"""
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from oms.core.config import settings
from oms.core.database import get_db
from oms.schemas.auth import UserResponse
from oms.services.auth_service import AuthService, InvalidCredentialsError

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db)
) -> UserResponse:
    """获取当前用户信息（用户不存在时抛 NotFoundError，由全局处理器返回 404）"""
    auth_service = AuthService(db)
    try:
        user = await auth_service.get_current_user(token)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return UserResponse.model_validate(user)


async def get_current_active_user(
    current_user: UserResponse = Depends(get_current_user)
) -> UserResponse:
    """获取当前活跃用户"""
    if not current_user.is_active:
        raise HTTPException(status_code=400, detail="用户未激活")
    return current_user


def get_client_ip(request: Request) -> str:
    """客户端 IP：优先取反向代理透传的 X-Forwarded-For 第一个地址"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else ""
