"""
应用配置：从环境变量读取配置
"""
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """应用配置类"""

    # 项目根目录
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT.parent / ".env"),  # 从项目根目录读取 .env
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # API配置
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "订单管理系统"
    CORS_ORIGINS: List[str] = ["*"]  # CORS允许的源

    # 数据库配置（默认本地 SQLite，生产可换 postgresql+asyncpg://...）
    DATABASE_URL: str = "sqlite+aiosqlite:///./oms.db"
    DATABASE_ECHO: bool = False

    # 安全配置
    JWT_SECRET_KEY: str = "your-jwt-secret-key-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080

    # 订单配置
    ORDER_NUMBER_PREFIX: str = "ORD"  # 订单号前缀：ORD-<毫秒时间戳>-<8位随机串>

    # 操作审计：是否记录下单、修改、取消等关键操作到 audit_log 表
    AUDIT_LOG_ENABLED: bool = True

    # 日志配置
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Path = PROJECT_ROOT / "logs" / "app.log"


# 创建全局配置实例
settings = Settings()
