"""
日志配置：控制台 + 按大小滚动的文件日志
"""
import logging
from logging.handlers import RotatingFileHandler

from oms.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging() -> None:
    """初始化根日志器，重复调用不会重复添加 handler"""
    root = logging.getLogger()
    root.setLevel(settings.LOG_LEVEL.upper())
    if getattr(root, "_oms_configured", False):
        return

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    try:
        settings.LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            settings.LOG_FILE,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
    except OSError as e:
        root.warning("日志文件不可写，仅输出到控制台: %s", e)

    # SQL 日志由 DATABASE_ECHO 控制，这里压低默认级别
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    root._oms_configured = True
