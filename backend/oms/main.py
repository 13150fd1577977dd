"""
FastAPI主应用入口
"""
import uuid
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager

from oms.core.config import settings
from oms.core.database import engine, Base
from oms.core.exceptions import OrderManagementError
from oms.api.v1 import api_router
from oms.core.logging import setup_logging
from oms.core.health import check_db
import oms.models  # noqa: F401  注册所有表到 Base.metadata


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    # 启动时执行
    setup_logging()
    # 创建数据库表
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    # 关闭时执行
    await engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="订单管理系统API：下单、查询、修改、取消订单",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS配置
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# GZip压缩
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """为每个请求生成或透传 X-Request-ID，并写入 request.state"""
    rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = rid
    response = await call_next(request)
    response.headers["X-Request-ID"] = rid
    return response


def _error_response(detail: str, status_code: int, request_id: str | None = None) -> dict:
    body = {"detail": detail}
    if request_id:
        body["request_id"] = request_id
    return body


@app.exception_handler(OrderManagementError)
async def order_management_exception_handler(request: Request, exc: OrderManagementError):
    """业务异常：404 不存在 / 403 无权操作 / 400 状态不允许 / 409 冲突"""
    rid = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_response(detail=exc.message, status_code=exc.status_code, request_id=rid),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """统一 HTTP 异常响应格式"""
    rid = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_response(
            detail=exc.detail if isinstance(exc.detail, str) else str(exc.detail),
            status_code=exc.status_code,
            request_id=rid,
        ),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """422 校验错误统一格式"""
    rid = getattr(request.state, "request_id", None)
    errs = jsonable_encoder(exc.errors())
    detail = errs[0].get("msg", "请求参数校验失败") if errs else "请求参数校验失败"
    body = _error_response(detail=detail, status_code=422, request_id=rid)
    body["errors"] = errs
    return JSONResponse(status_code=422, content=body)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """未捕获异常统一格式"""
    rid = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=500,
        content=_error_response(
            detail="服务器内部错误",
            status_code=500,
            request_id=rid,
        ),
    )


# 注册路由
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    """根路径"""
    return {
        "message": "订单管理系统API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """健康检查：返回数据库连通状态"""
    db_ok, db_msg = await check_db()
    return JSONResponse(
        content={
            "status": "healthy" if db_ok else "degraded",
            "service": "order-api",
            "dependencies": {
                "database": {"ok": db_ok, "message": db_msg},
            },
        }
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "oms.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        reload_excludes=["**/__pycache__/**", "**/*.pyc"],
    )
