"""
Admin Scaffold 主应用入口
基于 RBAC 的通用后台管理服务
"""
import logging
import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.database import SessionLocal, init_db
from app.exceptions import AppError, ConflictError
from app.system.routers import (
    admin_router, auth_router, config_router, menu_router, operation_log_router, role_router,
)

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"

HTTP_STATUS_CODES = {
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
}


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    setup_logging()
    if settings.AUTO_DB_INIT:
        init_db()

    db = SessionLocal()
    try:
        if settings.AUTO_DB_SEED:
            from app.system.services.seed import seed_all
            seed_all(db)
        if settings.AUTO_DB_INIT:
            from app.system.services.config_service import ConfigService
            ConfigService(db).load_cache()
    finally:
        db.close()

    logger.info("%s 启动完成", settings.APP_NAME)
    yield
    logger.info("%s 已关闭", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    description="RBAC 后台管理服务：管理员、角色、菜单权限、系统配置、操作日志",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
)


@app.middleware("http")
async def request_log_middleware(request: Request, call_next):
    """请求 ID + 访问日志"""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
    request.state.request_id = request_id
    started = time.perf_counter()

    response = await call_next(request)

    response.headers[REQUEST_ID_HEADER] = request_id
    logger.info(
        "%s %s -> %s (%dms) [%s]",
        request.method, request.url.path, response.status_code,
        int((time.perf_counter() - started) * 1000), request_id,
    )
    return response


# ========== 异常处理 ==========

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(err.get("loc", [])), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"code": "VALIDATION_ERROR", "message": "参数校验失败", "details": jsonable_encoder(details)},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    code = HTTP_STATUS_CODES.get(exc.status_code, "BUSINESS_ERROR" if exc.status_code < 500 else "INTERNAL_ERROR")
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": code, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("唯一约束冲突: %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content=ConflictError("数据已存在").to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("未处理的异常: %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"code": "INTERNAL_ERROR", "message": "服务器内部错误"})


# ========== 路由 ==========

app.include_router(auth_router.router, prefix=settings.API_PREFIX)
app.include_router(admin_router.router, prefix=settings.API_PREFIX)
app.include_router(role_router.router, prefix=settings.API_PREFIX)
app.include_router(menu_router.router, prefix=settings.API_PREFIX)
app.include_router(config_router.router, prefix=settings.API_PREFIX)
app.include_router(operation_log_router.router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    return {"name": settings.APP_NAME, "docs": "/docs"}


@app.get("/health")
async def health():
    return {"status": "ok"}
