"""
通用 CRUD 路由工厂

给定实体 / 创建 / 更新 / 查询 schema 和五个处理函数，在 APIRouter 上注册：

    GET    ""          列表   <prefix>:list
    GET    "/{id}"     详情   <prefix>:query
    POST   ""          创建   <prefix>:create   201
    PUT    "/{id}"     更新   <prefix>:update
    DELETE "/{id}"     删除   <prefix>:delete   data=null

未提供的处理函数不注册对应路由。写操作在独立事务中执行，
按 audit 配置写入操作日志（成功 / 失败都记录）。

扩展路由（如 /all、/tree）应在调用本工厂之前注册到同一个 router。
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Type, Union

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.database import get_db, transaction
from app.exceptions import ConflictError
from app.responses import ApiResponse, Page, PageQuery, created, ok, success
from app.security.auth import get_current_admin, require_permission
from app.security.permissions import (
    ACTION_CREATE, ACTION_DELETE, ACTION_LIST, ACTION_QUERY, ACTION_UPDATE, crud_permission,
)
from app.system.services.operation_log_service import write_audit_log

logger = logging.getLogger(__name__)

UNIQUE_CONFLICT_MESSAGE = "数据已存在"

OPERATION_LABELS = {
    ACTION_CREATE: "创建",
    ACTION_UPDATE: "更新",
    ACTION_DELETE: "删除",
}


@dataclass
class AuditConfig:
    """True 使用默认描述，字符串为自定义描述，False 不记录"""
    create: Union[bool, str] = True
    update: Union[bool, str] = True
    delete: Union[bool, str] = True


@dataclass
class CrudContext:
    db: Session
    request: Request
    admin: Any = None


@dataclass
class CrudConfig:
    module_name: str
    permission_prefix: str
    entity_schema: Type[BaseModel]
    detail_schema: Optional[Type[BaseModel]] = None
    create_schema: Optional[Type[BaseModel]] = None
    update_schema: Optional[Type[BaseModel]] = None
    query_schema: Type[BaseModel] = PageQuery
    paginated: bool = True
    require_auth: bool = True
    audit: AuditConfig = field(default_factory=AuditConfig)


@dataclass
class CrudHandlers:
    list: Optional[Callable[[CrudContext, Any], Any]] = None
    detail: Optional[Callable[[CrudContext, int], Any]] = None
    create: Optional[Callable[[CrudContext, Any], Any]] = None
    update: Optional[Callable[[CrudContext, int, Any], Any]] = None
    delete: Optional[Callable[[CrudContext, int], None]] = None


def query_params(schema: Type[BaseModel]):
    """把 query string 解析为 schema；失败时抛出请求校验错误"""
    def parse(request: Request):
        try:
            return schema.model_validate(dict(request.query_params))
        except PydanticValidationError as e:
            raise RequestValidationError(e.errors())
    return parse


def crud_context(permission: Optional[str], require_auth: bool = True):
    """构造 CrudContext 依赖；require_auth 时同时校验登录和权限"""
    if not require_auth:
        def public_context(request: Request, db: Session = Depends(get_db)) -> CrudContext:
            return CrudContext(db=db, request=request)
        return public_context

    guard = require_permission(permission) if permission else get_current_admin

    def context(
        request: Request,
        admin=Depends(guard),
        db: Session = Depends(get_db),
    ) -> CrudContext:
        return CrudContext(db=db, request=request, admin=admin)
    return context


def _serialize(result: Any, schema: Type[BaseModel]) -> Any:
    if result is None or isinstance(result, BaseModel):
        return result
    if isinstance(result, (list, tuple)):
        return [_serialize(item, schema) for item in result]
    return schema.model_validate(result)


def _audit_description(setting: Union[bool, str], action: str, module_name: str) -> str:
    if isinstance(setting, str):
        return setting
    return f"{OPERATION_LABELS[action]}{module_name}"


def run_write(ctx: CrudContext, *, module_name: str, action: str, audit: Union[bool, str],
              handler: Callable, args: tuple = (), params: Any = None,
              serialize: Optional[Callable[[Any], Any]] = None) -> Any:
    """在事务中执行写操作，并按需写入操作日志"""
    started = time.perf_counter()
    try:
        try:
            with transaction(ctx.db):
                result = handler(ctx, *args)
        except IntegrityError as e:
            # 预检查之后的并发写入由唯一约束拒绝
            logger.warning("唯一约束冲突: module=%s action=%s: %s", module_name, action, e.orig)
            raise ConflictError(UNIQUE_CONFLICT_MESSAGE) from e
        data = serialize(result) if serialize else result
    except Exception as e:
        if audit:
            write_audit_log(
                ctx.db, ctx.request, admin=ctx.admin, module=module_name,
                operation=OPERATION_LABELS.get(action, action),
                description=_audit_description(audit, action, module_name),
                method=handler.__name__, params=params, error=e,
                execution_time=int((time.perf_counter() - started) * 1000),
            )
        raise

    if audit:
        write_audit_log(
            ctx.db, ctx.request, admin=ctx.admin, module=module_name,
            operation=OPERATION_LABELS.get(action, action),
            description=_audit_description(audit, action, module_name),
            method=handler.__name__, params=params, result=data,
            execution_time=int((time.perf_counter() - started) * 1000),
        )
    return data


def _request_params(request: Request, payload: Optional[BaseModel] = None) -> dict:
    params = {}
    if request.path_params:
        params["path"] = dict(request.path_params)
    if request.query_params:
        params["query"] = dict(request.query_params)
    if payload is not None:
        params["body"] = payload.model_dump(by_alias=True, exclude_unset=True)
    return params


def create_crud_router(config: CrudConfig, handlers: CrudHandlers,
                       router: Optional[APIRouter] = None, **router_kwargs) -> APIRouter:
    """在 router 上注册 CRUD 路由并返回该 router"""
    if router is None:
        router = APIRouter(**router_kwargs)

    entity = config.entity_schema
    detail_schema = config.detail_schema or entity
    module = config.module_name

    def permission(action: str) -> str:
        return crud_permission(config.permission_prefix, action)

    def context_for(action: str):
        return crud_context(permission(action), config.require_auth)

    if handlers.list is not None:
        list_model = ApiResponse[Page[entity]] if config.paginated else ApiResponse[List[entity]]

        def list_items(
            ctx: CrudContext = Depends(context_for(ACTION_LIST)),
            query=Depends(query_params(config.query_schema)),
        ):
            return ok(_serialize(handlers.list(ctx, query), entity))

        router.add_api_route(
            "", list_items, methods=["GET"], response_model=list_model,
            summary=f"{module}列表", name=f"{config.permission_prefix}:list",
        )

    if handlers.detail is not None:
        def get_item(id: int, ctx: CrudContext = Depends(context_for(ACTION_QUERY))):
            return ok(_serialize(handlers.detail(ctx, id), detail_schema))

        router.add_api_route(
            "/{id:int}", get_item, methods=["GET"], response_model=ApiResponse[detail_schema],
            summary=f"{module}详情", name=f"{config.permission_prefix}:query",
        )

    if handlers.create is not None and config.create_schema is not None:
        create_schema = config.create_schema

        def create_item(
            payload: create_schema,
            ctx: CrudContext = Depends(context_for(ACTION_CREATE)),
        ):
            data = run_write(
                ctx, module_name=module, action=ACTION_CREATE, audit=config.audit.create,
                handler=handlers.create, args=(payload,),
                params=_request_params(ctx.request, payload),
                serialize=lambda r: _serialize(r, detail_schema),
            )
            return created(data)

        router.add_api_route(
            "", create_item, methods=["POST"], status_code=201,
            response_model=ApiResponse[detail_schema],
            summary=f"创建{module}", name=f"{config.permission_prefix}:create",
        )

    if handlers.update is not None and config.update_schema is not None:
        update_schema = config.update_schema

        def update_item(
            id: int,
            payload: update_schema,
            ctx: CrudContext = Depends(context_for(ACTION_UPDATE)),
        ):
            data = run_write(
                ctx, module_name=module, action=ACTION_UPDATE, audit=config.audit.update,
                handler=handlers.update, args=(id, payload),
                params=_request_params(ctx.request, payload),
                serialize=lambda r: _serialize(r, detail_schema),
            )
            return ok(data, "更新成功")

        router.add_api_route(
            "/{id:int}", update_item, methods=["PUT"], response_model=ApiResponse[detail_schema],
            summary=f"更新{module}", name=f"{config.permission_prefix}:update",
        )

    if handlers.delete is not None:
        def delete_item(id: int, ctx: CrudContext = Depends(context_for(ACTION_DELETE))):
            run_write(
                ctx, module_name=module, action=ACTION_DELETE, audit=config.audit.delete,
                handler=handlers.delete, args=(id,),
                params=_request_params(ctx.request),
            )
            return success("删除成功")

        router.add_api_route(
            "/{id:int}", delete_item, methods=["DELETE"], response_model=ApiResponse,
            summary=f"删除{module}", name=f"{config.permission_prefix}:delete",
        )

    return router
