"""
操作日志 API 路由（只读 + 删除）
前缀: /api/operation-logs
"""
from fastapi import APIRouter

from app.security.permissions import LOG_PREFIX
from app.system.routers.crud import AuditConfig, CrudConfig, CrudContext, CrudHandlers, create_crud_router
from app.system.schemas import OperationLogQuery, OperationLogResponse
from app.system.services.operation_log_service import OperationLogService


def list_logs(ctx: CrudContext, query: OperationLogQuery):
    return OperationLogService(ctx.db).list_logs(query)


def get_log(ctx: CrudContext, log_id: int):
    return OperationLogService(ctx.db).get_log(log_id)


def delete_log(ctx: CrudContext, log_id: int):
    OperationLogService(ctx.db).delete_log(log_id)


router = create_crud_router(
    CrudConfig(
        module_name="操作日志",
        permission_prefix=LOG_PREFIX,
        entity_schema=OperationLogResponse,
        query_schema=OperationLogQuery,
        audit=AuditConfig(create=False, update=False, delete=False),
    ),
    CrudHandlers(list=list_logs, detail=get_log, delete=delete_log),
    router=APIRouter(prefix="/operation-logs", tags=["操作日志"]),
)
