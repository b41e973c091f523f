"""
操作日志 Service - 审计记录写入与查询
"""
import json
import logging
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import NotFoundError
from app.responses import Page
from app.system.models import SysOperationLog
from app.system.schemas import OperationLogQuery, OperationLogResponse

logger = logging.getLogger(__name__)

MASK = "******"
_SENSITIVE_PATTERNS = ("password", "secret", "token", "credential")


def _is_sensitive_key(key: str) -> bool:
    key_lower = key.lower()
    return any(p in key_lower for p in _SENSITIVE_PATTERNS)


def mask_sensitive(value: Any) -> Any:
    """递归把密码类字段替换为 ******"""
    if isinstance(value, dict):
        return {
            k: MASK if isinstance(k, str) and _is_sensitive_key(k) else mask_sensitive(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [mask_sensitive(v) for v in value]
    return value


def to_log_text(value: Any, max_length: Optional[int] = None) -> Optional[str]:
    """序列化为 JSON 文本并截断"""
    if value is None:
        return None
    limit = max_length or settings.AUDIT_RESULT_MAX_LENGTH
    text = json.dumps(mask_sensitive(jsonable_encoder(value, by_alias=True)), ensure_ascii=False)
    if len(text) > limit:
        text = text[:limit] + "...(truncated)"
    return text


class OperationLogService:
    def __init__(self, db: Session):
        self.db = db

    def record(self, **fields) -> SysOperationLog:
        log = SysOperationLog(**fields)
        self.db.add(log)
        self.db.flush()
        return log

    def list_logs(self, query: OperationLogQuery) -> Page:
        q = self.db.query(SysOperationLog)
        if query.admin_name:
            q = q.filter(SysOperationLog.admin_name.contains(query.admin_name))
        if query.module:
            q = q.filter(SysOperationLog.module == query.module)
        if query.operation:
            q = q.filter(SysOperationLog.operation == query.operation)
        if query.status is not None:
            q = q.filter(SysOperationLog.status == query.status)
        if query.start_time:
            q = q.filter(SysOperationLog.created_at >= query.start_time)
        if query.end_time:
            q = q.filter(SysOperationLog.created_at <= query.end_time)

        total = q.count()
        rows = (
            q.order_by(SysOperationLog.created_at.desc(), SysOperationLog.id.desc())
            .offset(query.offset)
            .limit(query.page_size)
            .all()
        )
        return Page[OperationLogResponse].build(
            [OperationLogResponse.model_validate(r) for r in rows], total, query
        )

    def get_log(self, log_id: int) -> SysOperationLog:
        log = self.db.query(SysOperationLog).filter(SysOperationLog.id == log_id).first()
        if not log:
            raise NotFoundError("操作日志不存在")
        return log

    def delete_log(self, log_id: int) -> None:
        log = self.get_log(log_id)
        self.db.delete(log)
        self.db.flush()
        logger.info("删除操作日志: id=%s", log_id)


def client_ip(request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def write_audit_log(db: Session, request, *, admin=None, module: str, operation: str,
                    description: Optional[str] = None, method: Optional[str] = None,
                    params: Any = None, result: Any = None, error: Optional[BaseException] = None,
                    execution_time: int = 0, admin_name: Optional[str] = None) -> None:
    """写入一条操作日志并单独提交；写入失败只记录日志，不影响业务响应"""
    try:
        OperationLogService(db).record(
            admin_id=admin.id if admin is not None else None,
            admin_name=admin.username if admin is not None else admin_name,
            module=module,
            operation=operation,
            description=description,
            method=method,
            request_method=request.method,
            request_url=str(request.url.path),
            request_params=to_log_text(params),
            response_result=to_log_text(result) if error is None else None,
            ip=client_ip(request),
            user_agent=(request.headers.get("user-agent") or "")[:500] or None,
            execution_time=execution_time,
            status=0 if error is not None else 1,
            error_msg=str(error) if error is not None else None,
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("写入操作日志失败: module=%s operation=%s", module, operation)
