"""
业务异常

服务层抛出这些异常，由 main.py 中注册的处理器统一渲染为
{code, message, details?} 错误信封。
"""
from typing import Any, Optional


class AppError(Exception):
    """所有业务异常的基类"""

    status_code: int = 400
    code: str = "BUSINESS_ERROR"
    default_message: str = "操作失败"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"code": self.code, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class UnauthorizedError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "未登录或登录已过期"


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "无权限访问"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "资源不存在"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"
    default_message = "资源冲突"


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "参数校验失败"


class BusinessError(AppError):
    status_code = 400
    code = "BUSINESS_ERROR"
    default_message = "操作失败"
