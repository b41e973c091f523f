"""
统一响应信封与分页模型
"""
import math
from typing import Generic, List, Optional, TypeVar

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """snake_case 字段，camelCase JSON"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    code: str = "OK"
    data: Optional[T] = None
    message: Optional[str] = None


class PageQuery(CamelModel):
    """分页查询参数"""

    page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class Page(CamelModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def build(cls, items: list, total: int, query: PageQuery) -> "Page":
        return cls(
            items=items,
            total=total,
            page=query.page,
            page_size=query.page_size,
            total_pages=math.ceil(total / query.page_size) if total else 0,
        )


def _envelope(data, message: Optional[str], status_code: int) -> JSONResponse:
    body = {"code": "OK", "data": jsonable_encoder(data, by_alias=True)}
    if message:
        body["message"] = message
    return JSONResponse(status_code=status_code, content=body)


def ok(data=None, message: Optional[str] = None) -> JSONResponse:
    return _envelope(data, message, 200)


def created(data=None, message: str = "创建成功") -> JSONResponse:
    return _envelope(data, message, 201)


def success(message: str = "操作成功") -> JSONResponse:
    return _envelope(None, message, 200)
