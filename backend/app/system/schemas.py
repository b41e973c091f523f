"""
系统管理 Pydantic schemas（Create / Update / Query / Response）

JSON 字段统一 camelCase，Python 侧 snake_case。
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from app.responses import CamelModel, PageQuery

MenuType = Literal["D", "M", "B"]
ConfigType = Literal["string", "number", "boolean", "json"]
Flag = Literal[0, 1]


# ========== Auth ==========

class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1, max_length=64)


class ChangePasswordRequest(CamelModel):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=64)


# ========== Admin ==========

class AdminCreate(CamelModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6, max_length=64)
    nickname: str = Field("", max_length=50)
    status: Flag = 1
    remark: str = Field("", max_length=500)
    role_ids: Optional[List[int]] = None


class AdminUpdate(CamelModel):
    nickname: Optional[str] = Field(None, max_length=50)
    status: Optional[Flag] = None
    remark: Optional[str] = Field(None, max_length=500)
    role_ids: Optional[List[int]] = None


class AdminQuery(PageQuery):
    username: Optional[str] = None
    nickname: Optional[str] = None
    status: Optional[int] = Field(None, ge=0, le=1)


class AdminResponse(CamelModel):
    id: int
    username: str
    nickname: Optional[str] = None
    status: int
    remark: Optional[str] = None
    login_ip: Optional[str] = None
    login_time: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AdminDetail(AdminResponse):
    role_ids: List[int] = []


class AssignRolesRequest(CamelModel):
    role_ids: List[int]


class ResetPasswordRequest(CamelModel):
    password: str = Field(..., min_length=6, max_length=64)


# ========== Role ==========

class RoleCreate(CamelModel):
    role_name: str = Field(..., min_length=1, max_length=50)
    sort: int = 0
    status: Flag = 1
    remark: str = Field("", max_length=500)
    menu_ids: Optional[List[int]] = None


class RoleUpdate(CamelModel):
    role_name: Optional[str] = Field(None, min_length=1, max_length=50)
    sort: Optional[int] = None
    status: Optional[Flag] = None
    remark: Optional[str] = Field(None, max_length=500)
    menu_ids: Optional[List[int]] = None


class RoleQuery(PageQuery):
    role_name: Optional[str] = None
    status: Optional[int] = Field(None, ge=0, le=1)


class RoleResponse(CamelModel):
    id: int
    role_name: str
    sort: int
    status: int
    remark: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RoleDetail(RoleResponse):
    menu_ids: List[int] = []


class AssignMenusRequest(CamelModel):
    menu_ids: List[int]


# ========== Menu ==========

class MenuCreate(CamelModel):
    parent_id: int = Field(0, ge=0)
    menu_type: MenuType
    menu_name: str = Field(..., min_length=1, max_length=50)
    permission: Optional[str] = Field(None, max_length=100)
    path: Optional[str] = Field(None, max_length=200)
    component: Optional[str] = Field(None, max_length=200)
    icon: Optional[str] = Field(None, max_length=50)
    sort: int = 0
    visible: Flag = 1
    status: Flag = 1
    is_external: Flag = 0
    is_cache: Flag = 0
    remark: str = Field("", max_length=500)


class MenuUpdate(CamelModel):
    parent_id: Optional[int] = Field(None, ge=0)
    menu_type: Optional[MenuType] = None
    menu_name: Optional[str] = Field(None, min_length=1, max_length=50)
    permission: Optional[str] = Field(None, max_length=100)
    path: Optional[str] = Field(None, max_length=200)
    component: Optional[str] = Field(None, max_length=200)
    icon: Optional[str] = Field(None, max_length=50)
    sort: Optional[int] = None
    visible: Optional[Flag] = None
    status: Optional[Flag] = None
    is_external: Optional[Flag] = None
    is_cache: Optional[Flag] = None
    remark: Optional[str] = Field(None, max_length=500)


class MenuQuery(CamelModel):
    menu_name: Optional[str] = None
    menu_type: Optional[MenuType] = None
    status: Optional[int] = Field(None, ge=0, le=1)


class MenuResponse(CamelModel):
    id: int
    parent_id: int
    menu_type: str
    menu_name: str
    permission: Optional[str] = None
    path: Optional[str] = None
    component: Optional[str] = None
    icon: Optional[str] = None
    sort: int
    visible: int
    status: int
    is_external: int = 0
    is_cache: int = 0
    remark: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MenuTreeNode(MenuResponse):
    children: List["MenuTreeNode"] = []


class MenuSelectionRequest(CamelModel):
    selected_ids: List[int] = []
    action: Literal["toggle", "selectAll"]
    menu_id: Optional[int] = None


# ========== Config ==========

class ConfigCreate(CamelModel):
    config_key: str = Field(..., min_length=1, max_length=100)
    config_value: str = ""
    config_type: ConfigType = "string"
    config_group: str = Field("general", min_length=1, max_length=50)
    config_name: str = Field(..., min_length=1, max_length=100)
    remark: str = Field("", max_length=500)
    is_system: bool = False
    status: Flag = 1


class ConfigUpdate(CamelModel):
    config_key: Optional[str] = Field(None, min_length=1, max_length=100)
    config_value: Optional[str] = None
    config_type: Optional[ConfigType] = None
    config_group: Optional[str] = Field(None, min_length=1, max_length=50)
    config_name: Optional[str] = Field(None, min_length=1, max_length=100)
    remark: Optional[str] = Field(None, max_length=500)
    status: Optional[Flag] = None


class ConfigValueUpdate(CamelModel):
    config_value: str
    config_type: Optional[ConfigType] = None


class ConfigQuery(PageQuery):
    config_key: Optional[str] = None
    config_name: Optional[str] = None
    config_group: Optional[str] = None
    status: Optional[int] = Field(None, ge=0, le=1)


class ConfigResponse(CamelModel):
    id: int
    config_key: str
    config_value: Optional[str] = None
    config_type: str
    config_group: str
    config_name: str
    remark: Optional[str] = None
    is_system: bool
    status: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ========== Operation log ==========

class OperationLogQuery(PageQuery):
    admin_name: Optional[str] = None
    module: Optional[str] = None
    operation: Optional[str] = None
    status: Optional[int] = Field(None, ge=0, le=1)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class OperationLogResponse(CamelModel):
    id: int
    admin_id: Optional[int] = None
    admin_name: Optional[str] = None
    module: str
    operation: str
    description: Optional[str] = None
    method: Optional[str] = None
    request_method: Optional[str] = None
    request_url: Optional[str] = None
    request_params: Optional[str] = None
    response_result: Optional[str] = None
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    execution_time: int = 0
    status: int
    error_msg: Optional[str] = None
    created_at: Optional[datetime] = None


# ========== Login result ==========

class LoginResult(CamelModel):
    token: Optional[str] = None
    admin: AdminResponse
    permissions: List[str]
    menus: List[MenuTreeNode]
