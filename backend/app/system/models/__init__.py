"""
系统管理 ORM 模型
"""
from app.system.models.admin import SysAdmin
from app.system.models.rbac import SysRole, SysRoleMenu, SysAdminRole
from app.system.models.menu import SysMenu, ROOT_PARENT_ID
from app.system.models.config import SysConfig
from app.system.models.operation_log import SysOperationLog

__all__ = [
    "SysAdmin",
    "SysRole", "SysRoleMenu", "SysAdminRole",
    "SysMenu", "ROOT_PARENT_ID",
    "SysConfig",
    "SysOperationLog",
]
