"""
集中定义所有权限码常量

与前端 permissions.ts 保持一致；CRUD 路由的权限码由前缀 + 动作拼接。
"""

# 超级管理员在登录结果中返回的通配权限
ALL_PERMISSIONS = "*:*:*"

# CRUD 动作后缀
ACTION_LIST = "list"
ACTION_QUERY = "query"
ACTION_CREATE = "create"
ACTION_UPDATE = "update"
ACTION_DELETE = "delete"

# 管理员
ADMIN_PREFIX = "system:admin"
ADMIN_RESET_PWD = "system:admin:resetPwd"
ADMIN_ASSIGN_ROLE = "system:admin:assignRole"

# 角色
ROLE_PREFIX = "system:role"
ROLE_ASSIGN_MENU = "system:role:assignMenu"

# 菜单
MENU_PREFIX = "system:menu"
MENU_LIST = "system:menu:list"

# 系统配置
CONFIG_PREFIX = "system:config"
CONFIG_UPDATE = "system:config:update"

# 操作日志
LOG_PREFIX = "system:log"


def crud_permission(prefix: str, action: str) -> str:
    return f"{prefix}:{action}"
