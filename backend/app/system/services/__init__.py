# System Services
from app.system.services.admin_service import AdminService
from app.system.services.auth_service import AuthService
from app.system.services.config_service import ConfigService
from app.system.services.menu_service import MenuService
from app.system.services.operation_log_service import OperationLogService
from app.system.services.permission_service import PermissionService
from app.system.services.role_service import RoleService

__all__ = [
    'AdminService', 'AuthService', 'ConfigService', 'MenuService',
    'OperationLogService', 'PermissionService', 'RoleService',
]
