# System API Routers
from app.system.routers import (
    admin_router, auth_router, config_router, menu_router, operation_log_router, role_router,
)

__all__ = ['admin_router', 'auth_router', 'config_router', 'menu_router', 'operation_log_router', 'role_router']
