"""
权限解析 Service

管理员 → 启用的角色 → 角色菜单 → 启用菜单上的权限标识
"""
from typing import List, Set

from sqlalchemy.orm import Session

from app.system.models import SysAdminRole, SysMenu, SysRole, SysRoleMenu


class PermissionService:
    def __init__(self, db: Session):
        self.db = db

    def get_admin_role_ids(self, admin_id: int) -> List[int]:
        rows = (
            self.db.query(SysRole.id)
            .join(SysAdminRole, SysAdminRole.role_id == SysRole.id)
            .filter(SysAdminRole.admin_id == admin_id, SysRole.status == 1)
            .all()
        )
        return [r[0] for r in rows]

    def get_admin_menu_ids(self, admin_id: int) -> Set[int]:
        role_ids = self.get_admin_role_ids(admin_id)
        if not role_ids:
            return set()
        rows = (
            self.db.query(SysRoleMenu.menu_id)
            .filter(SysRoleMenu.role_id.in_(role_ids))
            .distinct()
            .all()
        )
        return {r[0] for r in rows}

    def get_admin_permissions(self, admin_id: int) -> Set[str]:
        """管理员拥有的全部权限标识"""
        menu_ids = self.get_admin_menu_ids(admin_id)
        if not menu_ids:
            return set()
        rows = (
            self.db.query(SysMenu.permission)
            .filter(
                SysMenu.id.in_(menu_ids),
                SysMenu.status == 1,
                SysMenu.permission.isnot(None),
                SysMenu.permission != "",
            )
            .all()
        )
        return {r[0] for r in rows}
