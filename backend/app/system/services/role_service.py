"""
角色管理 Service - 角色 CRUD + 角色菜单分配
"""
import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.responses import Page
from app.system.models import SysAdminRole, SysMenu, SysRole, SysRoleMenu
from app.system.schemas import RoleCreate, RoleQuery, RoleResponse, RoleUpdate

logger = logging.getLogger(__name__)


class RoleService:
    def __init__(self, db: Session):
        self.db = db

    # ---- Read operations ----

    def list_roles(self, query: RoleQuery) -> Page:
        q = self.db.query(SysRole)
        if query.role_name:
            q = q.filter(SysRole.role_name.contains(query.role_name))
        if query.status is not None:
            q = q.filter(SysRole.status == query.status)

        total = q.count()
        rows = q.order_by(SysRole.sort, SysRole.id).offset(query.offset).limit(query.page_size).all()
        items = [RoleResponse.model_validate(r) for r in rows]
        return Page[RoleResponse].build(items, total, query)

    def list_enabled_roles(self) -> List[SysRole]:
        return (
            self.db.query(SysRole)
            .filter(SysRole.status == 1)
            .order_by(SysRole.sort, SysRole.id)
            .all()
        )

    def get_role(self, role_id: int) -> SysRole:
        role = self.db.query(SysRole).filter(SysRole.id == role_id).first()
        if not role:
            raise NotFoundError("角色不存在")
        return role

    # ---- Write operations ----

    def create_role(self, data: RoleCreate) -> SysRole:
        self._check_name_unique(data.role_name)
        role = SysRole(
            role_name=data.role_name,
            sort=data.sort,
            status=data.status,
            remark=data.remark,
        )
        self.db.add(role)
        self.db.flush()
        if data.menu_ids is not None:
            self.assign_menus(role.id, data.menu_ids)
        logger.info("创建角色: id=%s name=%s", role.id, role.role_name)
        return role

    def update_role(self, role_id: int, data: RoleUpdate) -> SysRole:
        role = self.get_role(role_id)
        updates = data.model_dump(exclude_unset=True, exclude={"menu_ids"})
        if updates.get("role_name") and updates["role_name"] != role.role_name:
            self._check_name_unique(updates["role_name"], exclude_id=role.id)

        for key, value in updates.items():
            if value is not None:
                setattr(role, key, value)
        self.db.flush()

        if data.menu_ids is not None:
            self.assign_menus(role.id, data.menu_ids)
        logger.info("更新角色: id=%s", role.id)
        return role

    def delete_role(self, role_id: int) -> None:
        role = self.get_role(role_id)
        self.db.query(SysAdminRole).filter(SysAdminRole.role_id == role_id).delete(synchronize_session=False)
        self.db.query(SysRoleMenu).filter(SysRoleMenu.role_id == role_id).delete(synchronize_session=False)
        self.db.expire(role, ["role_menus"])
        self.db.delete(role)
        self.db.flush()
        logger.info("删除角色: id=%s", role_id)

    def assign_menus(self, role_id: int, menu_ids: Iterable[int]) -> List[int]:
        """整体替换角色的菜单集合

        先删除旧关联再插入新关联；调用方在同一事务内提交，
        任何异常回滚后旧分配保持不变。
        """
        role = self.get_role(role_id)
        wanted = sorted(set(menu_ids))
        self._validate_menu_ids(wanted)

        self.db.query(SysRoleMenu).filter(SysRoleMenu.role_id == role.id).delete(synchronize_session=False)
        self._insert_role_menus(role.id, wanted)
        self.db.flush()
        self.db.expire(role, ["role_menus"])
        logger.info("分配角色菜单: role=%s menus=%s", role.id, len(wanted))
        return wanted

    # ---- Helpers ----

    def _insert_role_menus(self, role_id: int, menu_ids: List[int]) -> None:
        self.db.add_all([SysRoleMenu(role_id=role_id, menu_id=menu_id) for menu_id in menu_ids])

    def _validate_menu_ids(self, menu_ids: List[int]) -> None:
        if not menu_ids:
            return
        found = {
            r[0] for r in self.db.query(SysMenu.id).filter(SysMenu.id.in_(menu_ids)).all()
        }
        missing = [m for m in menu_ids if m not in found]
        if missing:
            raise ValidationError("菜单不存在", details={"menuIds": missing})

    def _check_name_unique(self, role_name: str, exclude_id: Optional[int] = None) -> None:
        q = self.db.query(SysRole).filter(SysRole.role_name == role_name)
        if exclude_id is not None:
            q = q.filter(SysRole.id != exclude_id)
        if q.first():
            raise ConflictError("角色名称已存在")
