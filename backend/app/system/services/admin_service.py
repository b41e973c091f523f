"""
管理员 Service - 管理员 CRUD、角色分配、密码重置
"""
import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import BusinessError, ConflictError, NotFoundError, ValidationError
from app.responses import Page
from app.security.auth import get_password_hash
from app.system.models import SysAdmin, SysAdminRole, SysRole
from app.system.schemas import AdminCreate, AdminQuery, AdminResponse, AdminUpdate

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, db: Session):
        self.db = db

    # ---- Read operations ----

    def list_admins(self, query: AdminQuery) -> Page:
        q = self.db.query(SysAdmin)
        if query.username:
            q = q.filter(SysAdmin.username.contains(query.username))
        if query.nickname:
            q = q.filter(SysAdmin.nickname.contains(query.nickname))
        if query.status is not None:
            q = q.filter(SysAdmin.status == query.status)

        total = q.count()
        rows = q.order_by(SysAdmin.id).offset(query.offset).limit(query.page_size).all()
        return Page[AdminResponse].build([AdminResponse.model_validate(r) for r in rows], total, query)

    def get_admin(self, admin_id: int) -> SysAdmin:
        admin = self.db.query(SysAdmin).filter(SysAdmin.id == admin_id).first()
        if not admin:
            raise NotFoundError("管理员不存在")
        return admin

    def get_by_username(self, username: str) -> Optional[SysAdmin]:
        return self.db.query(SysAdmin).filter(SysAdmin.username == username).first()

    # ---- Write operations ----

    def create_admin(self, data: AdminCreate) -> SysAdmin:
        if self.get_by_username(data.username):
            raise ConflictError("用户名已存在")

        admin = SysAdmin(
            username=data.username,
            password_hash=get_password_hash(data.password),
            nickname=data.nickname,
            status=data.status,
            remark=data.remark,
        )
        self.db.add(admin)
        self.db.flush()
        if data.role_ids is not None:
            self.assign_roles(admin.id, data.role_ids)
        logger.info("创建管理员: id=%s username=%s", admin.id, admin.username)
        return admin

    def update_admin(self, admin_id: int, data: AdminUpdate) -> SysAdmin:
        admin = self.get_admin(admin_id)
        updates = data.model_dump(exclude_unset=True, exclude={"role_ids"})
        if updates.get("status") == 0 and admin.id == settings.SUPER_ADMIN_ID:
            raise BusinessError("超级管理员不能停用")

        for key, value in updates.items():
            if value is not None:
                setattr(admin, key, value)
        self.db.flush()

        if data.role_ids is not None:
            self.assign_roles(admin.id, data.role_ids)
        logger.info("更新管理员: id=%s", admin.id)
        return admin

    def delete_admin(self, admin_id: int, current_admin_id: Optional[int] = None) -> None:
        admin = self.get_admin(admin_id)
        if current_admin_id is not None and admin.id == current_admin_id:
            raise BusinessError("不能删除当前登录的账号")
        if admin.id == settings.SUPER_ADMIN_ID:
            raise BusinessError("超级管理员不能删除")

        self.db.delete(admin)
        self.db.flush()
        logger.info("删除管理员: id=%s", admin_id)

    def reset_password(self, admin_id: int, password: str) -> None:
        admin = self.get_admin(admin_id)
        admin.password_hash = get_password_hash(password)
        self.db.flush()
        logger.info("重置管理员密码: id=%s", admin_id)

    def assign_roles(self, admin_id: int, role_ids: Iterable[int]) -> List[int]:
        """整体替换管理员的角色集合（调用方负责提交事务）"""
        admin = self.get_admin(admin_id)
        wanted = sorted(set(role_ids))
        if wanted:
            found = {r[0] for r in self.db.query(SysRole.id).filter(SysRole.id.in_(wanted)).all()}
            missing = [r for r in wanted if r not in found]
            if missing:
                raise ValidationError("角色不存在", details={"roleIds": missing})

        self.db.query(SysAdminRole).filter(SysAdminRole.admin_id == admin.id).delete(synchronize_session=False)
        self.db.add_all([SysAdminRole(admin_id=admin.id, role_id=role_id) for role_id in wanted])
        self.db.flush()
        self.db.expire(admin, ["admin_roles"])
        logger.info("分配管理员角色: admin=%s roles=%s", admin.id, wanted)
        return wanted
