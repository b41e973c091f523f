"""
认证 Service - 登录、当前用户信息、修改密码
"""
import logging
from datetime import datetime, UTC
from typing import List, Optional

from sqlalchemy.orm import Session

from app.exceptions import BusinessError, UnauthorizedError
from app.security.auth import create_access_token, get_password_hash, is_super_admin, verify_password
from app.security.permissions import ALL_PERMISSIONS
from app.system.models import SysAdmin
from app.system.schemas import AdminResponse, LoginResult, MenuTreeNode
from app.system.services.menu_service import MenuService
from app.system.services.permission_service import PermissionService

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def authenticate(self, username: str, password: str) -> SysAdmin:
        admin = self.db.query(SysAdmin).filter(SysAdmin.username == username).first()
        if not admin or not verify_password(password, admin.password_hash):
            logger.warning("登录失败: username=%s", username)
            raise UnauthorizedError("用户名或密码错误")
        if admin.status != 1:
            raise UnauthorizedError("账号已停用")
        return admin

    def login(self, username: str, password: str, ip: Optional[str] = None) -> LoginResult:
        admin = self.authenticate(username, password)
        admin.login_ip = ip
        admin.login_time = datetime.now(UTC)
        self.db.flush()

        token = create_access_token(admin.id, admin.username)
        logger.info("登录成功: username=%s ip=%s", admin.username, ip)
        return self.build_profile(admin, token=token)

    def get_permission_list(self, admin: SysAdmin) -> List[str]:
        if is_super_admin(admin):
            return [ALL_PERMISSIONS]
        return sorted(PermissionService(self.db).get_admin_permissions(admin.id))

    def build_profile(self, admin: SysAdmin, token: Optional[str] = None) -> LoginResult:
        """登录结果 / 当前用户信息：管理员、权限标识、侧边栏菜单树"""
        granted = None if is_super_admin(admin) else PermissionService(self.db).get_admin_menu_ids(admin.id)
        menus = MenuService(self.db).get_admin_menu_tree(granted)
        return LoginResult(
            token=token,
            admin=AdminResponse.model_validate(admin),
            permissions=self.get_permission_list(admin),
            menus=[MenuTreeNode.model_validate(node) for node in menus],
        )

    def change_password(self, admin: SysAdmin, old_password: str, new_password: str) -> None:
        if not verify_password(old_password, admin.password_hash):
            raise BusinessError("原密码错误")
        admin.password_hash = get_password_hash(new_password)
        self.db.flush()
        logger.info("修改密码: username=%s", admin.username)
