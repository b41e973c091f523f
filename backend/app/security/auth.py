"""
认证与授权模块

- bcrypt 密码哈希
- python-jose 签发 / 校验 HS256 JWT
- get_current_admin: Bearer token → 当前管理员
- require_permission: 细粒度权限码检查（任一匹配即通过）
"""
import bcrypt
import logging
from datetime import datetime, timedelta, UTC
from typing import Optional, Set

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.exceptions import ForbiddenError, UnauthorizedError
from app.system.models import SysAdmin

logger = logging.getLogger(__name__)

# auto_error=False: 缺少 token 时由我们抛出 UNAUTHORIZED 信封，而不是框架的 403
security = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    """密码哈希"""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """验证密码"""
    try:
        return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))
    except ValueError:
        return False


def create_access_token(admin_id: int, username: str,
                        expires_minutes: Optional[int] = None) -> str:
    """创建 JWT token"""
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire = datetime.now(UTC) + timedelta(minutes=minutes)
    to_encode = {
        "sub": str(admin_id),
        "username": username,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """解码 JWT token，签名错误或过期均视为未登录"""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.debug("JWT 校验失败: %s", e)
        raise UnauthorizedError()


def is_super_admin(admin: SysAdmin) -> bool:
    return admin.id == settings.SUPER_ADMIN_ID


async def get_current_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> SysAdmin:
    """获取当前登录管理员"""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()

    payload = decode_token(credentials.credentials)
    try:
        admin_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise UnauthorizedError()

    admin = db.query(SysAdmin).filter(SysAdmin.id == admin_id).first()
    if not admin:
        raise UnauthorizedError("用户不存在")
    if admin.status != 1:
        raise UnauthorizedError("账号已停用")

    request.state.admin = admin
    return admin


def get_admin_permissions(request: Request, admin: SysAdmin, db: Session) -> Set[str]:
    """当前请求内缓存管理员权限集合"""
    cached = getattr(request.state, "permissions", None)
    if cached is not None:
        return cached
    from app.system.services.permission_service import PermissionService
    permissions = PermissionService(db).get_admin_permissions(admin.id)
    request.state.permissions = permissions
    return permissions


def require_permission(*permission_codes: str):
    """动态权限检查依赖 - 支持多个权限码（OR 逻辑）

    检查顺序:
    1. 超级管理员始终通过
    2. 角色 → 菜单权限标识集合中任一匹配即通过
    """
    async def permission_checker(
        request: Request,
        current_admin: SysAdmin = Depends(get_current_admin),
        db: Session = Depends(get_db),
    ) -> SysAdmin:
        if is_super_admin(current_admin):
            return current_admin

        granted = get_admin_permissions(request, current_admin, db)
        if any(code in granted for code in permission_codes):
            return current_admin

        logger.warning(
            "权限不足: admin=%s required=%s",
            current_admin.username, ",".join(permission_codes),
        )
        raise ForbiddenError()

    return permission_checker
