"""
Pytest 配置和共享 fixtures
"""
import os

# 应用启动时的 init_db / seed 不应触碰磁盘数据库
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_DB_SEED"] = "false"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from app.config import settings
from app.database import Base, get_db
from app.system import models  # noqa: F401
from app.system.models import SysAdmin, SysAdminRole, SysMenu, SysRole, SysRoleMenu
from app.system.services.config_service import ConfigService
from app.security.auth import get_password_hash, create_access_token
from app.main import app


@pytest.fixture(scope="function")
def db_engine():
    """创建内存数据库引擎"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """创建数据库会话"""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """创建测试客户端"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_config_cache():
    """Reset config cache between tests"""
    ConfigService.reset_cache()
    yield
    ConfigService.reset_cache()


# ============== 认证相关 Fixtures ==============

def make_admin(db_session, username: str, password: str = "123456", admin_id=None, status: int = 1) -> SysAdmin:
    admin = SysAdmin(
        id=admin_id,
        username=username,
        password_hash=get_password_hash(password),
        nickname=username,
        status=status,
    )
    db_session.add(admin)
    db_session.commit()
    db_session.refresh(admin)
    return admin


def grant_permissions(db_session, admin: SysAdmin, *permissions: str) -> SysRole:
    """为管理员创建一个角色，角色拥有给定权限标识的按钮菜单"""
    role = SysRole(role_name=f"role_{admin.username}", sort=0, status=1)
    db_session.add(role)
    db_session.flush()
    for code in permissions:
        menu = db_session.query(SysMenu).filter(SysMenu.permission == code).first()
        if menu is None:
            menu = SysMenu(parent_id=0, menu_type="B", menu_name=code, permission=code)
            db_session.add(menu)
            db_session.flush()
        db_session.add(SysRoleMenu(role_id=role.id, menu_id=menu.id))
    db_session.add(SysAdminRole(admin_id=admin.id, role_id=role.id))
    db_session.commit()
    return role


def bearer(admin: SysAdmin) -> dict:
    return {"Authorization": f"Bearer {create_access_token(admin.id, admin.username)}"}


@pytest.fixture
def super_admin(db_session):
    """超级管理员（id = SUPER_ADMIN_ID）"""
    return make_admin(db_session, "admin", "admin123", admin_id=settings.SUPER_ADMIN_ID)


@pytest.fixture
def auth_headers(super_admin):
    return bearer(super_admin)


@pytest.fixture
def plain_admin(db_session, super_admin):
    """没有任何权限的普通管理员"""
    return make_admin(db_session, "viewer")


@pytest.fixture
def plain_headers(plain_admin):
    return bearer(plain_admin)


@pytest.fixture
def admin_factory(db_session, super_admin):
    """创建普通管理员并授予给定权限标识"""
    def factory(username: str, *permissions: str, password: str = "123456", status: int = 1) -> SysAdmin:
        admin = make_admin(db_session, username, password, status=status)
        if permissions:
            grant_permissions(db_session, admin, *permissions)
        return admin
    return factory


@pytest.fixture
def headers_for():
    return bearer
