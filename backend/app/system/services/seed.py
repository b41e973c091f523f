"""
种子数据 - 默认菜单树、角色、超级管理员、系统配置

幂等：已存在的记录跳过。全部写入在一个事务内完成。
"""
import logging

from sqlalchemy.orm import Session

from app.config import settings
from app.database import transaction
from app.security.auth import get_password_hash
from app.system.models import SysAdmin, SysAdminRole, SysConfig, SysMenu, SysRole, SysRoleMenu

logger = logging.getLogger(__name__)

DEFAULT_ROLE_NAME = "普通管理员"
DEFAULT_ADMIN_USERNAME = "admin"
DEFAULT_ADMIN_PASSWORD = "admin123"

# ========== Menu Definitions ==========

BUTTON_LABELS = {
    "query": "查询",
    "create": "新增",
    "update": "修改",
    "delete": "删除",
    "resetPwd": "重置密码",
    "assignRole": "分配角色",
    "assignMenu": "分配菜单",
}

# (id, 名称, 路由, 组件, 图标, 权限前缀, 额外按钮动作, 按钮起始 id)
SYSTEM_PAGES = [
    (10, "管理员", "/system/admin", "system/admin/index", "User", "system:admin",
     ["query", "create", "update", "delete", "resetPwd", "assignRole"], 100),
    (20, "角色管理", "/system/role", "system/role/index", "UserCog", "system:role",
     ["query", "create", "update", "delete", "assignMenu"], 200),
    (30, "菜单管理", "/system/menu", "system/menu/index", "Menu", "system:menu",
     ["query", "create", "update", "delete"], 300),
    (40, "系统配置", "/system/config", "system/config/index", "Settings2", "system:config",
     ["query", "create", "update", "delete"], 400),
    (50, "操作日志", "/system/log", "system/log/index", "FileText", "system:log",
     ["query", "delete"], 500),
]


def build_seed_menus() -> list:
    menus = [
        {"id": 1, "parent_id": 0, "menu_type": "M", "menu_name": "仪表盘", "path": "/dashboard",
         "component": "dashboard/index", "icon": "LayoutDashboard", "sort": 0},
        {"id": 2, "parent_id": 0, "menu_type": "D", "menu_name": "系统管理", "path": "/system",
         "icon": "Settings", "sort": 1},
    ]
    for sort, (page_id, name, path, component, icon, prefix, actions, button_id) in enumerate(SYSTEM_PAGES, 1):
        menus.append({
            "id": page_id, "parent_id": 2, "menu_type": "M", "menu_name": name, "path": path,
            "component": component, "icon": icon, "permission": f"{prefix}:list", "sort": sort,
        })
        for offset, action in enumerate(actions):
            menus.append({
                "id": button_id + offset, "parent_id": page_id, "menu_type": "B",
                "menu_name": BUTTON_LABELS[action], "permission": f"{prefix}:{action}", "sort": offset + 1,
            })
    return menus


# ========== Config Definitions ==========

SEED_CONFIGS = [
    {"config_key": "site.name", "config_value": "Admin Scaffold", "config_type": "string",
     "config_group": "general", "config_name": "站点名称", "is_system": True},
    {"config_key": "site.description", "config_value": "通用后台管理系统", "config_type": "string",
     "config_group": "general", "config_name": "站点描述", "is_system": False},
    {"config_key": "security.password_min_length", "config_value": "6", "config_type": "number",
     "config_group": "security", "config_name": "密码最小长度", "is_system": True},
    {"config_key": "security.captcha_enabled", "config_value": "false", "config_type": "boolean",
     "config_group": "security", "config_name": "登录验证码", "is_system": False},
    {"config_key": "ui.theme", "config_value": '{"primary": "#1677ff", "dark": false}', "config_type": "json",
     "config_group": "ui", "config_name": "主题设置", "is_system": False},
]


def seed_menus(db: Session) -> int:
    created = 0
    for data in build_seed_menus():
        if db.query(SysMenu).filter(SysMenu.id == data["id"]).first():
            continue
        db.add(SysMenu(**data))
        created += 1
    db.flush()
    return created


def seed_roles(db: Session) -> dict:
    stats = {"roles": 0, "role_menus": 0}
    role = db.query(SysRole).filter(SysRole.role_name == DEFAULT_ROLE_NAME).first()
    if not role:
        role = SysRole(role_name=DEFAULT_ROLE_NAME, sort=1, status=1, remark="拥有全部菜单")
        db.add(role)
        db.flush()
        stats["roles"] += 1

    existing = {r[0] for r in db.query(SysRoleMenu.menu_id).filter(SysRoleMenu.role_id == role.id).all()}
    for (menu_id,) in db.query(SysMenu.id).all():
        if menu_id not in existing:
            db.add(SysRoleMenu(role_id=role.id, menu_id=menu_id))
            stats["role_menus"] += 1
    db.flush()
    return stats


def seed_admin(db: Session) -> int:
    created = 0
    admin = db.query(SysAdmin).filter(SysAdmin.id == settings.SUPER_ADMIN_ID).first()
    if not admin:
        admin = SysAdmin(
            id=settings.SUPER_ADMIN_ID,
            username=DEFAULT_ADMIN_USERNAME,
            password_hash=get_password_hash(DEFAULT_ADMIN_PASSWORD),
            nickname="超级管理员",
            status=1,
        )
        db.add(admin)
        db.flush()
        created = 1

    role = db.query(SysRole).filter(SysRole.role_name == DEFAULT_ROLE_NAME).first()
    if role and not db.query(SysAdminRole).filter(
        SysAdminRole.admin_id == admin.id, SysAdminRole.role_id == role.id
    ).first():
        db.add(SysAdminRole(admin_id=admin.id, role_id=role.id))
        db.flush()
    return created


def seed_configs(db: Session) -> int:
    created = 0
    for data in SEED_CONFIGS:
        if db.query(SysConfig).filter(SysConfig.config_key == data["config_key"]).first():
            continue
        db.add(SysConfig(**data))
        created += 1
    db.flush()
    return created


def seed_all(db: Session) -> dict:
    """Seed all initial data. Idempotent, skips existing records.

    Returns dict with counts of created items.
    """
    with transaction(db):
        stats = {"menus": seed_menus(db)}
        stats.update(seed_roles(db))
        stats["admins"] = seed_admin(db)
        stats["configs"] = seed_configs(db)
    logger.info("种子数据初始化完成: %s", stats)
    return stats


if __name__ == "__main__":
    from app.database import SessionLocal, init_db

    logging.basicConfig(level=logging.INFO)
    init_db()
    session = SessionLocal()
    try:
        print(seed_all(session))
    finally:
        session.close()
