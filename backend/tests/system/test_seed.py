"""
种子数据测试
"""
from fastapi.testclient import TestClient

from app.system.models import SysAdmin, SysConfig, SysMenu, SysRole
from app.system.services.seed import build_seed_menus, seed_all


def test_seed_menus_have_unique_ids_and_permissions():
    menus = build_seed_menus()
    ids = [m["id"] for m in menus]
    assert len(ids) == len(set(ids))
    permissions = [m["permission"] for m in menus if m.get("permission")]
    assert len(permissions) == len(set(permissions))
    assert "system:role:assignMenu" in permissions
    assert "system:log:delete" in permissions


def test_seed_all_creates_defaults(db_session):
    stats = seed_all(db_session)
    total_menus = len(build_seed_menus())

    assert stats == {"menus": total_menus, "roles": 1, "role_menus": total_menus, "admins": 1, "configs": 5}
    assert db_session.query(SysMenu).count() == total_menus
    assert db_session.query(SysConfig).count() == 5

    role = db_session.query(SysRole).one()
    assert len(role.menu_ids) == total_menus

    admin = db_session.query(SysAdmin).one()
    assert admin.id == 1
    assert admin.role_ids == [role.id]


def test_seed_all_is_idempotent(db_session):
    seed_all(db_session)
    stats = seed_all(db_session)
    assert stats == {"menus": 0, "roles": 0, "role_menus": 0, "admins": 0, "configs": 0}


def test_seeded_admin_can_login(client: TestClient, db_session):
    seed_all(db_session)
    response = client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["permissions"] == ["*:*:*"]
    assert [m["menuName"] for m in data["menus"]] == ["仪表盘", "系统管理"]
    assert len(data["menus"][1]["children"]) == 5
