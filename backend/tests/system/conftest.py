"""
System test fixtures - 菜单树样例数据
"""
import pytest

from app.system.models import SysMenu


@pytest.fixture
def sample_menus(db_session):
    """1(目录) → 2(菜单), 3(菜单)；2 → 4(按钮)"""
    menus = [
        SysMenu(id=1, parent_id=0, menu_type="D", menu_name="系统管理", path="/system", sort=1),
        SysMenu(id=2, parent_id=1, menu_type="M", menu_name="用户管理", path="/system/user",
                permission="demo:user:list", sort=1),
        SysMenu(id=3, parent_id=1, menu_type="M", menu_name="角色管理", path="/system/role",
                permission="demo:role:list", sort=2),
        SysMenu(id=4, parent_id=2, menu_type="B", menu_name="新增用户", permission="demo:user:create", sort=1),
    ]
    db_session.add_all(menus)
    db_session.commit()
    return menus
