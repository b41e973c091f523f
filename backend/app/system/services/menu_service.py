"""
菜单管理 Service
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.system.models import ROOT_PARENT_ID, SysMenu, SysRoleMenu
from app.system.schemas import MenuCreate, MenuQuery, MenuSelectionRequest, MenuUpdate
from core.menu_tree import (
    MenuNode, build_menu_tree, build_parent_map, collect_ids, descendant_ids,
    find_node, toggle_node, toggle_select_all,
)

logger = logging.getLogger(__name__)

BUTTON = "B"
DIRECTORY = "D"


def _normalize_permission(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _prune_empty_directories(nodes: List[MenuNode]) -> List[MenuNode]:
    """自底向上去掉没有子菜单的目录（含嵌套目录）"""
    kept = []
    for node in nodes:
        node.children = _prune_empty_directories(node.children)
        if node.menu_type != DIRECTORY or node.children:
            kept.append(node)
    return kept


class MenuService:
    """菜单管理服务"""

    def __init__(self, db: Session):
        self.db = db

    # ---- Read operations ----

    def list_menus(self, query: Optional[MenuQuery] = None) -> List[SysMenu]:
        q = self.db.query(SysMenu)
        if query is not None:
            if query.menu_name:
                q = q.filter(SysMenu.menu_name.contains(query.menu_name))
            if query.menu_type:
                q = q.filter(SysMenu.menu_type == query.menu_type)
            if query.status is not None:
                q = q.filter(SysMenu.status == query.status)
        return q.order_by(SysMenu.sort, SysMenu.id).all()

    def get_menu_tree(self, query: Optional[MenuQuery] = None) -> List[MenuNode]:
        return build_menu_tree(self.list_menus(query))

    def get_menu(self, menu_id: int) -> SysMenu:
        menu = self.db.query(SysMenu).filter(SysMenu.id == menu_id).first()
        if not menu:
            raise NotFoundError("菜单不存在")
        return menu

    def get_admin_menu_tree(self, granted_menu_ids: Optional[set] = None) -> List[MenuNode]:
        """侧边栏菜单树：目录和菜单，显示且启用

        granted_menu_ids 为 None 表示超级管理员（全部菜单）。
        """
        menus = (
            self.db.query(SysMenu)
            .filter(
                SysMenu.menu_type != BUTTON,
                SysMenu.visible == 1,
                SysMenu.status == 1,
            )
            .order_by(SysMenu.sort, SysMenu.id)
            .all()
        )
        if granted_menu_ids is None:
            return build_menu_tree(menus)

        menus = [m for m in menus if m.id in granted_menu_ids]
        return _prune_empty_directories(build_menu_tree(menus))

    # ---- Write operations ----

    def create_menu(self, data: MenuCreate) -> SysMenu:
        values = data.model_dump()
        values["permission"] = _normalize_permission(values.get("permission"))
        self._validate_parent(values["parent_id"])
        self._check_permission_unique(values["permission"])

        menu = SysMenu(**values)
        self.db.add(menu)
        self.db.flush()
        logger.info("创建菜单: id=%s name=%s", menu.id, menu.menu_name)
        return menu

    def update_menu(self, menu_id: int, data: MenuUpdate) -> SysMenu:
        menu = self.get_menu(menu_id)
        updates = data.model_dump(exclude_unset=True)

        if "parent_id" in updates and updates["parent_id"] is not None and updates["parent_id"] != menu.parent_id:
            self._validate_parent(updates["parent_id"], menu_id=menu.id)
        if updates.get("menu_type") == BUTTON and menu.menu_type != BUTTON and self._child_count(menu.id) > 0:
            raise ValidationError("按钮下不能有子菜单")
        if "permission" in updates:
            updates["permission"] = _normalize_permission(updates["permission"])
            self._check_permission_unique(updates["permission"], exclude_id=menu.id)

        for key, value in updates.items():
            if value is None and key in ("parent_id", "menu_type", "menu_name", "sort", "visible",
                                         "status", "is_external", "is_cache"):
                continue
            setattr(menu, key, value)

        self.db.flush()
        logger.info("更新菜单: id=%s", menu.id)
        return menu

    def delete_menu(self, menu_id: int) -> None:
        menu = self.get_menu(menu_id)
        child_count = self._child_count(menu_id)
        if child_count > 0:
            logger.warning("拒绝删除菜单 %s: 存在 %s 个子菜单", menu_id, child_count)
            raise ConflictError("存在子菜单，不允许删除")

        self.db.query(SysRoleMenu).filter(SysRoleMenu.menu_id == menu_id).delete(synchronize_session=False)
        self.db.delete(menu)
        self.db.flush()
        logger.info("删除菜单: id=%s", menu_id)

    # ---- Selection ----

    def compute_selection(self, data: MenuSelectionRequest) -> List[int]:
        """根据一次勾选操作计算新的已选 id 集合"""
        tree = self.get_menu_tree()
        if data.action == "selectAll":
            return sorted(toggle_select_all(data.selected_ids, collect_ids(tree)))

        if data.menu_id is None:
            raise ValidationError("menuId 不能为空")
        node = find_node(tree, data.menu_id)
        if node is None:
            raise NotFoundError("菜单不存在")
        return sorted(toggle_node(data.selected_ids, node, build_parent_map(tree)))

    # ---- Helpers ----

    def _child_count(self, menu_id: int) -> int:
        return self.db.query(SysMenu).filter(SysMenu.parent_id == menu_id).count()

    def _validate_parent(self, parent_id: int, menu_id: Optional[int] = None) -> None:
        if parent_id == ROOT_PARENT_ID:
            return
        if menu_id is not None and parent_id == menu_id:
            raise ValidationError("上级菜单不能是自身")

        parent = self.db.query(SysMenu).filter(SysMenu.id == parent_id).first()
        if not parent:
            raise ValidationError("上级菜单不存在")
        if parent.menu_type == BUTTON:
            raise ValidationError("按钮下不能添加子菜单")

        if menu_id is not None:
            node = find_node(self.get_menu_tree(), menu_id)
            if node is not None and parent_id in descendant_ids(node):
                raise ValidationError("上级菜单不能是自身的子菜单")

    def _check_permission_unique(self, permission: Optional[str], exclude_id: Optional[int] = None) -> None:
        if not permission:
            return
        q = self.db.query(SysMenu).filter(SysMenu.permission == permission)
        if exclude_id is not None:
            q = q.filter(SysMenu.id != exclude_id)
        if q.first():
            raise ConflictError("权限标识已存在")
