"""
菜单管理 API 路由
前缀: /api/menus
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.responses import ApiResponse, ok
from app.security.auth import require_permission
from app.security.permissions import MENU_LIST, MENU_PREFIX
from app.system.models import SysAdmin
from app.system.routers.crud import CrudConfig, CrudContext, CrudHandlers, create_crud_router, query_params
from app.system.schemas import (
    MenuCreate, MenuQuery, MenuResponse, MenuSelectionRequest, MenuTreeNode, MenuUpdate,
)
from app.system.services.menu_service import MenuService

router = APIRouter(prefix="/menus", tags=["菜单管理"])


@router.get("/tree", response_model=ApiResponse[List[MenuTreeNode]], summary="菜单树")
def get_menu_tree(
    current_admin: SysAdmin = Depends(require_permission(MENU_LIST)),
    query: MenuQuery = Depends(query_params(MenuQuery)),
    db: Session = Depends(get_db),
):
    tree = MenuService(db).get_menu_tree(query)
    return ok([MenuTreeNode.model_validate(node) for node in tree])


@router.post("/selection", response_model=ApiResponse[List[int]], summary="计算勾选结果")
def compute_menu_selection(
    data: MenuSelectionRequest,
    current_admin: SysAdmin = Depends(require_permission(MENU_LIST)),
    db: Session = Depends(get_db),
):
    """勾选节点时连带子孙和祖先；取消勾选只移除自身和子孙"""
    return ok(MenuService(db).compute_selection(data))


def list_menus(ctx: CrudContext, query: MenuQuery):
    return MenuService(ctx.db).list_menus(query)


def get_menu(ctx: CrudContext, menu_id: int):
    return MenuService(ctx.db).get_menu(menu_id)


def create_menu(ctx: CrudContext, data: MenuCreate):
    return MenuService(ctx.db).create_menu(data)


def update_menu(ctx: CrudContext, menu_id: int, data: MenuUpdate):
    return MenuService(ctx.db).update_menu(menu_id, data)


def delete_menu(ctx: CrudContext, menu_id: int):
    MenuService(ctx.db).delete_menu(menu_id)


create_crud_router(
    CrudConfig(
        module_name="菜单",
        permission_prefix=MENU_PREFIX,
        entity_schema=MenuResponse,
        create_schema=MenuCreate,
        update_schema=MenuUpdate,
        query_schema=MenuQuery,
        paginated=False,
    ),
    CrudHandlers(
        list=list_menus,
        detail=get_menu,
        create=create_menu,
        update=update_menu,
        delete=delete_menu,
    ),
    router=router,
)
