"""
角色管理 API 路由
前缀: /api/roles
"""
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.responses import ApiResponse, ok
from app.security.auth import get_current_admin, require_permission
from app.security.permissions import ROLE_ASSIGN_MENU, ROLE_PREFIX
from app.system.models import SysAdmin
from app.system.routers.crud import AuditConfig, CrudConfig, CrudContext, CrudHandlers, create_crud_router, run_write
from app.system.schemas import (
    AssignMenusRequest, RoleCreate, RoleDetail, RoleQuery, RoleResponse, RoleUpdate,
)
from app.system.services.role_service import RoleService

MODULE_NAME = "角色"

router = APIRouter(prefix="/roles", tags=["角色管理"])


# ---- Extra endpoints (registered before the generic /{id} routes) ----

@router.get("/all", response_model=ApiResponse[List[RoleResponse]], summary="全部启用角色")
def list_all_roles(
    db: Session = Depends(get_db),
    current_admin: SysAdmin = Depends(get_current_admin),
):
    """下拉选择用，不分页，只需登录"""
    roles = RoleService(db).list_enabled_roles()
    return ok([RoleResponse.model_validate(r) for r in roles])


@router.put("/{id:int}/menus", response_model=ApiResponse[RoleDetail], summary="分配角色菜单")
def assign_role_menus(
    id: int,
    data: AssignMenusRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_admin: SysAdmin = Depends(require_permission(ROLE_ASSIGN_MENU)),
):
    ctx = CrudContext(db=db, request=request, admin=current_admin)

    def assign_menus(ctx: CrudContext, role_id: int, payload: AssignMenusRequest):
        service = RoleService(ctx.db)
        service.assign_menus(role_id, payload.menu_ids)
        return service.get_role(role_id)

    detail = run_write(
        ctx, module_name=MODULE_NAME, action="分配菜单", audit=f"分配{MODULE_NAME}菜单",
        handler=assign_menus, args=(id, data),
        params={"path": {"id": id}, "body": data.model_dump(by_alias=True)},
        serialize=RoleDetail.model_validate,
    )
    return ok(detail, "操作成功")


# ---- Generic CRUD ----

def list_roles(ctx: CrudContext, query: RoleQuery):
    return RoleService(ctx.db).list_roles(query)


def get_role(ctx: CrudContext, role_id: int):
    return RoleService(ctx.db).get_role(role_id)


def create_role(ctx: CrudContext, data: RoleCreate):
    return RoleService(ctx.db).create_role(data)


def update_role(ctx: CrudContext, role_id: int, data: RoleUpdate):
    return RoleService(ctx.db).update_role(role_id, data)


def delete_role(ctx: CrudContext, role_id: int):
    RoleService(ctx.db).delete_role(role_id)


create_crud_router(
    CrudConfig(
        module_name=MODULE_NAME,
        permission_prefix=ROLE_PREFIX,
        entity_schema=RoleResponse,
        detail_schema=RoleDetail,
        create_schema=RoleCreate,
        update_schema=RoleUpdate,
        query_schema=RoleQuery,
        audit=AuditConfig(),
    ),
    CrudHandlers(
        list=list_roles,
        detail=get_role,
        create=create_role,
        update=update_role,
        delete=delete_role,
    ),
    router=router,
)
