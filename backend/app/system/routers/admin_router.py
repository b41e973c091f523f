"""
管理员 API 路由
前缀: /api/admins
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.responses import ApiResponse, ok, success
from app.security.auth import require_permission
from app.security.permissions import ADMIN_ASSIGN_ROLE, ADMIN_PREFIX, ADMIN_RESET_PWD
from app.system.models import SysAdmin
from app.system.routers.crud import CrudConfig, CrudContext, CrudHandlers, create_crud_router, run_write
from app.system.schemas import (
    AdminCreate, AdminDetail, AdminQuery, AdminResponse, AdminUpdate,
    AssignRolesRequest, ResetPasswordRequest,
)
from app.system.services.admin_service import AdminService

MODULE_NAME = "管理员"

router = APIRouter(prefix="/admins", tags=["管理员"])


# ---- Extra endpoints ----

@router.put("/{id:int}/roles", response_model=ApiResponse[AdminDetail], summary="分配管理员角色")
def assign_admin_roles(
    id: int,
    data: AssignRolesRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_admin: SysAdmin = Depends(require_permission(ADMIN_ASSIGN_ROLE)),
):
    ctx = CrudContext(db=db, request=request, admin=current_admin)

    def assign_roles(ctx: CrudContext, admin_id: int, payload: AssignRolesRequest):
        service = AdminService(ctx.db)
        service.assign_roles(admin_id, payload.role_ids)
        return service.get_admin(admin_id)

    detail = run_write(
        ctx, module_name=MODULE_NAME, action="分配角色", audit=f"分配{MODULE_NAME}角色",
        handler=assign_roles, args=(id, data),
        params={"path": {"id": id}, "body": data.model_dump(by_alias=True)},
        serialize=AdminDetail.model_validate,
    )
    return ok(detail, "操作成功")


@router.put("/{id:int}/reset-password", response_model=ApiResponse, summary="重置管理员密码")
def reset_admin_password(
    id: int,
    data: ResetPasswordRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_admin: SysAdmin = Depends(require_permission(ADMIN_RESET_PWD)),
):
    ctx = CrudContext(db=db, request=request, admin=current_admin)

    def reset_password(ctx: CrudContext, admin_id: int, payload: ResetPasswordRequest):
        AdminService(ctx.db).reset_password(admin_id, payload.password)

    run_write(
        ctx, module_name=MODULE_NAME, action="重置密码", audit=f"重置{MODULE_NAME}密码",
        handler=reset_password, args=(id, data),
        params={"path": {"id": id}, "body": data.model_dump(by_alias=True)},
    )
    return success("密码已重置")


# ---- Generic CRUD ----

def list_admins(ctx: CrudContext, query: AdminQuery):
    return AdminService(ctx.db).list_admins(query)


def get_admin(ctx: CrudContext, admin_id: int):
    return AdminService(ctx.db).get_admin(admin_id)


def create_admin(ctx: CrudContext, data: AdminCreate):
    return AdminService(ctx.db).create_admin(data)


def update_admin(ctx: CrudContext, admin_id: int, data: AdminUpdate):
    return AdminService(ctx.db).update_admin(admin_id, data)


def delete_admin(ctx: CrudContext, admin_id: int):
    AdminService(ctx.db).delete_admin(admin_id, current_admin_id=ctx.admin.id)


create_crud_router(
    CrudConfig(
        module_name=MODULE_NAME,
        permission_prefix=ADMIN_PREFIX,
        entity_schema=AdminResponse,
        detail_schema=AdminDetail,
        create_schema=AdminCreate,
        update_schema=AdminUpdate,
        query_schema=AdminQuery,
    ),
    CrudHandlers(
        list=list_admins,
        detail=get_admin,
        create=create_admin,
        update=update_admin,
        delete=delete_admin,
    ),
    router=router,
)
