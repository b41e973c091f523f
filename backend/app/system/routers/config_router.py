"""
系统配置 API 路由
前缀: /api/configs
"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.responses import ApiResponse, ok
from app.security.auth import require_permission
from app.security.permissions import CONFIG_PREFIX, CONFIG_UPDATE
from app.system.models import SysAdmin
from app.system.routers.crud import CrudConfig, CrudContext, CrudHandlers, create_crud_router, run_write
from app.system.schemas import ConfigCreate, ConfigQuery, ConfigResponse, ConfigUpdate, ConfigValueUpdate
from app.system.services.config_service import ConfigService

MODULE_NAME = "系统配置"

router = APIRouter(prefix="/configs", tags=["系统配置"])


@router.patch("/key/{id:int}", response_model=ApiResponse[ConfigResponse], summary="更新配置值")
def update_config_value(
    id: int,
    data: ConfigValueUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_admin: SysAdmin = Depends(require_permission(CONFIG_UPDATE)),
):
    ctx = CrudContext(db=db, request=request, admin=current_admin)

    def update_value(ctx: CrudContext, config_id: int, payload: ConfigValueUpdate):
        return ConfigService(ctx.db).update_value(config_id, payload)

    config = run_write(
        ctx, module_name=MODULE_NAME, action="update", audit=f"更新{MODULE_NAME}值",
        handler=update_value, args=(id, data),
        params={"path": {"id": id}, "body": data.model_dump(by_alias=True)},
        serialize=ConfigResponse.model_validate,
    )
    return ok(config, "更新成功")


def list_configs(ctx: CrudContext, query: ConfigQuery):
    return ConfigService(ctx.db).list_configs(query)


def get_config(ctx: CrudContext, config_id: int):
    return ConfigService(ctx.db).get_config(config_id)


def create_config(ctx: CrudContext, data: ConfigCreate):
    return ConfigService(ctx.db).create_config(data)


def update_config(ctx: CrudContext, config_id: int, data: ConfigUpdate):
    return ConfigService(ctx.db).update_config(config_id, data)


def delete_config(ctx: CrudContext, config_id: int):
    ConfigService(ctx.db).delete_config(config_id)


create_crud_router(
    CrudConfig(
        module_name=MODULE_NAME,
        permission_prefix=CONFIG_PREFIX,
        entity_schema=ConfigResponse,
        create_schema=ConfigCreate,
        update_schema=ConfigUpdate,
        query_schema=ConfigQuery,
    ),
    CrudHandlers(
        list=list_configs,
        detail=get_config,
        create=create_config,
        update=update_config,
        delete=delete_config,
    ),
    router=router,
)
