"""
认证 API 路由
前缀: /api/auth
"""
import time

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.database import get_db, transaction
from app.exceptions import AppError
from app.responses import ApiResponse, ok, success
from app.security.auth import get_current_admin
from app.system.models import SysAdmin
from app.system.schemas import ChangePasswordRequest, LoginRequest, LoginResult
from app.system.services.auth_service import AuthService
from app.system.services.operation_log_service import client_ip, write_audit_log

MODULE_NAME = "认证"

router = APIRouter(prefix="/auth", tags=["认证"])


@router.post("/login", response_model=ApiResponse[LoginResult], summary="登录")
def login(data: LoginRequest, request: Request, db: Session = Depends(get_db)):
    """用户名密码登录，返回 token、权限标识和侧边栏菜单"""
    started = time.perf_counter()
    params = {"body": data.model_dump(by_alias=True)}
    try:
        with transaction(db):
            result = AuthService(db).login(data.username, data.password, ip=client_ip(request))
    except AppError as e:
        write_audit_log(
            db, request, module=MODULE_NAME, operation="登录", description="管理员登录",
            method="login", params=params, error=e, admin_name=data.username,
            execution_time=int((time.perf_counter() - started) * 1000),
        )
        raise

    admin = db.query(SysAdmin).filter(SysAdmin.id == result.admin.id).first()
    write_audit_log(
        db, request, admin=admin, module=MODULE_NAME, operation="登录", description="管理员登录",
        method="login", params=params, result={"adminId": result.admin.id},
        execution_time=int((time.perf_counter() - started) * 1000),
    )
    return ok(result, "登录成功")


@router.get("/me", response_model=ApiResponse[LoginResult], summary="当前登录信息")
def get_me(
    db: Session = Depends(get_db),
    current_admin: SysAdmin = Depends(get_current_admin),
):
    return ok(AuthService(db).build_profile(current_admin))


@router.post("/logout", response_model=ApiResponse, summary="退出登录")
def logout(current_admin: SysAdmin = Depends(get_current_admin)):
    """token 无状态，客户端丢弃即可"""
    return success("退出成功")


@router.put("/password", response_model=ApiResponse, summary="修改密码")
def change_password(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_admin: SysAdmin = Depends(get_current_admin),
):
    with transaction(db):
        AuthService(db).change_password(current_admin, data.old_password, data.new_password)
    return success("密码修改成功")
