"""
CRUD 路由工厂的通用行为：认证、权限、信封、分页、审计
"""
import pytest
from fastapi.testclient import TestClient

from app.security.auth import create_access_token
from app.system.models import SysOperationLog, SysRole
from app.system.services.config_service import ConfigService
from app.system.services.role_service import RoleService

RESOURCES = ["admins", "roles", "menus", "configs", "operation-logs"]


class TestAuthentication:

    @pytest.mark.parametrize("resource", RESOURCES)
    def test_missing_token_is_unauthorized(self, client: TestClient, resource):
        response = client.get(f"/api/{resource}")
        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    @pytest.mark.parametrize("resource", RESOURCES)
    def test_invalid_token_is_unauthorized(self, client: TestClient, resource):
        response = client.delete(f"/api/{resource}/1", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    def test_expired_token(self, client: TestClient, super_admin):
        token = create_access_token(super_admin.id, super_admin.username, expires_minutes=-1)
        response = client.get("/api/roles", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_disabled_admin_rejected(self, client: TestClient, admin_factory, headers_for):
        admin = admin_factory("frozen", "system:role:list", status=0)
        response = client.get("/api/roles", headers=headers_for(admin))
        assert response.status_code == 401
        assert response.json()["message"] == "账号已停用"

    def test_token_for_unknown_admin(self, client: TestClient):
        token = create_access_token(9999, "ghost")
        response = client.get("/api/roles", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestPermissions:

    @pytest.mark.parametrize("resource", RESOURCES)
    def test_missing_permission_is_forbidden(self, client: TestClient, plain_headers, resource):
        response = client.get(f"/api/{resource}", headers=plain_headers)
        assert response.status_code == 403
        body = response.json()
        assert body["code"] == "FORBIDDEN"
        assert body["message"] == "无权限访问"

    def test_permission_is_per_operation(self, client: TestClient, admin_factory, headers_for):
        headers = headers_for(admin_factory("reader", "system:role:list"))

        assert client.get("/api/roles", headers=headers).status_code == 200
        response = client.post("/api/roles", headers=headers, json={"roleName": "编辑"})
        assert response.status_code == 403
        assert client.get("/api/roles/1", headers=headers).status_code == 403

    def test_disabled_role_grants_nothing(self, client: TestClient, db_session, admin_factory, headers_for):
        admin = admin_factory("reader", "system:role:list")
        role = admin.admin_roles[0].role
        role.status = 0
        db_session.commit()

        response = client.get("/api/roles", headers=headers_for(admin))
        assert response.status_code == 403

    def test_super_admin_bypasses_checks(self, client: TestClient, auth_headers):
        for resource in RESOURCES:
            assert client.get(f"/api/{resource}", headers=auth_headers).status_code == 200


class TestEnvelope:

    @pytest.mark.parametrize("resource", RESOURCES)
    def test_delete_missing_is_not_found(self, client: TestClient, auth_headers, resource):
        response = client.delete(f"/api/{resource}/9999", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_detail_missing_is_not_found(self, client: TestClient, auth_headers):
        response = client.get("/api/roles/9999", headers=auth_headers)
        assert response.status_code == 404
        assert response.json() == {"code": "NOT_FOUND", "message": "角色不存在"}

    def test_create_returns_201(self, client: TestClient, auth_headers):
        response = client.post("/api/roles", headers=auth_headers, json={"roleName": "运营"})
        assert response.status_code == 201
        body = response.json()
        assert body["code"] == "OK"
        assert body["message"] == "创建成功"
        assert body["data"]["roleName"] == "运营"

    def test_update_returns_200(self, client: TestClient, auth_headers):
        role_id = client.post("/api/roles", headers=auth_headers, json={"roleName": "运营"}).json()["data"]["id"]
        response = client.put(f"/api/roles/{role_id}", headers=auth_headers, json={"sort": 5})
        assert response.status_code == 200
        assert response.json()["data"]["sort"] == 5

    def test_delete_returns_null_data(self, client: TestClient, auth_headers):
        role_id = client.post("/api/roles", headers=auth_headers, json={"roleName": "运营"}).json()["data"]["id"]
        response = client.delete(f"/api/roles/{role_id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"code": "OK", "data": None, "message": "删除成功"}

    def test_invalid_body_is_validation_error(self, client: TestClient, auth_headers):
        response = client.post("/api/roles", headers=auth_headers, json={"roleName": ""})
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"]

    def test_non_integer_id_does_not_match(self, client: TestClient, auth_headers):
        response = client.get("/api/roles/abc", headers=auth_headers)
        assert response.status_code in (404, 405)
        assert response.json()["code"] in ("NOT_FOUND", "BUSINESS_ERROR")


class TestPagination:

    def test_page_shape(self, client: TestClient, auth_headers):
        for i in range(3):
            client.post("/api/roles", headers=auth_headers, json={"roleName": f"角色{i}", "sort": i})

        response = client.get("/api/roles?page=2&pageSize=2", headers=auth_headers)
        assert response.status_code == 200
        page = response.json()["data"]
        assert page["total"] == 3
        assert page["page"] == 2
        assert page["pageSize"] == 2
        assert page["totalPages"] == 2
        assert [r["roleName"] for r in page["items"]] == ["角色2"]

    def test_defaults(self, client: TestClient, auth_headers):
        page = client.get("/api/roles", headers=auth_headers).json()["data"]
        assert page == {"items": [], "total": 0, "page": 1, "pageSize": 20, "totalPages": 0}

    @pytest.mark.parametrize("query", ["page=0", "pageSize=0", "pageSize=101", "page=x"])
    def test_invalid_paging(self, client: TestClient, auth_headers, query):
        response = client.get(f"/api/roles?{query}", headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestAudit:

    def test_create_is_audited(self, client: TestClient, auth_headers, db_session):
        client.post("/api/roles", headers=auth_headers, json={"roleName": "运营"})

        log = db_session.query(SysOperationLog).one()
        assert log.module == "角色"
        assert log.operation == "创建"
        assert log.description == "创建角色"
        assert log.admin_name == "admin"
        assert log.status == 1
        assert log.request_method == "POST"
        assert log.request_url == "/api/roles"
        assert "运营" in log.request_params
        assert log.execution_time >= 0

    def test_failure_is_audited_and_rolled_back(self, client: TestClient, auth_headers, db_session):
        client.post("/api/roles", headers=auth_headers, json={"roleName": "运营"})
        response = client.post("/api/roles", headers=auth_headers, json={"roleName": "运营"})
        assert response.status_code == 409

        failed = db_session.query(SysOperationLog).filter(SysOperationLog.status == 0).one()
        assert failed.error_msg == "角色名称已存在"
        assert failed.response_result is None

    def test_password_masked_in_log(self, client: TestClient, auth_headers, db_session):
        client.post("/api/admins", headers=auth_headers, json={"username": "alice", "password": "s3cret-pass"})

        log = db_session.query(SysOperationLog).filter(SysOperationLog.module == "管理员").one()
        assert "s3cret-pass" not in log.request_params
        assert "******" in log.request_params

    def test_reads_are_not_audited(self, client: TestClient, auth_headers, db_session):
        client.get("/api/roles", headers=auth_headers)
        assert db_session.query(SysOperationLog).count() == 0


class TestUniqueConstraint:

    def test_constraint_violation_maps_to_conflict(self, client: TestClient, auth_headers, db_session,
                                                   monkeypatch):
        # 两个并发请求都通过了名称预检查
        monkeypatch.setattr(RoleService, "_check_name_unique", lambda self, role_name, exclude_id=None: None)
        assert client.post("/api/roles", headers=auth_headers, json={"roleName": "dup"}).status_code == 201

        response = client.post("/api/roles", headers=auth_headers, json={"roleName": "dup"})
        assert response.status_code == 409
        assert response.json() == {"code": "CONFLICT", "message": "数据已存在"}
        assert db_session.query(SysRole).filter(SysRole.role_name == "dup").count() == 1

        log = db_session.query(SysOperationLog).order_by(SysOperationLog.id.desc()).first()
        assert log.status == 0
        assert log.error_msg == "数据已存在"

    def test_config_key_race(self, client: TestClient, auth_headers, monkeypatch):
        monkeypatch.setattr(ConfigService, "get_by_key", lambda self, key: None)
        body = {"configKey": "site.name", "configValue": "Admin", "configName": "站点名称"}
        assert client.post("/api/configs", headers=auth_headers, json=body).status_code == 201
        assert client.post("/api/configs", headers=auth_headers, json=body).status_code == 409
