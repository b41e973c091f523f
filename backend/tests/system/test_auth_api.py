"""
认证 API 测试
覆盖 /api/auth 端点
"""
from fastapi.testclient import TestClient

from app.system.models import SysAdmin, SysAdminRole, SysOperationLog, SysRole, SysRoleMenu


class TestLogin:

    def test_login_success(self, client: TestClient, super_admin, sample_menus):
        response = client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token"]
        assert data["admin"]["username"] == "admin"
        assert data["permissions"] == ["*:*:*"]
        # 侧边栏不含按钮
        assert [m["id"] for m in data["menus"]] == [1]
        assert [m["id"] for m in data["menus"][0]["children"]] == [2, 3]
        assert data["menus"][0]["children"][0]["children"] == []

    def test_token_works_for_protected_routes(self, client: TestClient, super_admin):
        token = client.post("/api/auth/login", json={"username": "admin", "password": "admin123"}).json()["data"]["token"]
        response = client.get("/api/roles", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200

    def test_login_records_ip_and_time(self, client: TestClient, super_admin, db_session):
        client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
        admin = db_session.query(SysAdmin).filter(SysAdmin.username == "admin").one()
        db_session.refresh(admin)
        assert admin.login_time is not None
        assert admin.login_ip

    def test_wrong_password(self, client: TestClient, super_admin, db_session):
        response = client.post("/api/auth/login", json={"username": "admin", "password": "nope"})
        assert response.status_code == 401
        assert response.json() == {"code": "UNAUTHORIZED", "message": "用户名或密码错误"}

        log = db_session.query(SysOperationLog).one()
        assert log.module == "认证"
        assert log.status == 0
        assert log.admin_name == "admin"
        assert "nope" not in log.request_params

    def test_unknown_user(self, client: TestClient):
        response = client.post("/api/auth/login", json={"username": "ghost", "password": "x"})
        assert response.status_code == 401

    def test_disabled_account(self, client: TestClient, admin_factory):
        admin_factory("frozen", password="frozen123", status=0)
        response = client.post("/api/auth/login", json={"username": "frozen", "password": "frozen123"})
        assert response.status_code == 401
        assert response.json()["message"] == "账号已停用"

    def test_successful_login_audited(self, client: TestClient, super_admin, db_session):
        client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
        log = db_session.query(SysOperationLog).one()
        assert log.operation == "登录"
        assert log.status == 1
        assert log.admin_id == super_admin.id


class TestProfile:

    def test_me_for_role_based_admin(self, client: TestClient, db_session, admin_factory, headers_for, sample_menus):
        admin = admin_factory("ops")
        role = SysRole(role_name="运营")
        db_session.add(role)
        db_session.flush()
        db_session.add_all([SysRoleMenu(role_id=role.id, menu_id=m) for m in (1, 2, 4)])
        db_session.add(SysAdminRole(admin_id=admin.id, role_id=role.id))
        db_session.commit()

        response = client.get("/api/auth/me", headers=headers_for(admin))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["token"] is None
        assert data["permissions"] == ["demo:user:create", "demo:user:list"]
        assert [m["id"] for m in data["menus"]] == [1]
        assert [m["id"] for m in data["menus"][0]["children"]] == [2]

    def test_me_hides_empty_directories(self, client: TestClient, admin_factory, headers_for, sample_menus):
        data = client.get("/api/auth/me", headers=headers_for(admin_factory("nobody"))).json()["data"]
        assert data["menus"] == []
        assert data["permissions"] == []

    def test_me_requires_token(self, client: TestClient):
        assert client.get("/api/auth/me").status_code == 401

    def test_logout(self, client: TestClient, auth_headers):
        response = client.post("/api/auth/logout", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["data"] is None


class TestChangePassword:

    def test_change_password(self, client: TestClient, auth_headers):
        response = client.put("/api/auth/password", headers=auth_headers, json={
            "oldPassword": "admin123", "newPassword": "changed1",
        })
        assert response.status_code == 200

        login = client.post("/api/auth/login", json={"username": "admin", "password": "changed1"})
        assert login.status_code == 200

    def test_wrong_old_password(self, client: TestClient, auth_headers):
        response = client.put("/api/auth/password", headers=auth_headers, json={
            "oldPassword": "wrong", "newPassword": "changed1",
        })
        assert response.status_code == 400
        assert response.json()["code"] == "BUSINESS_ERROR"
