"""
操作日志 API 测试
覆盖 /api/operation-logs 端点
"""
from datetime import datetime, timedelta

from fastapi.testclient import TestClient

from app.system.models import SysOperationLog


def _log(db_session, **overrides):
    values = {
        "admin_id": 1, "admin_name": "admin", "module": "角色", "operation": "创建",
        "description": "创建角色", "request_method": "POST", "request_url": "/api/roles", "status": 1,
    }
    values.update(overrides)
    log = SysOperationLog(**values)
    db_session.add(log)
    db_session.commit()
    return log


class TestOperationLogAPI:

    def test_list_newest_first(self, client: TestClient, auth_headers, db_session):
        now = datetime(2026, 1, 1, 12, 0, 0)
        _log(db_session, description="旧", created_at=now - timedelta(hours=1))
        _log(db_session, description="新", created_at=now)

        page = client.get("/api/operation-logs", headers=auth_headers).json()["data"]
        assert [item["description"] for item in page["items"]] == ["新", "旧"]
        assert page["total"] == 2

    def test_filters(self, client: TestClient, auth_headers, db_session):
        _log(db_session, module="角色", status=1)
        _log(db_session, module="菜单", operation="删除", status=0, admin_name="ops")

        def items(query):
            return client.get(f"/api/operation-logs?{query}", headers=auth_headers).json()["data"]["items"]

        assert [i["module"] for i in items("module=菜单")] == ["菜单"]
        assert [i["status"] for i in items("status=0")] == [0]
        assert [i["adminName"] for i in items("adminName=op")] == ["ops"]
        assert [i["operation"] for i in items("operation=删除")] == ["删除"]

    def test_time_range(self, client: TestClient, auth_headers, db_session):
        _log(db_session, description="一月", created_at=datetime(2026, 1, 15))
        _log(db_session, description="三月", created_at=datetime(2026, 3, 15))

        response = client.get(
            "/api/operation-logs?startTime=2026-03-01T00:00:00&endTime=2026-03-31T23:59:59",
            headers=auth_headers,
        )
        assert [i["description"] for i in response.json()["data"]["items"]] == ["三月"]

    def test_detail_and_delete(self, client: TestClient, auth_headers, db_session):
        log_id = _log(db_session).id

        detail = client.get(f"/api/operation-logs/{log_id}", headers=auth_headers)
        assert detail.status_code == 200
        assert detail.json()["data"]["requestUrl"] == "/api/roles"

        response = client.delete(f"/api/operation-logs/{log_id}", headers=auth_headers)
        assert response.status_code == 200
        assert db_session.query(SysOperationLog).count() == 0

    def test_no_create_or_update_routes(self, client: TestClient, auth_headers):
        assert client.post("/api/operation-logs", headers=auth_headers, json={}).status_code == 405
        assert client.put("/api/operation-logs/1", headers=auth_headers, json={}).status_code == 405

    def test_query_permission(self, client: TestClient, admin_factory, headers_for, db_session):
        log_id = _log(db_session).id
        headers = headers_for(admin_factory("auditor", "system:log:list"))
        assert client.get("/api/operation-logs", headers=headers).status_code == 200
        assert client.get(f"/api/operation-logs/{log_id}", headers=headers).status_code == 403
        assert client.delete(f"/api/operation-logs/{log_id}", headers=headers).status_code == 403
