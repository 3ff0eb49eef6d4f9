import json

import respx
from httpx import Response

from mackerel_client.resources.alert_group_settings import AlertGroupSetting
from mackerel_client.resources.alerts import FindAlertLogsParam

BASE = "https://api.example.com"

ALERTS_PAGE = {
    "alerts": [
        {
            "id": "2wpLU5fBXbG",
            "status": "CRITICAL",
            "monitorId": "2cYjfibBkaj",
            "type": "connectivity",
            "hostId": "2vJ965ygiXf",
            "openedAt": 1441939800,
        },
        {
            "id": "2ust8jNxFH3",
            "status": "CRITICAL",
            "monitorId": "2cYjfibBkak",
            "type": "host",
            "hostId": "2vJ965ygiXf",
            "value": 2.5,
            "message": "load is high",
            "openedAt": 1441939801,
        },
    ],
    "nextId": "2ghy4jDhEH3",
}


def test_find_alerts_by_next_id(client):
    with respx.mock:
        route = respx.get(f"{BASE}/api/v0/alerts").mock(return_value=Response(200, json=ALERTS_PAGE))
        resp = client.find_alerts_by_next_id("2fsf8jRxFG1")

    assert route.calls.last.request.url.query == b"nextId=2fsf8jRxFG1"
    assert resp.alerts[0].type == "connectivity"
    assert resp.alerts[1].opened_at == 1441939801
    assert resp.alerts[1].value == 2.5
    assert resp.next_id == "2ghy4jDhEH3"


def test_find_with_closed_alerts(client):
    with respx.mock:
        route = respx.get(f"{BASE}/api/v0/alerts").mock(return_value=Response(200, json={"alerts": []}))
        first = client.find_with_closed_alerts()
        client.find_with_closed_alerts_by_next_id("abc")

    assert first.alerts == []
    assert first.next_id == ""
    queries = [call.request.url.query for call in route.calls]
    assert queries == [b"withClosed=true", b"nextId=abc&withClosed=true"]


def test_close_alert(client):
    with respx.mock:
        route = respx.post(f"{BASE}/api/v0/alerts/2wpLU5fBXbG/close").mock(
            return_value=Response(200, json={"id": "2wpLU5fBXbG", "status": "OK", "reason": "resolved", "closedAt": 1441940000})
        )
        alert = client.close_alert("2wpLU5fBXbG", "resolved")

    assert json.loads(route.calls.last.request.content) == {"reason": "resolved"}
    assert alert.status == "OK"
    assert alert.closed_at == 1441940000


def test_find_alert_logs(client):
    body = {
        "logs": [
            {
                "id": "log1",
                "createdAt": 1700000000,
                "status": "WARNING",
                "trigger": "monitoring",
                "monitorId": "m1",
                "targetValue": 85.5,
                "statusDetail": {"type": "check", "detail": {"message": "slow", "memo": ""}},
            },
            {"id": "log2", "createdAt": 1700000100, "status": "OK", "trigger": "manual", "monitorId": None, "targetValue": None, "statusDetail": None},
        ],
        "nextId": "log3",
    }
    with respx.mock:
        route = respx.get(f"{BASE}/api/v0/alerts/a1/logs").mock(return_value=Response(200, json=body))
        resp = client.find_alert_logs("a1", FindAlertLogsParam(next_id="log0", limit=2))

    assert route.calls.last.request.url.query == b"limit=2&nextId=log0"
    assert resp.logs[0].target_value == 85.5
    assert resp.logs[0].status_detail.detail.message == "slow"
    assert resp.logs[1].monitor_id is None
    assert resp.logs[1].status_detail is None
    assert resp.next_id == "log3"


def test_create_alert_group_setting(client):
    def echo(request):
        payload = json.loads(request.content)
        return Response(200, json={"id": "xxxxxxxxxxx", **payload})

    with respx.mock:
        route = respx.post(f"{BASE}/api/v0/alert-group-settings").mock(side_effect=echo)
        setting = client.create_alert_group_setting(
            AlertGroupSetting(name="alert group setting", memo="lorem ipsum...")
        )

    assert json.loads(route.calls.last.request.content) == {"name": "alert group setting", "memo": "lorem ipsum..."}
    assert setting.id == "xxxxxxxxxxx"
    assert setting.name == "alert group setting"
    assert setting.memo == "lorem ipsum..."
    assert setting.service_scopes == []
    assert setting.role_scopes == []
    assert setting.monitor_scopes == []
    assert setting.notification_interval == 0


def test_alert_group_setting_crud_paths(client):
    setting = {"id": "s1", "name": "group", "serviceScopes": ["web"]}
    with respx.mock:
        respx.get(f"{BASE}/api/v0/alert-group-settings").mock(
            return_value=Response(200, json={"alertGroupSettings": [setting]})
        )
        respx.get(f"{BASE}/api/v0/alert-group-settings/s1").mock(return_value=Response(200, json=setting))
        update = respx.put(f"{BASE}/api/v0/alert-group-settings/s1").mock(return_value=Response(200, json=setting))
        respx.delete(f"{BASE}/api/v0/alert-group-settings/s1").mock(return_value=Response(200, json=setting))

        assert [s.id for s in client.find_alert_group_settings()] == ["s1"]
        assert client.get_alert_group_setting("s1").service_scopes == ["web"]
        client.update_alert_group_setting("s1", AlertGroupSetting(name=""))
        assert client.delete_alert_group_setting("s1").name == "group"

    assert json.loads(update.calls.last.request.content) == {"name": ""}
