import json

import respx
from httpx import Response

from mackerel_client.resources.hosts import (
    CreateHostParam,
    FindHostByCustomIdentifierParam,
    FindHostsParam,
    Host,
    HostMeta,
)

BASE = "https://api.example.com"

HOST = {
    "id": "9rxGOHfVF8F",
    "name": "mydb001",
    "displayName": "DB 1",
    "customIdentifier": "mydb001/001",
    "status": "working",
    "memo": "",
    "roles": {"My-Service": ["db-master", "db-slave"]},
    "isRetired": False,
    "createdAt": 1401291970,
    "meta": {
        "agent-name": "mackerel-agent/0.30.2",
        "agent-revision": "bc2f9f6",
        "agent-version": "0.30.2",
        "block_device": {"sda": {"size": "41943040"}},
        "cpu": [{"model_name": "Intel(R) Xeon(R) CPU"}],
        "cloud": None,
    },
    "interfaces": [
        {"name": "eth0", "ipAddress": "10.0.0.1", "ipv4Addresses": ["10.0.0.1"], "macAddress": "02:00:00:00:00:01"}
    ],
}


def test_find_host(client):
    with respx.mock:
        respx.get(f"{BASE}/api/v0/hosts/9rxGOHfVF8F").mock(return_value=Response(200, json={"host": HOST}))
        host = client.find_host("9rxGOHfVF8F")

    assert host.name == "mydb001"
    assert host.meta.agent_version == "0.30.2"
    assert host.meta.block_device["sda"]["size"] == "41943040"
    assert host.meta.cloud is None
    assert host.interfaces[0].ipv4_addresses == ["10.0.0.1"]
    assert sorted(host.get_role_fullnames()) == ["My-Service:db-master", "My-Service:db-slave"]


def test_find_hosts_query(client):
    with respx.mock:
        route = respx.get(f"{BASE}/api/v0/hosts").mock(return_value=Response(200, json={"hosts": [HOST]}))
        hosts = client.find_hosts(
            FindHostsParam(service="My-Service", roles=["db-master", "db-slave"], name="mydb001", statuses=["working", "standby"])
        )

    assert [h.id for h in hosts] == ["9rxGOHfVF8F"]
    url = route.calls.last.request.url
    assert url.params.get_list("role") == ["db-master", "db-slave"]
    assert url.params.get_list("status") == ["working", "standby"]
    assert url.params["service"] == "My-Service"
    assert url.query == b"name=mydb001&role=db-master&role=db-slave&service=My-Service&status=working&status=standby"


def test_find_host_by_custom_identifier_escapes_path(client):
    with respx.mock:
        route = respx.route(method="GET", path__startswith="/api/v0/hosts-by-custom-identifier/").mock(
            return_value=Response(200, json={"host": HOST})
        )
        host = client.find_host_by_custom_identifier(
            "mydb001/001", FindHostByCustomIdentifierParam(case_insensitive=True)
        )

    assert host.custom_identifier == "mydb001/001"
    raw_path = route.calls.last.request.url.raw_path
    assert raw_path == b"/api/v0/hosts-by-custom-identifier/mydb001%2F001?caseInsensitive=true"


def test_find_host_by_custom_identifier_not_found(client):
    with respx.mock:
        respx.route(method="GET", path__startswith="/api/v0/hosts-by-custom-identifier/").mock(
            return_value=Response(200, json={"host": None})
        )
        assert client.find_host_by_custom_identifier("missing") is None


def test_create_host(client):
    with respx.mock:
        route = respx.post(f"{BASE}/api/v0/hosts").mock(return_value=Response(200, json={"id": "newhost"}))
        host_id = client.create_host(
            CreateHostParam(name="mydb002", role_fullnames=["My-Service:db-master"], meta=HostMeta(agent_version="0.30.2"))
        )

    assert host_id == "newhost"
    assert json.loads(route.calls.last.request.content) == {
        "name": "mydb002",
        "meta": {"agent-version": "0.30.2"},
        "roleFullnames": ["My-Service:db-master"],
    }


def test_update_host_status_and_retire(client):
    with respx.mock:
        status = respx.post(f"{BASE}/api/v0/hosts/h1/status").mock(return_value=Response(200, json={"success": True}))
        retire = respx.post(f"{BASE}/api/v0/hosts/h1/retire").mock(return_value=Response(200, json={"success": True}))
        bulk = respx.post(f"{BASE}/api/v0/hosts/bulk-retire").mock(return_value=Response(200, json={"success": True}))

        assert client.update_host_status("h1", "maintenance") is None
        assert client.retire_host("h1") is None
        assert client.bulk_retire_hosts(["h2", "h3"]) is None

    assert json.loads(status.calls.last.request.content) == {"status": "maintenance"}
    assert retire.calls.last.request.content == b"{}"
    assert json.loads(bulk.calls.last.request.content) == {"ids": ["h2", "h3"]}


def test_list_monitored_statuses(client):
    body = {
        "monitoredStatuses": [
            {"monitorId": "2cSZzK3XfmG", "status": "OK", "detail": {"type": "check", "message": "ok", "memo": ""}}
        ]
    }
    with respx.mock:
        respx.get(f"{BASE}/api/v0/hosts/h1/monitored-statuses").mock(return_value=Response(200, json=body))
        statuses = client.list_monitored_statuses("h1")

    assert statuses[0].monitor_id == "2cSZzK3XfmG"
    assert statuses[0].detail.type == "check"


def test_host_decodes_null_collections():
    host = Host.model_validate({"id": "h", "roles": None, "interfaces": None})
    assert host.roles == {}
    assert host.interfaces == []
