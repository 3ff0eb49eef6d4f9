import json
from datetime import datetime, timezone

import respx
from httpx import Response

from mackerel_client.resources.apm import ListHTTPServerStatsParam
from mackerel_client.resources.channels import Channel
from mackerel_client.resources.graph_annotations import GraphAnnotation
from mackerel_client.resources.graph_defs import GraphDefsMetric, GraphDefsParam
from mackerel_client.resources.invitations import Invitation
from mackerel_client.resources.notification_groups import (
    NotificationGroup,
    NotificationGroupMonitor,
    NotificationLevel,
)
from mackerel_client.resources.roles import CreateRoleParam
from mackerel_client.resources.services import CreateServiceParam
from mackerel_client.resources.traces import SpanKind, StatusCode

BASE = "https://api.example.com"


class TestServicesAndRoles:
    def test_find_services(self, client):
        body = {"services": [{"name": "web", "memo": "", "roles": ["app", "db"]}, {"name": "batch", "roles": None}]}
        with respx.mock:
            respx.get(f"{BASE}/api/v0/services").mock(return_value=Response(200, json=body))
            services = client.find_services()

        assert services[0].roles == ["app", "db"]
        assert services[1].roles == []

    def test_create_service_sends_empty_memo(self, client):
        with respx.mock:
            route = respx.post(f"{BASE}/api/v0/services").mock(
                return_value=Response(200, json={"name": "web", "memo": "", "roles": []})
            )
            client.create_service(CreateServiceParam(name="web"))

        assert json.loads(route.calls.last.request.content) == {"name": "web", "memo": ""}

    def test_delete_service_and_metric_names(self, client):
        with respx.mock:
            respx.delete(f"{BASE}/api/v0/services/web").mock(return_value=Response(200, json={"name": "web"}))
            respx.get(f"{BASE}/api/v0/services/web/metric-names").mock(
                return_value=Response(200, json={"names": ["custom.access"]})
            )

            assert client.delete_service("web").name == "web"
            assert client.list_service_metric_names("web") == ["custom.access"]

    def test_roles(self, client):
        with respx.mock:
            respx.get(f"{BASE}/api/v0/services/web/roles").mock(
                return_value=Response(200, json={"roles": [{"name": "app", "memo": "frontend"}]})
            )
            create = respx.post(f"{BASE}/api/v0/services/web/roles").mock(
                return_value=Response(200, json={"name": "db", "memo": ""})
            )
            respx.delete(f"{BASE}/api/v0/services/web/roles/db").mock(
                return_value=Response(200, json={"name": "db", "memo": ""})
            )

            assert client.find_roles("web")[0].memo == "frontend"
            client.create_role("web", CreateRoleParam(name="db"))
            assert client.delete_role("web", "db").name == "db"

        assert json.loads(create.calls.last.request.content) == {"name": "db", "memo": ""}


class TestChannels:
    def test_absent_collections_stay_none(self, client):
        body = {
            "channels": [
                {"id": "c1", "name": "mail", "type": "email", "emails": ["a@example.com"], "userIds": []},
                {"id": "c2", "name": "hook", "type": "webhook", "url": "https://example.com/hook", "events": ["alert"]},
            ]
        }
        with respx.mock:
            respx.get(f"{BASE}/api/v0/channels").mock(return_value=Response(200, json=body))
            channels = client.find_channels()

        assert channels[0].emails == ["a@example.com"]
        assert channels[0].user_ids == []
        assert channels[0].events is None
        assert channels[1].emails is None
        assert channels[1].events == ["alert"]
        assert channels[1].suspended_at is None

    def test_create_channel_keeps_explicit_empty_lists(self, client):
        param = Channel(name="mail", type="email", emails=[], user_ids=["u1"], enabled_graph_image=False)
        with respx.mock:
            route = respx.post(f"{BASE}/api/v0/channels").mock(
                return_value=Response(200, json={"id": "c1", "name": "mail", "type": "email"})
            )
            created = client.create_channel(param)

        assert json.loads(route.calls.last.request.content) == {
            "id": "",
            "name": "mail",
            "type": "email",
            "emails": [],
            "userIds": ["u1"],
            "mentions": {},
            "enabledGraphImage": False,
        }
        assert created.id == "c1"

    def test_identity_fields_always_sent(self):
        assert json.loads(Channel().to_json()) == {"id": "", "name": "", "type": "", "mentions": {}}

    def test_delete_channel(self, client):
        with respx.mock:
            respx.delete(f"{BASE}/api/v0/channels/c1").mock(return_value=Response(200, json={"id": "c1"}))
            assert client.delete_channel("c1").id == "c1"


class TestNotificationGroups:
    def test_create_notification_group_body(self, client):
        param = NotificationGroup(
            name="ops",
            notification_level=NotificationLevel.CRITICAL,
            monitors=[NotificationGroupMonitor(id="m1")],
        )
        with respx.mock:
            route = respx.post(f"{BASE}/api/v0/notification-groups").mock(
                return_value=Response(200, json={"id": "ng1", "name": "ops", "notificationLevel": "critical"})
            )
            created = client.create_notification_group(param)

        assert json.loads(route.calls.last.request.content) == {
            "name": "ops",
            "notificationLevel": "critical",
            "childNotificationGroupIds": [],
            "childChannelIds": [],
            "monitors": [{"id": "m1", "skipDefault": False}],
        }
        assert created.notification_level is NotificationLevel.CRITICAL

    def test_find_update_delete(self, client):
        group = {"id": "ng1", "name": "ops", "notificationLevel": "all", "services": [{"name": "web"}]}
        with respx.mock:
            respx.get(f"{BASE}/api/v0/notification-groups").mock(
                return_value=Response(200, json={"notificationGroups": [group]})
            )
            respx.put(f"{BASE}/api/v0/notification-groups/ng1").mock(return_value=Response(200, json=group))
            respx.delete(f"{BASE}/api/v0/notification-groups/ng1").mock(return_value=Response(200, json=group))

            groups = client.find_notification_groups()
            updated = client.update_notification_group("ng1", NotificationGroup(name="ops"))
            deleted = client.delete_notification_group("ng1")

        assert groups[0].services[0].name == "web"
        assert updated.id == deleted.id == "ng1"


class TestUsersOrgInvitations:
    def test_find_users(self, client):
        body = {
            "users": [
                {
                    "id": "u1",
                    "screenName": "alice",
                    "email": "alice@example.com",
                    "authority": "owner",
                    "isInRegistrationProcess": False,
                    "isMFAEnabled": True,
                    "authenticationMethods": ["password", "google"],
                    "joinedAt": 1600000000,
                }
            ]
        }
        with respx.mock:
            respx.get(f"{BASE}/api/v0/users").mock(return_value=Response(200, json=body))
            respx.delete(f"{BASE}/api/v0/users/u1").mock(return_value=Response(200, json=body["users"][0]))
            users = client.find_users()
            deleted = client.delete_user("u1")

        assert users[0].is_mfa_enabled is True
        assert users[0].authentication_methods == ["password", "google"]
        assert deleted.screen_name == "alice"

    def test_get_org(self, client):
        with respx.mock:
            respx.get(f"{BASE}/api/v0/org").mock(
                return_value=Response(200, json={"name": "example", "displayName": "Example Inc."})
            )
            org = client.get_org()

        assert org.name == "example"
        assert org.display_name == "Example Inc."

    def test_invitations(self, client):
        with respx.mock:
            respx.get(f"{BASE}/api/v0/invitations").mock(
                return_value=Response(
                    200, json={"invitations": [{"email": "bob@example.com", "authority": "viewer", "expiresAt": 1}]}
                )
            )
            create = respx.post(f"{BASE}/api/v0/invitations").mock(
                return_value=Response(200, json={"email": "carol@example.com", "authority": "manager", "expiresAt": 2})
            )

            invitations = client.find_invitations()
            created = client.create_invitation(Invitation(email="carol@example.com", authority="manager"))

        assert invitations[0].authority == "viewer"
        assert json.loads(create.calls.last.request.content) == {"email": "carol@example.com", "authority": "manager"}
        assert created.expires_at == 2


class TestGraphAnnotationsAndDefs:
    def test_find_graph_annotations(self, client):
        body = {"graphAnnotations": [{"id": "ga1", "service": "web", "from": 100, "to": 200, "title": "deploy"}]}
        with respx.mock:
            route = respx.get(f"{BASE}/api/v0/graph-annotations").mock(return_value=Response(200, json=body))
            annotations = client.find_graph_annotations("web", 100, 200)

        assert route.calls.last.request.url.query == b"from=100&service=web&to=200"
        assert annotations[0].from_ == 100
        assert annotations[0].roles == []

    def test_update_and_delete_graph_annotation(self, client):
        annotation = GraphAnnotation(service="web", roles=["app"], from_=1, to=2, title="deploy")
        with respx.mock:
            update = respx.put(f"{BASE}/api/v0/graph-annotations/ga1").mock(
                return_value=Response(200, json={"id": "ga1", "title": "deploy"})
            )
            respx.delete(f"{BASE}/api/v0/graph-annotations/ga1").mock(
                return_value=Response(200, json={"id": "ga1"})
            )
            client.update_graph_annotation("ga1", annotation)
            assert client.delete_graph_annotation("ga1").id == "ga1"

        assert json.loads(update.calls.last.request.content) == {
            "service": "web",
            "roles": ["app"],
            "from": 1,
            "to": 2,
            "title": "deploy",
        }

    def test_graph_defs(self, client):
        defs = [
            GraphDefsParam(
                name="custom.queue",
                metrics=[GraphDefsMetric(name="custom.queue.size")],
            )
        ]
        with respx.mock:
            create = respx.post(f"{BASE}/api/v0/graph-defs/create").mock(
                return_value=Response(200, json={"success": True})
            )
            delete = respx.delete(f"{BASE}/api/v0/graph-defs").mock(return_value=Response(200, json={"success": True}))

            client.create_graph_defs(defs)
            client.delete_graph_def("custom.queue")

        assert json.loads(create.calls.last.request.content) == [
            {
                "name": "custom.queue",
                "displayName": "",
                "unit": "",
                "metrics": [{"name": "custom.queue.size", "displayName": "", "isStacked": False}],
            }
        ]
        assert json.loads(delete.calls.last.request.content) == {"name": "custom.queue"}


class TestAPMAndTraces:
    def test_list_http_server_stats_query(self, client):
        page = {
            "results": [
                {
                    "method": "GET",
                    "route": "/users/:id",
                    "totalMillis": 1200.5,
                    "averageMillis": 12.0,
                    "approxP95Millis": 40.25,
                    "errorRatePercentage": 0.5,
                    "requestCount": 100,
                }
            ],
            "hasNextPage": False,
        }
        param = ListHTTPServerStatsParam(service_name="web", from_=100, to=200, environment="production", per_page=50)
        with respx.mock:
            route = respx.get(f"{BASE}/api/v0/apm/http-server-stats").mock(return_value=Response(200, json=page))
            result = client.list_http_server_stats(param)

        assert route.calls.last.request.url.query == b"environment=production&from=100&perPage=50&serviceName=web&to=200"
        assert result.results[0].approx_p95_millis == 40.25
        assert result.results[0].request_count == 100
        assert result.has_next_page is False

    def test_iter_http_server_stats(self, client):
        pages = [
            {"results": [{"route": "/a"}], "hasNextPage": True},
            {"results": [{"route": "/b"}, {"route": "/c"}], "hasNextPage": False},
        ]
        param = ListHTTPServerStatsParam(service_name="web", from_=1, to=2)
        with respx.mock:
            route = respx.get(f"{BASE}/api/v0/apm/http-server-stats").mock(
                side_effect=[Response(200, json=page) for page in pages]
            )
            items = list(client.iter_http_server_stats(param))

        assert [(stats.route, err) for stats, err in items] == [("/a", None), ("/b", None), ("/c", None)]
        assert [call.request.url.params["page"] for call in route.calls] == ["1", "2"]
        assert param.page is None

    def test_get_trace(self, client):
        body = {
            "spans": [
                {
                    "traceId": "t1",
                    "spanId": "s1",
                    "name": "GET /users",
                    "kind": "server",
                    "startTime": "2024-01-01T00:00:00.5Z",
                    "endTime": "2024-01-01T00:00:01Z",
                    "attributes": [
                        {"key": "http.method", "value": {"valueType": "string", "stringValue": "GET"}},
                        {"key": "payload", "value": {"valueType": "bytes", "bytesValue": "aGVsbG8="}},
                    ],
                    "status": {"code": "error", "message": "boom"},
                    "resource": {"attributes": [], "droppedAttributesCount": 1},
                    "scope": None,
                }
            ]
        }
        with respx.mock:
            respx.get(f"{BASE}/api/v0/traces/t1").mock(return_value=Response(200, json=body))
            trace = client.get_trace("t1")

        span = trace.spans[0]
        assert span.kind is SpanKind.SERVER
        assert span.start_time == datetime(2024, 1, 1, 0, 0, 0, 500000, tzinfo=timezone.utc)
        assert span.attributes[0].value.value == "GET"
        assert span.attributes[1].value.value == b"hello"
        assert span.status.code is StatusCode.ERROR
        assert span.resource.dropped_attributes_count == 1
        assert span.scope is None
