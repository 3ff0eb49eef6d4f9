from __future__ import annotations

from typing import Any, Mapping, Sequence, Union

import httpx
import structlog

from mackerel_client.config import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    Settings,
    get_settings,
)
from mackerel_client.logging import Logger, PrioritizedLogger, emit_trace
from mackerel_client.resources.alert_group_settings import AlertGroupSettingsAPI
from mackerel_client.resources.alerts import AlertsAPI
from mackerel_client.resources.apm import APMAPI
from mackerel_client.resources.aws_integrations import AWSIntegrationsAPI
from mackerel_client.resources.channels import ChannelsAPI
from mackerel_client.resources.checks import ChecksAPI
from mackerel_client.resources.dashboards import DashboardsAPI
from mackerel_client.resources.downtimes import DowntimesAPI
from mackerel_client.resources.graph_annotations import GraphAnnotationsAPI
from mackerel_client.resources.graph_defs import GraphDefsAPI
from mackerel_client.resources.hosts import HostsAPI
from mackerel_client.resources.invitations import InvitationsAPI
from mackerel_client.resources.metadata import MetadataAPI
from mackerel_client.resources.metrics import MetricsAPI
from mackerel_client.resources.monitors import MonitorsAPI
from mackerel_client.resources.notification_groups import NotificationGroupsAPI
from mackerel_client.resources.org import OrgAPI
from mackerel_client.resources.roles import RolesAPI
from mackerel_client.resources.services import ServicesAPI
from mackerel_client.resources.traces import TracesAPI
from mackerel_client.resources.users import UsersAPI
from mackerel_client.urls import QueryParams, parse_base_url, url_for

logger = structlog.get_logger()

HeaderTypes = Union[httpx.Headers, Mapping[str, str], Sequence[tuple[str, str]], None]


class Client(
    HostsAPI,
    ServicesAPI,
    RolesAPI,
    AlertsAPI,
    AlertGroupSettingsAPI,
    ChannelsAPI,
    NotificationGroupsAPI,
    MonitorsAPI,
    DashboardsAPI,
    DowntimesAPI,
    InvitationsAPI,
    UsersAPI,
    OrgAPI,
    AWSIntegrationsAPI,
    GraphAnnotationsAPI,
    GraphDefsAPI,
    MetricsAPI,
    ChecksAPI,
    MetadataAPI,
    APMAPI,
    TracesAPI,
):
    """Mackerel API client.

    A handle is safe to share between threads. Every operation has a
    ``*_context`` twin taking a Context as its first argument.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        verbose: bool = False,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        additional_headers: HeaderTypes = None,
        http_client: httpx.Client | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
        logger: Logger | None = None,
        prioritized_logger: PrioritizedLogger | None = None,
    ) -> None:
        self._base_parts = parse_base_url(base_url)
        self.base_url = base_url
        self.api_key = api_key
        self.verbose = verbose
        self.user_agent = user_agent
        self.additional_headers = httpx.Headers(additional_headers)
        self.timeout = timeout
        self.logger = logger
        self.prioritized_logger = prioritized_logger
        self._owns_http_client = http_client is None
        self.http_client = http_client if http_client is not None else httpx.Client(timeout=timeout)

    def _url_for(self, path: str, params: QueryParams = None) -> str:
        return url_for(self._base_parts, path, params)

    def _tracef(self, format: str, *args: Any) -> None:
        emit_trace(self.logger, self.prioritized_logger, format, *args)

    def _close(self) -> None:
        if self._owns_http_client:
            self.http_client.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._close()

    def __repr__(self) -> str:
        return f"Client(base_url={self.base_url!r}, verbose={self.verbose!r})"


def new_client(api_key: str) -> Client:
    """Client for the production endpoint."""
    return Client(api_key)


def new_client_with_options(api_key: str, base_url: str, verbose: bool) -> Client:
    return Client(api_key, base_url, verbose)


def new_client_from_settings(settings: Settings | None = None) -> Client:
    """Client configured from MACKEREL_* environment settings."""
    settings = settings or get_settings()
    logger.debug("client_from_settings", base_url=settings.base_url, verbose=settings.verbose)
    return Client(
        settings.api_key,
        settings.base_url,
        settings.verbose,
        user_agent=settings.user_agent,
        timeout=settings.http_timeout,
    )
