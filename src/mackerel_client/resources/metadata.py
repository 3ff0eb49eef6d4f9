"""
Host, service and role metadata.

Metadata bodies are arbitrary JSON owned by the caller. Reads also return the
time the namespace was last modified.
"""

from __future__ import annotations

from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Any

import httpx
from pydantic import Field

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.errors import DecodeError
from mackerel_client.request import (
    NO_RESULT,
    request_delete_context,
    request_get_and_return_header_context,
    request_get_context,
    request_put_context,
)
from mackerel_client.resources.base import MackerelModel
from mackerel_client.urls import escape_path


class MetadataResp(MackerelModel):
    metadata: Any = None
    last_modified: datetime | None = None


class _Namespace(MackerelModel):
    namespace: str = ""


class _NamespacesEnvelope(MackerelModel):
    metadata: list[_Namespace] = Field(default_factory=list)


def parse_last_modified(headers: httpx.Headers) -> datetime | None:
    raw = headers.get("Last-Modified")
    if not raw:
        return None
    try:
        return parsedate_to_datetime(raw)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"invalid Last-Modified header: {raw!r}") from exc


def _host_base(host_id: str) -> str:
    return f"/api/v0/hosts/{escape_path(host_id)}/metadata"


def _service_base(service_name: str) -> str:
    return f"/api/v0/services/{escape_path(service_name)}/metadata"


def _role_base(service_name: str, role_name: str) -> str:
    return f"/api/v0/services/{escape_path(service_name)}/roles/{escape_path(role_name)}/metadata"


def _get(client: Any, ctx: Context, path: str) -> MetadataResp:
    data, headers = request_get_and_return_header_context(ctx, client, path, Any)
    return MetadataResp(metadata=data, last_modified=parse_last_modified(headers))


def _namespaces(client: Any, ctx: Context, path: str) -> list[str]:
    data = request_get_context(ctx, client, path, _NamespacesEnvelope)
    return [entry.namespace for entry in data.metadata]


class MetadataAPI:
    def get_host_metadata(self, host_id: str, namespace: str) -> MetadataResp:
        return self.get_host_metadata_context(BACKGROUND, host_id, namespace)

    def get_host_metadata_context(self, ctx: Context, host_id: str, namespace: str) -> MetadataResp:
        return _get(self, ctx, f"{_host_base(host_id)}/{escape_path(namespace)}")

    def get_host_metadata_namespaces(self, host_id: str) -> list[str]:
        return self.get_host_metadata_namespaces_context(BACKGROUND, host_id)

    def get_host_metadata_namespaces_context(self, ctx: Context, host_id: str) -> list[str]:
        return _namespaces(self, ctx, _host_base(host_id))

    def put_host_metadata(self, host_id: str, namespace: str, metadata: Any) -> None:
        self.put_host_metadata_context(BACKGROUND, host_id, namespace, metadata)

    def put_host_metadata_context(self, ctx: Context, host_id: str, namespace: str, metadata: Any) -> None:
        path = f"{_host_base(host_id)}/{escape_path(namespace)}"
        request_put_context(ctx, self, path, metadata, NO_RESULT)

    def delete_host_metadata(self, host_id: str, namespace: str) -> None:
        self.delete_host_metadata_context(BACKGROUND, host_id, namespace)

    def delete_host_metadata_context(self, ctx: Context, host_id: str, namespace: str) -> None:
        request_delete_context(ctx, self, f"{_host_base(host_id)}/{escape_path(namespace)}", NO_RESULT)

    def get_service_metadata(self, service_name: str, namespace: str) -> MetadataResp:
        return self.get_service_metadata_context(BACKGROUND, service_name, namespace)

    def get_service_metadata_context(self, ctx: Context, service_name: str, namespace: str) -> MetadataResp:
        return _get(self, ctx, f"{_service_base(service_name)}/{escape_path(namespace)}")

    def get_service_metadata_namespaces(self, service_name: str) -> list[str]:
        return self.get_service_metadata_namespaces_context(BACKGROUND, service_name)

    def get_service_metadata_namespaces_context(self, ctx: Context, service_name: str) -> list[str]:
        return _namespaces(self, ctx, _service_base(service_name))

    def put_service_metadata(self, service_name: str, namespace: str, metadata: Any) -> None:
        self.put_service_metadata_context(BACKGROUND, service_name, namespace, metadata)

    def put_service_metadata_context(
        self, ctx: Context, service_name: str, namespace: str, metadata: Any
    ) -> None:
        path = f"{_service_base(service_name)}/{escape_path(namespace)}"
        request_put_context(ctx, self, path, metadata, NO_RESULT)

    def delete_service_metadata(self, service_name: str, namespace: str) -> None:
        self.delete_service_metadata_context(BACKGROUND, service_name, namespace)

    def delete_service_metadata_context(self, ctx: Context, service_name: str, namespace: str) -> None:
        path = f"{_service_base(service_name)}/{escape_path(namespace)}"
        request_delete_context(ctx, self, path, NO_RESULT)

    def get_role_metadata(self, service_name: str, role_name: str, namespace: str) -> MetadataResp:
        return self.get_role_metadata_context(BACKGROUND, service_name, role_name, namespace)

    def get_role_metadata_context(
        self, ctx: Context, service_name: str, role_name: str, namespace: str
    ) -> MetadataResp:
        return _get(self, ctx, f"{_role_base(service_name, role_name)}/{escape_path(namespace)}")

    def get_role_metadata_namespaces(self, service_name: str, role_name: str) -> list[str]:
        return self.get_role_metadata_namespaces_context(BACKGROUND, service_name, role_name)

    def get_role_metadata_namespaces_context(
        self, ctx: Context, service_name: str, role_name: str
    ) -> list[str]:
        return _namespaces(self, ctx, _role_base(service_name, role_name))

    def put_role_metadata(self, service_name: str, role_name: str, namespace: str, metadata: Any) -> None:
        self.put_role_metadata_context(BACKGROUND, service_name, role_name, namespace, metadata)

    def put_role_metadata_context(
        self, ctx: Context, service_name: str, role_name: str, namespace: str, metadata: Any
    ) -> None:
        path = f"{_role_base(service_name, role_name)}/{escape_path(namespace)}"
        request_put_context(ctx, self, path, metadata, NO_RESULT)

    def delete_role_metadata(self, service_name: str, role_name: str, namespace: str) -> None:
        self.delete_role_metadata_context(BACKGROUND, service_name, role_name, namespace)

    def delete_role_metadata_context(
        self, ctx: Context, service_name: str, role_name: str, namespace: str
    ) -> None:
        path = f"{_role_base(service_name, role_name)}/{escape_path(namespace)}"
        request_delete_context(ctx, self, path, NO_RESULT)
