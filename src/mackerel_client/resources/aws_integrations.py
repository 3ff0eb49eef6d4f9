from __future__ import annotations

from typing import Any

from pydantic import Field, model_serializer

from mackerel_client.context import BACKGROUND, Context
from mackerel_client.request import (
    request_delete_context,
    request_get_context,
    request_post_context,
    request_put_context,
)
from mackerel_client.resources.base import MackerelModel
from mackerel_client.urls import escape_path


class AWSIntegrationService(MackerelModel):
    """Per-service settings.

    Included and excluded metric lists are mutually exclusive on the wire: a
    non-empty list is sent alone, and both are sent when neither or both are set.
    """

    always_emit = frozenset({"enable", "role"})

    enable: bool = False
    role: str | None = None
    included_metrics: list[str] = Field(default_factory=list)
    excluded_metrics: list[str] = Field(default_factory=list)
    retire_automatically: bool = False

    @model_serializer(mode="wrap")
    def _serialize(self, handler: Any) -> Any:
        data = handler(self)
        if self.excluded_metrics and not self.included_metrics:
            data.pop("includedMetrics", None)
        elif self.included_metrics and not self.excluded_metrics:
            data.pop("excludedMetrics", None)
        if not self.retire_automatically:
            data.pop("retireAutomatically", None)
        return data


class AWSIntegration(MackerelModel):
    always_emit = frozenset(
        {"id", "name", "memo", "region", "includedTags", "excludedTags", "services"}
    )

    id: str = ""
    name: str = ""
    memo: str = ""
    key: str = ""
    role_arn: str = ""
    external_id: str = ""
    region: str = ""
    included_tags: str = ""
    excluded_tags: str = ""
    services: dict[str, AWSIntegrationService] = Field(default_factory=dict)


class CreateAWSIntegrationParam(MackerelModel):
    always_emit = frozenset({"name", "memo", "region", "includedTags", "excludedTags", "services"})

    name: str = ""
    memo: str = ""
    key: str = ""
    secret_key: str = ""
    role_arn: str = ""
    external_id: str = ""
    region: str = ""
    included_tags: str = ""
    excluded_tags: str = ""
    services: dict[str, AWSIntegrationService] = Field(default_factory=dict)


class UpdateAWSIntegrationParam(CreateAWSIntegrationParam):
    pass


ListAWSIntegrationExcludableMetrics = dict[str, list[str]]


class _AWSIntegrationsEnvelope(MackerelModel):
    aws_integrations: list[AWSIntegration] = Field(default_factory=list, alias="aws_integrations")


class _ExternalIDEnvelope(MackerelModel):
    external_id: str = ""


def _integration_path(integration_id: str) -> str:
    return f"/api/v0/aws-integrations/{escape_path(integration_id)}"


class AWSIntegrationsAPI:
    def find_aws_integrations(self) -> list[AWSIntegration]:
        return self.find_aws_integrations_context(BACKGROUND)

    def find_aws_integrations_context(self, ctx: Context) -> list[AWSIntegration]:
        data = request_get_context(ctx, self, "/api/v0/aws-integrations", _AWSIntegrationsEnvelope)
        return data.aws_integrations

    def find_aws_integration(self, integration_id: str) -> AWSIntegration:
        return self.find_aws_integration_context(BACKGROUND, integration_id)

    def find_aws_integration_context(self, ctx: Context, integration_id: str) -> AWSIntegration:
        return request_get_context(ctx, self, _integration_path(integration_id), AWSIntegration)

    def create_aws_integration(self, param: CreateAWSIntegrationParam) -> AWSIntegration:
        return self.create_aws_integration_context(BACKGROUND, param)

    def create_aws_integration_context(
        self, ctx: Context, param: CreateAWSIntegrationParam
    ) -> AWSIntegration:
        return request_post_context(ctx, self, "/api/v0/aws-integrations", param, AWSIntegration)

    def update_aws_integration(
        self, integration_id: str, param: UpdateAWSIntegrationParam
    ) -> AWSIntegration:
        return self.update_aws_integration_context(BACKGROUND, integration_id, param)

    def update_aws_integration_context(
        self, ctx: Context, integration_id: str, param: UpdateAWSIntegrationParam
    ) -> AWSIntegration:
        return request_put_context(ctx, self, _integration_path(integration_id), param, AWSIntegration)

    def delete_aws_integration(self, integration_id: str) -> AWSIntegration:
        return self.delete_aws_integration_context(BACKGROUND, integration_id)

    def delete_aws_integration_context(self, ctx: Context, integration_id: str) -> AWSIntegration:
        return request_delete_context(ctx, self, _integration_path(integration_id), AWSIntegration)

    def create_aws_integration_external_id(self) -> str:
        return self.create_aws_integration_external_id_context(BACKGROUND)

    def create_aws_integration_external_id_context(self, ctx: Context) -> str:
        path = "/api/v0/aws-integrations-external-id"
        return request_post_context(ctx, self, path, None, _ExternalIDEnvelope).external_id

    def list_aws_integration_excludable_metrics(self) -> ListAWSIntegrationExcludableMetrics:
        return self.list_aws_integration_excludable_metrics_context(BACKGROUND)

    def list_aws_integration_excludable_metrics_context(
        self, ctx: Context
    ) -> ListAWSIntegrationExcludableMetrics:
        path = "/api/v0/aws-integrations-excludable-metrics"
        return request_get_context(ctx, self, path, ListAWSIntegrationExcludableMetrics)
