"""
Helm releases installed into the deployment's EKS cluster.

  - HelmCommonServicesStack  – bitnami redis / mongodb / rabbitmq per tenant
  - HelmRegistryStack        – beckn-onix-registry, backed by Aurora
  - HelmGatewayStack         – beckn-onix-gateway, backed by Aurora
  - HelmRoleStack            – beckn-onix-bap / beckn-onix-bpp with an EFS volume
"""

from __future__ import annotations

from aws_cdk import CfnOutput, Stack
from aws_cdk import aws_ec2 as ec2
from aws_cdk import aws_efs as efs
from aws_cdk import aws_eks as eks
from aws_cdk import aws_iam as iam
from constructs import Construct

from onix_deploy import charts
from onix_deploy.config import DeploymentSettings
from onix_deploy.credentials import CredentialGenerator
from onix_deploy.schemas.handles import RelationalStoreHandle, RoleConfig

EFS_CLIENT_ACTIONS = [
    "elasticfilesystem:ClientRootAccess",
    "elasticfilesystem:ClientWrite",
    "elasticfilesystem:ClientMount",
]


class HelmCommonServicesStack(Stack):
    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: DeploymentSettings,
        cluster: eks.ICluster,
        tenant: str,
        credentials: CredentialGenerator,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.namespace = charts.common_services_namespace(tenant, config.namespace_suffix)
        # Not passed to the rabbitmq chart, which still uses charts.RABBITMQ_PASSWORD.
        self.broker_password = credentials.hex_token()

        for release in charts.COMMON_SERVICES_RELEASES:
            eks.HelmChart(
                self,
                f"{release.capitalize()}HelmChart",
                cluster=cluster,
                chart=release,
                namespace=self.namespace,
                release=release,
                wait=False,
                repository=charts.COMMON_SERVICES_REPOSITORY,
                values=charts.COMMON_SERVICES_VALUES[release](),
            )


class HelmRegistryStack(Stack):
    """Registry release backed by the deployment's Aurora cluster."""

    chart_name = charts.REGISTRY_CHART
    chart_id = "registryhelm"
    values_builder = staticmethod(charts.registry_values)

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: DeploymentSettings,
        cluster: eks.ICluster,
        role_config: RoleConfig,
        store: RelationalStoreHandle,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        eks.HelmChart(
            self,
            self.chart_id,
            cluster=cluster,
            chart=self.chart_name,
            release=role_config.release_name,
            wait=False,
            repository=config.repository,
            values=self.values_builder(role_config, store),
        )


class HelmGatewayStack(HelmRegistryStack):
    chart_name = charts.GATEWAY_CHART
    chart_id = "gatewayhelm"
    values_builder = staticmethod(charts.gateway_values)


class HelmRoleStack(Stack):
    """BAP or BPP release with its own EFS file system."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: DeploymentSettings,
        cluster: eks.ICluster,
        vpc: ec2.IVpc,
        security_group: ec2.ISecurityGroup,
        role_config: RoleConfig,
        is_sandbox: bool,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        role = role_config.role

        # ── EFS ───────────────────────────────────────────────────────────────
        file_system_policy = iam.PolicyDocument(
            statements=[
                iam.PolicyStatement(
                    actions=EFS_CLIENT_ACTIONS,
                    principals=[iam.ArnPrincipal("*")],
                    resources=["*"],
                    conditions={
                        "Bool": {"elasticfilesystem:AccessedViaMountTarget": "true"},
                    },
                )
            ]
        )
        self.file_system = efs.FileSystem(
            self,
            f"Beckn-Onix-{role.capitalize()}",
            vpc=vpc,
            security_group=security_group,
            file_system_policy=file_system_policy,
        )

        # ── Helm release ──────────────────────────────────────────────────────
        eks.HelmChart(
            self,
            f"{role}helm",
            cluster=cluster,
            chart=charts.ROLE_CHARTS[role],
            release=role_config.release_name,
            wait=False,
            repository=config.repository,
            values=charts.role_values(
                role_config, self.file_system.file_system_id, is_sandbox
            ),
        )

        # ── Stack outputs ─────────────────────────────────────────────────────
        CfnOutput(self, "EksFileSystemId", value=self.file_system.file_system_id)
