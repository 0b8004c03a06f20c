"""Provisioner that turns each plan step into a CDK stack."""

from __future__ import annotations

from typing import Optional

import aws_cdk as cdk

from onix_deploy import charts
from onix_deploy.config import DeploymentSettings
from onix_deploy.credentials import CredentialGenerator
from onix_deploy.exceptions.deployment_exceptions import ConfigurationError
from onix_deploy.logging_config import get_logger
from onix_deploy.provisioners.base import Provisioner
from onix_deploy.schemas.handles import (
    ClusterHandle,
    CommonServicesHandle,
    FileSystemHandle,
    ManagedServicesHandle,
    NetworkHandle,
    RelationalStoreHandle,
    RoleConfig,
    SubnetTier,
)
from onix_deploy.schemas.plan import Component, DeploymentPlan, PlanStep
from stacks.eks_stack import EksStack
from stacks.helm_stacks import (
    HelmCommonServicesStack,
    HelmGatewayStack,
    HelmRegistryStack,
    HelmRoleStack,
)
from stacks.managed_services_stack import ManagedServicesStack
from stacks.rds_stack import RdsStack
from stacks.vpc_stack import VpcStack

logger = get_logger(__name__)

_HELM_COMPONENTS = {
    Component.REGISTRY,
    Component.GATEWAY,
    Component.BAP,
    Component.BPP,
}


class CdkProvisioner(Provisioner):
    def __init__(
        self,
        app: cdk.App,
        settings: DeploymentSettings,
        credentials: Optional[CredentialGenerator] = None,
    ) -> None:
        super().__init__()
        self._app = app
        self._settings = settings
        self._credentials = credentials or CredentialGenerator()
        self._env = cdk.Environment(account=settings.account, region=settings.region)

    def preflight(self, plan: DeploymentPlan) -> None:
        missing = []
        if Component.CLUSTER in plan.components and not self._settings.role_arn:
            missing.append("ROLE_ARN")
        if _HELM_COMPONENTS.intersection(plan.components) and not self._settings.repository:
            missing.append("BECKN_ONIX_HELM_REPOSITORY")
        if missing:
            raise ConfigurationError(
                f"Missing settings required to synthesize {plan.target.value}: "
                f"{', '.join(missing)}."
            )

    def create_network(self, step: PlanStep) -> NetworkHandle:
        stack = VpcStack(self._app, step.stack_id, config=self._settings, env=self._env)
        self.emit(step.stack_id, "VpcId", stack.vpc.vpc_id)
        self.emit(step.stack_id, "VpcCidrBlock", self._settings.cidr)
        return NetworkHandle(
            name=step.stack_id,
            cidr=self._settings.cidr,
            public_subnet_ids=tuple(stack.public_subnet_ids),
            app_subnet_ids=tuple(stack.app_subnet_ids),
            database_subnet_ids=tuple(stack.database_subnet_ids),
            resource=stack.vpc,
        )

    def create_cluster(self, step: PlanStep, network: NetworkHandle) -> ClusterHandle:
        network.require_subnets(SubnetTier.APP)
        stack = EksStack(
            self._app,
            step.stack_id,
            config=self._settings,
            vpc=network.resource,
            env=self._env,
        )
        self.emit(step.stack_id, "EksClusterName", self._settings.eks_cluster_name)
        return ClusterHandle(
            name=self._settings.eks_cluster_name,
            security_group_id=stack.security_group.security_group_id,
            resource=stack.cluster,
            security_group=stack.security_group,
        )

    def create_relational_store(
        self, step: PlanStep, network: NetworkHandle
    ) -> RelationalStoreHandle:
        network.require_subnets(SubnetTier.DATABASE)
        stack = RdsStack(
            self._app,
            step.stack_id,
            config=self._settings,
            vpc=network.resource,
            database_name=step.database_name,
            credentials=self._credentials,
            env=self._env,
        )
        self.emit(step.stack_id, "RDSPasswordOutput", stack.password)
        return RelationalStoreHandle(
            host=stack.host,
            database_name=stack.database_name,
            username=stack.username,
            password=stack.password,
        )

    def create_managed_services(
        self, step: PlanStep, network: NetworkHandle
    ) -> ManagedServicesHandle:
        stack = ManagedServicesStack(
            self._app,
            step.stack_id,
            config=self._settings,
            vpc=network.resource,
            subnet_ids=network.require_subnets(SubnetTier.APP),
            tenant=step.tenant,
            env=self._env,
        )
        return ManagedServicesHandle(
            tenant=stack.tenant,
            cache_id=stack.redis.ref,
            document_store_id=stack.docdb.ref,
            broker_id=stack.broker.ref,
        )

    def install_common_services(
        self, step: PlanStep, cluster: ClusterHandle
    ) -> CommonServicesHandle:
        stack = HelmCommonServicesStack(
            self._app,
            step.stack_id,
            config=self._settings,
            cluster=cluster.resource,
            tenant=step.tenant,
            credentials=self._credentials,
            env=self._env,
        )
        return CommonServicesHandle(
            tenant=step.tenant,
            namespace=stack.namespace,
            releases=charts.COMMON_SERVICES_RELEASES,
        )

    def install_registry(
        self, step: PlanStep, cluster: ClusterHandle, store: RelationalStoreHandle
    ) -> None:
        HelmRegistryStack(
            self._app,
            step.stack_id,
            config=self._settings,
            cluster=cluster.resource,
            role_config=self._settings.role_config("registry"),
            store=store,
            env=self._env,
        )

    def install_gateway(
        self, step: PlanStep, cluster: ClusterHandle, store: RelationalStoreHandle
    ) -> None:
        HelmGatewayStack(
            self._app,
            step.stack_id,
            config=self._settings,
            cluster=cluster.resource,
            role_config=self._settings.role_config("gateway"),
            store=store,
            env=self._env,
        )

    def install_role(
        self,
        step: PlanStep,
        cluster: ClusterHandle,
        network: NetworkHandle,
        role_config: RoleConfig,
    ) -> FileSystemHandle:
        stack = HelmRoleStack(
            self._app,
            step.stack_id,
            config=self._settings,
            cluster=cluster.resource,
            vpc=network.resource,
            security_group=cluster.security_group,
            role_config=role_config,
            is_sandbox=step.is_sandbox,
            env=self._env,
        )
        logger.info("role_stack_defined", role=role_config.role, stack_id=step.stack_id)
        self.emit(step.stack_id, "EksFileSystemId", stack.file_system.file_system_id)
        return FileSystemHandle(
            role=role_config.role, file_system_id=stack.file_system.file_system_id
        )
