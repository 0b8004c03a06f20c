import dataclasses
from typing import List, Optional

from onix_deploy import charts
from onix_deploy.config import DeploymentSettings
from onix_deploy.credentials import CredentialGenerator
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
from onix_deploy.schemas.plan import PlanStep

logger = get_logger(__name__)


@dataclasses.dataclass(frozen=True)
class RecordedCall:
    step: PlanStep
    network: Optional[NetworkHandle] = None
    cluster: Optional[ClusterHandle] = None
    store: Optional[RelationalStoreHandle] = None
    role_config: Optional[RoleConfig] = None
    values: Optional[dict] = None


class DryRunProvisioner(Provisioner):
    """Records every construction call and returns synthetic handles.

    Credentials are generated for real so the run outputs look exactly like
    a deployment's, unredacted.
    """

    def __init__(
        self,
        settings: DeploymentSettings,
        credentials: Optional[CredentialGenerator] = None,
    ) -> None:
        super().__init__()
        self._settings = settings
        self._credentials = credentials or CredentialGenerator()
        self.calls: List[RecordedCall] = []

    def _slug(self, step: PlanStep) -> str:
        return step.stack_id.lower()

    def create_network(self, step: PlanStep) -> NetworkHandle:
        slug = self._slug(step)
        azs = range(self._settings.max_azs)
        network = NetworkHandle(
            name=f"vpc-{slug}",
            cidr=self._settings.cidr,
            public_subnet_ids=tuple(f"subnet-{slug}-public-{i}" for i in azs),
            app_subnet_ids=tuple(f"subnet-{slug}-app-{i}" for i in azs),
            database_subnet_ids=tuple(f"subnet-{slug}-database-{i}" for i in azs),
        )
        self.calls.append(RecordedCall(step=step))
        self.emit(step.stack_id, "VpcId", network.name)
        self.emit(step.stack_id, "VpcCidrBlock", network.cidr)
        return network

    def create_cluster(self, step: PlanStep, network: NetworkHandle) -> ClusterHandle:
        network.require_subnets(SubnetTier.APP)
        cluster = ClusterHandle(
            name=self._settings.eks_cluster_name,
            security_group_id=f"sg-{self._slug(step)}",
        )
        self.calls.append(RecordedCall(step=step, network=network))
        self.emit(step.stack_id, "EksClusterName", cluster.name)
        return cluster

    def create_relational_store(
        self, step: PlanStep, network: NetworkHandle
    ) -> RelationalStoreHandle:
        network.require_subnets(SubnetTier.DATABASE)
        store = RelationalStoreHandle(
            host=f"{step.database_name}.cluster.{self._settings.region}.rds.amazonaws.com",
            database_name=step.database_name,
            username=self._settings.rds_user,
            password=self._credentials.password(),
        )
        self.calls.append(RecordedCall(step=step, network=network))
        self.emit(step.stack_id, "RDSPasswordOutput", store.password)
        return store

    def create_managed_services(
        self, step: PlanStep, network: NetworkHandle
    ) -> ManagedServicesHandle:
        network.require_subnets(SubnetTier.APP)
        tenant = step.tenant or "shared"
        services = ManagedServicesHandle(
            tenant=tenant,
            cache_id=f"redis-{tenant}",
            document_store_id=f"docdb-{tenant}",
            broker_id=f"rabbitmq-{tenant}",
        )
        self.calls.append(RecordedCall(step=step, network=network))
        return services

    def install_common_services(
        self, step: PlanStep, cluster: ClusterHandle
    ) -> CommonServicesHandle:
        namespace = charts.common_services_namespace(
            step.tenant, self._settings.namespace_suffix
        )
        self.calls.append(RecordedCall(step=step, cluster=cluster))
        return CommonServicesHandle(
            tenant=step.tenant,
            namespace=namespace,
            releases=charts.COMMON_SERVICES_RELEASES,
        )

    def install_registry(
        self, step: PlanStep, cluster: ClusterHandle, store: RelationalStoreHandle
    ) -> None:
        values = charts.registry_values(self._settings.role_config("registry"), store)
        self.calls.append(RecordedCall(step=step, cluster=cluster, store=store, values=values))

    def install_gateway(
        self, step: PlanStep, cluster: ClusterHandle, store: RelationalStoreHandle
    ) -> None:
        values = charts.gateway_values(self._settings.role_config("gateway"), store)
        self.calls.append(RecordedCall(step=step, cluster=cluster, store=store, values=values))

    def install_role(
        self,
        step: PlanStep,
        cluster: ClusterHandle,
        network: NetworkHandle,
        role_config: RoleConfig,
    ) -> FileSystemHandle:
        file_system = FileSystemHandle(
            role=role_config.role, file_system_id=f"fs-{self._slug(step)}"
        )
        values = charts.role_values(role_config, file_system.file_system_id, step.is_sandbox)
        self.calls.append(
            RecordedCall(
                step=step,
                network=network,
                cluster=cluster,
                role_config=role_config,
                values=values,
            )
        )
        self.emit(step.stack_id, "EksFileSystemId", file_system.file_system_id)
        logger.debug("dry_run_role_installed", role=role_config.role, stack_id=step.stack_id)
        return file_system
