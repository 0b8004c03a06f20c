from abc import ABC, abstractmethod
from typing import List

from onix_deploy.schemas.handles import (
    ClusterHandle,
    CommonServicesHandle,
    FileSystemHandle,
    ManagedServicesHandle,
    NetworkHandle,
    RelationalStoreHandle,
    RoleConfig,
)
from onix_deploy.schemas.plan import DeploymentPlan, PlanStep, StackOutput


class Provisioner(ABC):
    """Constructs the resource behind each plan step.

    Every method receives the handles of the steps it depends on and returns
    the handle of what it built. Implementations record run outputs in
    ``outputs``.
    """

    def __init__(self) -> None:
        self.outputs: List[StackOutput] = []

    def preflight(self, plan: DeploymentPlan) -> None:
        """Check provider-specific inputs before the first step runs."""

    def emit(self, stack_id: str, key: str, value: str) -> None:
        self.outputs.append(StackOutput(stack_id=stack_id, key=key, value=value))

    @abstractmethod
    def create_network(self, step: PlanStep) -> NetworkHandle:
        ...

    @abstractmethod
    def create_cluster(self, step: PlanStep, network: NetworkHandle) -> ClusterHandle:
        ...

    @abstractmethod
    def create_relational_store(
        self, step: PlanStep, network: NetworkHandle
    ) -> RelationalStoreHandle:
        ...

    @abstractmethod
    def create_managed_services(
        self, step: PlanStep, network: NetworkHandle
    ) -> ManagedServicesHandle:
        ...

    @abstractmethod
    def install_common_services(
        self, step: PlanStep, cluster: ClusterHandle
    ) -> CommonServicesHandle:
        ...

    @abstractmethod
    def install_registry(
        self, step: PlanStep, cluster: ClusterHandle, store: RelationalStoreHandle
    ) -> None:
        ...

    @abstractmethod
    def install_gateway(
        self, step: PlanStep, cluster: ClusterHandle, store: RelationalStoreHandle
    ) -> None:
        ...

    @abstractmethod
    def install_role(
        self,
        step: PlanStep,
        cluster: ClusterHandle,
        network: NetworkHandle,
        role_config: RoleConfig,
    ) -> FileSystemHandle:
        ...
