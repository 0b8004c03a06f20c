from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from onix_deploy.exceptions.deployment_exceptions import (
    ConfigurationError,
    UnknownTargetError,
)


class DeploymentTarget(str, Enum):
    REGISTRY = "registry"
    GATEWAY = "gateway"
    BAP = "bap"
    BPP = "bpp"
    SANDBOX = "sandbox"

    @classmethod
    def parse(cls, value) -> "DeploymentTarget":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownTargetError(str(value)) from None


class ServiceMode(str, Enum):
    """How cache, document store and broker are provided."""

    SELF_HOSTED = "common"
    MANAGED = "managed"

    @classmethod
    def parse(cls, value) -> "ServiceMode":
        if value is None or value == "":
            return cls.SELF_HOSTED
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError(
                f"Unknown service mode {value!r}. Expected 'common' or 'managed'."
            ) from None


class Component(str, Enum):
    NETWORK = "network"
    CLUSTER = "cluster"
    RELATIONAL_STORE = "relational_store"
    MANAGED_SERVICES = "managed_services"
    COMMON_SERVICES = "common_services"
    REGISTRY = "registry"
    GATEWAY = "gateway"
    BAP = "bap"
    BPP = "bpp"


INSTALLERS = frozenset(
    {
        Component.COMMON_SERVICES,
        Component.REGISTRY,
        Component.GATEWAY,
        Component.BAP,
        Component.BPP,
    }
)


class PlanStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    component: Component
    stack_id: str
    tenant: Optional[str] = None
    database_name: Optional[str] = None
    is_sandbox: bool = False

    def describe(self) -> str:
        details = []
        if self.database_name:
            details.append(f"db={self.database_name}")
        if self.tenant:
            details.append(f"tenant={self.tenant}")
        if self.component in (Component.BAP, Component.BPP):
            details.append(f"is_sandbox={str(self.is_sandbox).lower()}")
        suffix = f"({', '.join(details)})" if details else ""
        return f"{self.component.value}{suffix}"


class DeploymentPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    target: DeploymentTarget
    mode: ServiceMode
    steps: Tuple[PlanStep, ...]

    @property
    def components(self) -> List[Component]:
        return [step.component for step in self.steps]


class StackOutput(BaseModel):
    model_config = ConfigDict(frozen=True)

    stack_id: str
    key: str
    value: str


class DeploymentResult(BaseModel):
    plan: DeploymentPlan
    completed: List[str]
    outputs: List[StackOutput]
