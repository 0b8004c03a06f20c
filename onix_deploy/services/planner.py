import dataclasses
from typing import Callable, Dict, List, Optional, Tuple

import structlog

from onix_deploy.config import DeploymentSettings
from onix_deploy.exceptions.deployment_exceptions import (
    ConfigurationError,
    DeploymentError,
    PlanOrderError,
    ProvisioningError,
)
from onix_deploy.logging_config import get_logger
from onix_deploy.provisioners.base import Provisioner
from onix_deploy.schemas.handles import (
    ClusterHandle,
    NetworkHandle,
    RelationalStoreHandle,
)
from onix_deploy.schemas.plan import (
    INSTALLERS,
    Component,
    DeploymentPlan,
    DeploymentResult,
    DeploymentTarget,
    PlanStep,
    ServiceMode,
)

logger = get_logger(__name__)


# ── Plan construction ─────────────────────────────────────────────────────────


def _foundation(prefix: str) -> List[PlanStep]:
    return [
        PlanStep(component=Component.NETWORK, stack_id=f"{prefix}VpcStack"),
        PlanStep(component=Component.CLUSTER, stack_id=f"{prefix}EksStack"),
    ]


def _database_role_steps(role: Component) -> Callable[[ServiceMode], List[PlanStep]]:
    prefix = role.value.capitalize()

    def build(mode: ServiceMode) -> List[PlanStep]:
        return _foundation(prefix) + [
            PlanStep(
                component=Component.RELATIONAL_STORE,
                stack_id=f"{prefix}RdsStack",
                database_name=role.value,
            ),
            PlanStep(component=role, stack_id=f"Helm{prefix}Stack"),
        ]

    return build


def _adapter_role_steps(role: Component) -> Callable[[ServiceMode], List[PlanStep]]:
    prefix = role.value.capitalize()

    def build(mode: ServiceMode) -> List[PlanStep]:
        if mode is ServiceMode.MANAGED:
            services = PlanStep(
                component=Component.MANAGED_SERVICES,
                stack_id=f"{prefix}ManagedServicesStack",
                tenant=role.value,
            )
        else:
            services = PlanStep(
                component=Component.COMMON_SERVICES,
                stack_id=f"Helm{prefix}CommonServicesStack",
                tenant=role.value,
            )
        return _foundation(prefix) + [
            services,
            PlanStep(component=role, stack_id=f"Helm{prefix}Stack", is_sandbox=False),
        ]

    return build


def _sandbox_steps(mode: ServiceMode) -> List[PlanStep]:
    steps = _foundation("") + [
        PlanStep(
            component=Component.RELATIONAL_STORE,
            stack_id="RdsStack",
            database_name="sandbox",
        ),
        PlanStep(component=Component.REGISTRY, stack_id="HelmRegistryStack"),
        PlanStep(component=Component.GATEWAY, stack_id="HelmGatewayStack"),
        PlanStep(
            component=Component.COMMON_SERVICES,
            stack_id="BapHelmCommonServicesStack",
            tenant="bap",
        ),
        PlanStep(
            component=Component.COMMON_SERVICES,
            stack_id="BppHelmCommonServicesStack",
            tenant="bpp",
        ),
        PlanStep(component=Component.BAP, stack_id="HelmBapStack", is_sandbox=True),
        PlanStep(component=Component.BPP, stack_id="HelmBppStack", is_sandbox=True),
    ]
    if mode is ServiceMode.MANAGED:
        # Nothing consumes the managed bundle's outputs; it only has to exist.
        steps.append(
            PlanStep(component=Component.MANAGED_SERVICES, stack_id="ManagedServicesStack")
        )
    return steps


_PLAN_BUILDERS: Dict[DeploymentTarget, Callable[[ServiceMode], List[PlanStep]]] = {
    DeploymentTarget.REGISTRY: _database_role_steps(Component.REGISTRY),
    DeploymentTarget.GATEWAY: _database_role_steps(Component.GATEWAY),
    DeploymentTarget.BAP: _adapter_role_steps(Component.BAP),
    DeploymentTarget.BPP: _adapter_role_steps(Component.BPP),
    DeploymentTarget.SANDBOX: _sandbox_steps,
}

_unplanned = set(DeploymentTarget) - set(_PLAN_BUILDERS)
if _unplanned:
    raise RuntimeError(f"no plan builder for targets: {sorted(t.value for t in _unplanned)}")


def validate_plan(plan: DeploymentPlan) -> None:
    """Check the ordering rules every plan must follow.

    The network comes first, the cluster precedes every installer, and a
    relational store precedes the registry and gateway installers.
    """
    seen = set()
    for index, step in enumerate(plan.steps):
        component = step.component
        if index == 0 and component is not Component.NETWORK:
            raise PlanOrderError(f"Plan must start with the network, not {component.value}.")
        if component is Component.CLUSTER and Component.NETWORK not in seen:
            raise PlanOrderError("Cluster step precedes the network step.")
        if component is Component.MANAGED_SERVICES and Component.NETWORK not in seen:
            raise PlanOrderError("Managed services step precedes the network step.")
        if component is Component.RELATIONAL_STORE and Component.NETWORK not in seen:
            raise PlanOrderError("Relational store step precedes the network step.")
        if component in INSTALLERS and Component.CLUSTER not in seen:
            raise PlanOrderError(f"{step.stack_id} is installed before the cluster exists.")
        if (
            component in (Component.REGISTRY, Component.GATEWAY)
            and Component.RELATIONAL_STORE not in seen
        ):
            raise PlanOrderError(f"{step.stack_id} needs a relational store built before it.")
        if component in (Component.NETWORK, Component.CLUSTER) and component in seen:
            raise PlanOrderError(f"Plan builds more than one {component.value}.")
        seen.add(component)


def build_plan(target, mode=ServiceMode.SELF_HOSTED) -> DeploymentPlan:
    target = DeploymentTarget.parse(target)
    mode = ServiceMode.parse(mode)
    plan = DeploymentPlan(target=target, mode=mode, steps=tuple(_PLAN_BUILDERS[target](mode)))
    validate_plan(plan)
    return plan


# ── Plan execution ────────────────────────────────────────────────────────────


@dataclasses.dataclass(frozen=True)
class StepContext:
    """Handles produced so far in one run; each step returns a new context."""

    network: Optional[NetworkHandle] = None
    cluster: Optional[ClusterHandle] = None
    store: Optional[RelationalStoreHandle] = None
    completed: Tuple[str, ...] = ()


class DeploymentPlanner:
    def __init__(self, settings: DeploymentSettings, provisioner: Provisioner) -> None:
        self._settings = settings
        self._provisioner = provisioner
        self._handlers: Dict[Component, Callable[[PlanStep, StepContext], StepContext]] = {
            Component.NETWORK: self._network,
            Component.CLUSTER: self._cluster,
            Component.RELATIONAL_STORE: self._relational_store,
            Component.MANAGED_SERVICES: self._managed_services,
            Component.COMMON_SERVICES: self._common_services,
            Component.REGISTRY: self._registry,
            Component.GATEWAY: self._gateway,
            Component.BAP: self._role,
            Component.BPP: self._role,
        }

    def plan(self, target, mode=ServiceMode.SELF_HOSTED) -> DeploymentPlan:
        missing = self._settings.missing_identity()
        if missing:
            raise ConfigurationError(
                f"Missing required AWS identity settings: {', '.join(missing)}. "
                "Set ACCOUNT and REGION in the environment or .env file."
            )
        return build_plan(target, mode)

    def run(self, target, mode=ServiceMode.SELF_HOSTED) -> DeploymentResult:
        plan = self.plan(target, mode)
        self._provisioner.preflight(plan)

        structlog.contextvars.bind_contextvars(target=plan.target.value, mode=plan.mode.value)
        try:
            logger.info("deployment_started", steps=len(plan.steps))
            context = StepContext()
            for step in plan.steps:
                context = self._execute(step, context)
            logger.info("deployment_completed", steps=len(context.completed))
        finally:
            structlog.contextvars.unbind_contextvars("target", "mode")

        return DeploymentResult(
            plan=plan,
            completed=list(context.completed),
            outputs=list(self._provisioner.outputs),
        )

    def _execute(self, step: PlanStep, context: StepContext) -> StepContext:
        logger.info("deployment_step_started", stack_id=step.stack_id, step=step.describe())
        try:
            context = self._handlers[step.component](step, context)
        except DeploymentError:
            logger.error(
                "deployment_step_failed",
                stack_id=step.stack_id,
                left_in_place=list(context.completed),
            )
            raise
        except Exception as exc:
            logger.error(
                "deployment_step_failed",
                stack_id=step.stack_id,
                error=str(exc),
                left_in_place=list(context.completed),
            )
            raise ProvisioningError(step.stack_id, exc, context.completed) from exc
        logger.info("deployment_step_completed", stack_id=step.stack_id)
        return dataclasses.replace(context, completed=context.completed + (step.stack_id,))

    def _network(self, step: PlanStep, context: StepContext) -> StepContext:
        return dataclasses.replace(context, network=self._provisioner.create_network(step))

    def _cluster(self, step: PlanStep, context: StepContext) -> StepContext:
        cluster = self._provisioner.create_cluster(step, context.network)
        return dataclasses.replace(context, cluster=cluster)

    def _relational_store(self, step: PlanStep, context: StepContext) -> StepContext:
        store = self._provisioner.create_relational_store(step, context.network)
        return dataclasses.replace(context, store=store)

    def _managed_services(self, step: PlanStep, context: StepContext) -> StepContext:
        self._provisioner.create_managed_services(step, context.network)
        return context

    def _common_services(self, step: PlanStep, context: StepContext) -> StepContext:
        self._provisioner.install_common_services(step, context.cluster)
        return context

    def _registry(self, step: PlanStep, context: StepContext) -> StepContext:
        self._provisioner.install_registry(step, context.cluster, context.store)
        return context

    def _gateway(self, step: PlanStep, context: StepContext) -> StepContext:
        self._provisioner.install_gateway(step, context.cluster, context.store)
        return context

    def _role(self, step: PlanStep, context: StepContext) -> StepContext:
        role_config = self._settings.role_config(step.component.value)
        self._provisioner.install_role(step, context.cluster, context.network, role_config)
        return context
