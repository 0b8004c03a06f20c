import pytest

from onix_deploy.exceptions.deployment_exceptions import (
    ConfigurationError,
    PlanOrderError,
    UnknownTargetError,
)
from onix_deploy.schemas.plan import (
    Component,
    DeploymentPlan,
    DeploymentTarget,
    PlanStep,
    ServiceMode,
)
from onix_deploy.services.planner import build_plan, validate_plan

NETWORK = PlanStep(component=Component.NETWORK, stack_id="VpcStack")
CLUSTER = PlanStep(component=Component.CLUSTER, stack_id="EksStack")
STORE = PlanStep(component=Component.RELATIONAL_STORE, stack_id="RdsStack", database_name="x")
REGISTRY = PlanStep(component=Component.REGISTRY, stack_id="HelmRegistryStack")
BAP = PlanStep(component=Component.BAP, stack_id="HelmBapStack")


def plan_of(*steps) -> DeploymentPlan:
    return DeploymentPlan(
        target=DeploymentTarget.SANDBOX, mode=ServiceMode.SELF_HOSTED, steps=steps
    )


class TestBuildPlan:
    @pytest.mark.parametrize("target", list(DeploymentTarget))
    @pytest.mark.parametrize("mode", list(ServiceMode))
    def test_every_plan_starts_with_network_then_cluster(self, target, mode):
        plan = build_plan(target, mode)

        assert plan.components[:2] == [Component.NETWORK, Component.CLUSTER]

    def test_registry_ignores_managed_mode(self):
        common = build_plan("registry", "common")
        managed = build_plan("registry", "managed")

        assert common.steps == managed.steps
        assert managed.mode is ServiceMode.MANAGED

    def test_sandbox_stack_ids(self):
        plan = build_plan("sandbox", "managed")

        assert [step.stack_id for step in plan.steps] == [
            "VpcStack",
            "EksStack",
            "RdsStack",
            "HelmRegistryStack",
            "HelmGatewayStack",
            "BapHelmCommonServicesStack",
            "BppHelmCommonServicesStack",
            "HelmBapStack",
            "HelmBppStack",
            "ManagedServicesStack",
        ]
        assert plan.steps[-1].tenant is None

    def test_bap_managed_stack_ids(self):
        plan = build_plan(DeploymentTarget.BAP, ServiceMode.MANAGED)

        assert [step.stack_id for step in plan.steps] == [
            "BapVpcStack",
            "BapEksStack",
            "BapManagedServicesStack",
            "HelmBapStack",
        ]

    def test_target_and_mode_are_parsed_case_insensitively(self):
        plan = build_plan(" Gateway ", "MANAGED")

        assert plan.target is DeploymentTarget.GATEWAY
        assert plan.mode is ServiceMode.MANAGED

    def test_mode_defaults_to_self_hosted(self):
        assert build_plan("bpp", None).mode is ServiceMode.SELF_HOSTED
        assert build_plan("bpp", "").mode is ServiceMode.SELF_HOSTED

    def test_unknown_target(self):
        with pytest.raises(UnknownTargetError):
            build_plan("staging")

    def test_unknown_mode(self):
        with pytest.raises(ConfigurationError):
            build_plan("bap", "serverless")

    def test_describe_includes_step_parameters(self):
        plan = build_plan("sandbox")

        assert plan.steps[2].describe() == "relational_store(db=sandbox)"
        assert plan.steps[5].describe() == "common_services(tenant=bap)"
        assert plan.steps[7].describe() == "bap(is_sandbox=true)"
        assert plan.steps[0].describe() == "network"


class TestValidatePlan:
    def test_valid_plan_passes(self):
        validate_plan(plan_of(NETWORK, CLUSTER, STORE, REGISTRY))

    def test_store_may_precede_cluster(self):
        validate_plan(plan_of(NETWORK, STORE, CLUSTER, REGISTRY))

    def test_network_must_come_first(self):
        with pytest.raises(PlanOrderError):
            validate_plan(plan_of(CLUSTER, NETWORK, BAP))

    def test_installer_before_cluster_rejected(self):
        with pytest.raises(PlanOrderError):
            validate_plan(plan_of(NETWORK, BAP, CLUSTER))

    def test_registry_without_store_rejected(self):
        with pytest.raises(PlanOrderError):
            validate_plan(plan_of(NETWORK, CLUSTER, REGISTRY, STORE))

    def test_second_cluster_rejected(self):
        with pytest.raises(PlanOrderError):
            validate_plan(plan_of(NETWORK, CLUSTER, CLUSTER, BAP))
