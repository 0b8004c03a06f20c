"""CDK synthesis fixtures; the whole directory is skipped without a working aws_cdk."""

import pytest

try:
    import aws_cdk as cdk
    import aws_cdk.lambda_layer_kubectl_v30  # noqa: F401
except Exception:  # cdk extra missing, or jsii cannot start its node runtime
    cdk = None
    collect_ignore_glob = ["test_*.py"]


@pytest.fixture
def cdk_app():
    return cdk.App()


@pytest.fixture
def vpc_stack(cdk_app, settings):
    from stacks.vpc_stack import VpcStack

    return VpcStack(cdk_app, "TestVpcStack", config=settings)


@pytest.fixture
def eks_stack(cdk_app, settings, vpc_stack):
    from stacks.eks_stack import EksStack

    return EksStack(cdk_app, "TestEksStack", config=settings, vpc=vpc_stack.vpc)
