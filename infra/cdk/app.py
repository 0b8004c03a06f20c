#!/usr/bin/env python3
"""
CDK app entry point.

Usage
-----
Install the project (from the repo root) first:
    pip install -e ".[cdk]"

Configure ACCOUNT, REGION, ROLE_ARN, BECKN_ONIX_HELM_REPOSITORY and the
per-role domains/keys in the environment, or in a .env file in the
directory cdk runs from (infra/cdk; copy infra/cdk/.env.example).

Bootstrap (once per account/region):
    cdk bootstrap aws://<ACCOUNT_ID>/<REGION>

Deploy a target:
    cdk deploy --all --context env=sandbox
    cdk deploy --all --context env=bap --context mode=managed

env is one of sandbox, registry, gateway, bap, bpp. mode is common
(bitnami charts on EKS, default) or managed (ElastiCache, DocumentDB,
Amazon MQ).
"""

import sys

import aws_cdk as cdk
from stacks.cdk_provisioner import CdkProvisioner

from onix_deploy.config import load_settings
from onix_deploy.exceptions.deployment_exceptions import DeploymentError
from onix_deploy.logging_config import configure_logging, get_logger
from onix_deploy.services.planner import DeploymentPlanner

logger = get_logger(__name__)


def main() -> None:
    app = cdk.App()
    target = app.node.try_get_context("env")
    mode = app.node.try_get_context("mode")

    try:
        settings = load_settings()
        configure_logging(settings)
        planner = DeploymentPlanner(settings, CdkProvisioner(app, settings))
        result = planner.run(target, mode)
    except DeploymentError as exc:
        logger.error("deployment_aborted", error=exc.message)
        print(f"Error: {exc.message}", file=sys.stderr)
        sys.exit(1)

    logger.info(
        "deploying_environment",
        target=result.plan.target.value,
        mode=result.plan.mode.value,
        stacks=result.completed,
    )
    app.synth()


if __name__ == "__main__":
    main()
