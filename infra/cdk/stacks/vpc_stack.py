"""
VPC for one Beckn-ONIX deployment.

Subnet tiers:
  - Public         – load balancers and the NAT gateway
  - AppLayer       – EKS nodes and managed services (private with egress)
  - DatabaseLayer  – Aurora PostgreSQL (isolated)
"""

from __future__ import annotations

from aws_cdk import CfnOutput, Fn, Stack
from aws_cdk import aws_ec2 as ec2
from constructs import Construct

from onix_deploy.config import DeploymentSettings

APP_LAYER = "AppLayer"
DATABASE_LAYER = "DatabaseLayer"


class VpcStack(Stack):
    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: DeploymentSettings,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.vpc = ec2.Vpc(
            self,
            "BecknOnixVpc",
            ip_addresses=ec2.IpAddresses.cidr(config.cidr),
            max_azs=config.max_azs,
            nat_gateways=1,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="Public",
                    subnet_type=ec2.SubnetType.PUBLIC,
                    cidr_mask=24,
                ),
                ec2.SubnetConfiguration(
                    name=APP_LAYER,
                    subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS,
                    cidr_mask=24,
                ),
                ec2.SubnetConfiguration(
                    name=DATABASE_LAYER,
                    subnet_type=ec2.SubnetType.PRIVATE_ISOLATED,
                    cidr_mask=24,
                ),
            ],
        )

        self.public_subnet_ids = [subnet.subnet_id for subnet in self.vpc.public_subnets]
        self.app_subnet_ids = self.vpc.select_subnets(subnet_group_name=APP_LAYER).subnet_ids
        self.database_subnet_ids = self.vpc.select_subnets(
            subnet_group_name=DATABASE_LAYER
        ).subnet_ids

        # ── Stack outputs ─────────────────────────────────────────────────────
        CfnOutput(
            self,
            "VpcCidrBlock",
            value=self.vpc.vpc_cidr_block,
            export_name=f"{construct_id}-VpcCidrBlock",
        )
        CfnOutput(
            self,
            "VpcId",
            value=self.vpc.vpc_id,
            export_name=f"{construct_id}-VpcId",
        )
        CfnOutput(
            self,
            "PublicSubnetIds",
            value=Fn.join(",", self.public_subnet_ids),
            export_name=f"{construct_id}-PublicSubnetIds",
        )
        CfnOutput(
            self,
            "AppLayerSubnetIds",
            value=Fn.join(",", self.app_subnet_ids),
            export_name=f"{construct_id}-AppLayerSubnetIds",
        )
        CfnOutput(
            self,
            "DatabaseSubnetIds",
            value=Fn.join(",", self.database_subnet_ids),
            export_name=f"{construct_id}-DatabaseSubnetIds",
        )
