"""
AWS managed alternatives to the self-hosted common services.

Provisions, inside the deployment VPC's AppLayer subnets:
  - ElastiCache Redis (single node)
  - DocumentDB cluster with two instances
  - Amazon MQ RabbitMQ broker (single instance, first AppLayer subnet)

Admin passwords are no-echo CloudFormation parameters whose defaults come
from DOCDB_PASSWORD / RABBITMQ_PASSWORD.
"""

from __future__ import annotations

from typing import Optional, Sequence

from aws_cdk import CfnOutput, CfnParameter, Stack
from aws_cdk import aws_amazonmq as amazonmq
from aws_cdk import aws_docdb as docdb
from aws_cdk import aws_ec2 as ec2
from aws_cdk import aws_elasticache as elasticache
from constructs import Construct

from onix_deploy.config import DeploymentSettings
from onix_deploy.exceptions.deployment_exceptions import SubnetAvailabilityError
from onix_deploy.schemas.handles import SubnetTier

REDIS_PORT = 6379
DOCDB_PORT = 27017
RABBITMQ_PORTS = {5672: "Allow RabbitMQ traffic", 15672: "Allow RabbitMQ management traffic"}


class ManagedServicesStack(Stack):
    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: DeploymentSettings,
        vpc: ec2.IVpc,
        subnet_ids: Sequence[str],
        tenant: Optional[str] = None,
        **kwargs,
    ) -> None:
        subnet_ids = list(subnet_ids)
        if not subnet_ids:
            raise SubnetAvailabilityError(SubnetTier.APP.value, construct_id)

        super().__init__(scope, construct_id, **kwargs)

        name = f"beckn-{tenant}" if tenant else "beckn"
        self.tenant = tenant or "shared"

        # ── Redis ─────────────────────────────────────────────────────────────
        redis_sg = ec2.SecurityGroup(
            self,
            "ElastiCacheSecurityGroup",
            vpc=vpc,
            description="Security group for Redis",
            allow_all_outbound=True,
        )
        redis_sg.add_ingress_rule(
            ec2.Peer.ipv4(vpc.vpc_cidr_block), ec2.Port.tcp(REDIS_PORT), "Allow Redis traffic"
        )
        redis_subnet_group = elasticache.CfnSubnetGroup(
            self,
            "RedisSubnetGroup",
            description="Subnet group for Redis cluster",
            subnet_ids=subnet_ids,
        )
        self.redis = elasticache.CfnCacheCluster(
            self,
            "RedisCluster",
            cache_node_type="cache.t3.medium",
            engine="redis",
            num_cache_nodes=1,
            vpc_security_group_ids=[redis_sg.security_group_id],
            cache_subnet_group_name=redis_subnet_group.ref,
        )

        # ── DocumentDB ────────────────────────────────────────────────────────
        docdb_password = CfnParameter(
            self,
            "DocDbPassword",
            type="String",
            description="The password for the DocumentDB cluster admin user",
            no_echo=True,
            default=config.docdb_password,
        )
        docdb_sg = ec2.SecurityGroup(
            self,
            "DocDbSecurityGroup",
            vpc=vpc,
            description="Security group for DocumentDB",
            allow_all_outbound=True,
        )
        docdb_sg.add_ingress_rule(
            ec2.Peer.ipv4(vpc.vpc_cidr_block),
            ec2.Port.tcp(DOCDB_PORT),
            "Allow DocumentDB traffic on port 27017",
        )
        docdb_subnet_group = docdb.CfnDBSubnetGroup(
            self,
            "DocDbSubnetGroup",
            db_subnet_group_description="Subnet group for DocumentDB",
            subnet_ids=subnet_ids,
        )
        self.docdb = docdb.CfnDBCluster(
            self,
            "DocDbCluster",
            master_username="beckn",
            master_user_password=docdb_password.value_as_string,
            db_cluster_identifier=f"{name}-docdb",
            engine_version="4.0.0",
            vpc_security_group_ids=[docdb_sg.security_group_id],
            db_subnet_group_name=docdb_subnet_group.ref,
        )
        for index in (1, 2):
            docdb.CfnDBInstance(
                self,
                f"DocDbInstance{index}",
                db_cluster_identifier=self.docdb.ref,
                db_instance_class="db.r5.large",
            )

        # ── RabbitMQ ──────────────────────────────────────────────────────────
        rabbitmq_password = CfnParameter(
            self,
            "RabbitMqPassword",
            type="String",
            description="The password for the RabbitMQ broker admin user",
            no_echo=True,
            default=config.rabbitmq_password,
        )
        rabbitmq_sg = ec2.SecurityGroup(
            self,
            "RabbitMqSecurityGroup",
            vpc=vpc,
            description="Security group for RabbitMQ broker",
            allow_all_outbound=True,
        )
        for port, description in RABBITMQ_PORTS.items():
            rabbitmq_sg.add_ingress_rule(
                ec2.Peer.ipv4(vpc.vpc_cidr_block), ec2.Port.tcp(port), description
            )
        self.broker = amazonmq.CfnBroker(
            self,
            "RabbitMqBroker",
            broker_name=f"{name}-rabbitmq",
            engine_type="RABBITMQ",
            engine_version="3.10.25",
            deployment_mode="SINGLE_INSTANCE",
            publicly_accessible=False,
            host_instance_type="mq.m5.large",
            auto_minor_version_upgrade=True,
            subnet_ids=[subnet_ids[0]],
            security_groups=[rabbitmq_sg.security_group_id],
            users=[
                amazonmq.CfnBroker.UserProperty(
                    username="becknadmin",
                    password=rabbitmq_password.value_as_string,
                )
            ],
        )

        # ── Stack outputs ─────────────────────────────────────────────────────
        CfnOutput(self, "RedisEndpoint", value=self.redis.attr_redis_endpoint_address)
        CfnOutput(self, "DocDbEndpoint", value=self.docdb.attr_endpoint)
        CfnOutput(self, "RabbitMqBrokerId", value=self.broker.ref)
