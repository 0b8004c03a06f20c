"""
Aurora PostgreSQL cluster backing the registry and gateway.

The master password is generated at synth time and emitted as a plain-text
stack output so operators can reach the database; treat the synthesized
template as sensitive.
"""

from __future__ import annotations

from aws_cdk import CfnOutput, SecretValue, Stack
from aws_cdk import aws_ec2 as ec2
from aws_cdk import aws_rds as rds
from aws_cdk import aws_secretsmanager as secretsmanager
from constructs import Construct

from onix_deploy.config import DeploymentSettings
from onix_deploy.credentials import CredentialGenerator


class RdsStack(Stack):
    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: DeploymentSettings,
        vpc: ec2.IVpc,
        database_name: str,
        credentials: CredentialGenerator,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.database_name = database_name
        self.username = config.rds_user
        self.password = credentials.password()

        # ── Security Group ────────────────────────────────────────────────────
        rds_sg = ec2.SecurityGroup(
            self,
            "RdsSecurityGroup",
            vpc=vpc,
            allow_all_outbound=True,
            description="Security group for Aurora PostgreSQL database",
        )
        rds_sg.add_ingress_rule(
            ec2.Peer.ipv4(config.cidr), ec2.Port.tcp(5432), "Allow Postgres access"
        )

        # ── Credentials ───────────────────────────────────────────────────────
        secret = secretsmanager.Secret(
            self,
            "RdsSecret",
            secret_object_value={
                "username": SecretValue.unsafe_plain_text(self.username),
                "password": SecretValue.unsafe_plain_text(self.password),
            },
        )

        # ── Aurora PostgreSQL ─────────────────────────────────────────────────
        instance_type = ec2.InstanceType.of(
            ec2.InstanceClass.BURSTABLE3, ec2.InstanceSize.MEDIUM
        )
        cluster = rds.DatabaseCluster(
            self,
            "AuroraCluster",
            engine=rds.DatabaseClusterEngine.aurora_postgres(
                version=rds.AuroraPostgresEngineVersion.VER_14_6,
            ),
            credentials=rds.Credentials.from_secret(secret),
            writer=rds.ClusterInstance.provisioned("Writer", instance_type=instance_type),
            readers=[
                rds.ClusterInstance.provisioned(f"Reader{index}", instance_type=instance_type)
                for index in range(1, config.rds_reader_count + 1)
            ],
            vpc=vpc,
            vpc_subnets=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PRIVATE_ISOLATED),
            security_groups=[rds_sg],
            default_database_name=database_name,
        )

        self.secret_arn = secret.secret_arn
        self.host = cluster.cluster_endpoint.hostname

        # ── Stack outputs ─────────────────────────────────────────────────────
        CfnOutput(
            self,
            "RDSPasswordOutput",
            value=self.password,
            export_name=f"RDSPassword-{database_name}",
        )
        CfnOutput(self, "RDSHost", value=self.host, description="Aurora cluster endpoint")
