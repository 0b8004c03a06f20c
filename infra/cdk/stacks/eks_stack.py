"""
EKS cluster for one Beckn-ONIX deployment.

The cluster is created with API_AND_CONFIG_MAP authentication and the
creator's admin permissions bootstrapped at creation time; the CSI driver
role below is federated through the cluster's OIDC provider and cannot be
created otherwise.
"""

from __future__ import annotations

from aws_cdk import CfnJson, CfnOutput, Stack
from aws_cdk import aws_ec2 as ec2
from aws_cdk import aws_eks as eks
from aws_cdk import aws_iam as iam
from aws_cdk.lambda_layer_kubectl_v30 import KubectlV30Layer
from constructs import Construct

from onix_deploy.config import DeploymentSettings

CSI_SERVICE_ACCOUNTS = [
    "system:serviceaccount:kube-system:ebs-csi-controller-sa",
    "system:serviceaccount:kube-system:efs-csi-controller-sa",
]
CSI_ADDONS = {
    "addonEbsCsi": "aws-ebs-csi-driver",
    "addonEfsCsi": "aws-efs-csi-driver",
}


class EksStack(Stack):
    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: DeploymentSettings,
        vpc: ec2.IVpc,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # ── Security Group ────────────────────────────────────────────────────
        self.security_group = ec2.SecurityGroup(
            self,
            "EKSSecurityGroup",
            vpc=vpc,
            allow_all_outbound=True,
            description="Security group for EKS",
        )
        self.security_group.add_ingress_rule(
            ec2.Peer.ipv4(config.cidr), ec2.Port.all_traffic(), "Allow EKS traffic"
        )

        admin_role = iam.Role.from_role_arn(self, "AdminRole", config.role_arn)

        # ── Cluster ───────────────────────────────────────────────────────────
        self.cluster = eks.Cluster(
            self,
            "EksCluster",
            vpc=vpc,
            vpc_subnets=[ec2.SubnetSelection(subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS)],
            default_capacity=0,
            kubectl_layer=KubectlV30Layer(self, "KubectlLayer"),
            version=eks.KubernetesVersion.V1_30,
            security_group=self.security_group,
            endpoint_access=eks.EndpointAccess.PUBLIC_AND_PRIVATE,
            ip_family=eks.IpFamily.IP_V4,
            cluster_name=config.eks_cluster_name,
            masters_role=admin_role,
            output_cluster_name=True,
            output_config_command=True,
            authentication_mode=eks.AuthenticationMode.API_AND_CONFIG_MAP,
            bootstrap_cluster_creator_admin_permissions=True,
            alb_controller=eks.AlbControllerOptions(
                version=eks.AlbControllerVersion.V2_8_1,
                repository="public.ecr.aws/eks/aws-load-balancer-controller",
            ),
        )

        # ── OIDC role for the EBS / EFS CSI drivers ───────────────────────────
        issuer = self.cluster.open_id_connect_provider.open_id_connect_provider_issuer
        conditions = CfnJson(
            self,
            "ConditionJson",
            value={
                f"{issuer}:sub": CSI_SERVICE_ACCOUNTS,
                f"{issuer}:aud": "sts.amazonaws.com",
            },
        )
        csi_role = iam.Role(
            self,
            "OIDCRole",
            assumed_by=iam.FederatedPrincipal(
                f"arn:aws:iam::{self.account}:oidc-provider/"
                f"{self.cluster.cluster_open_id_connect_issuer}",
                {"StringEquals": conditions},
                "sts:AssumeRoleWithWebIdentity",
            ),
        )
        for policy in ("AmazonEBSCSIDriverPolicy", "AmazonEFSCSIDriverPolicy"):
            csi_role.add_managed_policy(
                iam.ManagedPolicy.from_aws_managed_policy_name(f"service-role/{policy}")
            )
        for addon_id, addon_name in CSI_ADDONS.items():
            eks.CfnAddon(
                self,
                addon_id,
                addon_name=addon_name,
                cluster_name=self.cluster.cluster_name,
                service_account_role_arn=csi_role.role_arn,
            )

        # ── Node group ────────────────────────────────────────────────────────
        launch_template = ec2.CfnLaunchTemplate(
            self,
            "NodeLaunchTemplate",
            launch_template_data=ec2.CfnLaunchTemplate.LaunchTemplateDataProperty(
                instance_type=config.ec2_instance_type,
                security_group_ids=[
                    self.cluster.cluster_security_group_id,
                    self.security_group.security_group_id,
                ],
            ),
        )
        self.cluster.add_nodegroup_capacity(
            "CustomNodeGroup",
            ami_type=eks.NodegroupAmiType.AL2_X86_64,
            desired_size=config.ec2_nodes_count,
            launch_template_spec=eks.LaunchTemplateSpec(
                id=launch_template.ref,
                version=launch_template.attr_latest_version_number,
            ),
            subnets=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS),
        )

        # ── Stack outputs ─────────────────────────────────────────────────────
        CfnOutput(self, "OIDCIssuer", value=self.cluster.cluster_open_id_connect_issuer)
        CfnOutput(self, "OIDCIssuerURL", value=self.cluster.cluster_open_id_connect_issuer_url)
        CfnOutput(self, "EksClusterName", value=self.cluster.cluster_name)
        CfnOutput(self, "EksClusterArn", value=self.cluster.cluster_arn)
