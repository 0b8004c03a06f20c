from typing import List

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from onix_deploy.exceptions.deployment_exceptions import ConfigurationError
from onix_deploy.schemas.handles import RoleConfig

ROLES = ("registry", "gateway", "bap", "bpp")


class DeploymentSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # AWS identity
    account: str = ""
    region: str = "ap-south-1"

    # Helm
    repository: str = Field(
        default="",
        validation_alias=AliasChoices("BECKN_ONIX_HELM_REPOSITORY", "repository"),
    )
    registry_release_name: str = "beckn-onix-registry"
    gateway_release_name: str = "beckn-onix-gateway"
    bap_release_name: str = "beckn-onix-bap"
    bpp_release_name: str = "beckn-onix-bpp"
    namespace_suffix: str = "-common-services"

    # Network / cluster
    max_azs: int = Field(default=2, ge=1)
    cidr: str = "10.20.0.0/16"
    eks_cluster_name: str = "beckn-onix"
    ec2_nodes_count: int = Field(default=2, ge=1)
    ec2_instance_type: str = "t3.large"
    role_arn: str = ""

    # Databases and brokers
    rds_user: str = "postgres"
    rds_reader_count: int = Field(default=0, ge=0)  # 0 = writer only
    docdb_password: str = ""
    rabbitmq_password: str = ""

    # Beckn network roles
    cert_arn: str = ""
    registry_url: str = ""
    registry_external_domain: str = ""
    gateway_external_domain: str = ""
    bap_external_domain: str = ""
    bpp_external_domain: str = ""
    bap_public_key: str = ""
    bap_private_key: str = ""
    bpp_public_key: str = ""
    bpp_private_key: str = ""

    environment: str = "development"
    log_level: str = "INFO"

    def missing_identity(self) -> List[str]:
        """Return the names of the identity settings that are empty."""
        return [name for name in ("account", "region") if not getattr(self, name).strip()]

    def role_config(self, role: str) -> RoleConfig:
        if role not in ROLES:
            raise ValueError(f"unknown role {role!r}; expected one of {', '.join(ROLES)}")
        return RoleConfig(
            role=role,
            release_name=getattr(self, f"{role}_release_name"),
            external_domain=getattr(self, f"{role}_external_domain"),
            certificate_arn=self.cert_arn,
            registry_url=self.registry_url,
            public_key=getattr(self, f"{role}_public_key", ""),
            private_key=getattr(self, f"{role}_private_key", ""),
        )


def load_settings(**overrides) -> DeploymentSettings:
    """Build the settings once at process entry; callers pass them down explicitly."""
    try:
        return DeploymentSettings(**overrides)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigurationError(f"Invalid settings: {problems}.") from exc
