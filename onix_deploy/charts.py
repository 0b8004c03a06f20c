"""Helm chart names and value overrides for the Beckn-ONIX releases."""

from typing import Any, Dict

from onix_deploy.schemas.handles import RelationalStoreHandle, RoleConfig

REGISTRY_CHART = "beckn-onix-registry"
GATEWAY_CHART = "beckn-onix-gateway"
BAP_CHART = "beckn-onix-bap"
BPP_CHART = "beckn-onix-bpp"

ROLE_CHARTS = {
    "registry": REGISTRY_CHART,
    "gateway": GATEWAY_CHART,
    "bap": BAP_CHART,
    "bpp": BPP_CHART,
}

COMMON_SERVICES_REPOSITORY = "https://charts.bitnami.com/bitnami"
COMMON_SERVICES_RELEASES = ("redis", "mongodb", "rabbitmq")
STORAGE_CLASS = "gp2"

# The rabbitmq chart is installed with these fixed credentials.
RABBITMQ_USERNAME = "beckn"
RABBITMQ_PASSWORD = "beckn1234"


def common_services_namespace(tenant: str, suffix: str = "-common-services") -> str:
    if not tenant:
        raise ValueError("tenant label must not be empty")
    return f"{tenant}{suffix}"


def _ingress_tls(certificate_arn: str) -> Dict[str, Any]:
    return {"tls": {"certificateArn": certificate_arn}}


def registry_values(role_config: RoleConfig, store: RelationalStoreHandle) -> Dict[str, Any]:
    return {
        "externalDomain": role_config.external_domain,
        "database": {
            "host": store.host,
            "password": store.password,
        },
        "ingress": _ingress_tls(role_config.certificate_arn),
    }


def gateway_values(role_config: RoleConfig, store: RelationalStoreHandle) -> Dict[str, Any]:
    values = registry_values(role_config, store)
    values["registry_url"] = role_config.registry_url
    return values


def role_values(
    role_config: RoleConfig, file_system_id: str, is_sandbox: bool
) -> Dict[str, Any]:
    """Values for the bap/bpp charts; everything sits under ``global``."""
    return {
        "global": {
            "isSandbox": is_sandbox,
            "externalDomain": role_config.external_domain,
            "registry_url": role_config.registry_url,
            role_config.role: {
                "privateKey": role_config.private_key,
                "publicKey": role_config.public_key,
            },
            "efs": {"fileSystemId": file_system_id},
            "ingress": _ingress_tls(role_config.certificate_arn),
        }
    }


def redis_values() -> Dict[str, Any]:
    return {
        "auth": {"enabled": False},
        "replica": {"replicaCount": 0},
        "master": {"persistence": {"storageClass": STORAGE_CLASS}},
    }


def mongodb_values() -> Dict[str, Any]:
    return {"persistence": {"storageClass": STORAGE_CLASS}}


def rabbitmq_values() -> Dict[str, Any]:
    return {
        "persistence": {"enabled": True, "storageClass": STORAGE_CLASS},
        "auth": {"username": RABBITMQ_USERNAME, "password": RABBITMQ_PASSWORD},
    }


COMMON_SERVICES_VALUES = {
    "redis": redis_values,
    "mongodb": mongodb_values,
    "rabbitmq": rabbitmq_values,
}
