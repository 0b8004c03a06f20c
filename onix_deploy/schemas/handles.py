"""Handles returned by construction steps.

A handle is the only thing a later step learns about an earlier step's
resource. ``resource`` carries the provider-specific object (a CDK construct,
or nothing for a dry run) and is never inspected by the planner.
"""

from enum import Enum
from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict, Field

from onix_deploy.exceptions.deployment_exceptions import SubnetAvailabilityError


class SubnetTier(str, Enum):
    PUBLIC = "public"
    APP = "app"
    DATABASE = "database"


class _Handle(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class NetworkHandle(_Handle):
    name: str
    cidr: str
    public_subnet_ids: Tuple[str, ...] = ()
    app_subnet_ids: Tuple[str, ...] = ()
    database_subnet_ids: Tuple[str, ...] = ()
    resource: Any = Field(default=None, exclude=True, repr=False)

    def subnets(self, tier: SubnetTier) -> Tuple[str, ...]:
        return {
            SubnetTier.PUBLIC: self.public_subnet_ids,
            SubnetTier.APP: self.app_subnet_ids,
            SubnetTier.DATABASE: self.database_subnet_ids,
        }[SubnetTier(tier)]

    def require_subnets(self, tier: SubnetTier) -> Tuple[str, ...]:
        subnet_ids = self.subnets(tier)
        if not subnet_ids:
            raise SubnetAvailabilityError(SubnetTier(tier).value, self.name)
        return subnet_ids


class ClusterHandle(_Handle):
    name: str
    security_group_id: str
    resource: Any = Field(default=None, exclude=True, repr=False)
    security_group: Any = Field(default=None, exclude=True, repr=False)


class RelationalStoreHandle(_Handle):
    host: str
    database_name: str
    username: str
    password: str = Field(repr=False)


class ManagedServicesHandle(_Handle):
    tenant: str
    cache_id: str
    document_store_id: str
    broker_id: str


class CommonServicesHandle(_Handle):
    tenant: str
    namespace: str
    releases: Tuple[str, ...]


class FileSystemHandle(_Handle):
    role: str
    file_system_id: str


class RoleConfig(_Handle):
    role: str
    release_name: str
    external_domain: str = ""
    certificate_arn: str = ""
    registry_url: str = ""
    public_key: str = ""
    private_key: str = Field(default="", repr=False)
