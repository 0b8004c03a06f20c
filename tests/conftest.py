"""Shared pytest fixtures."""

import random

import pytest
import structlog

from onix_deploy.config import DeploymentSettings
from onix_deploy.credentials import CredentialGenerator
from onix_deploy.provisioners.dry_run import DryRunProvisioner


def make_settings(**overrides) -> DeploymentSettings:
    values = {
        "account": "123456789012",
        "region": "ap-south-1",
        "repository": "https://charts.example.org/beckn-onix",
        "role_arn": "arn:aws:iam::123456789012:role/beckn-admin",
        "cert_arn": "arn:aws:acm:ap-south-1:123456789012:certificate/abc",
        "registry_url": "https://registry.example.org",
        "registry_external_domain": "registry.example.org",
        "gateway_external_domain": "gateway.example.org",
        "bap_external_domain": "bap.example.org",
        "bpp_external_domain": "bpp.example.org",
        "bap_public_key": "bap-public",
        "bap_private_key": "bap-private",
        "bpp_public_key": "bpp-public",
        "bpp_private_key": "bpp-private",
    }
    values.update(overrides)
    return DeploymentSettings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def credentials():
    """Seeded generator so credential sequences are reproducible."""
    return CredentialGenerator(random.Random(1234))


@pytest.fixture
def provisioner(settings, credentials):
    return DryRunProvisioner(settings, credentials)


@pytest.fixture(autouse=True)
def stdlib_logging():
    """Route structlog through stdlib logging so pytest captures it."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.KeyValueRenderer(key_order=["event"]),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
