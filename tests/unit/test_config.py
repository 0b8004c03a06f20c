import pytest
from pydantic import ValidationError

from onix_deploy.config import DeploymentSettings, load_settings
from onix_deploy.exceptions.deployment_exceptions import ConfigurationError
from tests.conftest import make_settings


class TestDeploymentSettings:
    def test_defaults_match_reference_deployment(self, monkeypatch):
        for name in ("ACCOUNT", "REGION", "CIDR", "MAX_AZS", "EKS_CLUSTER_NAME"):
            monkeypatch.delenv(name, raising=False)
        settings = DeploymentSettings(_env_file=None)

        assert settings.account == ""
        assert settings.region == "ap-south-1"
        assert settings.cidr == "10.20.0.0/16"
        assert settings.max_azs == 2
        assert settings.eks_cluster_name == "beckn-onix"
        assert settings.ec2_nodes_count == 2
        assert settings.ec2_instance_type == "t3.large"
        assert settings.rds_user == "postgres"
        assert settings.namespace_suffix == "-common-services"
        assert settings.bap_release_name == "beckn-onix-bap"

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("ACCOUNT", "111122223333")
        monkeypatch.setenv("REGION", "eu-west-1")
        monkeypatch.setenv("BECKN_ONIX_HELM_REPOSITORY", "https://charts.example.org")
        monkeypatch.setenv("EC2_NODES_COUNT", "4")

        settings = load_settings(_env_file=None)

        assert settings.account == "111122223333"
        assert settings.region == "eu-west-1"
        assert settings.repository == "https://charts.example.org"
        assert settings.ec2_nodes_count == 4

    def test_settings_are_immutable(self, settings):
        with pytest.raises(ValidationError):
            settings.account = "999999999999"

    def test_missing_identity(self):
        assert make_settings().missing_identity() == []
        assert make_settings(account="", region=" ").missing_identity() == [
            "account",
            "region",
        ]

    def test_node_count_must_be_positive(self):
        with pytest.raises(ValidationError):
            make_settings(ec2_nodes_count=0)

    def test_load_settings_reports_invalid_values_as_configuration_error(self, monkeypatch):
        monkeypatch.setenv("EC2_NODES_COUNT", "two")

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(_env_file=None)

        assert "ec2_nodes_count" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, ValidationError)


class TestRoleConfig:
    def test_bap_role_config(self, settings):
        config = settings.role_config("bap")

        assert config.role == "bap"
        assert config.release_name == "beckn-onix-bap"
        assert config.external_domain == "bap.example.org"
        assert config.certificate_arn == settings.cert_arn
        assert config.registry_url == "https://registry.example.org"
        assert config.public_key == "bap-public"
        assert config.private_key == "bap-private"

    def test_registry_role_has_no_keypair(self, settings):
        config = settings.role_config("registry")

        assert config.release_name == "beckn-onix-registry"
        assert config.public_key == ""
        assert config.private_key == ""

    def test_private_key_hidden_from_repr(self, settings):
        assert "bpp-private" not in repr(settings.role_config("bpp"))

    def test_unknown_role(self, settings):
        with pytest.raises(ValueError):
            settings.role_config("observer")
