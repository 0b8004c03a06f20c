import pytest

from onix_deploy import charts
from onix_deploy.schemas.handles import RelationalStoreHandle


@pytest.fixture
def store():
    return RelationalStoreHandle(
        host="db.internal", database_name="sandbox", username="postgres", password="p@ss"
    )


class TestChartValues:
    def test_namespace_is_tenant_plus_suffix(self):
        assert charts.common_services_namespace("bap") == "bap-common-services"
        assert charts.common_services_namespace("bpp", "-svc") == "bpp-svc"

    def test_namespace_requires_tenant(self):
        with pytest.raises(ValueError):
            charts.common_services_namespace("")

    def test_registry_values(self, settings, store):
        values = charts.registry_values(settings.role_config("registry"), store)

        assert values == {
            "externalDomain": "registry.example.org",
            "database": {"host": "db.internal", "password": "p@ss"},
            "ingress": {"tls": {"certificateArn": settings.cert_arn}},
        }

    def test_gateway_values_add_registry_url(self, settings, store):
        values = charts.gateway_values(settings.role_config("gateway"), store)

        assert values["externalDomain"] == "gateway.example.org"
        assert values["registry_url"] == "https://registry.example.org"
        assert values["database"]["host"] == "db.internal"

    @pytest.mark.parametrize("is_sandbox", [True, False])
    def test_role_values(self, settings, is_sandbox):
        values = charts.role_values(settings.role_config("bpp"), "fs-123", is_sandbox)["global"]

        assert values["isSandbox"] is is_sandbox
        assert values["externalDomain"] == "bpp.example.org"
        assert values["bpp"] == {"privateKey": "bpp-private", "publicKey": "bpp-public"}
        assert "bap" not in values
        assert values["efs"] == {"fileSystemId": "fs-123"}
        assert values["ingress"]["tls"]["certificateArn"] == settings.cert_arn

    def test_common_service_values(self):
        assert charts.redis_values()["auth"] == {"enabled": False}
        assert charts.mongodb_values()["persistence"]["storageClass"] == "gp2"
        assert charts.rabbitmq_values()["auth"]["username"] == "beckn"
        assert set(charts.COMMON_SERVICES_VALUES) == set(charts.COMMON_SERVICES_RELEASES)
