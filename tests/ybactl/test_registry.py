import pytest

from common.exceptions import ServiceLookupError
from ybactl.registry import ServiceRegistry
from ybactl.services import PlatformService, PostgresService, PrometheusService


def test_from_settings_uses_dependency_order(app_settings):
    registry = ServiceRegistry.from_settings(app_settings, "2.20.1.0-b97")
    assert registry.order() == ["postgres", "prometheus", "yb-platform"]
    assert [s.name for s in registry.reversed_services()] == ["yb-platform", "prometheus", "postgres"]
    assert isinstance(registry.get("postgres"), PostgresService)


def test_from_settings_skips_postgres_when_using_existing(existing_pg_settings):
    registry = ServiceRegistry.from_settings(existing_pg_settings, "2.20.1.0-b97")
    assert registry.order() == ["prometheus", "yb-platform"]
    with pytest.raises(ServiceLookupError):
        registry.get("postgres")


def test_get_typed(app_settings):
    registry = ServiceRegistry.from_settings(app_settings, "2.20.1.0-b97")
    assert isinstance(registry.get_typed("yb-platform", PlatformService), PlatformService)
    with pytest.raises(ServiceLookupError, match="not a PlatformService"):
        registry.get_typed("prometheus", PlatformService)


def test_duplicate_services_rejected(make_fake_service):
    with pytest.raises(ValueError, match="Duplicate"):
        ServiceRegistry([make_fake_service("a"), make_fake_service("a")])


def test_unknown_service_class():
    with pytest.raises(ServiceLookupError):
        ServiceRegistry.get_service_class("grafana")


def test_registered_classes_carry_their_names():
    assert ServiceRegistry.get_service_class("prometheus") is PrometheusService
    assert PrometheusService.name == "prometheus"
