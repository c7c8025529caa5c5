"""Unit tests for publicdashboard.engine.registry — dashboard component registry."""

import sys
import types
from unittest.mock import patch

import pytest

from publicdashboard.engine.errors import ComponentRegistryError
from publicdashboard.engine.registry import (
    ComponentRegistry,
    DashboardComponent,
    dashboard_component,
)


class TestComponentRegistry:

    def test_list_in_registration_order(self, registry):
        assert registry.list_components() == [
            ("weather", "Weather forecast"),
            ("news", "Latest news"),
        ]
        assert registry.count == 2

    def test_as_map_and_describe(self, registry):
        assert registry.as_map()["news"] == "Latest news"
        assert registry.describe("weather") == "Weather forecast"
        assert registry.describe("unknown") == "unknown"

    def test_get_and_contains(self, registry):
        assert registry.get("news").description == "Latest news"
        assert registry.get("nope") is None
        assert registry.contains("weather")
        assert not registry.contains("nope")

    def test_replace_same_id(self, registry, component_factory):
        registry.register(component_factory("news", "Breaking news"))
        assert registry.count == 2
        assert registry.describe("news") == "Breaking news"

    def test_unregister_and_clear(self, registry):
        registry.unregister("news")
        registry.unregister("never-registered")
        assert registry.count == 1
        registry.clear()
        assert registry.list_components() == []

    def test_rejects_non_component(self):
        with pytest.raises(ComponentRegistryError):
            ComponentRegistry().register(object())

    def test_rejects_empty_id(self, component_factory):
        with pytest.raises(ComponentRegistryError):
            ComponentRegistry().register(component_factory(""))


class TestLoadModules:

    def test_imports_and_counts(self):
        registry = ComponentRegistry()
        module = types.ModuleType("fake_dashboard_plugin")
        with patch.dict(sys.modules, {"fake_dashboard_plugin": module}):
            assert registry.load_modules(["fake_dashboard_plugin", "no_such_plugin_xyz"]) == 1

    def test_registers_module_components_on_this_registry(self):
        module = types.ModuleType("fake_weather_plugin")

        class WeatherComponent(DashboardComponent):
            component_id = "weather"
            description = "Weather forecast"

        class PartialComponent(DashboardComponent):
            @property
            def component_id(self) -> str:
                return "partial"

        WeatherComponent.__module__ = PartialComponent.__module__ = module.__name__
        module.WeatherComponent = WeatherComponent
        module.PartialComponent = PartialComponent
        module.DashboardComponent = DashboardComponent

        global_registry = ComponentRegistry()
        service_registry = ComponentRegistry()
        with patch.dict(sys.modules, {"fake_weather_plugin": module}), \
                patch("publicdashboard.engine.registry.component_registry", global_registry):
            dashboard_component(WeatherComponent)
            assert service_registry.load_modules(["fake_weather_plugin"]) == 1
            service_registry.load_modules(["fake_weather_plugin"])

        assert service_registry.list_components() == [("weather", "Weather forecast")]
        assert global_registry.count == 1


class TestDecorator:

    def test_registers_on_global_registry(self):
        fresh = ComponentRegistry()
        with patch("publicdashboard.engine.registry.component_registry", fresh):
            @dashboard_component
            class ClockComponent(DashboardComponent):
                component_id = "clock"
                description = "World clock"

        assert fresh.list_components() == [("clock", "World clock")]
        assert isinstance(fresh.get("clock"), ClockComponent)

    def test_rejects_non_component_class(self):
        with pytest.raises(ComponentRegistryError):
            dashboard_component(object)
