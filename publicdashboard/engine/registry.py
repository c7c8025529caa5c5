"""
PublicDashboard Component Registry — Explicit table of dashboard component types.

Dashboard records reference a component type by id. Plugins implement
``DashboardComponent`` and register at startup, either directly with
``ComponentRegistry.register()`` or through the ``@dashboard_component``
class decorator on the global registry. Modules named in the ``components``
config list are imported by ``load_modules()``, which registers the
component classes they define on the registry it is called on.
"""

from __future__ import annotations

import importlib
import inspect
import logging
from abc import ABC, abstractmethod
from types import ModuleType
from typing import Dict, Iterable, List, Optional, Tuple, Type

from publicdashboard.engine.errors import ComponentRegistryError

logger = logging.getLogger("publicdashboard.engine.registry")


class DashboardComponent(ABC):
    """Capability interface implemented by every dashboard component plugin."""

    @property
    @abstractmethod
    def component_id(self) -> str:
        """Stable identifier stored on dashboard records."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description shown in the admin console."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(component_id='{self.component_id}')>"


class ComponentRegistry:
    """
    In-memory registry of dashboard components keyed by component id.

    Usage:
        registry = ComponentRegistry()
        registry.register(WeatherComponent())
        registry.list_components()  # [("weather", "Weather forecast")]
    """

    def __init__(self):
        self._components: Dict[str, DashboardComponent] = {}

    def register(self, component: DashboardComponent) -> None:
        """Register a component instance. Re-registering an id replaces it."""
        if not isinstance(component, DashboardComponent):
            raise ComponentRegistryError(
                f"Not a DashboardComponent: {component!r}",
                component=repr(component),
            )
        component_id = component.component_id
        if not component_id:
            raise ComponentRegistryError(
                f"Component has an empty id: {component!r}",
                component=repr(component),
            )
        if component_id in self._components:
            logger.warning(f"Replacing registered component: {component_id}")
        self._components[component_id] = component
        logger.debug(f"Registered component: {component_id}")

    def unregister(self, component_id: str) -> None:
        self._components.pop(component_id, None)

    def get(self, component_id: str) -> Optional[DashboardComponent]:
        return self._components.get(component_id)

    def contains(self, component_id: str) -> bool:
        return component_id in self._components

    def list_components(self) -> List[Tuple[str, str]]:
        """Return (component_id, description) pairs in registration order."""
        return [(c.component_id, c.description) for c in self._components.values()]

    def as_map(self) -> Dict[str, str]:
        """Return component_id → description, for labelling list rows."""
        return dict(self.list_components())

    def describe(self, component_id: str) -> str:
        """Description for a component id, or the id itself when unregistered."""
        component = self._components.get(component_id)
        return component.description if component else component_id

    def load_modules(self, module_paths: Iterable[str]) -> int:
        """
        Import plugin modules and register the components they define.

        Concrete ``DashboardComponent`` subclasses defined in each module are
        registered on this registry, so a registry other than the global one
        also receives components whose ``@dashboard_component`` decorator
        already ran on an earlier import.

        Returns:
            Number of modules imported successfully.
        """
        loaded = 0
        for module_path in module_paths:
            try:
                module = importlib.import_module(module_path)
            except ImportError as e:
                logger.warning(f"Failed to import component module {module_path}: {e}")
                continue
            loaded += 1
            found = self._register_module_components(module)
            logger.debug(f"Imported component module: {module_path} ({found} components)")
        return loaded

    def _register_module_components(self, module: ModuleType) -> int:
        found = 0
        for obj in vars(module).values():
            if not (isinstance(obj, type) and issubclass(obj, DashboardComponent)):
                continue
            if obj.__module__ != module.__name__ or inspect.isabstract(obj):
                continue
            found += 1
            if not any(type(c) is obj for c in self._components.values()):
                self.register(obj())
        return found

    @property
    def count(self) -> int:
        return len(self._components)

    def clear(self) -> None:
        self._components.clear()


# Global registry populated at process startup
component_registry = ComponentRegistry()


def dashboard_component(
    cls: Type[DashboardComponent],
) -> Type[DashboardComponent]:
    """
    Class decorator: instantiate and register a component on the global registry.

    Usage:
        @dashboard_component
        class WeatherComponent(DashboardComponent):
            component_id = "weather"
            description = "Weather forecast"
    """
    if not (isinstance(cls, type) and issubclass(cls, DashboardComponent)):
        raise ComponentRegistryError(
            f"@dashboard_component requires a DashboardComponent subclass, got {cls!r}",
        )
    component_registry.register(cls())
    return cls
