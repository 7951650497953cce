"""
Registry for managed services.

Service classes register themselves by name with the ServiceRegistry.register
decorator. A ServiceRegistry instance holds the instantiated services in
dependency order; the orchestrator walks that order and never refers to
services by hard-coded names.
"""

import logging
from typing import Dict, Iterator, List, Optional, Sequence, Type, TypeVar

from common.exceptions import ServiceLookupError
from setup import config as static_config
from setup.config_models import AppSettings
from ybactl.base_service import BaseService

ServiceT = TypeVar("ServiceT", bound=BaseService)


class ServiceRegistry:
    """
    Ordered, immutable collection of managed services.
    """

    _service_classes: Dict[str, Type[BaseService]] = {}

    @classmethod
    def register(cls, name: str):
        """
        Decorator for registering service classes.

        Args:
            name: The unique service name.

        Returns:
            A decorator function that registers the service class.
        """

        def decorator(service_class: Type[BaseService]) -> Type[BaseService]:
            if name in cls._service_classes:
                raise ValueError(f"Service with name '{name}' already registered")
            service_class.name = name
            cls._service_classes[name] = service_class
            return service_class

        return decorator

    @classmethod
    def get_service_class(cls, name: str) -> Type[BaseService]:
        """
        Raises:
            ServiceLookupError: If no service class is registered under `name`.
        """
        if name not in cls._service_classes:
            raise ServiceLookupError(f"No service registered with name '{name}'")
        return cls._service_classes[name]

    @classmethod
    def from_settings(
        cls,
        app_settings: AppSettings,
        version: str,
        order: Optional[Sequence[str]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "ServiceRegistry":
        """
        Instantiates the registered services in `order` (SERVICE_ORDER by
        default). Postgres is left out when an existing database is used.
        """
        # Importing the package registers the concrete services.
        import ybactl.services  # noqa: F401

        names = list(order if order is not None else static_config.SERVICE_ORDER)
        if not app_settings.postgres.install.enabled:
            names = [n for n in names if n != static_config.POSTGRES_SERVICE_NAME]
        services = [
            cls.get_service_class(name)(app_settings, version, logger)
            for name in names
        ]
        return cls(services)

    def __init__(self, services: Sequence[BaseService]):
        names = [service.name for service in services]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise ValueError(f"Duplicate services in sequence: {', '.join(sorted(duplicates))}")
        self._order: List[str] = names
        self._services: Dict[str, BaseService] = {s.name: s for s in services}

    def order(self) -> List[str]:
        """Service names in startup order."""
        return list(self._order)

    def get(self, name: str) -> BaseService:
        if name not in self._services:
            raise ServiceLookupError(f"Service '{name}' is not part of this installation")
        return self._services[name]

    def get_typed(self, name: str, service_type: Type[ServiceT]) -> ServiceT:
        """
        Returns the service `name`, checked to be a `service_type`.

        Raises:
            ServiceLookupError: If the service is missing or of another type.
        """
        service = self.get(name)
        if not isinstance(service, service_type):
            raise ServiceLookupError(
                f"Service '{name}' is a {type(service).__name__}, not a {service_type.__name__}"
            )
        return service

    def services(self) -> List[BaseService]:
        """Services in startup order."""
        return [self._services[name] for name in self._order]

    def reversed_services(self) -> List[BaseService]:
        """Services in shutdown order."""
        return [self._services[name] for name in reversed(self._order)]

    def __iter__(self) -> Iterator[BaseService]:
        return iter(self.services())

    def __len__(self) -> int:
        return len(self._order)
