from __future__ import annotations

import inspect
import logging
import threading
from typing import TYPE_CHECKING, Any, TypeVar

from ._errors import DuplicateRegistration, type_name
from ._registry import ServiceDescriptor, TypeRegistry
from ._resolver import Resolver, check_instance


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable

    T = TypeVar("T")


class Container:
    """Minimal DI container.

    - register types (one constructor each) or factories
    - resolve with constructor injection
    - every type is a singleton for the container's lifetime
    - circular dependencies are detected while resolving.

    Registration is expected to finish before the first `resolve`.
    """

    def __init__(self, *services: type) -> None:
        self._lock = threading.RLock()
        self._registry = TypeRegistry()
        self._resolver = Resolver(self._registry, self._lock)
        self.register_many(*services)

    def register(
        self,
        service: type,
        *,
        factory: Callable[..., Any] | None = None,
        replace: bool = False,
    ) -> None:
        """Register a type, optionally with a factory building it.

        Example:
          container.register(Repo)
          container.register(Db, factory=lambda settings: Db(settings.url))

        The factory's annotated parameters are resolved like constructor
        parameters.
        """
        with self._lock:
            if replace and self._resolver.is_cached(service):
                msg = f"Type {type_name(service)} is already constructed and cannot be replaced."
                raise DuplicateRegistration(service, msg)
            self._registry.register(service, factory, replace=replace)

    def register_many(self, *services: type) -> None:
        for service in services:
            self.register(service)

    def register_instance(self, service: type[T], instance: T) -> None:
        """Register a pre-built instance, returned by every `resolve`."""
        if inspect.isclass(service):
            check_instance(service, instance)

        with self._lock:
            self._registry.add(ServiceDescriptor(service=service, factory=lambda: instance))
            self._resolver.seed(service, instance)
            logger.debug("registered instance of %s", type_name(service))

    def lookup(self, service: object) -> ServiceDescriptor | None:
        return self._registry.lookup(service)

    def resolve(self, service: type[T]) -> T:
        """Return the singleton instance of `service`, building its graph on first use.

        Raises UnregisteredType or CircularDependency when the graph cannot be built.
        """
        return self._resolver.resolve(service)

    get_service = resolve

    def is_cached(self, service: object) -> bool:
        return self._resolver.is_cached(service)

    def __contains__(self, service: object) -> bool:
        return service in self._registry

    def __len__(self) -> int:
        return len(self._registry)
