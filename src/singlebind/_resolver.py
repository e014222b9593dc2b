from __future__ import annotations

import inspect
import logging
import threading
import typing
from typing import TYPE_CHECKING, Any, Protocol, cast

from ._errors import CircularDependency, UnregisteredType, type_name


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ._registry import Dependency, ServiceDescriptor, TypeRegistry

    Path = tuple[Any, ...]


class Resolver:
    """Builds singleton instances from a registry by constructor injection.

    - cached instances are returned as-is
    - dependencies are resolved depth-first, in parameter order
    - the ancestor path of the current branch is used to detect cycles
    - the first instance built for a type is kept for the resolver's lifetime.
    """

    def __init__(self, registry: TypeRegistry, lock: threading.RLock | None = None) -> None:
        self._registry = registry
        self._cache: dict[Any, object] = {}
        self._lock = lock if lock is not None else threading.RLock()

    def resolve(self, service: Any) -> Any:
        with self._lock:
            return self._resolve(service, ())

    def seed(self, service: Any, instance: object) -> object:
        """Cache a pre-built instance. An existing cache entry wins."""
        with self._lock:
            return self._cache.setdefault(service, instance)

    def is_cached(self, service: object) -> bool:
        return service in self._cache

    def _resolve(self, service: Any, path: Path) -> Any:
        if service in self._cache:
            return self._cache[service]

        descriptor = self._registry.lookup(service)
        if descriptor is None:
            raise UnregisteredType(service)

        if service in path:
            raise CircularDependency(service, (*path, service))

        # siblings share `path`; only this branch and its children see `branch`
        branch = (*path, service)
        resolved = [(dep.service, self._resolve(dep.service, branch)) for dep in descriptor.dependencies]

        instance = self._build(descriptor, resolved)
        return self._cache.setdefault(service, instance)

    def _build(self, descriptor: ServiceDescriptor, resolved: list[tuple[Any, object]]) -> object:
        args, kwargs = _match_arguments(descriptor.dependencies, resolved)

        logger.debug("constructing %s", type_name(descriptor.service))
        instance = descriptor.factory(*args, **kwargs)

        if descriptor.factory is not descriptor.service:
            check_instance(descriptor.service, instance)

        return instance


def _match_arguments(
    dependencies: tuple[Dependency, ...],
    resolved: list[tuple[Any, object]],
) -> tuple[list[object], dict[str, object]]:
    """Order resolved instances by the constructor's parameters.

    Each parameter takes the first resolved instance whose type equals its own,
    so two parameters of one type always share the same instance.
    """
    args: list[object] = []
    kwargs: dict[str, object] = {}

    for dep in dependencies:
        value = next(instance for service, instance in resolved if service == dep.service)

        if dep.kind is inspect.Parameter.POSITIONAL_ONLY:
            args.append(value)
        else:
            kwargs[dep.name] = value

    return args, kwargs


def check_instance(service: type, instance: object) -> None:
    if _is_protocol(service):
        if _is_runtime_checkable_protocol(service) and not isinstance(instance, service):
            msg = f"Resolved instance {type(instance).__name__} does not implement runtime protocol {service.__name__}"
            raise TypeError(msg)
        return

    if not isinstance(instance, service):
        msg = f"Resolved instance {type(instance).__name__} is not an instance of {service.__name__}"
        raise TypeError(msg)


def _is_runtime_checkable_protocol(tp: type) -> bool:
    try:
        isinstance(None, tp)
    except TypeError:
        return False
    else:
        return True


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def _is_protocol(tp: type) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def _is_protocol(tp: type) -> bool:
        """Detect whether 'tp' is a typing.Protocol subclass (safe)."""
        return inspect.isclass(tp) and getattr(tp, "_is_protocol", False) and tp is not cast("type", Protocol)
