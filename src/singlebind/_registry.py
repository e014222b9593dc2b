from __future__ import annotations

import functools
import inspect
import logging
import types
import typing
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, get_type_hints

from ._errors import AmbiguousConstructor, DuplicateRegistration, UnannotatedParameter, type_name


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


@dataclass(frozen=True)
class Dependency:
    name: str
    service: Any
    kind: Any


@dataclass(frozen=True)
class ServiceDescriptor:
    """Declared shape of a registered type.

    `factory` is the single construction path (the class itself, or a registered
    builder) and `dependencies` its injectable parameters in declaration order.
    """

    service: Any
    factory: Callable[..., object]
    dependencies: tuple[Dependency, ...] = ()

    @property
    def parameter_types(self) -> tuple[Any, ...]:
        return tuple(dep.service for dep in self.dependencies)


class TypeRegistry:
    """Mapping of registered types to their descriptors.

    Filled during the registration phase; lookups have no side effects.
    """

    def __init__(self) -> None:
        self._descriptors: dict[Any, ServiceDescriptor] = {}

    def register(
        self,
        service: type,
        factory: Callable[..., object] | None = None,
        *,
        replace: bool = False,
    ) -> ServiceDescriptor:
        descriptor = describe(service, factory)
        self.add(descriptor, replace=replace)
        return descriptor

    def add(self, descriptor: ServiceDescriptor, *, replace: bool = False) -> None:
        if not replace and descriptor.service in self._descriptors:
            raise DuplicateRegistration(descriptor.service)

        self._descriptors[descriptor.service] = descriptor
        logger.debug(
            "registered %s with dependencies %s",
            type_name(descriptor.service),
            [type_name(t) for t in descriptor.parameter_types],
        )

    def lookup(self, service: object) -> ServiceDescriptor | None:
        return self._descriptors.get(service)

    def __contains__(self, service: object) -> bool:
        return service in self._descriptors

    def __iter__(self) -> Iterator[Any]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)


def describe(service: type, factory: Callable[..., object] | None = None) -> ServiceDescriptor:
    """Inspect the construction path of `service` and build its descriptor.

    Without a factory the class constructor is used. Raises AmbiguousConstructor
    when that callable declares more than one overload, and UnannotatedParameter
    when a required parameter has no usable type hint.
    """
    if not inspect.isclass(service):
        msg = f"Only types can be registered, got {service!r}"
        raise TypeError(msg)

    target = service if factory is None else factory
    if not callable(target):
        msg = f"Factory for {service.__qualname__} is not callable: {target!r}"
        raise TypeError(msg)

    if inspect.isclass(target) and inspect.getattr_static(target, "__init__") is object.__init__:
        return ServiceDescriptor(service=service, factory=target)

    func = _underlying_function(target)
    overloads = typing.get_overloads(func) if func is not None else []
    if len(overloads) > 1:
        raise AmbiguousConstructor(service, len(overloads))

    try:
        params = _construction_parameters(target)
    except (TypeError, ValueError):
        # builtin constructors have no introspectable signature
        logger.debug("no signature for %s, treating as parameterless", service.__qualname__)
        return ServiceDescriptor(service=service, factory=target)

    globalns = getattr(func, "__globals__", {})
    dependencies: list[Dependency] = []

    for p in params:
        if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD):
            continue
        if p.default is not p.empty:
            continue

        ann = _resolve_annotation(service, p, globalns)
        if ann is p.empty:
            raise UnannotatedParameter(service, p.name)

        dependencies.append(Dependency(name=p.name, service=ann, kind=p.kind))

    return ServiceDescriptor(service=service, factory=target, dependencies=tuple(dependencies))


def _construction_parameters(target: Callable[..., object]) -> list[inspect.Parameter]:
    if inspect.isclass(target):
        init = inspect.getattr_static(target, "__init__")
        return list(inspect.signature(init).parameters.values())[1:]  # self

    # partials and callable objects report their remaining call parameters
    return list(inspect.signature(target).parameters.values())


def _underlying_function(target: Callable[..., object]) -> Callable[..., object] | None:
    """Return the plain function that defines `target`'s parameters, if any.

    Partials are unwrapped to what they call, classes to `__init__` and other
    callable objects to their type's `__call__`.
    """
    while isinstance(target, functools.partial):
        target = target.func

    if inspect.isclass(target):
        target = inspect.getattr_static(target, "__init__")
    elif not inspect.isroutine(target):
        target = getattr(type(target), "__call__", target)

    target = inspect.unwrap(getattr(target, "__func__", target))
    return target if inspect.isfunction(target) else None


def _resolve_annotation(service: type, p: inspect.Parameter, globalns: dict[str, Any]) -> Any:
    """Evaluate one parameter's annotation, or return `Parameter.empty` when it can't be."""
    ann = p.annotation
    if not isinstance(ann, str | typing.ForwardRef):
        return ann

    holder = types.SimpleNamespace(__annotations__={p.name: ann})
    try:
        return get_type_hints(holder, globalns=globalns)[p.name]
    except NameError as exc:
        logger.warning(
            "'%s' name error retrieving %s (%s) type hint of '%s'",
            exc.name,
            service.__name__,
            service.__qualname__,
            p.name,
        )
    except (SyntaxError, TypeError) as exc:
        logger.warning("invalid type hint of '%s' on %s: %s", p.name, service.__qualname__, exc)

    return p.empty
