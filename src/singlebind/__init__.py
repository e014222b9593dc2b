"""Minimal singleton dependency injection container.

This package provides a small inversion-of-control container for Python that
registers types, builds their object graphs via constructor injection and keeps
exactly one instance per type for the lifetime of the container.

Exports:
- `Container`: registration and resolution entry point.
- `TypeRegistry` / `ServiceDescriptor`: the declared constructor shape of each type.
- `Resolver`: recursive, cycle-detecting, caching resolution over a registry.
- Errors: `AmbiguousConstructor`, `DuplicateRegistration`, `UnannotatedParameter`
  (raised while registering) and `UnregisteredType`, `CircularDependency`
  (raised while resolving). All derive from `ContainerError`.
"""

from ._container import Container
from ._errors import (
    AmbiguousConstructor,
    CircularDependency,
    ContainerError,
    DuplicateRegistration,
    RegistrationError,
    ResolutionError,
    UnannotatedParameter,
    UnregisteredType,
)
from ._registry import Dependency, ServiceDescriptor, TypeRegistry
from ._resolver import Resolver


__all__ = [
    "AmbiguousConstructor",
    "CircularDependency",
    "Container",
    "ContainerError",
    "Dependency",
    "DuplicateRegistration",
    "RegistrationError",
    "ResolutionError",
    "Resolver",
    "ServiceDescriptor",
    "TypeRegistry",
    "UnannotatedParameter",
    "UnregisteredType",
]
