from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Sequence


def type_name(service: object) -> str:
    return getattr(service, "__qualname__", repr(service))


class ContainerError(RuntimeError):
    pass


class RegistrationError(ContainerError):
    pass


class ResolutionError(ContainerError):
    pass


class AmbiguousConstructor(RegistrationError):
    def __init__(self, service: object, count: int) -> None:
        self.service = service
        self.count = count
        msg = f"Type {type_name(service)} has {count} constructors. Only one constructor per type allowed."
        super().__init__(msg)


class DuplicateRegistration(RegistrationError):
    def __init__(self, service: object, msg: str | None = None) -> None:
        self.service = service
        if msg is None:
            msg = f"Type {type_name(service)} is already registered. Pass replace=True to overwrite."
        super().__init__(msg)


class UnannotatedParameter(RegistrationError):
    def __init__(self, service: object, parameter: str) -> None:
        self.service = service
        self.parameter = parameter
        msg = (
            f"Cannot determine dependency type of parameter '{parameter}' for {type_name(service)}. "
            "Annotate it or give it a default."
        )
        super().__init__(msg)


class UnregisteredType(ResolutionError):
    def __init__(self, service: object) -> None:
        self.service = service
        super().__init__(f"Type {type_name(service)} not registered")


class CircularDependency(ResolutionError):
    """Raised when resolving `service` would revisit a type on the ancestor path.

    `path` holds the chain from the root request down to, and including, the
    revisited type, e.g. ``(I, J, I)``.
    """

    def __init__(self, service: object, path: Sequence[object]) -> None:
        self.service = service
        self.path = tuple(path)
        chain = " -> ".join(type_name(p) for p in self.path)
        super().__init__(f"Circular dependency detected involving {type_name(service)} ({chain})")
