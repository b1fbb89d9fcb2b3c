from __future__ import annotations

import inspect
from typing import Any


def type_name(tp: Any) -> str:
    """Readable name for a type token (class, typing construct or string)."""
    if tp is inspect.Parameter.empty:
        return "<no annotation>"
    if inspect.isclass(tp):
        module = getattr(tp, "__module__", "")
        if module in ("builtins", ""):
            return tp.__qualname__
        return f"{module}.{tp.__qualname__}"
    return repr(tp)


class ContainerError(Exception):
    """Base class for every failure raised by the container.

    `type` is the offending type token.
    """

    def __init__(self, tp: Any, msg: str) -> None:
        super().__init__(msg)
        self.type = tp


class RegistrationError(ContainerError):
    """A registration was rejected; the registry is left unchanged."""


class DuplicateRegistrationError(RegistrationError):
    def __init__(self, tp: Any) -> None:
        super().__init__(tp, f"Type {type_name(tp)} is already registered with the container")


class NotAssignableError(RegistrationError, TypeError):
    def __init__(self, tp: Any, concrete: Any, reason: str | None = None) -> None:
        msg = f"Implementation {type_name(concrete)} is not assignable to {type_name(tp)}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(tp, msg)
        self.concrete = concrete


class TypeNotConstructableError(RegistrationError):
    def __init__(self, tp: Any) -> None:
        super().__init__(
            tp,
            f"The type {type_name(tp)} is not constructable. "
            "Either it is abstract, a protocol, a builtin, or has no public constructor",
        )


class CircularResolutionError(ContainerError, RuntimeError):
    """A single instance was requested again while it was still being created."""

    def __init__(self, tp: Any) -> None:
        super().__init__(tp, f"Circular resolution: {type_name(tp)} was requested while being created")


class UnregisteredTypeError(ContainerError, LookupError):
    def __init__(self, tp: Any, msg: str | None = None) -> None:
        super().__init__(tp, msg or f"The type {type_name(tp)} has not been registered with the container")


class DependencyUnresolvedError(UnregisteredTypeError, RegistrationError):
    """The dependency lookup hook produced no plan for a constructor parameter."""

    def __init__(self, tp: Any, *, parameter: str | None = None, dependent: Any = None) -> None:
        msg = f"Could not resolve dependency for type: {type_name(tp)}"
        if parameter is not None:
            msg = f"{msg} (parameter '{parameter}' of {type_name(dependent)})"
        super().__init__(tp, msg)
        self.parameter = parameter
        self.dependent = dependent
