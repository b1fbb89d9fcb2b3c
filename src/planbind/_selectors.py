"""Constructor discovery and selection.

A class exposes one or more *public constructors*: the class call itself
(described by its `__init__` signature) and any public classmethod marked
with `@constructor`. Selectors pick one of them for a concrete type.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, get_type_hints

from ._assignability import is_protocol


if TYPE_CHECKING:
    from collections.abc import Callable

    F = TypeVar("F")


logger = logging.getLogger(__name__)

_CONSTRUCTOR_MARK = "__planbind_constructor__"


@dataclass(frozen=True)
class ParameterSpec:
    name: str
    annotation: Any
    kind: Any
    default: Any = inspect.Parameter.empty

    @property
    def has_default(self) -> bool:
        return self.default is not inspect.Parameter.empty

    @property
    def positional_only(self) -> bool:
        return self.kind is inspect.Parameter.POSITIONAL_ONLY


@dataclass(frozen=True)
class ConstructorDescriptor:
    target: type
    call: Callable[..., Any]
    parameters: tuple[ParameterSpec, ...]
    name: str = "__init__"

    @property
    def arity(self) -> int:
        return len(self.parameters)


def constructor(func: F) -> F:
    """Mark a classmethod as an alternate public constructor.

    Works above or below `@classmethod`:

        @constructor
        @classmethod
        def from_settings(cls, settings: Settings) -> Service: ...
    """
    target = func.__func__ if isinstance(func, classmethod) else func
    setattr(target, _CONSTRUCTOR_MARK, True)
    return func


def is_marked_constructor(func: Any) -> bool:
    return bool(getattr(func, _CONSTRUCTOR_MARK, False))


def is_constructable(concrete: Any) -> bool:
    if not inspect.isclass(concrete):
        return False
    if is_protocol(concrete) or inspect.isabstract(concrete):
        return False
    return getattr(concrete, "__module__", "") != "builtins"


def public_constructors(concrete: Any) -> list[ConstructorDescriptor]:
    """Enumerate the public constructors of 'concrete' in a stable order.

    The class call comes first, then marked classmethods from the most derived
    class outwards, each in definition order. Empty when the type cannot be
    constructed at all.
    """
    if not is_constructable(concrete):
        return []

    found = [_class_call_descriptor(concrete)]
    seen: set[str] = set()
    for klass in concrete.__mro__:
        for name, attr in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if name.startswith("_") or not isinstance(attr, classmethod):
                continue
            if not is_marked_constructor(attr.__func__):
                continue
            bound = getattr(concrete, name)
            found.append(
                ConstructorDescriptor(
                    target=concrete,
                    call=bound,
                    parameters=_parameters(bound, _get_type_hints(attr.__func__, concrete)),
                    name=name,
                )
            )
    return found


class ConstructorSelector(Protocol):
    def select_constructor(self, concrete: Any) -> ConstructorDescriptor | None: ...


class MostSpecificSelector:
    """Pick the constructor with the most parameters; ties go to the first one enumerated."""

    def select_constructor(self, concrete: Any) -> ConstructorDescriptor | None:
        candidates = public_constructors(concrete)
        if not candidates:
            return None
        return max(candidates, key=lambda c: c.arity)


class LeastSpecificSelector:
    """Pick the constructor with the fewest parameters. Handy for test doubles."""

    def select_constructor(self, concrete: Any) -> ConstructorDescriptor | None:
        candidates = public_constructors(concrete)
        if not candidates:
            return None
        return min(candidates, key=lambda c: c.arity)


class MarkedConstructorSelector:
    """Pick the first `@constructor`-marked classmethod, else defer to 'fallback'."""

    def __init__(self, fallback: ConstructorSelector | None = None) -> None:
        self._fallback = fallback or MostSpecificSelector()

    def select_constructor(self, concrete: Any) -> ConstructorDescriptor | None:
        for candidate in public_constructors(concrete):
            if candidate.name != "__init__":
                return candidate
        return self._fallback.select_constructor(concrete)


def _class_call_descriptor(cls: type) -> ConstructorDescriptor:
    try:
        sig = inspect.signature(cls)
    except (TypeError, ValueError):
        # no introspectable signature; treated as a parameterless call
        return ConstructorDescriptor(target=cls, call=cls, parameters=())

    hints = _get_init_type_hints(cls)
    return ConstructorDescriptor(target=cls, call=cls, parameters=_specs(sig, hints))


def _parameters(func: Callable[..., Any], hints: dict[str, Any]) -> tuple[ParameterSpec, ...]:
    return _specs(inspect.signature(func), hints)


def _specs(sig: inspect.Signature, hints: dict[str, Any]) -> tuple[ParameterSpec, ...]:
    specs = []
    for name, p in sig.parameters.items():
        if p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD):
            continue
        annotation = hints.get(name, p.annotation)
        specs.append(ParameterSpec(name=name, annotation=annotation, kind=p.kind, default=p.default))
    return tuple(specs)


def _get_init_type_hints(cls: type) -> dict[str, Any]:
    init = inspect.getattr_static(cls, "__init__")
    return _get_type_hints(init, cls)


def _get_type_hints(func: Any, cls: type) -> dict[str, Any]:
    try:
        hints = get_type_hints(func)
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s (%s) type hints", exc.name, cls.__name__, cls.__qualname__)
        hints = {}

    hints.pop("return", None)
    return hints
