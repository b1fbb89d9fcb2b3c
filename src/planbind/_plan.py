"""Construction plans.

A plan is a DAG of three node kinds. Constructor nodes call a selected
constructor with child plans as arguments; constant and factory-call nodes
are leaves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from ._errors import UnregisteredTypeError, type_name


if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from ._registry import Registry
    from ._selectors import ConstructorDescriptor, ParameterSpec


logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ConstructorNode:
    target: type
    constructor: ConstructorDescriptor
    parameters: tuple[ParameterSpec, ...] = ()
    children: tuple[ConstructionPlan, ...] = ()

    def __post_init__(self) -> None:
        if len(self.parameters) != len(self.children):
            msg = "Constructor node needs exactly one child plan per parameter"
            raise ValueError(msg)

    def arguments(self) -> Iterator[tuple[ParameterSpec, ConstructionPlan]]:
        return zip(self.parameters, self.children)

    def __repr__(self) -> str:
        return f"ConstructorNode({type_name(self.target)}.{self.constructor.name}, children={len(self.children)})"


@dataclass(frozen=True, eq=False)
class ConstantNode:
    target: Any
    value: Any = None

    def __repr__(self) -> str:
        return f"ConstantNode({type_name(self.target)}, value={self.value!r})"


@dataclass(frozen=True, eq=False)
class FactoryCallNode:
    target: Any
    factory: Callable[[], Any]

    def __repr__(self) -> str:
        return f"FactoryCallNode({type_name(self.target)}, factory={self.factory!r})"


ConstructionPlan = Union[ConstructorNode, ConstantNode, FactoryCallNode]


def validate(plan: ConstructionPlan, registry: Registry) -> None:
    """Fail fast on the first constructor child whose type the registry does not know.

    Depth-first, in parameter order. A child counts as known when
    `registry.is_registered` accepts its target type, which includes types
    that are only the concrete implementation of some other registration.
    Constant and factory-call children are leaves and always pass.
    """
    _validate(plan, registry, set())


def _validate(plan: ConstructionPlan, registry: Registry, visited: set[int]) -> None:
    # shared subplans are walked once
    if not isinstance(plan, ConstructorNode) or id(plan) in visited:
        return
    visited.add(id(plan))

    for child in plan.children:
        if not isinstance(child, ConstructorNode):
            continue
        if not registry.is_registered(child.target):
            logger.debug("Plan for %s references unregistered %s", type_name(plan.target), type_name(child.target))
            raise UnregisteredTypeError(child.target)
        _validate(child, registry, visited)
