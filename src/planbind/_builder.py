from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

from ._errors import DependencyUnresolvedError, TypeNotConstructableError, type_name
from ._plan import ConstantNode, ConstructionPlan, ConstructorNode, FactoryCallNode
from ._selectors import ConstructorSelector, MostSpecificSelector


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._registry import Registry


logger = logging.getLogger(__name__)


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


class DependencyLookup(Protocol):
    """Maps a dependency type to the plan that builds it, or None when it cannot."""

    def __call__(self, dependency_type: Any) -> ConstructionPlan | None: ...


class RegistryLookup:
    """Default lookup: plans of the registry's existing registrations, by exact key."""

    def __init__(self, registry: Registry) -> None:
        self._registry = registry

    def __call__(self, dependency_type: Any) -> ConstructionPlan | None:
        registration = self._registry.get(dependency_type)
        if registration is None:
            return None
        return registration.dependency_plan

    def __repr__(self) -> str:
        return f"RegistryLookup({self._registry!r})"


class LoggingLookup:
    """Log every lookup made through 'inner' and whether it produced a plan."""

    def __init__(self, inner: DependencyLookup, logger: logging.Logger | None = None) -> None:
        self._inner = inner
        self._logger = logger or logging.getLogger(__name__)

    def __call__(self, dependency_type: Any) -> ConstructionPlan | None:
        plan = self._inner(dependency_type)
        if plan is None:
            self._logger.info("Dependency %s: no plan", type_name(dependency_type))
        else:
            self._logger.info("Dependency %s: %r", type_name(dependency_type), plan)
        return plan


class ChainedLookup:
    """Ask each hook in turn; the first plan wins."""

    def __init__(self, *lookups: DependencyLookup) -> None:
        if not lookups:
            msg = "ChainedLookup needs at least one lookup."
            raise ValueError(msg)
        self._lookups = lookups

    def __call__(self, dependency_type: Any) -> ConstructionPlan | None:
        for lookup in self._lookups:
            plan = lookup(dependency_type)
            if plan is not None:
                return plan
        return None


class ConstructionPlanBuilder:
    """Turns a concrete type, instance or factory into a ConstructionPlan.

    Constructor parameters are resolved one level deep through the lookup
    hook; the plans it returns are embedded as they are, which is what makes
    the result a graph rather than a tree.
    """

    def __init__(self, selector: ConstructorSelector | None = None) -> None:
        self.selector = selector or MostSpecificSelector()

    def build(
        self,
        concrete: Any,
        lookup: DependencyLookup,
        *,
        instance: Any = MISSING,
        factory: Callable[[], Any] | None = None,
    ) -> ConstructionPlan:
        if instance is not MISSING and factory is not None:
            msg = "Provide either `instance` or `factory`, not both."
            raise ValueError(msg)

        if instance is not MISSING:
            return self.constant(concrete, instance)
        if factory is not None:
            return self.factory_call(concrete, factory)
        return self.constructor_call(concrete, lookup)

    def constant(self, target: Any, value: Any) -> ConstantNode:
        return ConstantNode(target=target, value=value)

    def factory_call(self, target: Any, factory: Callable[[], Any]) -> FactoryCallNode:
        if not callable(factory):
            msg = f"Factory for {type_name(target)} must be callable, got {factory!r}"
            raise TypeError(msg)
        return FactoryCallNode(target=target, factory=factory)

    def constructor_call(self, concrete: Any, lookup: DependencyLookup) -> ConstructorNode:
        selected = self.selector.select_constructor(concrete)
        if selected is None:
            raise TypeNotConstructableError(concrete)

        parameters = []
        children = []
        for param in selected.parameters:
            child = lookup(param.annotation)
            if child is None:
                if not param.has_default:
                    raise DependencyUnresolvedError(param.annotation, parameter=param.name, dependent=concrete)
                if not param.positional_only:
                    # leave it to the Python default
                    continue
                # positional slots cannot be skipped; pass the default explicitly
                child = self.constant(param.annotation, param.default)
            parameters.append(param)
            children.append(child)

        logger.debug(
            "Built plan for %s via %s with %d dependencies",
            type_name(concrete),
            selected.name,
            len(children),
        )
        return ConstructorNode(
            target=concrete,
            constructor=selected,
            parameters=tuple(parameters),
            children=tuple(children),
        )
