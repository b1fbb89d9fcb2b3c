from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._builder import ConstructionPlanBuilder, DependencyLookup, RegistryLookup
from ._errors import UnregisteredTypeError
from ._plan import ConstructionPlan, validate
from ._providers import Lifetime
from ._registry import Registry


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._selectors import ConstructorSelector

    T = TypeVar("T")

    Token = type[T] | str


logger = logging.getLogger(__name__)


class Container:
    """Dependency-injection container.

    - register types (self or interface -> implementation), factories or instances
    - plans are built and validated eagerly, at registration
    - lifetimes: transient / single
    - one pluggable dependency lookup hook.
    """

    def __init__(
        self,
        *,
        constructor_selector: ConstructorSelector | None = None,
        dependency_lookup: DependencyLookup | None = None,
    ) -> None:
        self._registry = Registry()
        self._builder = ConstructionPlanBuilder(constructor_selector)
        self._default_lookup = RegistryLookup(self._registry)
        self._lookup: DependencyLookup = dependency_lookup if dependency_lookup is not None else self._default_lookup

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def default_lookup(self) -> DependencyLookup:
        """The lookup that reads this container's own registrations."""
        return self._default_lookup

    @property
    def dependency_lookup(self) -> DependencyLookup:
        """Hook used to find the plan of each constructor dependency.

        Defaults to `default_lookup`. Assigning None restores the default.
        The hook only affects registrations made after it is set.
        """
        return self._lookup

    @dependency_lookup.setter
    def dependency_lookup(self, lookup: DependencyLookup | None) -> None:
        if lookup is not None and not callable(lookup):
            msg = f"Dependency lookup must be callable, got {lookup!r}"
            raise TypeError(msg)
        self._lookup = lookup if lookup is not None else self._default_lookup
        logger.debug("Dependency lookup set to %r", self._lookup)

    @overload
    def register(
        self,
        requested: type[T],
        concrete: type[T] | None = ...,
        *,
        factory: Callable[[], T] | None = ...,
        lifetime: Lifetime = Lifetime.TRANSIENT,
    ) -> None: ...

    @overload
    def register(
        self,
        requested: str,
        concrete: type | None = ...,
        *,
        factory: Callable[[], Any] | None = ...,
        lifetime: Lifetime = Lifetime.TRANSIENT,
    ) -> None: ...

    def register(
        self,
        requested: Token[T],
        concrete: type | None = None,
        *,
        factory: Callable[[], Any] | None = None,
        lifetime: Lifetime = Lifetime.TRANSIENT,
    ) -> None:
        """Register 'requested', built from 'concrete' (defaults to 'requested') or from 'factory'.

        Example:
          container.register(Clock)
          container.register(IRepo, SqlRepo)
          container.register(IClock, factory=lambda: FixedClock(0))

        Constructor dependencies must already be resolvable through the
        dependency lookup hook.
        """
        if concrete is None:
            concrete = requested

        # duplicates and assignability first, so they win over plan building errors
        self._registry.check_registrable(requested, concrete)

        plan = self._builder.build(concrete, self._lookup, factory=factory)
        self._registry.register(requested, plan, lifetime, concrete=concrete)

    def register_single(
        self,
        requested: Token[T],
        concrete: type | None = None,
        *,
        factory: Callable[[], Any] | None = None,
    ) -> None:
        """Register 'requested' with a single, lazily created and cached instance."""
        self.register(requested, concrete, factory=factory, lifetime=Lifetime.SINGLE)

    def register_instance(self, requested: Token[T], instance: object) -> None:
        """Register a pre-built instance (always single). None is allowed."""
        plan = self._builder.build(requested, self._lookup, instance=instance)
        self._registry.register(requested, plan, Lifetime.SINGLE, concrete=requested)

    @overload
    def resolve(self, requested: type[T]) -> T: ...

    @overload
    def resolve(self, requested: str) -> object: ...

    def resolve(self, requested: Token[T]) -> object:
        """Resolve 'requested' to an instance.

        Raises UnregisteredTypeError when it was never registered. Errors
        raised by user constructors and factories propagate unchanged.
        """
        return self._registry.resolve(requested)

    def is_registered(self, key: Any, *, exact: bool = False) -> bool:
        """See `Registry.is_registered`; 'exact' limits the check to requested types."""
        return self._registry.is_registered(key, exact=exact)

    def build_plan(self, concrete: Any) -> ConstructionPlan:
        """Build and validate the constructor plan for 'concrete' without registering it."""
        plan = self._builder.build(concrete, self._lookup)
        validate(plan, self._registry)
        return plan

    def get_plan(self, requested: Any) -> ConstructionPlan:
        """Plan stored for a registered type."""
        registration = self._registry.get(requested)
        if registration is None:
            raise UnregisteredTypeError(requested)
        return registration.plan

    def __repr__(self) -> str:
        return f"Container({len(self._registry)} registrations)"

