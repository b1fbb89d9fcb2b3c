from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ._assignability import check_assignable
from ._errors import DuplicateRegistrationError, UnregisteredTypeError, type_name
from ._plan import ConstantNode, ConstructionPlan, FactoryCallNode, validate
from ._providers import InstanceProvider, Lifetime, provider_for


if TYPE_CHECKING:
    from collections.abc import Iterator


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Registration:
    requested: Any
    concrete: Any
    plan: ConstructionPlan
    lifetime: Lifetime
    provider: InstanceProvider = field(repr=False)
    dependency_plan: ConstructionPlan = field(repr=False)

    @classmethod
    def create(cls, requested: Any, concrete: Any, plan: ConstructionPlan, lifetime: Lifetime) -> Registration:
        provider = provider_for(lifetime, plan)
        if lifetime is Lifetime.SINGLE and not isinstance(plan, ConstantNode):
            # dependents share the one cached instance instead of re-running the plan
            dependency_plan: ConstructionPlan = FactoryCallNode(target=concrete, factory=provider.get_instance)
        else:
            dependency_plan = plan
        return cls(
            requested=requested,
            concrete=concrete,
            plan=plan,
            lifetime=lifetime,
            provider=provider,
            dependency_plan=dependency_plan,
        )

    def get_instance(self) -> Any:
        return self.provider.get_instance()


class Registry:
    """Requested type -> Registration.

    Writes happen under a lock and are all-or-nothing; reads are plain dict
    lookups and safe alongside writes on other keys.
    """

    def __init__(self) -> None:
        self._registrations: dict[Any, Registration] = {}
        self._concrete_types: set[Any] = set()
        self._lock = threading.RLock()

    def register(
        self,
        requested: Any,
        plan: ConstructionPlan,
        lifetime: Lifetime = Lifetime.TRANSIENT,
        *,
        concrete: Any = None,
    ) -> Registration:
        """Validate and store a registration for 'requested'.

        Raises DuplicateRegistrationError, NotAssignableError or
        UnregisteredTypeError; on failure the registry is unchanged.
        """
        if concrete is None:
            concrete = plan.target

        with self._lock:
            self.check_registrable(requested, concrete, plan)
            validate(plan, self)

            registration = Registration.create(requested, concrete, plan, lifetime)
            self._registrations[requested] = registration
            if concrete is not None:
                self._concrete_types.add(concrete)

        logger.debug(
            "Registered %s -> %s (%s)",
            type_name(requested),
            type_name(concrete),
            lifetime.value,
        )
        return registration

    def check_registrable(self, requested: Any, concrete: Any, plan: ConstructionPlan | None = None) -> None:
        if requested in self._registrations:
            raise DuplicateRegistrationError(requested)

        if isinstance(plan, ConstantNode):
            # None is a legal constant for any requested type
            if plan.value is not None:
                check_assignable(requested, type(plan.value))
            return

        check_assignable(requested, concrete)

    def resolve(self, requested: Any) -> Any:
        registration = self._registrations.get(requested)
        if registration is None:
            raise UnregisteredTypeError(requested)
        return registration.get_instance()

    def get(self, requested: Any) -> Registration | None:
        return self._registrations.get(requested)

    def is_registered(self, key: Any, *, exact: bool = False) -> bool:
        """Whether 'key' is registered.

        A key counts as registered when it is a requested type, or, unless
        'exact' is set, when it is the concrete type of any registration.
        `resolve` only ever accepts requested types.
        """
        if key in self._registrations:
            return True
        return not exact and key in self._concrete_types

    def __contains__(self, key: object) -> bool:
        return key in self._registrations

    def __len__(self) -> int:
        return len(self._registrations)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._registrations))

    def __repr__(self) -> str:
        return f"Registry({len(self._registrations)} registrations)"
