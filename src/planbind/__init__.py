"""Dependency injection with eagerly validated construction plans.

Registrations are turned into construction plans when they are made: the
constructor of the concrete type is selected, each of its dependencies is
looked up, and the resulting graph is checked against the registry. A
registration that succeeds can therefore always be resolved.

Exports:
- `Container`: register types, factories and instances; resolve them.
- `Lifetime`: TRANSIENT (new graph per resolve) or SINGLE (one cached instance).
- Plan nodes (`ConstructorNode`, `ConstantNode`, `FactoryCallNode`) and the
  `ConstructionPlanBuilder` / `validate` / `compile_plan` building blocks.
- Constructor selectors and the `@constructor` marker for alternate constructors.
- Dependency lookup hooks: `RegistryLookup` (default), `LoggingLookup`, `ChainedLookup`.
- `ContainerServiceProvider`: the container behind a generic `get_service` interface.
- The error hierarchy rooted at `ContainerError`.
"""

from ._adapter import ContainerServiceProvider, ServiceProvider
from ._builder import ChainedLookup, ConstructionPlanBuilder, DependencyLookup, LoggingLookup, RegistryLookup
from ._container import Container
from ._errors import (
    CircularResolutionError,
    ContainerError,
    DependencyUnresolvedError,
    DuplicateRegistrationError,
    NotAssignableError,
    RegistrationError,
    TypeNotConstructableError,
    UnregisteredTypeError,
)
from ._plan import ConstantNode, ConstructionPlan, ConstructorNode, FactoryCallNode, validate
from ._providers import Lifetime, OnceCell, SingleProvider, TransientProvider, compile_plan
from ._registry import Registration, Registry
from ._selectors import (
    ConstructorDescriptor,
    ConstructorSelector,
    LeastSpecificSelector,
    MarkedConstructorSelector,
    MostSpecificSelector,
    ParameterSpec,
    constructor,
    public_constructors,
)


__all__ = [
    "ChainedLookup",
    "CircularResolutionError",
    "ConstantNode",
    "ConstructionPlan",
    "ConstructionPlanBuilder",
    "ConstructorDescriptor",
    "ConstructorNode",
    "ConstructorSelector",
    "Container",
    "ContainerError",
    "ContainerServiceProvider",
    "DependencyLookup",
    "DependencyUnresolvedError",
    "DuplicateRegistrationError",
    "FactoryCallNode",
    "LeastSpecificSelector",
    "Lifetime",
    "LoggingLookup",
    "MarkedConstructorSelector",
    "MostSpecificSelector",
    "NotAssignableError",
    "OnceCell",
    "ParameterSpec",
    "Registration",
    "RegistrationError",
    "Registry",
    "RegistryLookup",
    "ServiceProvider",
    "SingleProvider",
    "TransientProvider",
    "TypeNotConstructableError",
    "UnregisteredTypeError",
    "compile_plan",
    "constructor",
    "public_constructors",
    "validate",
]
