from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ._errors import CircularResolutionError, type_name
from ._plan import ConstantNode, ConstructionPlan, ConstructorNode, FactoryCallNode


if TYPE_CHECKING:
    from collections.abc import Callable


logger = logging.getLogger(__name__)

V = TypeVar("V")


class Lifetime(Enum):
    TRANSIENT = "transient"
    SINGLE = "single"


class OnceCell(Generic[V]):
    """Set-once cell: the first successful `get_or_init` wins, every caller sees its value.

    Initialization runs under a lock (double-checked), so concurrent first
    callers block until the value is set. If the initializer raises the cell
    stays empty and the exception propagates. Re-entering from the thread
    that is running the initializer raises CircularResolutionError for 'key'.
    """

    __slots__ = ("_key", "_lock", "_owner", "_set", "_value")

    def __init__(self, key: Any = None) -> None:
        self._key = key
        self._lock = threading.Lock()
        self._owner: int | None = None
        self._set = False
        self._value: V | None = None

    @property
    def is_set(self) -> bool:
        return self._set

    def get_or_init(self, init: Callable[[], V]) -> V:
        if self._set:
            return self._value  # type: ignore[return-value]
        if self._owner == threading.get_ident():
            raise CircularResolutionError(self._key)
        with self._lock:
            if not self._set:
                self._owner = threading.get_ident()
                try:
                    self._value = init()
                    self._set = True
                finally:
                    self._owner = None
        return self._value  # type: ignore[return-value]


def compile_plan(plan: ConstructionPlan) -> Callable[[], Any]:
    """Compile a plan into a zero-argument callable by direct interpretation."""
    if isinstance(plan, ConstantNode):
        value = plan.value
        return lambda: value

    if isinstance(plan, FactoryCallNode):
        return plan.factory

    if isinstance(plan, ConstructorNode):
        return _compile_constructor(plan)

    msg = f"Unknown plan node: {plan!r}"
    raise TypeError(msg)


def _compile_constructor(plan: ConstructorNode) -> Callable[[], Any]:
    call = plan.constructor.call
    positional: list[Callable[[], Any]] = []
    keywords: list[tuple[str, Callable[[], Any]]] = []

    for param, child in plan.arguments():
        compiled = compile_plan(child)
        if param.positional_only:
            positional.append(compiled)
        else:
            keywords.append((param.name, compiled))

    if not positional and not keywords:
        return call

    def create() -> Any:
        args = [make() for make in positional]
        kwargs = {name: make() for name, make in keywords}
        return call(*args, **kwargs)

    return create


class TransientProvider:
    """New object graph on every `get_instance()`; the plan is compiled once, lazily."""

    lifetime = Lifetime.TRANSIENT

    def __init__(self, plan: ConstructionPlan) -> None:
        self.plan = plan
        self._factory: OnceCell[Callable[[], Any]] = OnceCell(plan.target)

    def compile(self) -> Callable[[], Any]:
        return self._factory.get_or_init(self._compile)

    def get_instance(self) -> Any:
        if isinstance(self.plan, ConstantNode):
            return self.plan.value
        return self.compile()()

    def _compile(self) -> Callable[[], Any]:
        logger.debug("Compiling transient plan for %s", type_name(self.plan.target))
        return compile_plan(self.plan)


class SingleProvider:
    """Executes the compiled plan exactly once and caches the result forever."""

    lifetime = Lifetime.SINGLE

    def __init__(self, plan: ConstructionPlan) -> None:
        self.plan = plan
        self._factory: OnceCell[Callable[[], Any]] = OnceCell(plan.target)
        self._instance: OnceCell[Any] = OnceCell(plan.target)

    @property
    def is_created(self) -> bool:
        return self._instance.is_set

    def compile(self) -> Callable[[], Any]:
        return self._factory.get_or_init(self._compile)

    def get_instance(self) -> Any:
        return self._instance.get_or_init(self._create)

    def _compile(self) -> Callable[[], Any]:
        logger.debug("Compiling single plan for %s", type_name(self.plan.target))
        return compile_plan(self.plan)

    def _create(self) -> Any:
        if isinstance(self.plan, ConstantNode):
            return self.plan.value
        return self.compile()()


InstanceProvider = TransientProvider | SingleProvider

_PROVIDERS: dict[Lifetime, type[InstanceProvider]] = {
    Lifetime.TRANSIENT: TransientProvider,
    Lifetime.SINGLE: SingleProvider,
}


def provider_for(lifetime: Lifetime, plan: ConstructionPlan) -> InstanceProvider:
    return _PROVIDERS[lifetime](plan)
