import logging
from unittest.mock import MagicMock

import pytest

from planbind import (
    ChainedLookup,
    ConstantNode,
    Container,
    DependencyUnresolvedError,
    FactoryCallNode,
    LoggingLookup,
    RegistryLookup,
    UnregisteredTypeError,
)


class Config:
    def __init__(self, url: str = "sqlite://"):
        self.url = url


class A: ...


class C:
    def __init__(self, a: A):
        self.a = a


class Repo:
    def __init__(self, config: Config):
        self.config = config


def test_default_lookup_reads_own_registry():
    c = Container()
    assert isinstance(c.dependency_lookup, RegistryLookup)
    assert c.dependency_lookup is c.default_lookup

    c.register(A)
    assert c.dependency_lookup(A) is c.get_plan(A)
    assert c.dependency_lookup(C) is None


def test_counting_lookup_is_invoked_for_dependency():
    c = Container()
    calls = []

    def counting(dependency_type):
        calls.append(dependency_type)
        return c.default_lookup(dependency_type)

    c.dependency_lookup = counting
    c.register(A)
    c.register(C)

    assert isinstance(c.resolve(C).a, A)
    assert len(calls) >= 1
    assert calls == [A]


def test_lookup_passed_to_constructor():
    lookup = MagicMock(return_value=None)
    c = Container(dependency_lookup=lookup)

    with pytest.raises(DependencyUnresolvedError):
        c.register(C)
    lookup.assert_called_once_with(A)


def test_assigning_none_restores_default():
    c = Container()
    c.dependency_lookup = lambda t: None
    c.dependency_lookup = None
    assert c.dependency_lookup is c.default_lookup


def test_assigning_non_callable_raises():
    c = Container()
    with pytest.raises(TypeError):
        c.dependency_lookup = "nope"


def test_hook_can_supply_constants_for_unregistered_types():
    c = Container()
    config = Config("postgres://")
    settings = {Config: ConstantNode(target=Config, value=config)}
    c.dependency_lookup = ChainedLookup(c.default_lookup, settings.get)

    c.register(Repo)
    assert c.resolve(Repo).config is config
    assert not c.is_registered(Config)


def test_hook_can_supply_factories_for_unregistered_types():
    c = Container()
    c.dependency_lookup = lambda t: FactoryCallNode(target=t, factory=Config) if t is Config else None

    c.register(Repo)
    r1 = c.resolve(Repo)
    r2 = c.resolve(Repo)
    assert r1.config is not r2.config


def test_hook_supplying_constructor_plan_for_unregistered_type_fails_validation():
    c = Container()
    other = Container()
    other.register(A)
    c.dependency_lookup = ChainedLookup(c.default_lookup, other.default_lookup)

    with pytest.raises(UnregisteredTypeError) as ctx:
        c.register(C)
    assert not isinstance(ctx.value, DependencyUnresolvedError)
    assert ctx.value.type is A
    assert not c.is_registered(C)


def test_chained_lookup_returns_first_plan():
    first = ConstantNode(target=A, value=A())
    second = MagicMock()
    lookup = ChainedLookup(lambda t: first, second)

    assert lookup(A) is first
    second.assert_not_called()


def test_chained_lookup_needs_lookups():
    with pytest.raises(ValueError):
        ChainedLookup()


def test_logging_lookup_logs_hits_and_misses(caplog):
    c = Container()
    c.register(A)
    c.dependency_lookup = LoggingLookup(c.default_lookup)

    with caplog.at_level(logging.INFO, logger="planbind._builder"):
        c.register(C)
        with pytest.raises(DependencyUnresolvedError):
            c.register(Repo)

    messages = [r.getMessage() for r in caplog.records]
    assert any("A: ConstructorNode" in m for m in messages)
    assert any("Config: no plan" in m for m in messages)


def test_logging_lookup_uses_given_logger():
    logger = MagicMock()
    lookup = LoggingLookup(lambda t: None, logger=logger)

    assert lookup(A) is None
    assert logger.info.call_count == 1
