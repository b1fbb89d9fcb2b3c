import inspect
import unittest

import pytest

from planbind import (
    Container,
    DependencyUnresolvedError,
    LeastSpecificSelector,
    MarkedConstructorSelector,
    MostSpecificSelector,
    constructor,
    public_constructors,
)


class Clock: ...


class Settings:
    def __init__(self):
        self.source = "defaults"


class Service:
    def __init__(self, clock: Clock):
        self.clock = clock
        self.settings = None
        self.built_by = "__init__"

    @constructor
    @classmethod
    def with_settings(cls, clock: Clock, settings: Settings) -> "Service":
        svc = cls(clock)
        svc.settings = settings
        svc.built_by = "with_settings"
        return svc

    @classmethod
    @constructor
    def bare(cls) -> "Service":
        svc = cls(Clock())
        svc.built_by = "bare"
        return svc

    @classmethod
    def not_marked(cls, clock: Clock, settings: Settings, extra: int) -> "Service":
        raise AssertionError("never selected")

    @constructor
    @classmethod
    def _private(cls, clock: Clock, settings: Settings, extra: int, more: int) -> "Service":
        raise AssertionError("never selected")


class Tie:
    def __init__(self, clock: Clock):
        self.built_by = "__init__"

    @constructor
    @classmethod
    def alternate(cls, settings: Settings) -> "Tie":
        obj = cls(Clock())
        obj.built_by = "alternate"
        return obj


class TestPublicConstructors(unittest.TestCase):
    def test_class_call_comes_first_then_marked_classmethods(self):
        names = [c.name for c in public_constructors(Service)]
        assert names == ["__init__", "with_settings", "bare"]

    def test_parameters_are_read_in_declaration_order(self):
        ctor = public_constructors(Service)[1]
        assert [p.name for p in ctor.parameters] == ["clock", "settings"]
        assert [p.annotation for p in ctor.parameters] == [Clock, Settings]
        assert ctor.arity == 2

    def test_variadic_parameters_are_not_part_of_the_descriptor(self):
        class Variadic:
            def __init__(self, clock: Clock, *args, **kwargs): ...

        (ctor,) = public_constructors(Variadic)
        assert [p.name for p in ctor.parameters] == ["clock"]
        assert ctor.parameters[0].kind is inspect.Parameter.POSITIONAL_OR_KEYWORD

    def test_inherited_marked_constructor_is_enumerated(self):
        class Derived(Service): ...

        names = [c.name for c in public_constructors(Derived)]
        assert names == ["__init__", "with_settings", "bare"]

    def test_non_class_has_no_constructors(self):
        assert public_constructors("Service") == []
        assert public_constructors(len) == []


class TestSelectors(unittest.TestCase):
    def test_most_specific_picks_greatest_parameter_count(self):
        selected = MostSpecificSelector().select_constructor(Service)
        assert selected.name == "with_settings"

    def test_most_specific_breaks_ties_by_enumeration_order(self):
        selected = MostSpecificSelector().select_constructor(Tie)
        assert selected.name == "__init__"

    def test_least_specific_picks_fewest_parameters(self):
        selected = LeastSpecificSelector().select_constructor(Service)
        assert selected.name == "bare"

    def test_marked_selector_prefers_marked_classmethod(self):
        selected = MarkedConstructorSelector().select_constructor(Tie)
        assert selected.name == "alternate"

    def test_marked_selector_falls_back(self):
        assert MarkedConstructorSelector().select_constructor(Clock).name == "__init__"
        assert MarkedConstructorSelector(LeastSpecificSelector()).select_constructor(Settings).name == "__init__"

    def test_selectors_return_none_for_unconstructable_types(self):
        for selector in (MostSpecificSelector(), LeastSpecificSelector(), MarkedConstructorSelector()):
            assert selector.select_constructor(int) is None


class TestContainerWithSelectors(unittest.TestCase):
    def test_default_selector_uses_classmethod_constructor(self):
        cont = Container()
        cont.register(Clock)
        cont.register(Settings)
        cont.register(Service)

        svc = cont.resolve(Service)
        assert svc.built_by == "with_settings"
        assert isinstance(svc.settings, Settings)

    def test_most_specific_selector_requires_all_dependencies(self):
        cont = Container()
        cont.register(Clock)

        with pytest.raises(DependencyUnresolvedError):
            cont.register(Service)
        assert not cont.is_registered(Service)

    def test_least_specific_selector_for_test_doubles(self):
        cont = Container(constructor_selector=LeastSpecificSelector())
        cont.register(Service)

        assert cont.resolve(Service).built_by == "bare"

    def test_custom_selector(self):
        class FirstOnly:
            def select_constructor(self, concrete):
                found = public_constructors(concrete)
                return found[0] if found else None

        cont = Container(constructor_selector=FirstOnly())
        cont.register(Clock)
        cont.register(Service)
        assert cont.resolve(Service).built_by == "__init__"
