import unittest
from typing import Protocol

import pytest

from simplecontainer import Container, NoAvailableConstructors, constructor


class Clock(Protocol):
    def now(self) -> float: ...


class SystemClock(Clock):
    def now(self) -> float:
        return 0.0


class TestConstructorSelection(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_zero_argument_alternative_constructor_is_preferred(self):
        class Counter:
            def __init__(self, start: int):
                self.start = start

            @constructor
            @classmethod
            def empty(cls):
                return cls(0)

        self.cont.register_instance(int, 10)

        assert self.cont.resolve(Counter).start == 0

    def test_zero_argument_constructor_is_preferred_regardless_of_declaration_order(self):
        class Counter:
            @constructor
            @classmethod
            def starting_at(cls, start: int):
                obj = cls()
                obj.start = start
                return obj

            def __init__(self):
                self.start = 0

        self.cont.register_instance(int, 10)

        assert self.cont.resolve(Counter).start == 0

    def test_constructor_decorator_below_classmethod(self):
        class Counter:
            def __init__(self, start: int):
                self.start = start

            @classmethod
            @constructor
            def empty(cls):
                return cls(-1)

        assert self.cont.resolve(Counter).start == -1

    def test_constructor_with_unregistered_abstraction_is_skipped(self):
        class Scheduler:
            def __init__(self, clock: Clock):
                self.clock = clock

            @constructor
            @classmethod
            def with_system_clock(cls, clock: SystemClock, interval: float = 1.0):
                obj = cls(clock)
                obj.interval = interval
                return obj

        obj = self.cont.resolve(Scheduler)

        assert isinstance(obj.clock, SystemClock)
        assert obj.interval == 1.0

    def test_registering_abstraction_makes_smaller_constructor_eligible(self):
        class Scheduler:
            def __init__(self, clock: Clock):
                self.clock = clock
                self.source = "init"

            @constructor
            @classmethod
            def with_interval(cls, clock: SystemClock, interval: float = 1.0):
                obj = cls(clock)
                obj.source = "with_interval"
                return obj

        assert self.cont.resolve(Scheduler).source == "with_interval"

        self.cont.register(Clock, SystemClock)

        assert self.cont.resolve(Scheduler).source == "init"

    def test_equal_arity_keeps_declaration_order(self):
        class A: ...

        class B: ...

        class Pair:
            def __init__(self, a: A, b: B):
                self.source = "init"

            @constructor
            @classmethod
            def from_a(cls, a: A):
                obj = cls(a, B())
                obj.source = "from_a"
                return obj

            @constructor
            @classmethod
            def from_b(cls, b: B):
                obj = cls(A(), b)
                obj.source = "from_b"
                return obj

        assert self.cont.resolve(Pair).source == "from_a"

    def test_inherited_alternative_constructor_is_used(self):
        class Base:
            def __init__(self, start: int):
                self.start = start

            @constructor
            @classmethod
            def empty(cls):
                return cls(5)

        class Derived(Base): ...

        obj = self.cont.resolve(Derived)

        assert type(obj) is Derived
        assert obj.start == 5

    def test_subclass_can_shadow_inherited_alternative_constructor(self):
        class Base:
            def __init__(self, start: int):
                self.start = start

            @constructor
            @classmethod
            def empty(cls):
                return cls(5)

        class Derived(Base):
            @classmethod
            def empty(cls):
                return cls(1)

        # only __init__ is left; the int is auto-wired
        assert self.cont.resolve(Derived).start == 0

    def test_no_satisfiable_constructor_lists_every_candidate(self):
        class Sink(Protocol):
            def write(self, data: bytes) -> None: ...

        class Needy:
            def __init__(self, clock: Clock):
                self.clock = clock

            @constructor
            @classmethod
            def from_sink(cls, sink: Sink):
                return cls(SystemClock())

        with pytest.raises(NoAvailableConstructors) as ctx:
            self.cont.resolve(Needy)

        assert ctx.value.token is Needy
        assert len(ctx.value.reasons) == 2
        assert "clock" in str(ctx.value)
        assert "sink" in str(ctx.value)

    def test_constructor_decorator_rejects_non_callables(self):
        with pytest.raises(TypeError):
            constructor(42)


class TestVariadicConstructorInjection(unittest.TestCase):
    cont: Container

    def setUp(self):
        self.cont = Container()

    def test_resolve_ignores_inherited_variadic_args_and_kwargs(self):
        class Base:
            def __init__(self, value: int = 7, *args, **kwargs):
                self.value = value
                self.args = args
                self.kwargs = kwargs

        class Derived(Base):
            ...
            # No explicit __init__; inherits Base.__init__ with *args/**kwargs

        child = self.cont.resolve(Derived)  # should ignore *args/**kwargs and use default for 'value'
        assert isinstance(child, Derived)
        assert child.value == 7
        assert child.args == ()
        assert child.kwargs == {}

    def test_variadic_parameters_do_not_count_towards_arity(self):
        class Clockish:
            def __init__(self, *parts, **options):
                self.parts = parts
                self.source = "init"

            @constructor
            @classmethod
            def from_clock(cls, clock: SystemClock):
                obj = cls(clock)
                obj.source = "from_clock"
                return obj

        assert self.cont.resolve(Clockish).source == "init"
