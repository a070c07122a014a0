from __future__ import annotations

import inspect
import logging
import types
import typing
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, cast, get_type_hints

from ._errors import NoAvailableConstructors, token_name


if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping

    F = TypeVar("F")


logger = logging.getLogger(__name__)

_CONSTRUCTOR_MARKER = "__simplecontainer_constructor__"
_EMPTY = inspect.Parameter.empty
_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def constructor(method: F) -> F:
    """Mark a classmethod as an alternative constructor.

    Works above or below ``@classmethod``::

        class Config:
            def __init__(self, port: int) -> None: ...

            @constructor
            @classmethod
            def default(cls) -> Config:
                return cls(8080)
    """
    func = method.__func__ if isinstance(method, classmethod) else method
    if not inspect.isfunction(func):
        msg = f"@constructor expects a classmethod, got {method!r}"
        raise TypeError(msg)
    setattr(func, _CONSTRUCTOR_MARKER, True)
    return method


@dataclass(frozen=True)
class ParameterSpec:
    name: str
    kind: inspect._ParameterKind
    annotation: Any = _EMPTY
    default: Any = _EMPTY

    @property
    def annotated(self) -> bool:
        return self.annotation is not _EMPTY

    @property
    def has_default(self) -> bool:
        return self.default is not _EMPTY


@dataclass(frozen=True)
class ConstructorDescriptor:
    name: str
    target: Callable[..., object]
    parameters: tuple[ParameterSpec, ...] = ()

    @property
    def arity(self) -> int:
        return len(self.parameters)

    def invoke(self, arguments: Mapping[str, Any]) -> object:
        """Call the constructor; parameters missing from `arguments` keep their defaults."""
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for p in self.parameters:
            if p.kind is inspect.Parameter.POSITIONAL_ONLY:
                # positional slots can't be skipped, fall back to the default explicitly
                args.append(arguments.get(p.name, p.default))
            elif p.name in arguments:
                kwargs[p.name] = arguments[p.name]
        return self.target(*args, **kwargs)


class ConstructorSelector:
    """Picks the constructor a type is built with.

    Candidates are ``__init__`` followed by ``@constructor`` classmethods,
    tried fewest parameters first; candidates of equal arity keep that
    enumeration order. The first candidate whose parameters are all
    registered, defaulted or auto-wirable wins.
    """

    def __init__(self) -> None:
        self._memo: dict[Any, tuple[ConstructorDescriptor, ...]] = {}

    def select(self, impl: type, is_registered: Callable[[Any], bool]) -> ConstructorDescriptor:
        reasons: list[str] = []
        for candidate in self.candidates(impl):
            problem = _unsatisfiable_parameter(candidate, is_registered)
            if problem is None:
                logger.debug("Selected %s.%s (arity %d)", token_name(impl), candidate.name, candidate.arity)
                return candidate
            reasons.append(f"{candidate.name}() {problem}")

        raise NoAvailableConstructors(impl, reasons)

    def candidates(self, impl: type) -> tuple[ConstructorDescriptor, ...]:
        cached = self._memo.get(impl)
        if cached is None:
            cached = tuple(sorted(_enumerate_constructors(impl), key=lambda c: c.arity))
            self._memo[impl] = cached
        return cached


def _unsatisfiable_parameter(candidate: ConstructorDescriptor, is_registered: Callable[[Any], bool]) -> str | None:
    for p in candidate.parameters:
        if p.annotated and is_registered(p.annotation):
            continue
        if p.has_default:
            continue
        if p.annotated and is_injectable(p.annotation):
            continue

        if not p.annotated:
            return f"parameter '{p.name}' has no annotation and no default"
        return f"parameter '{p.name}' needs unregistered {token_name(p.annotation)}"

    return None


def _enumerate_constructors(cls: type) -> Iterator[ConstructorDescriptor]:
    yield _init_descriptor(cls)

    seen: set[str] = set()
    for klass in cls.__mro__:
        for name, attr in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if isinstance(attr, classmethod) and getattr(attr.__func__, _CONSTRUCTOR_MARKER, False):
                yield _method_descriptor(cls, name, attr.__func__)


def _init_descriptor(cls: type) -> ConstructorDescriptor:
    try:
        sig = inspect.signature(cls)
    except (TypeError, ValueError):
        # C-implemented types expose no signature; assume a plain cls()
        logger.debug("No signature available for %s, assuming a zero-argument constructor", token_name(cls))
        return ConstructorDescriptor(name="__init__", target=cls)

    init = inspect.getattr_static(cls, "__init__", None)
    hints = _get_type_hints(init, cls)
    return ConstructorDescriptor(name="__init__", target=cls, parameters=_parameters(sig, hints))


def _method_descriptor(cls: type, name: str, func: Callable[..., object]) -> ConstructorDescriptor:
    bound = getattr(cls, name)
    hints = _get_type_hints(func, cls)
    return ConstructorDescriptor(name=name, target=bound, parameters=_parameters(inspect.signature(bound), hints))


def _parameters(sig: inspect.Signature, hints: dict[str, Any]) -> tuple[ParameterSpec, ...]:
    return tuple(
        ParameterSpec(
            name=name,
            kind=p.kind,
            annotation=hints.get(name, p.annotation),
            default=p.default,
        )
        for name, p in sig.parameters.items()
        if p.kind not in _SKIPPED_KINDS
    )


def _get_type_hints(func: object, cls: type) -> dict[str, Any]:
    if func is None:
        return {}

    try:
        hints = get_type_hints(func)
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %s (%s) type hints", exc.name, cls.__name__, cls.__qualname__)
        hints = {}

    return hints


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def is_protocol(tp: Any) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def is_protocol(tp: Any) -> bool:
        return inspect.isclass(tp) and getattr(tp, "_is_protocol", False) and issubclass(tp, cast("type", Protocol))


def is_plain_class(tp: Any) -> bool:
    # list[int] passes inspect.isclass on 3.10
    return inspect.isclass(tp) and not isinstance(tp, types.GenericAlias)


def is_abstraction(tp: Any) -> bool:
    """True for Protocols and classes with unimplemented abstract methods."""
    if not is_plain_class(tp):
        return False
    return is_protocol(tp) or inspect.isabstract(tp)


def is_injectable(tp: Any) -> bool:
    """True when an unregistered `tp` may be instantiated directly.

    Concrete classes (builtins included) and parametrized generics like
    ``list[int]`` qualify; strings and other non-type tokens never do.
    """
    if isinstance(tp, types.GenericAlias):
        return inspect.isclass(tp.__origin__) and not is_abstraction(tp.__origin__)
    return is_plain_class(tp) and not is_abstraction(tp)
