from __future__ import annotations

import inspect
from typing import Any, get_type_hints

from ._constructors import is_protocol


def validate_impl(token: type, impl: type) -> None:
    """Validate that `impl` may be registered for the class `token`.

    - Normal classes/ABCs: require issubclass(impl, token).
    - Protocols: nominal via MRO, otherwise structural conformance.
    """
    if not inspect.isclass(impl):
        msg = f"Implementation {impl!r} must be a class"
        raise TypeError(msg)

    if not is_protocol(token):
        if not issubclass(impl, token):
            msg = f"Implementation {impl.__name__} must be a subclass of {token.__name__}"
            raise TypeError(msg)
        return

    validate_protocol_impl(token, impl)


def validate_instance(token: type, instance: object) -> None:
    """Validate an already built object against `token`."""
    if is_protocol(token):
        try:
            validate_protocol_impl(token, type(instance))
        except TypeError as e:
            msg = f"Instance of {type(instance).__name__} does not conform to protocol {token.__name__} ({e})"
            raise TypeError(msg) from e
        return

    if not isinstance(instance, token):
        msg = f"Instance of {type(instance).__name__} is not an instance of {token.__name__}"
        raise TypeError(msg)


def validate_protocol_impl(proto_cls: type, impl: type) -> None:
    if proto_cls in getattr(impl, "__mro__", ()):
        return

    missing: list[str] = []
    mismatches: list[str] = []

    try:
        proto_hints = get_type_hints(proto_cls, include_extras=True)
    except (NameError, TypeError):
        proto_hints = {}

    # attributes declared by annotation only
    for name in proto_hints:
        if not name.startswith("_") and not hasattr(impl, name):
            missing.append(name)

    for name, proto_attr in proto_cls.__dict__.items():
        if name.startswith("_") or not inspect.isfunction(proto_attr):
            continue

        if not hasattr(impl, name):
            missing.append(name)
            continue

        problem = _compare_method(name, proto_attr, getattr(impl, name), impl)
        if problem:
            mismatches.append(problem)

    if missing or mismatches:
        parts = []
        if missing:
            parts.append(f"missing members: {', '.join(missing)}")
        if mismatches:
            parts.append(f"signature mismatches: {', '.join(mismatches)}")

        msg = (
            f"Implementation {impl.__name__} does not structurally conform to protocol "
            f"{proto_cls.__name__}: {'; '.join(parts)}"
        )
        raise TypeError(msg)


def _compare_method(name: str, proto_attr: Any, impl_attr: Any, impl: type) -> str | None:
    if not callable(impl_attr):
        return f"{name}: not callable on {impl.__name__}"

    try:
        proto_sig = inspect.signature(proto_attr)
        impl_sig = inspect.signature(impl_attr)
    except (TypeError, ValueError) as e:
        return f"{name}: unable to compare signatures ({e})"

    proto_arity = _required_positional(proto_sig)
    impl_arity = _required_positional(impl_sig)
    if impl_arity < proto_arity:
        return (
            f"{name}: impl has fewer required positional params ({impl_arity}) "
            f"than protocol ({proto_arity})"
        )

    proto_ret = proto_sig.return_annotation
    impl_ret = impl_sig.return_annotation
    if (
        proto_ret is not inspect.Signature.empty
        and impl_ret is not inspect.Signature.empty
        and proto_ret is not Any
        and impl_ret is not Any
        and not _is_return_type_compatible(impl_ret, proto_ret)
    ):
        return f"{name}: return type {impl_ret!r} is not compatible with protocol return type {proto_ret!r}"

    return None


def _required_positional(sig: inspect.Signature) -> int:
    return sum(
        1
        for p in sig.parameters.values()
        if p.name != "self"
        and p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        and p.default is inspect.Parameter.empty
    )


def _is_return_type_compatible(impl_ret: object, proto_ret: object) -> bool:
    if impl_ret == proto_ret:
        return True

    if isinstance(impl_ret, type) and isinstance(proto_ret, type):
        return issubclass(impl_ret, proto_ret)

    # Unions, TypeVars, string annotations: conservative failure
    return False
