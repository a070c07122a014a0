from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, TypeVar, overload

from ._constructors import is_injectable, is_plain_class
from ._errors import NotRegisteredDependency, token_name
from ._registry import Lifetime, Registry
from ._resolver import Resolver
from ._validation import validate_impl, validate_instance


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")


class Container:
    """Minimal IoC container.

    - register implementation types, factories or pre-built instances
    - resolve with constructor injection driven by type annotations
    - lifetimes: singleton / transient
    - optional scoping.

    Each container owns its registrations; containers never share state
    unless one is a scope of the other.
    """

    def __init__(self, *, default_lifetime: Lifetime = Lifetime.SINGLETON) -> None:
        self._default_lifetime = default_lifetime
        self._registry = Registry()
        self._lock = threading.RLock()
        self._resolver = Resolver(self._registry, self, lock=self._lock)

    @property
    def default_lifetime(self) -> Lifetime:
        return self._default_lifetime

    @overload
    def register(
        self,
        token: type[T],
        impl: type[T] | None = ...,
        *,
        factory: None = ...,
        lifetime: Lifetime | None = ...,
    ) -> None: ...

    @overload
    def register(
        self,
        token: type[T],
        impl: None = ...,
        *,
        factory: Callable[[Container], T],
        lifetime: Lifetime | None = ...,
    ) -> None: ...

    def register(
        self,
        token: Any,
        impl: type | None = None,
        *,
        factory: Callable[[Container], Any] | None = None,
        lifetime: Lifetime | None = None,
    ) -> None:
        """Register an implementation type or a factory for a token.

        Re-registering a token replaces the previous registration, including
        any singleton it already built.

        Example:
          container.register(Foo)                    # Foo -> Foo
          container.register(IFoo, FooImpl, lifetime=Lifetime.TRANSIENT)
          container.register(IDb, factory=lambda c: connect(c.resolve(Settings)))

        """
        if impl is not None and factory is not None:
            msg = "Provide either `impl` or `factory`, not both."
            raise ValueError(msg)

        lifetime = lifetime or self._default_lifetime

        if factory is not None:
            if not callable(factory):
                msg = f"Factory for {token_name(token)} must be callable"
                raise TypeError(msg)
            with self._lock:
                self._registry.register_factory(token, factory, lifetime)
            logger.debug("Registered %s -> factory %r (%s)", token_name(token), factory, lifetime.value)
            return

        if impl is None:
            impl = token

        if not is_injectable(impl):
            msg = f"Cannot use {token_name(impl)} as an implementation: it cannot be instantiated"
            raise TypeError(msg)

        if is_plain_class(token):
            validate_impl(token, impl)

        with self._lock:
            self._registry.register(token, impl, lifetime)
        logger.debug("Registered %s -> %s (%s)", token_name(token), token_name(impl), lifetime.value)

    def register_instance(self, token: Any, instance: object) -> None:
        """Register a pre-built instance (always singleton, last call wins)."""
        if is_plain_class(token):
            validate_instance(token, instance)

        with self._lock:
            self._registry.register_instance(token, instance)
        logger.debug("Registered %s -> instance of %s", token_name(token), type(instance).__name__)

    def unregister(self, token: Any) -> None:
        """Remove the registration for `token`, dropping any cached singleton."""
        with self._lock:
            if self._registry.remove(token) is None:
                raise NotRegisteredDependency(token)
        logger.debug("Unregistered %s", token_name(token))

    def is_registered(self, token: Any) -> bool:
        with self._lock:
            return self._resolver.is_registered(token)

    @overload
    def resolve(self, token: type[T]) -> T: ...

    @overload
    def resolve(self, token: Any) -> Any: ...

    def resolve(self, token: Any) -> Any:
        """Resolve the token to an instance.

        - If a registration exists: use it (cached singleton, factory or impl).
        - If no registration and token is a concrete class: auto-wire it from
          its constructor annotations.

        Raises NotRegisteredDependency, NoAvailableConstructors or
        DependencyCycleDetected; nothing is cached when resolution fails.
        """
        return self._resolver.resolve(token)

    def create_scope(self) -> Scope:
        """Create a scope that prefers its own registrations, falls back to parent."""
        return Scope(self, _from_parent=True)


class Scope(Container):
    """A scoped container that looks up in itself first, then in its parent.

    Registrations owned by the parent are built by the parent, so parent
    singletons never capture scope-local dependencies. Useful for
    per-request/per-test lifetimes without altering root registrations.
    """

    def __init__(self, parent: Container, *, _from_parent: bool = False) -> None:
        if not _from_parent:
            msg = "Scope instances must be created via Container.create_scope()"
            raise RuntimeError(msg)
        super().__init__(default_lifetime=parent.default_lifetime)
        self._parent = parent
        self._lock = parent._lock  # noqa: SLF001
        self._resolver = parent._resolver.create_child(self._registry, self)  # noqa: SLF001

    @property
    def parent(self) -> Container:
        return self._parent
