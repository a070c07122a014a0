from __future__ import annotations

import logging
import threading
import types
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from ._constructors import ConstructorSelector, is_injectable, is_plain_class
from ._errors import DependencyCycleDetected, NotRegisteredDependency, token_name
from ._validation import validate_instance


if TYPE_CHECKING:
    from collections.abc import Iterator

    from ._registry import Registration, Registry


logger = logging.getLogger(__name__)


class Resolution:
    """State of a single top-level resolve call.

    `path` is the construction frame used for cycle detection; `pending`
    holds singletons built during this call, written to their registrations
    only once the whole call has succeeded.
    """

    def __init__(self) -> None:
        self.path: list[Any] = []
        self.pending: dict[Registration, object] = {}

    @contextmanager
    def enter(self, token: Any) -> Iterator[None]:
        if token in self.path:
            raise DependencyCycleDetected(token, self.path[self.path.index(token) :])

        self.path.append(token)
        try:
            yield
        finally:
            self.path.pop()

    def commit(self) -> None:
        for reg, instance in self.pending.items():
            reg.cache(instance)
        self.pending.clear()


class Resolver:
    def __init__(
        self,
        registry: Registry,
        owner: Any,
        *,
        selector: ConstructorSelector | None = None,
        lock: threading.RLock | None = None,
        local: threading.local | None = None,
        parent: Resolver | None = None,
    ) -> None:
        self._registry = registry
        self._owner = owner
        self._selector = selector or ConstructorSelector()
        self._lock = lock or threading.RLock()
        self._local = local or threading.local()
        self._parent = parent

    def create_child(self, registry: Registry, owner: Any) -> Resolver:
        """Resolver for a scope: own registry, shared lock, frame slot and selector memo."""
        return Resolver(
            registry,
            owner,
            selector=self._selector,
            lock=self._lock,
            local=self._local,
            parent=self,
        )

    def is_registered(self, token: Any) -> bool:
        if token in self._registry:
            return True
        return self._parent is not None and self._parent.is_registered(token)

    def resolve(self, token: Any) -> object:
        with self._lock:
            active: Resolution | None = getattr(self._local, "resolution", None)
            if active is not None:
                # called back from a factory or constructor: same frame, same pending writes
                return self.resolve_internal(token, active)

            resolution = Resolution()
            self._local.resolution = resolution
            try:
                instance = self.resolve_internal(token, resolution)
                resolution.commit()
            finally:
                self._local.resolution = None

            logger.debug("Resolved %s -> %s", token_name(token), type(instance).__name__)
            return instance

    def resolve_internal(self, token: Any, resolution: Resolution) -> object:
        reg = self._registry.lookup(token)
        if reg is None and self._parent is not None and self._parent.is_registered(token):
            # parent-owned registrations are built with the parent's view
            return self._parent.resolve_internal(token, resolution)

        with resolution.enter(token):
            if reg is not None:
                return self._from_registration(token, reg, resolution)

            if not is_injectable(token):
                raise NotRegisteredDependency(token)

            return self._construct(token, resolution)

    def _from_registration(self, token: Any, reg: Registration, resolution: Resolution) -> object:
        if reg.has_instance:
            return reg.cached_instance
        if reg in resolution.pending:
            return resolution.pending[reg]

        if reg.factory is not None:
            instance = reg.factory(self._owner)
            if is_plain_class(token):
                validate_instance(token, instance)
        else:
            instance = self._construct(reg.impl, resolution)

        if reg.is_singleton:
            resolution.pending[reg] = instance
        return instance

    def _construct(self, impl: Any, resolution: Resolution) -> object:
        if isinstance(impl, types.GenericAlias):
            impl = impl.__origin__
        ctor = self._selector.select(impl, self.is_registered)

        arguments: dict[str, Any] = {}
        for p in ctor.parameters:
            registered = p.annotated and self.is_registered(p.annotation)
            if p.has_default and not registered:
                continue
            arguments[p.name] = self.resolve_internal(p.annotation, resolution)

        logger.debug("Constructing %s via %s(%s)", token_name(impl), ctor.name, ", ".join(arguments))
        return ctor.invoke(arguments)
