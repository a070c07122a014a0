from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import Callable


logger = logging.getLogger(__name__)

_UNSET: Any = object()


class Lifetime(Enum):
    SINGLETON = "singleton"
    TRANSIENT = "transient"


@dataclass(eq=False)
class Registration:
    impl: Any
    lifetime: Lifetime
    factory: Callable[..., object] | None = None
    _instance: object = field(default=_UNSET, repr=False)

    @property
    def is_singleton(self) -> bool:
        return self.lifetime is Lifetime.SINGLETON

    @property
    def has_instance(self) -> bool:
        return self._instance is not _UNSET

    @property
    def cached_instance(self) -> object:
        return self._instance

    def cache(self, instance: object) -> None:
        if not self.is_singleton:
            msg = "Transient registrations never cache instances"
            raise ValueError(msg)
        self._instance = instance


class Registry:
    """Maps requested tokens to registrations.

    Holds no behaviour beyond lookup/insert/override; the owning container
    serializes access.
    """

    def __init__(self) -> None:
        self._entries: dict[Any, Registration] = {}

    def register(self, token: Any, impl: Any, lifetime: Lifetime) -> Registration:
        reg = Registration(impl=impl, lifetime=lifetime)
        self._store(token, reg)
        return reg

    def register_factory(self, token: Any, factory: Callable[..., object], lifetime: Lifetime) -> Registration:
        reg = Registration(impl=None, lifetime=lifetime, factory=factory)
        self._store(token, reg)
        return reg

    def register_instance(self, token: Any, instance: object) -> Registration:
        reg = Registration(impl=type(instance), lifetime=Lifetime.SINGLETON)
        reg.cache(instance)
        self._store(token, reg)
        return reg

    def lookup(self, token: Any) -> Registration | None:
        try:
            return self._entries.get(token)
        except TypeError:
            # unhashable annotation objects can never be registered
            return None

    def remove(self, token: Any) -> Registration | None:
        return self._entries.pop(token, None)

    def __contains__(self, token: Any) -> bool:
        return self.lookup(token) is not None

    def _store(self, token: Any, reg: Registration) -> None:
        previous = self._entries.get(token)
        if previous is not None:
            logger.debug("Replacing registration for %r (was %r)", token, previous)
        self._entries[token] = reg
