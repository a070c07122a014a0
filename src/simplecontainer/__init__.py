"""Minimal inversion-of-control container.

This package resolves instances of requested types, constructing their
transitive dependencies from constructor annotations. Types can be mapped to
implementations, factories or pre-built instances with a singleton or
transient lifetime, and containers can be scoped.

Exports:
- `Container`: Main container supporting registration and resolution.
- `Scope`: Scoped container that resolves within itself first, then falls back
  to a parent container. Useful for per-request or per-test lifetimes.
- `Lifetime`: Enum for controlling object lifetimes (singleton or transient).
- `constructor`: Decorator marking a classmethod as an alternative constructor.
- `ResolutionError` and its subclasses `NotRegisteredDependency`,
  `NoAvailableConstructors` and `DependencyCycleDetected`.
"""

from ._constructors import constructor
from ._container import Container, Scope
from ._errors import DependencyCycleDetected, NoAvailableConstructors, NotRegisteredDependency, ResolutionError
from ._registry import Lifetime


__all__ = [
    "Container",
    "DependencyCycleDetected",
    "Lifetime",
    "NoAvailableConstructors",
    "NotRegisteredDependency",
    "ResolutionError",
    "Scope",
    "constructor",
]
