from __future__ import annotations

from typing import Any


def token_name(token: Any) -> str:
    return getattr(token, "__qualname__", None) or repr(token)


class ResolutionError(RuntimeError):
    pass


class NotRegisteredDependency(ResolutionError):
    """Raised when an abstraction (or non-injectable token) has no registration."""

    def __init__(self, token: Any) -> None:
        self.token = token
        super().__init__(f"No registration found for {token_name(token)}")


class NoAvailableConstructors(ResolutionError):
    """Raised when none of a type's constructors can be satisfied."""

    def __init__(self, token: Any, reasons: list[str] | None = None) -> None:
        self.token = token
        self.reasons = list(reasons or [])
        msg = f"No available constructor for {token_name(token)}"
        if self.reasons:
            msg = f"{msg}: {'; '.join(self.reasons)}"
        super().__init__(msg)


class DependencyCycleDetected(ResolutionError):
    """Raised when a type is requested again while it is still being built."""

    def __init__(self, token: Any, path: list[Any]) -> None:
        self.token = token
        self.path = list(path)
        chain = " -> ".join(token_name(t) for t in [*self.path, token])
        super().__init__(f"Dependency cycle detected: {chain}")
