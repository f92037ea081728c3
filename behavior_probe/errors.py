"""Exception classes for the probe."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Failure


class ProbeError(Exception):
    """Base exception for all probe errors."""
    pass


class TypeLookupError(ProbeError):
    """A qualified name does not resolve to a class."""

    def __init__(self, qualified_name: str, reason: str = ""):
        super().__init__(reason or f"no class named {qualified_name}")
        self.qualified_name = qualified_name


class TypeInitializationError(ProbeError):
    """Importing the module that holds a class raised an exception."""

    def __init__(self, qualified_name: str, cause: BaseException):
        super().__init__(f"importing {qualified_name} failed: {cause!r}")
        self.qualified_name = qualified_name
        self.cause = cause


class ProbeFailedError(ProbeError):
    """Raised by ProbeResult.unwrap() when the probe call failed."""

    def __init__(self, failure: Failure):
        super().__init__(failure.message)
        self.failure = failure

    def __str__(self) -> str:
        return f"{self.failure.message} (cause: {self.failure.cause.value})"
