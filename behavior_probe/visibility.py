"""
Access conventions used by the probe.

Python has no access modifiers. A member is private when its name starts
with a single underscore, when it is name-mangled, or when its function
was marked with :func:`private`. Dunder names are public.
"""

from typing import Any, Callable, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

PRIVATE_MARKER: str = "__probe_private__"


def private(func: F) -> F:
    """
    Mark a function as private.

    Exercise templates use this on ``__init__`` to give a class a private
    constructor, which the probe then refuses to call.

    Args:
        func: Function to mark.

    Returns:
        The same function, marked.
    """
    setattr(func, PRIVATE_MARKER, True)
    return func


def is_private_name(name: str) -> bool:
    """Whether an attribute name is private by convention."""
    if name.startswith("__") and name.endswith("__"):
        return False
    return name.startswith("_")


def is_marked_private(func: Any) -> bool:
    """Whether a function (or a static/class method wrapping one) is marked private."""
    func = getattr(func, "__func__", func)
    return bool(getattr(func, PRIVATE_MARKER, False))


def mangled_name(cls: type, name: str) -> str:
    """Return the name-mangled form ``_Class__name`` of a double-underscore name."""
    return f"_{cls.__name__.lstrip('_')}{name}"
