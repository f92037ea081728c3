"""
Parameter-type derivation and signature matching.

Argument types are taken from the runtime type of each argument value and
matched exactly against declared annotations: ``bool`` does not match an
``int`` parameter. Unannotated parameters and ``typing.Any`` accept anything.
"""

import inspect
import traceback
import types
import typing
from typing import Any, Callable, Iterable, Sequence

from .config import NO_PARAMETERS

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
_UNION_ORIGINS = (typing.Union, types.UnionType)


def simple_name(qualified_name: str | None) -> str:
    """Return the last dot-separated segment of a qualified name."""
    return str(qualified_name).split(".")[-1]


def type_name(tp: Any) -> str:
    """Unqualified name of a type, as shown in grading messages."""
    return getattr(tp, "__name__", None) or str(tp)


def derive_parameter_types(args: Sequence[Any]) -> tuple[type, ...]:
    """Runtime types of the given argument values, in order."""
    return tuple(type(arg) for arg in args)


def describe_parameter_types(parameter_types: Iterable[Any] | None) -> str:
    """
    Render parameter types as ``[ A, B ]``.

    Args:
        parameter_types: Types to render; empty or None renders as ``[ none ]``.

    Returns:
        The bracketed, comma-joined simple type names.
    """
    names = [type_name(tp) for tp in parameter_types or ()]
    if not names:
        return NO_PARAMETERS
    return f"[ {', '.join(names)} ]"


def describe_exception(exc: BaseException) -> str:
    """String form of an exception, e.g. ``ZeroDivisionError: division by zero``."""
    return traceback.format_exception_only(type(exc), exc)[-1].strip()


def _resolved_hints(func: Callable[..., Any]) -> dict[str, Any]:
    try:
        return typing.get_type_hints(func)
    except Exception:
        # Unresolvable forward references are compared by name instead
        return dict(getattr(func, "__annotations__", {}) or {})


def annotation_matches(annotation: Any, arg_type: Any) -> bool:
    """
    Whether a declared annotation accepts a derived argument type.

    Args:
        annotation: Declared annotation (possibly a string or a typing construct).
        arg_type: Type derived from an argument value, or requested by a caller.

    Returns:
        True when the annotation is absent, ``Any``, or names exactly ``arg_type``.
    """
    if annotation is inspect.Parameter.empty or annotation is Any:
        return True
    arg_type = typing.get_origin(arg_type) or arg_type
    if annotation is None:
        annotation = type(None)
    if isinstance(annotation, str):
        return annotation in (type_name(arg_type), getattr(arg_type, "__qualname__", None))
    origin = typing.get_origin(annotation)
    if origin in _UNION_ORIGINS:
        return any(annotation_matches(member, arg_type) for member in typing.get_args(annotation))
    if origin is not None:
        return origin is arg_type
    return annotation is arg_type


def _signature(func: Callable[..., Any]) -> inspect.Signature | None:
    try:
        return inspect.signature(func)
    except (TypeError, ValueError):
        return None


def accepts_parameter_types(
    func: Callable[..., Any],
    parameter_types: Sequence[Any],
    bound: bool = True,
) -> bool:
    """
    Check whether a function can be called positionally with the given types.

    Args:
        func: The unbound function (including its ``self``/``cls`` parameter).
        parameter_types: Types of the positional arguments, in order.
        bound: Whether the first parameter is the receiver and must be skipped.

    Returns:
        True when arity and every annotation accept the types. Callables
        without an introspectable signature (some builtins) always match.
    """
    signature = _signature(func)
    if signature is None:
        return True

    parameters = list(signature.parameters.values())
    if bound and parameters and parameters[0].kind in _POSITIONAL:
        parameters = parameters[1:]

    positional = [p for p in parameters if p.kind in _POSITIONAL]
    variadic = next((p for p in parameters if p.kind is inspect.Parameter.VAR_POSITIONAL), None)
    required = [p for p in positional if p.default is inspect.Parameter.empty]

    if len(parameter_types) < len(required):
        return False
    if len(parameter_types) > len(positional) and variadic is None:
        return False

    hints = _resolved_hints(func)
    for index, arg_type in enumerate(parameter_types):
        parameter = positional[index] if index < len(positional) else variadic
        annotation = hints.get(parameter.name, parameter.annotation)
        if not annotation_matches(annotation, arg_type):
            return False
    return True


def can_bind(func: Callable[..., Any], args: Sequence[Any]) -> bool:
    """Whether ``func(*args)`` would bind without a TypeError."""
    signature = _signature(func)
    if signature is None:
        return True
    try:
        signature.bind(*args)
    except TypeError:
        return False
    return True
