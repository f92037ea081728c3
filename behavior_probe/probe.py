"""
Reflective probe over student-submitted classes.

Looks classes up by qualified name, instantiates them, reads their fields
and invokes their methods. Every failure is turned into a ``Failure`` with
a grading message instead of an exception, so a grading test can report it
and move on.
"""

import abc
import builtins
import importlib
import inspect
import logging
import types
from typing import Any, Callable

from .config_loader import ProbeConfig
from .errors import TypeInitializationError, TypeLookupError
from .models import Failure, FailureCause, MethodHandle, MethodKind, ProbeResult
from .signatures import (
    accepts_parameter_types,
    can_bind,
    derive_parameter_types,
    describe_exception,
    describe_parameter_types,
    simple_name,
)
from .visibility import is_marked_private, is_private_name, mangled_name

logger = logging.getLogger(__name__)

_NOT_FOUND = object()


def load_type(qualified_name: str) -> type:
    """
    Resolve a dotted name such as ``package.module.Outer.Inner`` to a class.

    The longest importable module prefix is imported and the remaining
    segments are looked up as attributes. A name without a dot is looked
    up among the builtins.

    Raises:
        TypeLookupError: If the name does not denote a class.
        TypeInitializationError: If importing the module raised.
    """
    parts = str(qualified_name).split(".")
    if not qualified_name or not all(part.isidentifier() for part in parts):
        raise TypeLookupError(str(qualified_name), "not a valid qualified name")

    target: Any = None
    if len(parts) == 1:
        target = getattr(builtins, qualified_name, None)

    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as exc:
            # Only a missing module on our own path means "try a shorter prefix"
            if exc.name and (module_name == exc.name or module_name.startswith(exc.name + ".")):
                continue
            raise TypeInitializationError(qualified_name, exc) from exc
        except Exception as exc:
            raise TypeInitializationError(qualified_name, exc) from exc

        target = module
        for attribute in parts[split:]:
            target = getattr(target, attribute, None)
            if target is None:
                break
        break

    if not isinstance(target, type):
        raise TypeLookupError(qualified_name)
    return target


def is_abstract(cls: type) -> bool:
    """Abstract classes have unimplemented abstract methods or derive from ABC directly."""
    return inspect.isabstract(cls) or abc.ABC in cls.__bases__


def constructor_of(cls: type) -> Callable[..., Any] | None:
    """
    The function that receives constructor arguments.

    Returns ``__init__``, else an overridden ``__new__``, else None for the
    implicit no-argument constructor.
    """
    if cls.__init__ is not object.__init__:
        return cls.__init__
    if cls.__new__ is not object.__new__:
        return cls.__new__
    return None


def declared_field(instance: Any, name: str) -> Any:
    """
    Look up a field declared by the instance's own class.

    Instance attributes, slots declared on the exact class and plain data
    attributes of the class body count. Inherited slots and class
    attributes, properties and methods do not.

    Returns:
        The field value, or ``_NOT_FOUND``.
    """
    instance_dict = getattr(instance, "__dict__", None) or {}
    if name in instance_dict:
        return instance_dict[name]

    own = vars(type(instance))
    if name not in own:
        return _NOT_FOUND
    attribute = own[name]

    if isinstance(attribute, types.MemberDescriptorType):
        # Declared but never assigned slots read as None
        return getattr(instance, name, None)
    if name.startswith("__") and name.endswith("__"):
        return _NOT_FOUND
    if callable(attribute) or isinstance(attribute, (property, staticmethod, classmethod, types.GetSetDescriptorType)):
        return _NOT_FOUND
    return attribute


class ReflectiveProbe:
    """
    Safe, descriptive access to classes under test.

    Each operation returns a ``ProbeResult``; failures carry a message that
    names the class or member involved and the specific cause.
    """

    def __init__(self, config: ProbeConfig | None = None) -> None:
        """
        Initialize the probe.

        Args:
            config: Probe settings; defaults allow every package.
        """
        self.config = config or ProbeConfig()

    def resolve_type(self, qualified_name: str) -> ProbeResult:
        """
        Look up a class by its qualified name (``package.module.ClassName``).

        Args:
            qualified_name: Dotted name of the class.

        Returns:
            ProbeResult holding the class.
        """
        try:
            return ProbeResult.success(load_type(qualified_name))
        except TypeLookupError:
            return self._type_not_found(qualified_name)
        except TypeInitializationError as exc:
            subject = simple_name(qualified_name)
            return self._fail(
                FailureCause.STATIC_INITIALIZATION,
                f"The class '{subject}' could not be initialized because its module raised an exception: "
                f"{describe_exception(exc.cause)}. Make sure the module can be imported without errors.",
                subject,
                exc.cause,
            )

    def instantiate(self, qualified_name: str, *args: Any) -> ProbeResult:
        """
        Instantiate a class with the given constructor arguments.

        The constructor must accept exactly the runtime types of ``args``.

        Args:
            qualified_name: Dotted name of the class.
            *args: Constructor arguments; omit for the no-argument constructor.

        Returns:
            ProbeResult holding the new instance.
        """
        subject = simple_name(qualified_name)
        parameter_types = derive_parameter_types(args)
        signature = describe_parameter_types(parameter_types)
        fail_message = f"Could not instantiate the class '{subject}' because"

        try:
            cls = load_type(qualified_name)
        except TypeLookupError:
            return self._type_not_found(qualified_name)
        except TypeInitializationError as exc:
            return self._fail(
                FailureCause.STATIC_INITIALIZATION,
                f"{fail_message} the constructor with {len(args)} parameters could not be initialized: "
                f"{describe_exception(exc.cause)}.",
                subject,
                exc.cause,
            )

        if self._package_denied(cls):
            return self._fail(
                FailureCause.PACKAGE_ACCESS_DENIED,
                f"{fail_message} access to the package of the class was denied.",
                subject,
            )

        if is_abstract(cls):
            return self._fail(
                FailureCause.ABSTRACT_INSTANTIATION,
                f"{fail_message} the class is abstract and cannot be instantiated."
                " Make sure the class is concrete and implements all of its abstract methods.",
                subject,
            )

        constructor = constructor_of(cls)
        if constructor is None:
            found = not args
        else:
            found = accepts_parameter_types(constructor, parameter_types)
        if not found:
            return self._fail(
                FailureCause.CONSTRUCTOR_NOT_FOUND,
                f"{fail_message} the class does not have a constructor with the arguments: {signature}."
                " Make sure to implement this constructor properly.",
                subject,
            )

        if constructor is not None and is_marked_private(constructor):
            return self._fail(
                FailureCause.ACCESS_DENIED,
                f"{fail_message} access to its constructor with the parameters: {signature} was denied."
                " Make sure to check the modifiers of the constructor.",
                subject,
            )

        if constructor is not None and not can_bind(constructor, (cls, *args)):
            return self._fail(
                FailureCause.ILLEGAL_ARGUMENTS,
                f"{fail_message} the actual constructor of this class does not match the expected one."
                f" We expect one with {signature} parameters, which does not exist."
                " Make sure to implement this constructor correctly.",
                subject,
            )

        try:
            return ProbeResult.success(cls(*args))
        except (Exception, SystemExit) as exc:
            return self._fail(
                FailureCause.CONSTRUCTOR_ERROR,
                f"{fail_message} the constructor with {len(args)} parameters threw an exception and could not be"
                f" initialized: {describe_exception(exc)}. Make sure to check the constructor implementation.",
                subject,
                exc,
            )

    def read_field(self, instance: Any, field_name: str) -> ProbeResult:
        """
        Read a field declared by the instance's own class.

        Args:
            instance: Object holding the field.
            field_name: Name of the field.

        Returns:
            ProbeResult holding the field's current value.
        """
        cls = type(instance)
        subject = cls.__name__
        fail_message = f"Could not retrieve the attribute '{field_name}' from the class '{subject}' because"

        if self._package_denied(cls):
            return self._fail(
                FailureCause.PACKAGE_ACCESS_DENIED,
                f"{fail_message} access to the package of the class was denied.",
                subject,
            )

        name = str(field_name)
        candidates = [name] if is_private_name(name) else [name, f"_{name}", mangled_name(cls, f"__{name}")]
        if name.startswith("__") and not name.endswith("__"):
            candidates.append(mangled_name(cls, name))

        for candidate in candidates:
            value = declared_field(instance, candidate)
            if value is _NOT_FOUND:
                continue
            if is_private_name(candidate):
                return self._fail(
                    FailureCause.ACCESS_DENIED,
                    f"{fail_message} access to the attribute was denied. Make sure to check the modifiers of the attribute.",
                    subject,
                )
            return ProbeResult.success(value)

        return self._fail(
            FailureCause.FIELD_NOT_FOUND,
            f"{fail_message} the attribute does not exist. Make sure to implement the attribute correctly.",
            subject,
        )

    def find_method(self, type_or_instance: Any, method_name: str | None, *parameter_types: Any) -> ProbeResult:
        """
        Look up a public method, inherited ones included.

        Args:
            type_or_instance: Class to search, or an instance of it.
            method_name: Name of the method.
            *parameter_types: Positional parameter types after ``self``; omit for none.

        Returns:
            ProbeResult holding a ``MethodHandle``.
        """
        cls = type_or_instance if isinstance(type_or_instance, type) else type(type_or_instance)
        subject = cls.__name__
        if parameter_types:
            fail_message = (
                f"Could not find the method '{method_name}' with the parameters: "
                f"{describe_parameter_types(parameter_types)} from the class {subject} because"
            )
        else:
            fail_message = f"Could not find the method '{method_name}' from the class {subject} because"

        if not method_name:
            return self._fail(
                FailureCause.METHOD_NAME_MISSING,
                f"{fail_message} the name of the method is missing. Make sure to check the name of the method.",
                subject,
            )

        if self._package_denied(cls):
            return self._fail(
                FailureCause.PACKAGE_ACCESS_DENIED,
                f"{fail_message} access to the package class was denied.",
                subject,
            )

        handle = self._lookup_method(cls, method_name, parameter_types)
        if handle is None:
            return self._fail(
                FailureCause.METHOD_NOT_FOUND,
                f"{fail_message} the method does not exist. Make sure to implement this method properly.",
                subject,
            )
        return ProbeResult.success(handle)

    def invoke(self, instance: Any, method: MethodHandle | Callable[..., Any] | None, *args: Any) -> ProbeResult:
        """
        Invoke a method on an instance.

        Args:
            instance: Receiver of the call.
            method: A handle from ``find_method`` or a function taken from the class.
            *args: Arguments of the method; omit for none.

        Returns:
            ProbeResult holding the method's return value.
        """
        subject = type(instance).__name__
        handle = method if isinstance(method, MethodHandle) else self._handle_for(instance, method)
        name = handle.name if handle is not None else getattr(method, "__name__", str(method))
        fail_message = f"Could not invoke the method '{name}' in the class '{subject}' because"

        if handle is None:
            if method is None or not callable(method):
                return self._fail(
                    FailureCause.METHOD_NOT_FOUND,
                    f"{fail_message} the method does not exist. Make sure to implement this method properly.",
                    subject,
                )
            return self._fail(
                FailureCause.ARGUMENT_MISMATCH,
                f"{fail_message} the method is not declared by this class. Make sure to check the parameters of the method.",
                subject,
            )

        if is_private_name(handle.name) or is_marked_private(handle.function):
            return self._fail(
                FailureCause.ACCESS_DENIED,
                f"{fail_message} access to the method was denied. Make sure to check the modifiers of the method.",
                subject,
            )

        receiver_ok = isinstance(instance, handle.declaring_type) or (
            handle.kind is not MethodKind.INSTANCE and instance is handle.declaring_type
        )
        if handle.kind is MethodKind.STATIC:
            call_args: tuple[Any, ...] = args
        elif handle.kind is MethodKind.CLASS:
            call_args = (instance if isinstance(instance, type) else type(instance), *args)
        else:
            call_args = (instance, *args)

        bound = handle.kind is not MethodKind.STATIC
        if (
            not receiver_ok
            or not accepts_parameter_types(handle.function, derive_parameter_types(args), bound=bound)
            or not can_bind(handle.function, call_args)
        ):
            return self._fail(
                FailureCause.ARGUMENT_MISMATCH,
                f"{fail_message} the parameters are not implemented right. Make sure to check the parameters of the method.",
                subject,
            )

        try:
            return ProbeResult.success(handle.function(*call_args))
        except (Exception, SystemExit) as exc:
            return self._fail(
                FailureCause.METHOD_BODY_ERROR,
                f"{fail_message} of an exception within the method: {describe_exception(exc)}",
                subject,
                exc,
            )

    def invoke_by_name(self, instance: Any, method_name: str, *args: Any) -> ProbeResult:
        """
        Find a method by name and the runtime types of ``args``, then invoke it.

        Returns:
            ProbeResult holding the method's return value, or the lookup failure.
        """
        found = self.find_method(instance, method_name, *derive_parameter_types(args))
        if not found.ok:
            return found
        return self.invoke(instance, found.value, *args)

    def _lookup_method(self, cls: type, name: str, parameter_types: tuple[Any, ...]) -> MethodHandle | None:
        if is_private_name(name):
            return None
        try:
            raw = inspect.getattr_static(cls, name)
        except AttributeError:
            return None

        if isinstance(raw, staticmethod):
            kind, function = MethodKind.STATIC, raw.__func__
        elif isinstance(raw, classmethod):
            kind, function = MethodKind.CLASS, raw.__func__
        elif inspect.isfunction(raw) or inspect.ismethoddescriptor(raw):
            kind, function = MethodKind.INSTANCE, raw
        else:
            return None

        if not callable(function) or is_marked_private(function):
            return None
        if not accepts_parameter_types(function, parameter_types, bound=kind is not MethodKind.STATIC):
            return None

        return MethodHandle(
            name=name,
            declaring_type=next((owner for owner in cls.__mro__ if name in vars(owner)), cls),
            function=function,
            kind=kind,
            parameter_types=parameter_types,
        )

    def _handle_for(self, instance: Any, method: Any) -> MethodHandle | None:
        """Build a handle for a plain function by finding the class in the MRO that declares it."""
        if method is None or not callable(method):
            return None
        function = getattr(method, "__func__", method)
        name = getattr(function, "__name__", None)
        cls = instance if isinstance(instance, type) else type(instance)
        if not name:
            return None

        for owner in cls.__mro__:
            raw = vars(owner).get(name)
            if raw is None or getattr(raw, "__func__", raw) is not function:
                continue
            if isinstance(raw, staticmethod):
                kind = MethodKind.STATIC
            elif isinstance(raw, classmethod):
                kind = MethodKind.CLASS
            else:
                kind = MethodKind.INSTANCE
            return MethodHandle(name=name, declaring_type=owner, function=function, kind=kind)
        return None

    def _package_denied(self, cls: type) -> bool:
        module = getattr(cls, "__module__", None) or ""
        return any(
            module == package or module.startswith(package + ".")
            for package in self.config.denied_packages
        )

    def _type_not_found(self, qualified_name: str) -> ProbeResult:
        subject = simple_name(qualified_name)
        return self._fail(
            FailureCause.TYPE_NOT_FOUND,
            f"The class '{subject}' was not found within the submission. Make sure to implement it properly.",
            subject,
        )

    def _fail(
        self,
        cause: FailureCause,
        message: str,
        subject: str,
        exc: BaseException | None = None,
    ) -> ProbeResult:
        logger.debug("Probe failure (%s): %s", cause.value, message)
        detail = describe_exception(exc) if exc is not None else None
        return ProbeResult.failed(Failure(cause=cause, message=message, subject=subject, detail=detail))
