"""
Base class for grading test suites.

Grading tests inherit from :class:`BehaviorTest` and call its helpers to
look up and exercise the submission's classes. A failed lookup is reported
to the sink (``pytest.fail`` by default) and the helper returns None.
"""

from typing import Any, Callable

from .models import MethodHandle, ProbeResult
from .probe import ReflectiveProbe
from .sinks import FailureSink, pytest_sink


class BehaviorTest:
    """
    Reflection helpers for functional tests of student submissions.

    The operations include:
    - retrieving a class given its qualified name,
    - instantiating an object of a class with given constructor arguments,
    - retrieving the value of an attribute given the attribute's name,
    - retrieving a method from a class given its name and parameter types,
    - invoking a method with arguments and retrieving its return value.

    Subclasses must not define ``__init__`` so pytest can collect them; the
    probe plugin replaces ``probe`` with the configured one before each test.
    """

    probe: ReflectiveProbe = ReflectiveProbe()
    sink: FailureSink = staticmethod(pytest_sink)

    @classmethod
    def with_probe(cls, probe: ReflectiveProbe, sink: FailureSink | None = None) -> "BehaviorTest":
        """Create a helper bound to a specific probe and, optionally, sink."""
        behavior = cls()
        behavior.probe = probe
        if sink is not None:
            behavior.sink = sink
        return behavior

    def resolve_type(self, qualified_name: str) -> type | None:
        """Retrieve a class by its qualified name (``package.module.ClassName``)."""
        return self._report(self.probe.resolve_type(qualified_name))

    def instantiate(self, qualified_name: str, *args: Any) -> Any:
        """Instantiate a class; omit ``args`` for the no-argument constructor."""
        return self._report(self.probe.instantiate(qualified_name, *args))

    def read_field(self, instance: Any, field_name: str) -> Any:
        """Retrieve the value of an attribute declared by the instance's class."""
        return self._report(self.probe.read_field(instance, field_name))

    def find_method(self, type_or_instance: Any, method_name: str, *parameter_types: Any) -> MethodHandle | None:
        """Retrieve a public method by name and parameter types."""
        return self._report(self.probe.find_method(type_or_instance, method_name, *parameter_types))

    def invoke(self, instance: Any, method: MethodHandle | Callable[..., Any] | None, *args: Any) -> Any:
        """Invoke a method on an instance and return its result."""
        return self._report(self.probe.invoke(instance, method, *args))

    def invoke_by_name(self, instance: Any, method_name: str, *args: Any) -> Any:
        """Invoke a method by name, deriving its parameter types from ``args``."""
        return self._report(self.probe.invoke_by_name(instance, method_name, *args))

    def _report(self, result: ProbeResult) -> Any:
        if result.failure is not None:
            self.sink(result.failure.message)
            return None
        return result.value
