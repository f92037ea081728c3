"""
Behavior Probe: reflective inspection of student submissions.

A grading toolkit whose core is a probe that looks up, instantiates and
invokes classes written by students, turning every introspection failure
into a readable grading message, plus a runner that executes grading
suites against each submission.
"""

from .behavior_test import BehaviorTest
from .errors import ProbeError, ProbeFailedError
from .models import Failure, FailureCause, MethodHandle, ProbeResult
from .probe import ReflectiveProbe
from .sinks import RecordingSink, pytest_sink
from .visibility import private

__version__ = "0.1.0"

__all__ = [
    "BehaviorTest",
    "Failure",
    "FailureCause",
    "MethodHandle",
    "ProbeError",
    "ProbeFailedError",
    "ProbeResult",
    "RecordingSink",
    "ReflectiveProbe",
    "private",
    "pytest_sink",
]
