"""
Pydantic models for the Behavior Probe system.

Defines the structured results of probe calls and the data types that
flow through the grading runner.
"""

from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import ProbeFailedError


class FailureCause(str, Enum):
    """Every distinguishable reason a probe call can fail."""

    TYPE_NOT_FOUND = "type-not-found"
    CONSTRUCTOR_NOT_FOUND = "constructor-not-found"
    ILLEGAL_ARGUMENTS = "illegal-arguments"
    ABSTRACT_INSTANTIATION = "abstract-instantiation"
    CONSTRUCTOR_ERROR = "constructor-error"
    STATIC_INITIALIZATION = "static-initialization"
    ACCESS_DENIED = "access-denied"
    PACKAGE_ACCESS_DENIED = "package-access-denied"
    FIELD_NOT_FOUND = "field-not-found"
    METHOD_NOT_FOUND = "method-not-found"
    METHOD_NAME_MISSING = "method-name-missing"
    ARGUMENT_MISMATCH = "argument-mismatch"
    METHOD_BODY_ERROR = "method-body-error"


class MethodKind(str, Enum):
    """How a method binds when invoked."""

    INSTANCE = "instance"
    STATIC = "static"
    CLASS = "class"


class Failure(BaseModel):
    """
    A described probe failure.

    Attributes:
        cause: Which failure occurred.
        message: Human-readable grading feedback.
        subject: Simple name of the class the failure is about.
        detail: String form of the underlying exception, if any.
    """

    cause: FailureCause = Field(..., description="Failure cause")
    message: str = Field(..., description="Grading feedback shown to the student")
    subject: str = Field(default="", description="Simple name of the implicated class")
    detail: str | None = Field(default=None, description="Underlying exception text")


class ProbeResult(BaseModel):
    """
    Outcome of a probe call: a value or a failure, never both.

    Attributes:
        value: Returned value (may legitimately be None on success).
        failure: Failure description when the call could not run.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    value: Any = Field(default=None, description="Value produced by the call")
    failure: Failure | None = Field(default=None, description="Failure, if the call failed")

    @model_validator(mode="after")
    def check_value_on_failure(self) -> "ProbeResult":
        if self.failure is not None and self.value is not None:
            raise ValueError("a failed probe result cannot carry a value")
        return self

    @classmethod
    def success(cls, value: Any) -> "ProbeResult":
        return cls(value=value)

    @classmethod
    def failed(cls, failure: Failure) -> "ProbeResult":
        return cls(failure=failure)

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> Any:
        """
        Return the value or raise.

        Raises:
            ProbeFailedError: If the call failed.
        """
        if self.failure is not None:
            raise ProbeFailedError(self.failure)
        return self.value


class MethodHandle(BaseModel):
    """
    A method found on a class.

    Attributes:
        name: Method name.
        declaring_type: First class in the MRO that defines the method.
        function: Underlying function (unwrapped for static and class methods).
        kind: Instance, static or class method.
        parameter_types: Types the lookup matched, in order.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    name: str = Field(..., description="Method name")
    declaring_type: type = Field(..., description="Class that defines the method")
    function: Callable[..., Any] = Field(..., description="Underlying function")
    kind: MethodKind = Field(default=MethodKind.INSTANCE, description="Binding kind")
    parameter_types: tuple[Any, ...] = Field(default=(), description="Matched parameter types")


class TestResult(BaseModel):
    """
    Result from pytest execution.

    Attributes:
        test_name: Name of the test function.
        passed: Whether the test passed.
        error_message: Error message if test failed.
        duration_seconds: Time taken to run the test.
    """

    __test__ = False

    test_name: str = Field(..., description="Test function name")
    passed: bool = Field(..., description="Whether the test passed")
    error_message: str = Field(default="", description="Error message if failed")
    duration_seconds: float = Field(default=0.0, ge=0, description="Test duration")


class ExecutionResult(BaseModel):
    """
    Result from running the grading suite against a submission.

    Attributes:
        success: Whether execution completed without errors.
        setup_log: Notes about preparing the run.
        test_log: Output from pytest execution.
        exit_code: Process exit code.
        tests: Parsed test results from JUnit XML.
        timeout_exceeded: Whether the execution timed out.
    """

    success: bool = Field(..., description="Whether execution succeeded")
    setup_log: str = Field(default="", description="Run preparation output")
    test_log: str = Field(default="", description="Pytest execution output")
    exit_code: int = Field(default=-1, description="Process exit code")
    tests: list[TestResult] = Field(default_factory=list, description="Parsed test results")
    timeout_exceeded: bool = Field(default=False, description="Whether timeout was exceeded")


class GradeResult(BaseModel):
    """
    Grading result for a student submission.

    Attributes:
        student_id: Student identifier (folder name).
        tests: Per-test outcomes.
        code_execution_passed: Whether all tests passed.
        total_score: Number of passed tests.
        max_score: Number of tests run.
        overall_feedback: Failure messages of the failed tests.
    """

    student_id: str = Field(..., description="Student identifier (folder name)")
    tests: list[TestResult] = Field(default_factory=list, description="Per-test outcomes")
    code_execution_passed: bool = Field(
        ..., description="Whether all grading tests passed"
    )
    total_score: float = Field(..., ge=0, description="Total points earned")
    max_score: float = Field(..., ge=0, description="Maximum possible points")
    overall_feedback: str = Field(
        default="", description="Feedback collected from failed tests"
    )
    submission_path: str | None = Field(default=None, description="Path to the original submission directory")


class StudentSubmission(BaseModel):
    """
    Represents a student's submission for grading.

    Attributes:
        student_id: Student identifier (folder name).
        submission_path: Path to the submission directory.
        source_files: Python files found in the submission.
    """

    student_id: str = Field(..., description="Student identifier")
    submission_path: str = Field(..., description="Path to submission directory")
    source_files: list[str] = Field(default_factory=list, description="Python files in the submission")

    @property
    def has_sources(self) -> bool:
        return bool(self.source_files)
