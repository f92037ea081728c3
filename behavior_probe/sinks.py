"""Destinations for probe failure messages."""

from typing import Protocol

import pytest


class FailureSink(Protocol):
    """Accepts a grading message and marks the current check as failed."""

    def __call__(self, message: str) -> None: ...


def pytest_sink(message: str) -> None:
    """Fail the running pytest test with the message, without a traceback."""
    pytest.fail(message, pytrace=False)


class RecordingSink:
    """Append-only sink that collects messages instead of failing."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)

    def __len__(self) -> int:
        return len(self.messages)

    @property
    def last(self) -> str | None:
        return self.messages[-1] if self.messages else None
