"""Sample submission classes exercised by the probe tests."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from behavior_probe import private


class Counter:
    @private
    def __init__(self):
        self.count = 0


class Calculator:
    greeting = "hello"

    def __init__(self):
        self.memory = 0
        self._secret = 42
        self.__pin = 1234

    def add(self, a: int, b: int) -> int:
        return a + b

    def divide(self, a: int, b: int) -> float:
        return a / b

    def reset(self):
        self.memory = 0

    def store(self, value):
        self.memory = value
        return value

    def describe(self, label: Optional[str]) -> str:
        return f"{label}: {self.memory}"

    def anything(self, value: Any) -> Any:
        return value

    def _internal(self):
        return "internal"

    @private
    def audit(self):
        return "audited"

    @staticmethod
    def square(x: int) -> int:
        return x * x

    @classmethod
    def create(cls) -> "Calculator":
        return cls()

    @property
    def doubled(self):
        return self.memory * 2


class ScientificCalculator(Calculator):
    precision = 10

    def __init__(self, precision: int):
        super().__init__()
        self.digits = precision

    def power(self, base: int, exponent: int) -> int:
        return base ** exponent


class Shape(ABC):
    @abstractmethod
    def area(self) -> float:
        ...


class Marker(ABC):
    pass


@dataclass
class Point:
    x: int
    y: int


class Account:
    def __init__(self, owner: str, balance: float = 0.0):
        if balance < 0:
            raise ValueError("balance must not be negative")
        self.owner = owner
        self.balance = balance


class Keyed:
    def __init__(self, *, key: str):
        self.key = key


class Vector:
    __slots__ = ("x", "y")

    def __init__(self, x: float, y: float):
        self.x = x
        self.y = y


class Vector3(Vector):
    __slots__ = ("z",)


class Outer:
    class Inner:
        def __init__(self):
            self.level = 2


class Stranger:
    def add(self, a: int, b: int) -> int:
        return a + b


class Quitter:
    def __init__(self, code: int = 0):
        if code:
            raise SystemExit(code)

    def run(self):
        raise SystemExit(3)
