"""A tiny test registry with checks that record failures instead of stopping."""

from __future__ import annotations

import math
import operator
import sys
from collections.abc import Callable, Iterable, Sequence
from typing import Any, TextIO

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


def distance(a: Any, b: Any) -> float:
    """Return how far apart two values are: Euclidean for sequences, ``abs(a - b)`` otherwise."""
    if (
        isinstance(a, Sequence)
        and isinstance(b, Sequence)
        and not isinstance(a, (str, bytes))
        and not isinstance(b, (str, bytes))
    ):
        return math.dist(a, b)
    return abs(a - b)


class TestRegistry:
    """Named test functions and the checks they use. Each test is called with the registry."""

    __test__ = False

    def __init__(self) -> None:
        self._tests: dict[str, Callable[[TestRegistry], Any]] = {}
        self.failed = False
        self.failed_tests = 0
        self.failures: list[str] = []
        self.out: TextIO = sys.stdout

    @property
    def names(self) -> list[str]:
        return list(self._tests)

    def add(self, name: str, func: Callable[[TestRegistry], Any]) -> Callable[[TestRegistry], Any]:
        """Register a test function under a name."""
        self._tests[name] = func
        return func

    def run(self, name: str) -> bool:
        """Run one test; return True if it ran and no check failed."""
        self.failed = False
        func = self._tests.get(name)
        if func is None:
            return False
        func(self)
        if self.failed:
            self.failed_tests += 1
        return not self.failed

    def _run_named(self, names: Iterable[str], out: TextIO) -> bool:
        previous, self.out = self.out, out
        try:
            for name in names:
                result = self.run(name)
                print(f"Test {name}:\n----------------> {'OK' if result else 'FAILED'}\n", file=out)
        finally:
            self.out = previous
        return self.failed_tests == 0

    def run_all(self, out: TextIO | None = None) -> bool:
        """Run every test, report each result, and return True if none failed."""
        return self._run_named(list(self._tests), out or self.out)

    def _fail(self, message: str) -> None:
        self.failed = True
        self.failures.append(message)
        print(f"\nerror: {message}\n", file=self.out)

    def check(self, condition: Any, message: str = "condition") -> bool:
        """Record a failure if the condition is false."""
        if not condition:
            self._fail(f"'{message}'")
        return bool(condition)

    def expect(self, x: Any, op: str, y: Any) -> bool:
        """Record a failure unless ``x op y`` holds for a comparison operator given as text."""
        try:
            compare = _OPERATORS[op]
        except KeyError:
            raise ValueError(f"unknown comparison operator {op!r}") from None
        ok = bool(compare(x, y))
        if not ok:
            self._fail(f"Expected value {op} '{y}' but it is {x}")
        return ok

    def expect_near(self, x: Any, y: Any, d: float) -> bool:
        """Record a failure unless ``x`` and ``y`` are closer than ``d``."""
        return self.expect(distance(x, y), "<", d)


_default = TestRegistry()


def test(func: Callable[[TestRegistry], Any]) -> Callable[[TestRegistry], Any]:
    """Decorator adding a function to the default registry under its own name."""
    return _default.add(func.__name__, func)


test.__test__ = False  # type: ignore[attr-defined]


def main(argv: list[str] | None = None) -> int:
    """Run the default registry's tests (all, or those named) and return the number failed."""
    names = sys.argv[1:] if argv is None else list(argv)
    selected = names or _default.names
    ok = _default._run_named(selected, sys.stdout)
    print(f"\n{'OK' if ok else 'Error'}: {_default.failed_tests} tests failed of {len(_default.names)}")
    return _default.failed_tests