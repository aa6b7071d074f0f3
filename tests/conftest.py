"""
Pytest configuration and shared fixtures for bootstrap tests.
"""
from typing import Any, Callable, List

import pytest

from openlibs import InterpreterState, ModuleDescriptor, ScriptError, Table


@pytest.fixture
def captured() -> List[str]:
    """Collects everything a state writes to its output sink."""
    return []


@pytest.fixture
def state(captured):
    """A fresh interpreter state whose output goes to ``captured``."""
    return InterpreterState(output_sink=captured.append)


class ConstructorRecorder:
    """Builds dummy constructors that log each invocation into a shared list."""

    def __init__(self) -> None:
        self.calls: List[str] = []

    def count(self, name: str) -> int:
        return self.calls.count(name)

    def constructor(self, fail: bool = False) -> Callable[..., Any]:
        def construct(state: InterpreterState, name: str) -> Table:
            self.calls.append(name)
            if fail:
                raise ScriptError(f"cannot initialize {name}")
            return state.register_module(name, {f"{name or 'g'}_order": len(self.calls)})

        return construct

    def descriptor(self, name: str, fail: bool = False) -> ModuleDescriptor:
        return ModuleDescriptor(name=name, constructor=self.constructor(fail=fail))


@pytest.fixture
def recorder():
    return ConstructorRecorder()
