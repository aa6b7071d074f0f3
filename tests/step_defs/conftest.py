"""
Step definitions shared by every bootstrap feature.
"""
from typing import Any, Dict, List

import pytest
from pytest_bdd import given, parsers, then, when

from openlibs import (
    InterpreterState,
    LibraryManifest,
    ScriptError,
    Table,
    ffi_supported,
    install_libraries,
)


def split_names(names: str) -> List[str]:
    return [name.strip() for name in names.split(",")]


@pytest.fixture
def test_context(captured) -> Dict[str, Any]:
    """Shared context for passing data between steps."""
    return {
        "captured": captured,
        "state": None,
        "eager": [],
        "preload": [],
        "failing": set(),
        "result": None,
        "module": None,
        "error": None,
    }


# =============================================================================
# Given Steps
# =============================================================================


@given("a fresh interpreter state")
def fresh_state(test_context, state):
    test_context["state"] = state


@given("the host supports ffi")
def host_supports_ffi():
    if not ffi_supported():
        pytest.skip("ffi is not supported on this host")


@given(parsers.re(r'the "(?P<name>[^"]*)" constructor fails'))
def constructor_fails(test_context, name):
    test_context["failing"].add(name)


# =============================================================================
# When Steps
# =============================================================================


@when("I install the manifest")
def install_manifest(test_context, recorder):
    eager = tuple(
        recorder.descriptor(name, fail=name in test_context["failing"])
        if isinstance(name, str) else name
        for name in test_context["eager"]
    )
    preload = tuple(
        recorder.descriptor(name) if isinstance(name, str) else name
        for name in test_context["preload"]
    )
    manifest = LibraryManifest(eager=eager, preload=preload)
    test_context["manifest"] = manifest
    test_context["result"] = install_libraries(test_context["state"], manifest)


@when(parsers.re(r'a script requires "(?P<name>[^"]*)"'))
def script_requires(test_context, name):
    require = test_context["state"].globals["require"]
    test_context["error"] = None
    try:
        test_context["module"] = require(name)
    except ScriptError as exc:
        test_context["error"] = exc


# =============================================================================
# Then Steps
# =============================================================================


@then("the bootstrap result is successful")
def check_success(test_context):
    result = test_context["result"]
    assert result.ok, f"Expected success, got error: {result.error}"


@then(parsers.re(r'the global "(?P<name>[^"]*)" is callable'))
def global_is_callable(test_context, name):
    assert callable(test_context["state"].globals.get(name))


@then(parsers.re(r'the global "(?P<name>[^"]*)" is absent'))
def global_is_absent(test_context, name):
    state: InterpreterState = test_context["state"]
    assert name not in state.globals
    assert name not in state.loaded


@then(parsers.re(r'the global "(?P<name>[^"]*)" equals (?P<value>\d+)'))
def global_equals(test_context, name, value):
    assert test_context["state"].globals.get(name) == int(value)


@then(parsers.re(r'the "(?P<namespace>[^"]*)" namespace exposes "(?P<name>[^"]*)"'))
def namespace_exposes(test_context, namespace, name):
    module = test_context["state"].globals.get(namespace)
    assert isinstance(module, Table)
    assert module.get(name) is not None


@then(parsers.re(r'"(?P<name>[^"]*)" is not in the preload registry'))
def not_in_preload(test_context, name):
    preload = test_context["state"].preload
    assert preload is None or name not in preload


@then(parsers.re(r'the "(?P<name>[^"]*)" constructor ran (?P<times>\d+) times'))
def constructor_ran(test_context, recorder, name, times):
    assert recorder.count(name) == int(times)


@then(parsers.re(r'the constructors ran in the order "(?P<names>[^"]*)"'))
def constructors_in_order(recorder, names):
    assert recorder.calls == split_names(names)
