"""
Step definitions for the bootstrap feature.

These tests verify the two-phase loader:
- eager libraries install in manifest order, once each
- preload libraries are staged by name and never called
- a failing constructor stops the walk and skips staging
- the standard full profile exposes print, table and a staged ffi

BDD Flow: Feature file -> Step definitions -> Implementation
"""
from collections import Counter

from pytest_bdd import given, parsers, scenarios, then, when

from openlibs import LibraryProfile, LoadPhase, install_standard_library

# Load scenarios from feature file
scenarios("../features/bootstrap.feature")


def split_names(names):
    return [name.strip() for name in names.split(",")]


# =============================================================================
# Given Steps
# =============================================================================


@given(
    parsers.re(
        r'a manifest with eager libraries "(?P<eager>[^"]*)" '
        r'and preload libraries "(?P<preload>[^"]*)"'
    )
)
def manifest_with_preload(test_context, eager, preload):
    test_context["eager"] = split_names(eager)
    test_context["preload"] = split_names(preload)


@given(parsers.re(r'a manifest with eager libraries "(?P<eager>[^"]*)"$'))
def manifest_eager_only(test_context, eager):
    test_context["eager"] = split_names(eager)


# =============================================================================
# When Steps
# =============================================================================


@when("I install the standard library with the full profile")
def install_full(test_context):
    test_context["result"] = install_standard_library(
        test_context["state"], profile=LibraryProfile()
    )


# =============================================================================
# Then Steps
# =============================================================================


@then(parsers.re(r'the preload registry holds a callable "(?P<name>[^"]*)" entry'))
def preload_holds_callable(test_context, name):
    preload = test_context["state"].preload
    assert preload is not None
    assert callable(preload.get(name))


@then(parsers.re(r'"(?P<name>[^"]*)" has not been materialized'))
def not_materialized(test_context, name):
    state = test_context["state"]
    assert name not in state.loaded
    assert name not in state.globals


@then(parsers.re(r'the preload registry holds the "(?P<name>[^"]*)" constructor itself'))
def preload_holds_constructor(test_context, name):
    manifest = test_context["manifest"]
    descriptor = next(d for d in manifest.preload if d.name == name)
    assert test_context["state"].preload[name] is descriptor.constructor


@then(parsers.re(r"the preload registry was sized for (?P<count>\d+) entry"))
def preload_sized(test_context, count):
    assert test_context["state"].preload.size_hint == int(count)


@then("each constructor ran exactly once")
def ran_exactly_once(recorder):
    assert all(count == 1 for count in Counter(recorder.calls).values())


@then(
    parsers.re(
        r'the bootstrap result failed in library "(?P<name>[^"]*)" at position (?P<position>\d+)'
    )
)
def bootstrap_failed(test_context, name, position):
    result = test_context["result"]
    assert not result.ok
    assert result.phase == LoadPhase.FAILED
    assert result.error.module == name
    assert result.error.position == int(position)
    assert result.staged == []


@then("the state has no preload registry")
def no_preload(test_context):
    assert test_context["state"].preload is None
