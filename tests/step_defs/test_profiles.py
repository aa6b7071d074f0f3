"""
Step definitions for the library profiles feature.

These tests verify that profile switches select libraries at call time:
- a disabled library has no global binding and no preload entry
- the sandbox preset strips host access
- OPENLIBS_* environment variables pick and adjust the preset

BDD Flow: Feature file -> Step definitions -> Implementation
"""
from pytest_bdd import given, parsers, scenarios, when

from openlibs import LibraryProfile, get_profile, install_standard_library
from openlibs.config import disable_switch

# Load scenarios from feature file
scenarios("../features/profiles.feature")


# =============================================================================
# Given Steps
# =============================================================================


@given(parsers.re(r'a profile with "(?P<library>[^"]*)" disabled'))
def profile_with_disabled(test_context, library):
    switch = disable_switch(library)
    test_context["profile"] = LibraryProfile(**{switch: switch != "enable_ffi_if_supported"})


@given(parsers.re(r'the environment variable "(?P<name>[^"]*)" is "(?P<value>[^"]*)"'))
def environment_variable(monkeypatch, name, value):
    monkeypatch.setenv(name, value)


# =============================================================================
# When Steps
# =============================================================================


@when("I install the standard library with that profile")
def install_with_profile(test_context):
    test_context["result"] = install_standard_library(
        test_context["state"], profile=test_context["profile"]
    )


@when(parsers.re(r'I install the standard library with the "(?P<name>[^"]*)" profile'))
def install_with_preset(test_context, name):
    test_context["result"] = install_standard_library(
        test_context["state"], profile=get_profile(name)
    )


@when("I install the standard library from the environment")
def install_from_environment(test_context):
    test_context["result"] = install_standard_library(test_context["state"])
