"""Unit tests for library profiles and environment configuration."""

import pytest

from openlibs import LibraryProfile, get_profile, profile_from_env
from openlibs.config import PROFILES, disable_switch


def test_default_profile_enables_everything():
    profile = LibraryProfile()
    for name in ("", "package", "table", "io", "os", "string", "math", "debug", "bit", "jit", "ffi"):
        assert profile.is_enabled(name)


def test_is_enabled_unknown_library():
    with pytest.raises(KeyError):
        LibraryProfile().is_enabled("sockets")


def test_profiles_are_frozen():
    with pytest.raises(Exception):
        PROFILES["full"].disable_io = True


def test_get_profile_is_case_insensitive():
    assert get_profile(" Sandbox ") is PROFILES["sandbox"]


def test_get_profile_unknown():
    with pytest.raises(KeyError, match="known: full, minimal, sandbox"):
        get_profile("paranoid")


@pytest.mark.parametrize(
    "library, switch",
    [
        ("core", "disable_core"),
        ("base", "disable_core"),
        ("IO", "disable_io"),
        ("ffi", "enable_ffi_if_supported"),
    ],
)
def test_disable_switch(library, switch):
    assert disable_switch(library) == switch


def test_profile_from_empty_env_is_full():
    assert profile_from_env({}) == LibraryProfile()


def test_profile_from_env_disables_listed_libraries():
    profile = profile_from_env({"OPENLIBS_DISABLE": "io, os,ffi"})
    assert profile.disable_io and profile.disable_os
    assert not profile.enable_ffi_if_supported
    assert not profile.disable_table


def test_profile_from_env_ffi_override():
    profile = profile_from_env({"OPENLIBS_PROFILE": "sandbox", "OPENLIBS_FFI": "1"})
    assert profile.enable_ffi_if_supported
    assert profile.disable_io


def test_profile_from_env_reads_os_environ(monkeypatch):
    monkeypatch.setenv("OPENLIBS_PROFILE", "minimal")
    monkeypatch.delenv("OPENLIBS_DISABLE", raising=False)
    monkeypatch.delenv("OPENLIBS_FFI", raising=False)
    assert profile_from_env() == PROFILES["minimal"]
