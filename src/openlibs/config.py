"""
Library profiles for bootstrapping interpreter states.

A profile is a LibraryProfile: one switch per standard library plus the
function-level switches. Presets:
- full: everything, ffi staged for lazy loading when the host supports it
- sandbox: no filesystem, process, introspection or native access
  (io, os, debug and ffi off; loadfile/dofile removed)
- minimal: core, table, string and math only

Environment:
- OPENLIBS_PROFILE: preset name (default "full")
- OPENLIBS_DISABLE: comma-separated library names to switch off on top of it
- OPENLIBS_FFI: "0" or "1" to force the ffi switch
"""

from __future__ import annotations

import os
from typing import Dict, Mapping, Optional

from .kernel.schema import DISABLE_SWITCHES, LibraryName, LibraryProfile

ENV_PROFILE = "OPENLIBS_PROFILE"
ENV_DISABLE = "OPENLIBS_DISABLE"
ENV_FFI = "OPENLIBS_FFI"

DEFAULT_PROFILE = "full"

PROFILES: Dict[str, LibraryProfile] = {
    "full": LibraryProfile(),
    "sandbox": LibraryProfile(
        disable_io=True,
        disable_os=True,
        disable_debug=True,
        enable_ffi_if_supported=False,
        disable_func_loadfile=True,
    ),
    "minimal": LibraryProfile(
        disable_package=True,
        disable_io=True,
        disable_os=True,
        disable_debug=True,
        disable_bit=True,
        disable_jit=True,
        enable_ffi_if_supported=False,
    ),
}

# "core" is the switch name; "base" and "_G" are what people type
_ALIASES = {"core": LibraryName.BASE, "base": LibraryName.BASE, "_g": LibraryName.BASE}


def get_profile(name: str) -> LibraryProfile:
    """Look up a preset by name."""
    try:
        return PROFILES[name.strip().lower()]
    except KeyError:
        known = ", ".join(sorted(PROFILES))
        raise KeyError(f"Unknown library profile {name!r} (known: {known})") from None


def disable_switch(library: str) -> str:
    """Map a library name (or alias) to the profile field that disables it."""
    name = library.strip().lower()
    name = _ALIASES.get(name, name)
    if name == LibraryName.FFI:
        return "enable_ffi_if_supported"
    for switch, target in DISABLE_SWITCHES.items():
        if target == name:
            return switch
    raise KeyError(f"Unknown standard library: {library!r}")


def profile_from_env(environ: Optional[Mapping[str, str]] = None) -> LibraryProfile:
    """Build a profile from OPENLIBS_* environment variables."""
    env = os.environ if environ is None else environ
    profile = get_profile(env.get(ENV_PROFILE) or DEFAULT_PROFILE)

    updates: Dict[str, bool] = {}
    for library in (env.get(ENV_DISABLE) or "").split(","):
        if not library.strip():
            continue
        switch = disable_switch(library)
        updates[switch] = switch != "enable_ffi_if_supported"

    ffi = env.get(ENV_FFI)
    if ffi is not None and ffi.strip():
        updates["enable_ffi_if_supported"] = ffi.strip().lower() in ("1", "true", "yes", "on")

    if not updates:
        return profile
    return profile.model_copy(update=updates)
