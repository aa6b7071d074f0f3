"""
Standard library configuration and the bootstrap entry point.

STANDARD_LIBRARIES is the fixed catalogue, in install order. A profile picks
which entries make it into a LibraryManifest; the kernel loader then runs the
manifest against a state.

Usage:
    from openlibs import InterpreterState, install_standard_library

    state = InterpreterState(output_sink=print)
    result = install_standard_library(state)
    if not result.ok:
        ...  # result.error names the library that failed
"""

from __future__ import annotations

import functools
import importlib.util
from typing import Any, Dict, List, Optional

from .config import profile_from_env
from .kernel.loader import BootstrapResult, LibraryManifest, install_libraries
from .kernel.schema import LibraryName, LibraryProfile, ModuleDescriptor
from .kernel.state import InterpreterState, Table
from .lib.base import open_base
from .lib.bit import open_bit
from .lib.debug import open_debug
from .lib.io import open_io
from .lib.jit import host_arch, open_jit
from .lib.math import open_math
from .lib.os import open_os
from .lib.package import open_package
from .lib.string import open_string
from .lib.table import open_table

FFI_ARCHES = {"x86", "x64", "arm", "arm64", "ppc", "mips", "mips64"}


def open_ffi(state: InterpreterState, name: str = LibraryName.FFI) -> Table:
    """Construct the ffi library. ctypes is imported only when this runs."""
    from .lib.ffi import open_ffi as construct

    return construct(state, name)


STANDARD_LIBRARIES: Dict[str, Any] = {
    LibraryName.BASE: open_base,
    LibraryName.PACKAGE: open_package,
    LibraryName.TABLE: open_table,
    LibraryName.IO: open_io,
    LibraryName.OS: open_os,
    LibraryName.STRING: open_string,
    LibraryName.MATH: open_math,
    LibraryName.DEBUG: open_debug,
    LibraryName.BIT: open_bit,
    LibraryName.JIT: open_jit,
    LibraryName.FFI: open_ffi,
}

# Libraries staged in _PRELOAD rather than installed
LAZY_LIBRARIES = (LibraryName.FFI,)


def ffi_supported() -> bool:
    """Whether this host can back the ffi library."""
    return importlib.util.find_spec("ctypes") is not None and host_arch() in FFI_ARCHES


def _constructor(name: str, profile: LibraryProfile) -> Any:
    constructor = STANDARD_LIBRARIES[name]
    if name == LibraryName.BASE and profile.disable_func_loadfile:
        return functools.partial(constructor, include_loadfile=False)
    if name == LibraryName.DEBUG and profile.disable_func_debug_debug:
        return functools.partial(constructor, include_debug_loop=False)
    return constructor


def build_manifest(profile: Optional[LibraryProfile] = None) -> LibraryManifest:
    """Select and order the standard libraries enabled by ``profile``."""
    profile = profile or LibraryProfile()
    eager: List[ModuleDescriptor] = []
    preload: List[ModuleDescriptor] = []
    for name in STANDARD_LIBRARIES:
        if not profile.is_enabled(name):
            continue
        descriptor = ModuleDescriptor(name=name, constructor=_constructor(name, profile))
        if name in LAZY_LIBRARIES:
            if name == LibraryName.FFI and not ffi_supported():
                continue
            preload.append(descriptor)
        else:
            eager.append(descriptor)
    return LibraryManifest(eager=tuple(eager), preload=tuple(preload))


DEFAULT_MANIFEST = build_manifest()


def install_standard_library(
    state: InterpreterState,
    profile: Optional[LibraryProfile] = None,
    manifest: Optional[LibraryManifest] = None,
) -> BootstrapResult:
    """
    Populate a fresh interpreter state with the standard libraries.

    Call once, right after creating the state and before running scripts.
    Calling again re-runs every eager constructor; nothing guards against it.

    Args:
        state: The state to populate
        profile: Library selection; defaults to the OPENLIBS_* environment
        manifest: Explicit manifest, overriding ``profile`` entirely

    Returns:
        BootstrapResult; ``ok`` is False and ``error`` names the failing
        library if a constructor raised.
    """
    if manifest is None:
        profile = profile if profile is not None else profile_from_env()
        manifest = DEFAULT_MANIFEST if profile == LibraryProfile() else build_manifest(profile)
    return install_libraries(state, manifest)


def open_library(state: InterpreterState, name: str) -> Table:
    """Eagerly open a single standard library, outside any bootstrap.

    Raises KeyError for a name that is not a standard library.
    """
    constructor = STANDARD_LIBRARIES[name]
    module = state.call(constructor, state, name)[0]
    if name in LAZY_LIBRARIES:
        state.loaded[name] = module
    return module
