"""
openlibs: standard library bootstrap for embedded interpreter states.

Public API re-exports from kernel/ (machinery), config (profiles) and
stdlib (the standard catalogue and entry point).
"""
from .kernel.schema import (
    InstallError,
    LibraryName,
    LibraryProfile,
    LoadPhase,
    ModuleDescriptor,
)
from .kernel.state import InterpreterState, ScriptError, Table
from .kernel.loader import BootstrapError, BootstrapResult, LibraryManifest, install_libraries
from .config import get_profile, profile_from_env
from .stdlib import (
    DEFAULT_MANIFEST,
    STANDARD_LIBRARIES,
    build_manifest,
    ffi_supported,
    install_standard_library,
    open_library,
)

__all__ = [
    # Schema
    "InstallError",
    "LibraryName",
    "LibraryProfile",
    "LoadPhase",
    "ModuleDescriptor",
    # State
    "InterpreterState",
    "ScriptError",
    "Table",
    # Loader
    "BootstrapError",
    "BootstrapResult",
    "LibraryManifest",
    "install_libraries",
    # Configuration
    "get_profile",
    "profile_from_env",
    # Standard library
    "DEFAULT_MANIFEST",
    "STANDARD_LIBRARIES",
    "build_manifest",
    "ffi_supported",
    "install_standard_library",
    "open_library",
]
