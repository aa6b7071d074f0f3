"""
Kernel: the bootstrap machinery.

This package contains:
- schema: descriptors, profiles, load phases and install errors
- state: the interpreter state libraries install into
- loader: the two-phase (eager, then preload) bootstrap walk

The kernel is distinct from lib/ (the standard library constructors).
Kernel = how libraries get installed. Lib = what gets installed.
"""
from .schema import (
    InstallError,
    LibraryName,
    LibraryProfile,
    LoadPhase,
    ModuleDescriptor,
)
from .state import InterpreterState, ScriptError, Table
from .loader import BootstrapError, BootstrapResult, LibraryManifest, install_libraries

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
]
