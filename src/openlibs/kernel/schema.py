from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict

from pydantic import BaseModel, ConfigDict, Field


class LibraryName:
    """Well-known names of the standard libraries."""

    BASE = ""
    PACKAGE = "package"
    TABLE = "table"
    IO = "io"
    OS = "os"
    STRING = "string"
    MATH = "math"
    DEBUG = "debug"
    BIT = "bit"
    JIT = "jit"
    FFI = "ffi"


class ModuleDescriptor(BaseModel):
    """A (name, constructor) pair.

    An empty name means the constructor installs into the global namespace
    instead of a named sub-namespace. The loader never checks this; the
    constructor honours it.
    """

    name: str
    constructor: Callable[..., Any]

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


# Profile field -> library name it switches off
DISABLE_SWITCHES: Dict[str, str] = {
    "disable_core": LibraryName.BASE,
    "disable_package": LibraryName.PACKAGE,
    "disable_table": LibraryName.TABLE,
    "disable_io": LibraryName.IO,
    "disable_os": LibraryName.OS,
    "disable_string": LibraryName.STRING,
    "disable_math": LibraryName.MATH,
    "disable_debug": LibraryName.DEBUG,
    "disable_bit": LibraryName.BIT,
    "disable_jit": LibraryName.JIT,
}


class LibraryProfile(BaseModel):
    """Selects which standard libraries a bootstrap installs.

    One switch per library, resolved when the manifest is built rather than
    at build time of the interpreter, so one installation can serve several
    profiles (for example a sandbox without os/io/ffi).
    """

    disable_core: bool = False
    disable_package: bool = False
    disable_table: bool = False
    disable_io: bool = False
    disable_os: bool = False
    disable_string: bool = False
    disable_math: bool = False
    disable_debug: bool = False
    disable_bit: bool = False
    disable_jit: bool = False
    enable_ffi_if_supported: bool = True

    # Function-level switches inside otherwise enabled libraries
    disable_func_loadfile: bool = False
    disable_func_debug_debug: bool = False

    model_config = ConfigDict(frozen=True)

    def is_enabled(self, name: str) -> bool:
        if name == LibraryName.FFI:
            return self.enable_ffi_if_supported
        for switch, library in DISABLE_SWITCHES.items():
            if library == name:
                return not getattr(self, switch)
        raise KeyError(f"Unknown standard library: {name!r}")


class LoadPhase(str, Enum):
    NOT_STARTED = "not_started"
    EAGER_LOADING = "eager_loading"
    LAZY_STAGING = "lazy_staging"
    COMPLETE = "complete"
    FAILED = "failed"


class InstallError(BaseModel):
    kind: str = "module_install_failure"
    module: str
    position: int
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)

    @property
    def display_name(self) -> str:
        # The core library installs into globals and has no name of its own
        return self.module or "_G"

    def describe(self) -> str:
        return f"{self.kind}: {self.display_name} (#{self.position}): {self.message}"

