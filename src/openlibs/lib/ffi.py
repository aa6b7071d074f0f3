"""
Library: ffi (foreign function interface)
Staged lazily: the bootstrap only places ``open_ffi`` in ``package.preload``;
the library exists once a script calls ``require("ffi")``.

Backed by ctypes. Only type introspection and library loading are exposed;
argument marshalling is left to ctypes' own conventions.

Functions:
  - ffi.sizeof / ffi.alignof: Size and alignment of a C type name
  - ffi.abi: Query ABI properties ("32bit", "64bit", "le", "be", "win")
  - ffi.load: Load a shared library
  - ffi.os / ffi.arch
"""
from __future__ import annotations

import ctypes
import sys
from typing import Any, Dict

from ..kernel.state import InterpreterState, ScriptError, Table
from .base import check_string
from .jit import host_arch, host_os

C_TYPES: Dict[str, Any] = {
    "char": ctypes.c_char,
    "bool": ctypes.c_bool,
    "int8_t": ctypes.c_int8,
    "uint8_t": ctypes.c_uint8,
    "short": ctypes.c_short,
    "int16_t": ctypes.c_int16,
    "uint16_t": ctypes.c_uint16,
    "int": ctypes.c_int,
    "unsigned int": ctypes.c_uint,
    "int32_t": ctypes.c_int32,
    "uint32_t": ctypes.c_uint32,
    "long": ctypes.c_long,
    "unsigned long": ctypes.c_ulong,
    "long long": ctypes.c_longlong,
    "int64_t": ctypes.c_int64,
    "uint64_t": ctypes.c_uint64,
    "size_t": ctypes.c_size_t,
    "float": ctypes.c_float,
    "double": ctypes.c_double,
    "void *": ctypes.c_void_p,
    "char *": ctypes.c_char_p,
}


def _ctype(name: Any, fname: str) -> Any:
    key = " ".join(check_string(name, 1, fname).split()).replace(" *", "*").replace("*", " *")
    ctype = C_TYPES.get(key)
    if ctype is None:
        if key.endswith("*"):
            return ctypes.c_void_p
        raise ScriptError(f"invalid C type '{name}'")
    return ctype


def sizeof(name: Any) -> int:
    return ctypes.sizeof(_ctype(name, "sizeof"))


def alignof(name: Any) -> int:
    return ctypes.alignment(_ctype(name, "alignof"))


def abi(param: Any) -> bool:
    param = check_string(param, 1, "abi")
    pointer_bits = ctypes.sizeof(ctypes.c_void_p) * 8
    checks = {
        "32bit": pointer_bits == 32,
        "64bit": pointer_bits == 64,
        "le": sys.byteorder == "little",
        "be": sys.byteorder == "big",
        "fpu": True,
        "win": sys.platform.startswith("win"),
    }
    return checks.get(param, False)


def load(name: Any, is_global: bool = False) -> Any:
    name = check_string(name, 1, "load")
    mode = ctypes.RTLD_GLOBAL if is_global else ctypes.RTLD_LOCAL
    try:
        return ctypes.CDLL(name, mode=mode)
    except OSError as exc:
        raise ScriptError(f"cannot load library '{name}': {exc}") from None


def open_ffi(state: InterpreterState, name: str = "ffi") -> Table:
    # Not bound as a global: ``require`` caches the returned table in _LOADED
    return Table(
        {
            "sizeof": sizeof,
            "alignof": alignof,
            "abi": abi,
            "load": load,
            "os": host_os(),
            "arch": host_arch(),
        }
    )
