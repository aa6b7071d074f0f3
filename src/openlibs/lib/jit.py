"""
Library: jit (engine control)
Installs into: ``jit``

The engine flag lives in the state, so ``jit.off()`` in one state leaves
other states untouched. Hosts read it back through ``jit.status()``.

Functions:
  - jit.on / jit.off: Toggle the compiler flag
  - jit.flush: Discard compiled traces (no-op without a backend)
  - jit.status: (enabled, flags...)
  - jit.opt.start: Record optimizer flags
"""
from __future__ import annotations

import platform
import sys
from typing import Any, Dict, List, Tuple

from ..kernel.state import InterpreterState, ScriptError, Table

VERSION = "LuaJIT 2.1.0-beta3"
VERSION_NUM = 20100

JIT_STATE_KEY = "_JIT"

DEFAULT_FLAGS = ["fold", "cse", "dce", "fwd", "dse", "narrow", "loop", "abc", "sink", "fuse"]

_ARCHES = {
    "x86_64": "x64",
    "amd64": "x64",
    "i386": "x86",
    "i686": "x86",
    "x86": "x86",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "armv6l": "arm",
    "ppc": "ppc",
    "ppc64le": "ppc",
    "mips": "mips",
    "mips64": "mips64",
}


def host_os() -> str:
    if sys.platform.startswith("win"):
        return "Windows"
    if sys.platform.startswith("linux"):
        return "Linux"
    if sys.platform == "darwin":
        return "OSX"
    if "bsd" in sys.platform:
        return "BSD"
    if sys.platform.startswith(("aix", "sunos", "cygwin")):
        return "POSIX"
    return "Other"


def host_arch() -> str:
    machine = platform.machine().lower()
    return _ARCHES.get(machine, machine or "unknown")


def open_jit(state: InterpreterState, name: str = "jit") -> Table:
    engine = state.find_table(state.registry, JIT_STATE_KEY)
    engine["enabled"] = True
    engine["flags"] = Table.from_list(DEFAULT_FLAGS)

    def on(*args: Any) -> None:
        engine["enabled"] = True

    def off(*args: Any) -> None:
        engine["enabled"] = False

    def flush(*args: Any) -> None:
        return None

    def status() -> Tuple[Any, ...]:
        return (engine["enabled"],) + tuple(engine["flags"].array())

    def opt_start(*flags: Any) -> None:
        current: List[str] = list(engine["flags"].array())
        for flag in flags:
            if not isinstance(flag, str):
                raise ScriptError("bad argument to 'jit.opt.start' (string expected)")
            if flag.startswith("-"):
                current = [f for f in current if f != flag[1:]]
            elif flag.startswith("+"):
                if flag[1:] not in current:
                    current.append(flag[1:])
            elif "=" not in flag and flag not in current:
                current.append(flag)
        engine["flags"] = Table.from_list(current)

    functions: Dict[str, Any] = {
        "on": on,
        "off": off,
        "flush": flush,
        "status": status,
        "opt": Table({"start": opt_start}),
        "version": VERSION,
        "version_num": VERSION_NUM,
        "os": host_os(),
        "arch": host_arch(),
    }
    return state.register_module(name, functions)
