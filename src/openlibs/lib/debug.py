"""
Library: debug (introspection)
Installs into: ``debug``

Functions:
  - debug.getregistry: The state's registry table
  - debug.getmetatable / debug.setmetatable: Raw metatable access, ignoring __metatable
  - debug.getinfo: Minimal info table for a function
  - debug.traceback: Message plus a host stack traceback
  - debug.debug: Interactive loop over the input source (until "cont")
"""
from __future__ import annotations

import inspect
import traceback as _traceback
from typing import Any, Dict, Optional

from ..kernel.state import InterpreterState, ScriptError, Table
from .base import tostring


def getmetatable(value: Any) -> Optional[Table]:
    if isinstance(value, Table):
        return value.metatable
    return None


def setmetatable(value: Any, metatable: Any) -> Any:
    if not isinstance(value, Table):
        raise ScriptError("bad argument #1 to 'setmetatable' (table expected)")
    if metatable is not None and not isinstance(metatable, Table):
        raise ScriptError("bad argument #2 to 'setmetatable' (nil or table expected)")
    value.metatable = metatable
    return value


def getinfo(fn: Any, what: str = "flnSu") -> Optional[Table]:
    if not callable(fn):
        return None
    info = Table()
    if "S" in what:
        try:
            source = inspect.getsourcefile(fn) or "=[C]"
        except TypeError:
            source = "=[C]"
        info["source"] = source
        info["short_src"] = source.lstrip("=@")
        info["what"] = "C"
    if "n" in what:
        info["name"] = getattr(fn, "__name__", None)
    if "u" in what:
        try:
            info["nups"] = len(inspect.getclosurevars(fn).nonlocals)
        except TypeError:
            info["nups"] = 0
    if "f" in what:
        info["func"] = fn
    return info


def traceback(message: Any = None, level: int = 1) -> Any:
    if message is not None and not isinstance(message, (str, int, float)):
        return message
    frames = _traceback.format_stack()[:-1]
    lines = ["stack traceback:"] + [f"\t{frame.strip().splitlines()[0]}" for frame in reversed(frames)]
    text = "\n".join(lines)
    return text if message is None else f"{tostring(message)}\n{text}"


def open_debug(
    state: InterpreterState,
    name: str = "debug",
    include_debug_loop: bool = True,
) -> Table:
    def getregistry() -> Table:
        return state.registry

    def debug_loop() -> None:
        while True:
            state.write("lua_debug> ")
            line = state.read_line()
            if line is None or line.strip() == "cont":
                return
            if state.compiler is None:
                state.emit("no chunk compiler attached to this state")
                continue
            try:
                chunk = state.compiler(line, "=(debug command)")
                state.call(chunk)
            except ScriptError as exc:
                state.emit(tostring(exc.value))

    functions: Dict[str, Any] = {
        "getregistry": getregistry,
        "getmetatable": getmetatable,
        "setmetatable": setmetatable,
        "getinfo": getinfo,
        "traceback": traceback,
    }
    if include_debug_loop:
        functions["debug"] = debug_loop
    return state.register_module(name, functions)
