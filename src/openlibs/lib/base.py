"""
Library: core primitives
Installs into: the global namespace (registered under the empty name)

Functions:
  - print, type, tostring, tonumber
  - assert, error, pcall, select
  - next, pairs, ipairs, unpack
  - rawget, rawset, rawequal, getmetatable, setmetatable
  - collectgarbage
  - loadstring, loadfile, dofile (through the host chunk compiler)

Also sets ``_G`` and ``_VERSION``.
"""
from __future__ import annotations

import gc
import math
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from ..kernel.state import GLOBALS_KEY, InterpreterState, ScriptError, Table, type_name

VERSION = "Lua 5.1"


def tostring(value: Any) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isinf(value):
            return "inf" if value > 0 else "-inf"
        if math.isnan(value):
            return "nan"
        if value.is_integer() and abs(value) < 1e15:
            return str(int(value))
        return f"{value:.14g}"
    if isinstance(value, (int, str)):
        return str(value)
    if isinstance(value, Table):
        handler = value.metatable.get("__tostring") if value.metatable else None
        if handler is not None:
            return str(handler(value))
        return repr(value)
    return f"{type_name(value)}: 0x{id(value):08x}"


def tonumber(value: Any, base: int = 10) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)) and base == 10:
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if base != 10:
        try:
            return int(text, base)
        except ValueError:
            return None
    try:
        if text.lower().startswith(("0x", "-0x")):
            return int(text, 16)
        number = float(text)
    except ValueError:
        return None
    return int(number) if number.is_integer() and "." not in text and "e" not in text.lower() else number


def check_table(value: Any, position: int, fname: str) -> Table:
    if not isinstance(value, Table):
        raise ScriptError(
            f"bad argument #{position} to '{fname}' (table expected, got {type_name(value)})"
        )
    return value


def check_number(value: Any, position: int, fname: str) -> float:
    number = tonumber(value)
    if number is None:
        raise ScriptError(
            f"bad argument #{position} to '{fname}' (number expected, got {type_name(value)})"
        )
    return number


def check_int(value: Any, position: int, fname: str) -> int:
    return int(check_number(value, position, fname))


def check_string(value: Any, position: int, fname: str) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return tostring(value)
    raise ScriptError(
        f"bad argument #{position} to '{fname}' (string expected, got {type_name(value)})"
    )


def open_base(state: InterpreterState, name: str = "", include_loadfile: bool = True) -> Table:
    def lua_print(*args: Any) -> None:
        state.emit("\t".join(tostring(arg) for arg in args))

    def lua_type(*args: Any) -> str:
        if not args:
            raise ScriptError("bad argument #1 to 'type' (value expected)")
        return type_name(args[0])

    def lua_assert(*args: Any) -> Tuple[Any, ...]:
        if not args or args[0] is None or args[0] is False:
            message = args[1] if len(args) > 1 else "assertion failed!"
            raise ScriptError(message)
        return args

    def lua_error(value: Any = None, level: int = 1) -> None:
        raise ScriptError(value)

    def pcall(fn: Any = None, *args: Any) -> Tuple[Any, ...]:
        try:
            return (True,) + state.call(fn, *args)
        except ScriptError as exc:
            return (False, exc.value)
        except Exception as exc:
            return (False, str(exc))

    def select(n: Any, *args: Any) -> Any:
        if n == "#":
            return len(args)
        index = check_int(n, 1, "select")
        if index < 0:
            index = len(args) + index
            if index < 0:
                raise ScriptError("bad argument #1 to 'select' (index out of range)")
            return args[index:]
        if index == 0:
            raise ScriptError("bad argument #1 to 'select' (index out of range)")
        return args[index - 1:]

    def lua_next(table: Any, key: Any = None) -> Tuple[Any, ...]:
        table = check_table(table, 1, "next")
        keys = list(table.keys())
        if key is None:
            position = 0
        else:
            # True == 1 in Python; booleans only match booleans
            matches = [
                index for index, candidate in enumerate(keys)
                if candidate == key and isinstance(candidate, bool) == isinstance(key, bool)
            ]
            if not matches:
                raise ScriptError("invalid key to 'next'")
            position = matches[0] + 1
        if position >= len(keys):
            return (None,)
        found = keys[position]
        return (found, table[found])

    def pairs(table: Any) -> Tuple[Any, ...]:
        check_table(table, 1, "pairs")
        return (lua_next, table, None)

    def ipairs(table: Any) -> Tuple[Any, ...]:
        check_table(table, 1, "ipairs")

        def step(t: Table, i: int) -> Tuple[Any, ...]:
            value = t.get(i + 1)
            if value is None:
                return (None,)
            return (i + 1, value)

        return (step, table, 0)

    def unpack(table: Any, i: Any = 1, j: Any = None) -> Tuple[Any, ...]:
        table = check_table(table, 1, "unpack")
        start = check_int(i, 2, "unpack")
        stop = table.length() if j is None else check_int(j, 3, "unpack")
        return tuple(table.get(k) for k in range(start, stop + 1))

    def rawget(table: Any, key: Any) -> Any:
        return check_table(table, 1, "rawget").get(key)

    def rawset(table: Any, key: Any, value: Any) -> Table:
        table = check_table(table, 1, "rawset")
        if key is None:
            raise ScriptError("table index is nil")
        table[key] = value
        return table

    def rawequal(a: Any, b: Any) -> bool:
        if isinstance(a, Table) or isinstance(b, Table):
            return a is b
        return a == b and type_name(a) == type_name(b)

    def getmetatable(value: Any) -> Optional[Table]:
        if not isinstance(value, Table) or value.metatable is None:
            return None
        protected = value.metatable.get("__metatable")
        return protected if protected is not None else value.metatable

    def setmetatable(table: Any, metatable: Any) -> Table:
        table = check_table(table, 1, "setmetatable")
        if metatable is not None and not isinstance(metatable, Table):
            raise ScriptError("bad argument #2 to 'setmetatable' (nil or table expected)")
        if table.metatable is not None and table.metatable.get("__metatable") is not None:
            raise ScriptError("cannot change a protected metatable")
        table.metatable = metatable
        return table

    def collectgarbage(option: str = "collect", arg: Any = None) -> Any:
        if option == "collect":
            gc.collect()
            return 0
        if option == "count":
            return float(sum(gc.get_count()))
        if option in ("stop", "restart", "step", "setpause", "setstepmul"):
            return 0
        raise ScriptError(f"bad argument #1 to 'collectgarbage' (invalid option '{option}')")

    def loadstring(source: Any, chunkname: Optional[str] = None) -> Tuple[Any, ...]:
        source = check_string(source, 1, "loadstring")
        if state.compiler is None:
            return (None, "no chunk compiler attached to this state")
        try:
            return (state.compiler(source, chunkname or source),)
        except ScriptError as exc:
            return (None, exc.value)

    def loadfile(path: Any = None) -> Tuple[Any, ...]:
        if path is None:
            return (None, "reading chunks from stdin is not supported")
        filename = check_string(path, 1, "loadfile")
        try:
            source = Path(filename).read_text()
        except OSError as exc:
            return (None, f"cannot open {filename}: {exc.strerror}")
        return loadstring(source, f"@{filename}")

    def dofile(path: Any = None) -> Tuple[Any, ...]:
        results = loadfile(path)
        if results[0] is None:
            raise ScriptError(results[1])
        return state.call(results[0])

    functions: Dict[str, Any] = {
        "print": lua_print,
        "type": lua_type,
        "tostring": tostring,
        "tonumber": tonumber,
        "assert": lua_assert,
        "error": lua_error,
        "pcall": pcall,
        "select": select,
        "next": lua_next,
        "pairs": pairs,
        "ipairs": ipairs,
        "unpack": unpack,
        "rawget": rawget,
        "rawset": rawset,
        "rawequal": rawequal,
        "getmetatable": getmetatable,
        "setmetatable": setmetatable,
        "collectgarbage": collectgarbage,
        "loadstring": loadstring,
        "_VERSION": VERSION,
    }
    if include_loadfile:
        functions["loadfile"] = loadfile
        functions["dofile"] = dofile

    state.globals[GLOBALS_KEY] = state.globals
    return state.register_module(name, functions)
