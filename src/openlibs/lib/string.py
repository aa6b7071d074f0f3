"""
Library: string
Installs into: ``string``

Byte-string helpers with 1-based, negative-from-the-end indices.
Pattern matching (find/match/gsub) is not provided.
"""
from __future__ import annotations

import re
from typing import Any, Dict, Tuple

from ..kernel.state import InterpreterState, ScriptError, Table
from .base import check_int, check_number, check_string, tostring

_FORMAT_SPEC = re.compile(r"%([-+ #0]*)(\d*)(?:\.(\d+))?([a-zA-Z%])")


def _start_index(i: int, size: int) -> int:
    if i < 0:
        i = max(size + i + 1, 1)
    return max(i, 1)


def _end_index(j: int, size: int) -> int:
    if j < 0:
        j = size + j + 1
    return min(j, size)


def length(s: Any) -> int:
    return len(check_string(s, 1, "len"))


def sub(s: Any, i: Any = 1, j: Any = -1) -> str:
    s = check_string(s, 1, "sub")
    start = _start_index(check_int(i, 2, "sub"), len(s))
    stop = _end_index(check_int(j, 3, "sub"), len(s))
    if start > stop:
        return ""
    return s[start - 1:stop]


def upper(s: Any) -> str:
    return check_string(s, 1, "upper").upper()


def lower(s: Any) -> str:
    return check_string(s, 1, "lower").lower()


def rep(s: Any, n: Any) -> str:
    return check_string(s, 1, "rep") * max(check_int(n, 2, "rep"), 0)


def reverse(s: Any) -> str:
    return check_string(s, 1, "reverse")[::-1]


def byte(s: Any, i: Any = 1, j: Any = None) -> Tuple[int, ...]:
    s = check_string(s, 1, "byte")
    first = check_int(i, 2, "byte")
    start = _start_index(first, len(s))
    stop = _end_index(first if j is None else check_int(j, 3, "byte"), len(s))
    return tuple(ord(c) for c in s[start - 1:stop])


def char(*codes: Any) -> str:
    chars = []
    for position, code in enumerate(codes, start=1):
        value = check_int(code, position, "char")
        if not 0 <= value <= 255:
            raise ScriptError(f"bad argument #{position} to 'char' (invalid value)")
        chars.append(chr(value))
    return "".join(chars)


def _quote(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\\n")
        .replace("\r", "\\r")
        .replace("\0", "\\0")
    )
    return f'"{escaped}"'


def format(fmt: Any, *args: Any) -> str:
    fmt = check_string(fmt, 1, "format")
    out = []
    position = 0
    argument = 0
    for match in _FORMAT_SPEC.finditer(fmt):
        out.append(fmt[position:match.start()])
        position = match.end()
        flags, width, precision, conv = match.groups()
        if conv == "%":
            out.append("%")
            continue
        if argument >= len(args):
            raise ScriptError(f"bad argument #{argument + 2} to 'format' (no value)")
        value = args[argument]
        argument += 1
        spec = "%" + flags + width + (f".{precision}" if precision is not None else "")
        if conv in "di":
            out.append((spec + "d") % int(check_number(value, argument + 1, "format")))
        elif conv in "xXo":
            out.append((spec + conv) % int(check_number(value, argument + 1, "format")))
        elif conv in "eEfgG":
            out.append((spec + conv) % float(check_number(value, argument + 1, "format")))
        elif conv == "c":
            out.append(chr(check_int(value, argument + 1, "format")))
        elif conv == "s":
            out.append((spec + "s") % tostring(value))
        elif conv == "q":
            out.append(_quote(check_string(value, argument + 1, "format")))
        else:
            raise ScriptError(f"invalid option '%{conv}' to 'format'")
    out.append(fmt[position:])
    return "".join(out)


def open_string(state: InterpreterState, name: str = "string") -> Table:
    functions: Dict[str, Any] = {
        "len": length,
        "sub": sub,
        "upper": upper,
        "lower": lower,
        "rep": rep,
        "reverse": reverse,
        "byte": byte,
        "char": char,
        "format": format,
    }
    return state.register_module(name, functions)
