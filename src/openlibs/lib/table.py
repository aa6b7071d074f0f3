"""
Library: table
Installs into: ``table``

Functions:
  - table.insert: Append, or insert at a position shifting elements up
  - table.remove: Remove (default: last) element, shifting elements down
  - table.concat: Join array elements with a separator
  - table.sort: In-place sort with optional less-than comparator
  - table.maxn: Largest positive numeric key
"""
from __future__ import annotations

import functools
from typing import Any, Dict

from ..kernel.state import InterpreterState, ScriptError, Table
from .base import check_int, check_string, check_table, tostring


def insert(table: Any, *args: Any) -> None:
    table = check_table(table, 1, "insert")
    size = table.length()
    if len(args) == 1:
        table[size + 1] = args[0]
        return
    if len(args) != 2:
        raise ScriptError("wrong number of arguments to 'insert'")
    position = check_int(args[0], 2, "insert")
    if position < 1 or position > size + 1:
        raise ScriptError("bad argument #2 to 'insert' (position out of bounds)")
    for index in range(size, position - 1, -1):
        table[index + 1] = table[index]
    table[position] = args[1]


def remove(table: Any, position: Any = None) -> Any:
    table = check_table(table, 1, "remove")
    size = table.length()
    if size == 0:
        return None
    index = size if position is None else check_int(position, 2, "remove")
    if index < 1 or index > size:
        return None
    value = table.get(index)
    for shift in range(index, size):
        table[shift] = table.get(shift + 1)
    table[size] = None
    return value


def concat(table: Any, sep: Any = "", i: Any = 1, j: Any = None) -> str:
    table = check_table(table, 1, "concat")
    sep = check_string(sep, 2, "concat")
    start = check_int(i, 3, "concat")
    stop = table.length() if j is None else check_int(j, 4, "concat")
    parts = []
    for index in range(start, stop + 1):
        value = table.get(index)
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ScriptError(f"invalid value (at index {index}) in table for 'concat'")
        parts.append(tostring(value))
    return sep.join(parts)


def sort(table: Any, comp: Any = None) -> None:
    table = check_table(table, 1, "sort")
    items = list(table.array())
    if comp is None:
        try:
            items.sort()
        except TypeError:
            raise ScriptError("attempt to compare incompatible values") from None
    else:
        def compare(a: Any, b: Any) -> int:
            if comp(a, b):
                return -1
            if comp(b, a):
                return 1
            return 0

        items.sort(key=functools.cmp_to_key(compare))
    for index, value in enumerate(items, start=1):
        table[index] = value


def maxn(table: Any) -> float:
    table = check_table(table, 1, "maxn")
    numeric = [k for k in table if isinstance(k, (int, float)) and not isinstance(k, bool) and k > 0]
    return max(numeric, default=0)


def open_table(state: InterpreterState, name: str = "table") -> Table:
    functions: Dict[str, Any] = {
        "insert": insert,
        "remove": remove,
        "concat": concat,
        "sort": sort,
        "maxn": maxn,
    }
    return state.register_module(name, functions)
