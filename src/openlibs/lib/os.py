"""
Library: os
Installs into: ``os``

Clock, calendar and environment access. Process control (``os.exit``,
``os.execute``) is left to the host.
"""
from __future__ import annotations

import os
import tempfile
import time as _time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from ..kernel.state import InterpreterState, ScriptError, Table
from .base import check_number, check_string

_START = _time.process_time()


def clock() -> float:
    return _time.process_time() - _START


def lua_time(table: Any = None) -> int:
    if table is None:
        return int(_time.time())
    if not isinstance(table, Table):
        raise ScriptError("bad argument #1 to 'time' (table expected)")
    try:
        moment = datetime(
            int(table["year"]),
            int(table["month"]),
            int(table["day"]),
            int(table.get("hour", 12)),
            int(table.get("min", 0)),
            int(table.get("sec", 0)),
        )
    except KeyError as exc:
        raise ScriptError(f"field '{exc.args[0]}' missing in date table") from None
    return int(_time.mktime(moment.timetuple()))


def date(fmt: Any = "%c", when: Any = None) -> Any:
    fmt = check_string(fmt, 1, "date")
    stamp = _time.time() if when is None else check_number(when, 2, "date")
    if fmt.startswith("!"):
        moment = datetime.fromtimestamp(stamp, tz=timezone.utc)
        fmt = fmt[1:]
    else:
        moment = datetime.fromtimestamp(stamp)
    if fmt.startswith("*t"):
        parts = moment.timetuple()
        return Table(
            {
                "year": parts.tm_year,
                "month": parts.tm_mon,
                "day": parts.tm_mday,
                "hour": parts.tm_hour,
                "min": parts.tm_min,
                "sec": parts.tm_sec,
                "wday": (parts.tm_wday + 1) % 7 + 1,
                "yday": parts.tm_yday,
                "isdst": parts.tm_isdst > 0,
            }
        )
    return moment.strftime(fmt)


def difftime(t2: Any, t1: Any = 0) -> float:
    return float(check_number(t2, 1, "difftime") - check_number(t1, 2, "difftime"))


def getenv(name: Any) -> Optional[str]:
    return os.environ.get(check_string(name, 1, "getenv"))


def remove(path: Any) -> Tuple[Any, ...]:
    path = check_string(path, 1, "remove")
    try:
        if os.path.isdir(path):
            os.rmdir(path)
        else:
            os.remove(path)
    except OSError as exc:
        return (None, f"{path}: {exc.strerror}", exc.errno)
    return (True,)


def rename(old: Any, new: Any) -> Tuple[Any, ...]:
    old = check_string(old, 1, "rename")
    new = check_string(new, 2, "rename")
    try:
        os.rename(old, new)
    except OSError as exc:
        return (None, f"{old}: {exc.strerror}", exc.errno)
    return (True,)


def tmpname() -> str:
    fd, path = tempfile.mkstemp(prefix="lua_")
    os.close(fd)
    return path


def open_os(state: InterpreterState, name: str = "os") -> Table:
    functions: Dict[str, Any] = {
        "clock": clock,
        "time": lua_time,
        "date": date,
        "difftime": difftime,
        "getenv": getenv,
        "remove": remove,
        "rename": rename,
        "tmpname": tmpname,
    }
    return state.register_module(name, functions)
