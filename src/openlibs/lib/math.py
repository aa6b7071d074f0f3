"""
Library: math
Installs into: ``math``

Each state gets its own random generator so scripts in one state cannot
observe or disturb the sequence of another.
"""
from __future__ import annotations

import math
import random
from typing import Any, Dict, Tuple

from ..kernel.state import InterpreterState, ScriptError, Table
from .base import check_int, check_number


def _unary(fname: str, fn: Any) -> Any:
    def wrapper(x: Any) -> float:
        value = check_number(x, 1, fname)
        try:
            return fn(value)
        except OverflowError:
            return math.inf
        except ValueError:
            return math.nan

    wrapper.__name__ = fname
    return wrapper


def floor(x: Any) -> float:
    value = check_number(x, 1, "floor")
    # inf and nan have no integer floor; they pass through
    if not math.isfinite(value):
        return value
    return math.floor(value)


def ceil(x: Any) -> float:
    value = check_number(x, 1, "ceil")
    if not math.isfinite(value):
        return value
    return math.ceil(value)


def sqrt(x: Any) -> float:
    value = check_number(x, 1, "sqrt")
    return math.sqrt(value) if value >= 0 else math.nan


def log(x: Any, base: Any = None) -> float:
    value = check_number(x, 1, "log")
    if value <= 0:
        return -math.inf if value == 0 else math.nan
    if base is None:
        return math.log(value)
    return math.log(value, check_number(base, 2, "log"))


def fmod(x: Any, y: Any) -> float:
    divisor = check_number(y, 2, "fmod")
    if divisor == 0:
        return math.nan
    return math.fmod(check_number(x, 1, "fmod"), divisor)


def modf(x: Any) -> Tuple[float, float]:
    value = check_number(x, 1, "modf")
    fractional, integral = math.modf(value)
    return (float(integral), fractional)


def lua_pow(x: Any, y: Any) -> float:
    try:
        return math.pow(check_number(x, 1, "pow"), check_number(y, 2, "pow"))
    except ValueError:
        return math.nan
    except OverflowError:
        return math.inf


def lua_max(*args: Any) -> float:
    if not args:
        raise ScriptError("bad argument #1 to 'max' (number expected, got no value)")
    return max(check_number(v, i, "max") for i, v in enumerate(args, start=1))


def lua_min(*args: Any) -> float:
    if not args:
        raise ScriptError("bad argument #1 to 'min' (number expected, got no value)")
    return min(check_number(v, i, "min") for i, v in enumerate(args, start=1))


def open_math(state: InterpreterState, name: str = "math") -> Table:
    rng = random.Random(0)

    def lua_random(m: Any = None, n: Any = None) -> float:
        if m is None:
            return rng.random()
        low, high = (1, check_int(m, 1, "random")) if n is None else (
            check_int(m, 1, "random"),
            check_int(n, 2, "random"),
        )
        if low > high:
            raise ScriptError("bad argument to 'random' (interval is empty)")
        return rng.randint(low, high)

    def randomseed(seed: Any) -> None:
        rng.seed(check_number(seed, 1, "randomseed"))

    functions: Dict[str, Any] = {
        "abs": _unary("abs", abs),
        "ceil": ceil,
        "floor": floor,
        "sqrt": sqrt,
        "sin": _unary("sin", math.sin),
        "cos": _unary("cos", math.cos),
        "tan": _unary("tan", math.tan),
        "exp": _unary("exp", math.exp),
        "log": log,
        "pow": lua_pow,
        "fmod": fmod,
        "modf": modf,
        "max": lua_max,
        "min": lua_min,
        "random": lua_random,
        "randomseed": randomseed,
        "pi": math.pi,
        "huge": math.inf,
    }
    return state.register_module(name, functions)
