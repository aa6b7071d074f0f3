"""
Library: bit (32-bit bit operations)
Installs into: ``bit``

Every operation first normalizes its arguments with ``tobit`` and returns a
signed 32-bit result, so results are identical on every platform. Shift
counts use only their low five bits.
"""
from __future__ import annotations

import math
from typing import Any, Dict

from ..kernel.state import InterpreterState, Table
from .base import check_number

_MASK = 0xFFFFFFFF


def _signed(value: int) -> int:
    value &= _MASK
    return value - 0x100000000 if value & 0x80000000 else value


def _arg(value: Any, position: int, fname: str) -> int:
    number = check_number(value, position, fname)
    if not math.isfinite(number):
        return 0
    # Non-integral numbers round to nearest, ties to even
    return _signed(int(round(number)))


def tobit(x: Any) -> int:
    return _arg(x, 1, "tobit")


def tohex(x: Any, n: Any = 8) -> str:
    value = _arg(x, 1, "tohex") & _MASK
    digits = _arg(n, 2, "tohex")
    upper = digits < 0
    digits = min(abs(digits), 8)
    text = format(value & ((1 << (4 * digits)) - 1), f"0{digits}x") if digits else ""
    return text.upper() if upper else text


def bnot(x: Any) -> int:
    return _signed(~_arg(x, 1, "bnot"))


def band(x: Any, *rest: Any) -> int:
    result = _arg(x, 1, "band")
    for position, value in enumerate(rest, start=2):
        result &= _arg(value, position, "band")
    return _signed(result)


def bor(x: Any, *rest: Any) -> int:
    result = _arg(x, 1, "bor")
    for position, value in enumerate(rest, start=2):
        result |= _arg(value, position, "bor")
    return _signed(result)


def bxor(x: Any, *rest: Any) -> int:
    result = _arg(x, 1, "bxor")
    for position, value in enumerate(rest, start=2):
        result ^= _arg(value, position, "bxor")
    return _signed(result)


def lshift(x: Any, n: Any) -> int:
    return _signed(_arg(x, 1, "lshift") << (_arg(n, 2, "lshift") & 31))


def rshift(x: Any, n: Any) -> int:
    return _signed((_arg(x, 1, "rshift") & _MASK) >> (_arg(n, 2, "rshift") & 31))


def arshift(x: Any, n: Any) -> int:
    return _signed(_arg(x, 1, "arshift") >> (_arg(n, 2, "arshift") & 31))


def rol(x: Any, n: Any) -> int:
    value = _arg(x, 1, "rol") & _MASK
    shift = _arg(n, 2, "rol") & 31
    return _signed((value << shift) | (value >> (32 - shift)))


def ror(x: Any, n: Any) -> int:
    value = _arg(x, 1, "ror") & _MASK
    shift = _arg(n, 2, "ror") & 31
    return _signed((value >> shift) | (value << (32 - shift)))


def bswap(x: Any) -> int:
    value = _arg(x, 1, "bswap") & _MASK
    return _signed(int.from_bytes(value.to_bytes(4, "little"), "big"))


def open_bit(state: InterpreterState, name: str = "bit") -> Table:
    functions: Dict[str, Any] = {
        "tobit": tobit,
        "tohex": tohex,
        "bnot": bnot,
        "band": band,
        "bor": bor,
        "bxor": bxor,
        "lshift": lshift,
        "rshift": rshift,
        "arshift": arshift,
        "rol": rol,
        "ror": ror,
        "bswap": bswap,
    }
    return state.register_module(name, functions)
