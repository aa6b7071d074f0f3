"""
Interpreter State: the host-owned execution context libraries install into.

The state holds two roots:
- globals: the namespace scripts see (``_G``)
- registry: host metadata, including ``_LOADED`` (materialized modules) and,
  once a bootstrap has staged something, ``_PRELOAD`` (deferred constructors)

Script-visible output flows through ``output_sink`` (the I/O membrane), so
the logic of a library is decoupled from where its text ends up. Hosts pass
``print`` for a console, or a list's ``append`` to capture.
"""

from __future__ import annotations

import sys
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

LOADED_KEY = "_LOADED"
PRELOAD_KEY = "_PRELOAD"
GLOBALS_KEY = "_G"

ChunkCompiler = Callable[[str, str], Callable[..., Any]]


class ScriptError(Exception):
    """The host error channel.

    Raised by library functions (and ``error()``) to unwind a script call.
    ``value`` is the error object the script passed, usually a message string.
    """

    def __init__(self, value: Any = None, kind: str = "runtime_error") -> None:
        super().__init__(value)
        self.value = value
        self.kind = kind

    def __str__(self) -> str:
        return str(self.value)


class Table(dict):
    """A script table: hash part plus a 1-based array part.

    ``size_hint`` records the capacity the creator asked for; it has no effect
    on storage and exists so hosts can see how a table was preallocated.
    """

    def __init__(self, *args: Any, size_hint: int = 0, **kwargs: Any) -> None:
        super().__init__()
        self.size_hint = size_hint
        self.metatable: Optional[Table] = None
        for key, value in dict(*args, **kwargs).items():
            self[key] = value

    # dict equality would make two empty tables "equal"; scripts compare by identity
    __eq__ = object.__eq__
    __ne__ = object.__ne__
    __hash__ = object.__hash__

    @classmethod
    def from_list(cls, items: Iterable[Any]) -> "Table":
        table = cls()
        for index, value in enumerate(items, start=1):
            table[index] = value
        return table

    def length(self) -> int:
        """Border of the array part: the largest n with t[1..n] all non-nil."""
        n = 0
        while self.get(n + 1) is not None:
            n += 1
        return n

    def append(self, value: Any) -> None:
        self[self.length() + 1] = value

    def array(self) -> Iterator[Any]:
        for index in range(1, self.length() + 1):
            yield self[index]

    def __setitem__(self, key: Any, value: Any) -> None:
        # Assigning nil removes the key
        if value is None:
            self.pop(key, None)
        else:
            super().__setitem__(_normalize_key(key), value)

    def __getitem__(self, key: Any) -> Any:
        return super().__getitem__(_normalize_key(key))

    def __contains__(self, key: Any) -> bool:
        return super().__contains__(_normalize_key(key))

    def __delitem__(self, key: Any) -> None:
        super().__delitem__(_normalize_key(key))

    def get(self, key: Any, default: Any = None) -> Any:
        return super().get(_normalize_key(key), default)

    def pop(self, key: Any, *default: Any) -> Any:
        return super().pop(_normalize_key(key), *default)

    def __iter__(self) -> Iterator[Any]:
        for key in super().__iter__():
            yield _public_key(key)

    def keys(self) -> List[Any]:  # type: ignore[override]
        return list(self)

    def items(self) -> List[Tuple[Any, Any]]:  # type: ignore[override]
        return [(_public_key(key), value) for key, value in super().items()]

    def __repr__(self) -> str:
        return f"table: 0x{id(self):08x}"


class _BoolKey:
    """Stands in for True/False as a key, which dict would merge with 1/0."""

    __slots__ = ("value",)

    def __init__(self, value: bool) -> None:
        self.value = value

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, _BoolKey) and other.value is self.value

    def __hash__(self) -> int:
        return hash((_BoolKey, self.value))


_TRUE_KEY = _BoolKey(True)
_FALSE_KEY = _BoolKey(False)


def _normalize_key(key: Any) -> Any:
    if key is True:
        return _TRUE_KEY
    if key is False:
        return _FALSE_KEY
    # 2.0 and 2 are the same key
    if isinstance(key, float) and key.is_integer():
        return int(key)
    return key


def _public_key(key: Any) -> Any:
    return key.value if isinstance(key, _BoolKey) else key


class InterpreterState:
    """
    A fresh interpreter state.

    The host creates it, runs a bootstrap against it, then hands it to
    scripts. Nothing here is thread-safe; the host serializes access.

    Example:
        state = InterpreterState(output_sink=print)
        install_standard_library(state)
        state.globals["print"]("hello")
    """

    def __init__(
        self,
        output_sink: Optional[Callable[[str], None]] = None,
        input_source: Optional[Callable[[], Optional[str]]] = None,
        compiler: Optional[ChunkCompiler] = None,
    ) -> None:
        self.globals = Table()
        self.registry = Table()
        self.registry[LOADED_KEY] = Table()
        self.output_sink = output_sink
        self.input_source = input_source
        self.compiler = compiler

    @property
    def loaded(self) -> Table:
        return self.registry[LOADED_KEY]

    @property
    def preload(self) -> Optional[Table]:
        """The preload registry, or None if nothing has created it yet."""
        return self.registry.get(PRELOAD_KEY)

    # ------------------------------------------------------------------
    # Call / lookup primitives
    # ------------------------------------------------------------------

    def call(self, fn: Any, *args: Any) -> Tuple[Any, ...]:
        """Invoke ``fn`` with ``args`` and normalize its results to a tuple."""
        if not callable(fn):
            raise ScriptError(f"attempt to call a {type_name(fn)} value")
        return as_results(fn(*args))

    def find_table(self, root: Table, key: str, size_hint: int = 0) -> Table:
        """Return the table at dotted path ``key`` under ``root``, creating it.

        Intermediate tables are created on the way. Only the last one gets
        ``size_hint``. A non-table value on the path is an error.
        """
        current = root
        parts = key.split(".")
        for index, part in enumerate(parts):
            value = current.get(part)
            if value is None:
                hint = size_hint if index == len(parts) - 1 else 1
                value = Table(size_hint=hint)
                current[part] = value
            elif not isinstance(value, Table):
                raise ScriptError(f"name conflict for module '{key}'")
            current = value
        return current

    def register_module(self, name: str, functions: Dict[str, Any]) -> Table:
        """Install ``functions`` under ``name``.

        The empty name merges into globals. Any other name reuses the table
        already in ``_LOADED`` (so reopening a library keeps its identity) or
        creates one, and binds it as a global of the same name.
        """
        if not name:
            target = self.globals
        else:
            target = self.loaded.get(name)
            if not isinstance(target, Table):
                target = self.find_table(self.globals, name, size_hint=len(functions))
                self.loaded[name] = target
            self.globals[name] = target
        for key, value in functions.items():
            target[key] = value
        return target

    # ------------------------------------------------------------------
    # I/O membrane
    # ------------------------------------------------------------------

    def emit(self, line: str) -> None:
        """Send a complete line to the output sink, or stdout as fallback."""
        if self.output_sink:
            self.output_sink(line)
        else:
            print(line)

    def write(self, chunk: str) -> None:
        """Send raw text (no newline added) to the output sink."""
        if self.output_sink:
            self.output_sink(chunk)
        else:
            sys.stdout.write(chunk)

    def read_line(self) -> Optional[str]:
        if self.input_source is not None:
            return self.input_source()
        line = sys.stdin.readline()
        if not line:
            return None
        return line.rstrip("\n")


def as_results(value: Any) -> Tuple[Any, ...]:
    if value is None:
        return ()
    if isinstance(value, tuple):
        return value
    return (value,)


def type_name(value: Any) -> str:
    """Script-level type name of a Python value."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Table):
        return "table"
    if callable(value):
        return "function"
    return "userdata"
