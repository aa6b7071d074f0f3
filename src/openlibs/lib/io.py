"""
Library: io
Installs into: ``io``

``io.write`` and ``io.read`` go through the state's I/O membrane (output
sink / input source), so a host capturing output sees everything a script
writes. ``io.open`` returns file handles backed by real files.

Functions:
  - io.write, io.read
  - io.open, io.lines, io.close, io.type
  - io.stdout: handle whose writes go to the output sink
"""
from __future__ import annotations

from typing import IO, Any, Dict, Iterator, Optional, Tuple

from ..kernel.state import InterpreterState, ScriptError, Table
from .base import check_string, tonumber, tostring

_MODES = {"r", "w", "a", "r+", "w+", "a+"}


def _chunk(value: Any, position: int) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return tostring(value)
    raise ScriptError(f"bad argument #{position} to 'write' (string expected)")


class FileHandle:
    """A script-visible file. Methods take the handle first (``f:read()``)."""

    def __init__(self, stream: Optional[IO[str]], name: str) -> None:
        self._stream = stream
        self.name = name

    @property
    def closed(self) -> bool:
        return self._stream is None

    def _check(self) -> IO[str]:
        if self._stream is None:
            raise ScriptError("attempt to use a closed file")
        return self._stream

    def read(self, fmt: Any = "*l") -> Any:
        stream = self._check()
        if isinstance(fmt, (int, float)) and not isinstance(fmt, bool):
            data = stream.read(int(fmt))
            return data if data or int(fmt) == 0 else None
        fmt = str(fmt).lstrip("*")[:1]
        if fmt == "a":
            return stream.read()
        if fmt == "n":
            return tonumber(stream.readline())
        if fmt == "l":
            line = stream.readline()
            return line.rstrip("\n") if line else None
        raise ScriptError("bad argument #1 to 'read' (invalid format)")

    def write(self, *values: Any) -> "FileHandle":
        stream = self._check()
        for position, value in enumerate(values, start=1):
            stream.write(_chunk(value, position))
        return self

    def lines(self) -> Iterator[str]:
        stream = self._check()
        for line in stream:
            yield line.rstrip("\n")

    def seek(self, whence: str = "cur", offset: int = 0) -> int:
        stream = self._check()
        anchors = {"set": 0, "cur": 1, "end": 2}
        if whence not in anchors:
            raise ScriptError(f"bad argument #1 to 'seek' (invalid option '{whence}')")
        if whence == "cur" and offset == 0:
            return stream.tell()
        return stream.seek(offset, anchors[whence])

    def flush(self) -> "FileHandle":
        self._check().flush()
        return self

    def close(self) -> bool:
        self._check().close()
        self._stream = None
        return True

    def __repr__(self) -> str:
        return "file (closed)" if self.closed else f"file (0x{id(self):08x})"


class SinkHandle(FileHandle):
    """``io.stdout``: writes go to the state's output sink."""

    def __init__(self, state: InterpreterState) -> None:
        super().__init__(None, "stdout")
        self._state = state

    @property
    def closed(self) -> bool:
        return False

    def write(self, *values: Any) -> "FileHandle":
        for position, value in enumerate(values, start=1):
            self._state.write(_chunk(value, position))
        return self

    def read(self, fmt: Any = "*l") -> Any:
        raise ScriptError("file not readable")

    def flush(self) -> "FileHandle":
        return self

    def close(self) -> bool:
        raise ScriptError("cannot close standard file")


def open_io(state: InterpreterState, name: str = "io") -> Table:
    stdout = SinkHandle(state)

    def write(*values: Any) -> FileHandle:
        return stdout.write(*values)

    def read(fmt: Any = "*l") -> Any:
        line = state.read_line()
        if line is None:
            return None
        if str(fmt).lstrip("*")[:1] == "n":
            return tonumber(line)
        return line

    def lua_open(filename: Any, mode: Any = "r") -> Tuple[Any, ...]:
        filename = check_string(filename, 1, "open")
        mode = check_string(mode, 2, "open").replace("b", "")
        if mode not in _MODES:
            raise ScriptError(f"bad argument #2 to 'open' (invalid mode '{mode}')")
        try:
            stream = open(filename, mode)
        except OSError as exc:
            return (None, f"{filename}: {exc.strerror}", exc.errno)
        return (FileHandle(stream, filename),)

    def lines(filename: Any) -> Any:
        opened = lua_open(filename)
        handle = opened[0]
        if handle is None:
            raise ScriptError(opened[1])

        def iterate() -> Iterator[str]:
            try:
                yield from handle.lines()
            finally:
                handle.close()

        return iterate()

    def close(handle: Any = None) -> bool:
        if handle is None:
            handle = stdout
        if not isinstance(handle, FileHandle):
            raise ScriptError("bad argument #1 to 'close' (file expected)")
        return handle.close()

    def io_type(value: Any) -> Optional[str]:
        if not isinstance(value, FileHandle):
            return None
        return "closed file" if value.closed else "file"

    functions: Dict[str, Any] = {
        "write": write,
        "read": read,
        "open": lua_open,
        "lines": lines,
        "close": close,
        "type": io_type,
        "stdout": stdout,
    }
    return state.register_module(name, functions)
