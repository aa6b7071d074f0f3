"""
Library: package (module resolution)
Installs into: ``package`` plus the global ``require``

``require`` is where staged modules materialize. The bootstrap loader only
writes constructors into ``_PRELOAD``; the first ``require(name)`` calls the
constructor with the module name and caches what it returns in ``_LOADED``.

Searchers (``package.loaders``) are tried in order. Each takes a module name
and returns either a constructor or a string explaining why it has none. The
only built-in searcher reads ``package.preload``; hosts append their own.
"""
from __future__ import annotations

from typing import Any, Callable, Dict

from ..kernel.state import PRELOAD_KEY, InterpreterState, ScriptError, Table
from ..logging import get_logger
from .base import check_string

log = get_logger(__name__)

DEFAULT_PATH = "./?.lua;./?/init.lua"
DEFAULT_CPATH = "./?.so"

# Marks a module whose constructor is running, to catch require loops
_LOADING = object()


def open_package(state: InterpreterState, name: str = "package") -> Table:
    preload = state.find_table(state.registry, PRELOAD_KEY)

    def preload_searcher(modname: Any) -> Any:
        modname = check_string(modname, 1, "require")
        constructor = preload.get(modname)
        if constructor is None:
            return f"\n\tno field package.preload['{modname}']"
        return constructor

    loaders = Table.from_list([preload_searcher])

    def require(modname: Any) -> Any:
        modname = check_string(modname, 1, "require")
        loaded = state.loaded
        cached = loaded.get(modname)
        if cached is _LOADING:
            raise ScriptError(f"loop or previous error loading module '{modname}'")
        if cached is not None and cached is not False:
            return cached

        messages = []
        constructor: Callable[..., Any] | None = None
        for searcher in loaders.array():
            found = state.call(searcher, modname)
            candidate = found[0] if found else None
            if callable(candidate):
                constructor = candidate
                break
            if isinstance(candidate, str):
                messages.append(candidate)
        if constructor is None:
            raise ScriptError(f"module '{modname}' not found:{''.join(messages)}")

        loaded[modname] = _LOADING
        try:
            results = state.call(constructor, state, modname)
        except Exception:
            loaded[modname] = None
            raise
        if results and results[0] is not None:
            loaded[modname] = results[0]
        elif loaded.get(modname) is _LOADING:
            loaded[modname] = True
        log.debug("module_materialized", module=modname)
        return loaded[modname]

    functions: Dict[str, Any] = {
        "loaded": state.loaded,
        "preload": preload,
        "loaders": loaders,
        "path": DEFAULT_PATH,
        "cpath": DEFAULT_CPATH,
        "config": "/\n;\n?\n!\n-",
    }
    module = state.register_module(name, functions)
    state.globals["require"] = require
    return module
