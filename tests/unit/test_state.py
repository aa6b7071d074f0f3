"""Unit tests for the interpreter state primitives."""

import pytest

from openlibs import InterpreterState, ScriptError, Table


def test_table_length_stops_at_first_gap():
    table = Table.from_list(["a", "b", "c"])
    table[5] = "e"
    assert table.length() == 3


def test_table_nil_assignment_removes_key():
    table = Table({"x": 1})
    table["x"] = None
    assert "x" not in table


def test_table_float_keys_normalize():
    table = Table()
    table[2.0] = "two"
    assert table[2] == "two"


def test_tables_compare_by_identity():
    assert Table() != Table()


def test_call_normalizes_results(state):
    assert state.call(lambda: None) == ()
    assert state.call(lambda: 1) == (1,)
    assert state.call(lambda: (1, 2)) == (1, 2)


def test_call_rejects_non_callables(state):
    with pytest.raises(ScriptError) as excinfo:
        state.call(42)
    assert str(excinfo.value) == "attempt to call a number value"


def test_find_table_creates_nested_tables(state):
    inner = state.find_table(state.registry, "a.b.c", size_hint=4)
    assert state.registry["a"]["b"]["c"] is inner
    assert inner.size_hint == 4
    assert state.find_table(state.registry, "a.b.c") is inner


def test_find_table_conflict(state):
    state.registry["taken"] = "string"
    with pytest.raises(ScriptError):
        state.find_table(state.registry, "taken.sub")


def test_register_module_empty_name_merges_into_globals(state):
    target = state.register_module("", {"answer": 42})
    assert target is state.globals
    assert state.globals["answer"] == 42


def test_register_module_reuses_loaded_table(state):
    first = state.register_module("mod", {"a": 1})
    second = state.register_module("mod", {"b": 2})
    assert first is second
    assert state.loaded["mod"] is first
    assert state.globals["mod"] is first
    assert first["a"] == 1 and first["b"] == 2


def test_preload_absent_until_created(state):
    assert state.preload is None


def test_emit_and_write_use_sink(state, captured):
    state.emit("line")
    state.write("chunk")
    assert captured == ["line", "chunk"]


def test_emit_falls_back_to_stdout(capsys):
    InterpreterState().emit("hello")
    assert capsys.readouterr().out == "hello\n"


def test_read_line_uses_input_source():
    lines = iter(["one", None])
    state = InterpreterState(input_source=lambda: next(lines))
    assert state.read_line() == "one"
    assert state.read_line() is None


def test_boolean_keys_do_not_collide_with_numbers():
    table = Table()
    table[1] = "one"
    table[True] = "yes"
    table[0] = "zero"
    table[False] = "no"
    assert table[1] == "one"
    assert table[True] == "yes"
    assert table.get(0) == "zero"
    assert table.get(False) == "no"
    assert sorted(k for k in table if not isinstance(k, bool)) == [0, 1]
    assert {k for k in table if isinstance(k, bool)} == {True, False}
    table[True] = None
    assert True not in table
    assert 1 in table


def test_table_constructor_normalizes_keys():
    table = Table({2.0: "two", "x": None})
    assert table[2] == "two"
    assert "x" not in table
