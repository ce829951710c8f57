from __future__ import annotations

"""
Unit tests for the Dependency Graph Accumulator.

Verifies node registration, collision detection, deterministic
serialization and the write-once flush.
"""

import json
from pathlib import Path

import pytest

from compile_modules.core.pipeline.stages.graph import GraphAccumulator
from compile_modules.domain.errors import ModuleNameCollisionError


def test_append_and_serialize() -> None:
    graph = GraphAccumulator()
    graph.append_node("b", [])
    graph.append_node("a", ["b", "c"])

    assert len(graph) == 2
    assert "a" in graph
    assert graph.to_dict() == {"a": {"requires": ["b", "c"]}, "b": {"requires": []}}

    text = graph.serialize()
    assert text.endswith("\n")
    assert text.index('"a"') < text.index('"b"')


def test_duplicate_name_rejected() -> None:
    graph = GraphAccumulator()
    graph.append_node("a", ["x"])

    with pytest.raises(ModuleNameCollisionError) as exc_info:
        graph.append_node("a", ["y"])

    assert exc_info.value.module_name == "a"
    assert graph.to_dict() == {"a": {"requires": ["x"]}}


def test_flush_writes_graph_json(tmp_path: Path) -> None:
    graph = GraphAccumulator()
    graph.append_node("lib/a", ["lib/b"])
    dest = tmp_path / "out" / "nested"

    path = graph.flush(str(dest))

    assert Path(path) == dest / "graph.json"
    assert json.loads(Path(path).read_text(encoding="utf-8")) == {"lib/a": {"requires": ["lib/b"]}}
    assert graph.flushed


def test_empty_graph_flushes_empty_object(tmp_path: Path) -> None:
    path = GraphAccumulator().flush(str(tmp_path))
    assert json.loads(Path(path).read_text(encoding="utf-8")) == {}


def test_flush_is_single_shot(tmp_path: Path) -> None:
    graph = GraphAccumulator()
    graph.flush(str(tmp_path))

    with pytest.raises(RuntimeError):
        graph.flush(str(tmp_path))
    with pytest.raises(RuntimeError):
        graph.append_node("late", [])
