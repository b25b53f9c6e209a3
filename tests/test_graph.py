"""Tests for ir/graph.py: payload ingestion, entity sizing, relationship filtering."""

from __future__ import annotations

import pytest

from flowgraph_layout.config import LayoutConfig
from flowgraph_layout.ir.graph import GraphIR, callable_height, entity_from_dict, relationship_from_dict
from flowgraph_layout.types import EntityKind

# ─── Helpers ──────────────────────────────────────────────────────────────────


def fn(entity_id: str, file: str = "a.go", **extra) -> dict:
    return {"id": entity_id, "type": "function", "file": file, **extra}


def decl(entity_id: str, file: str = "a.go", **extra) -> dict:
    return {"id": entity_id, "type": "struct", "file": file, **extra}


# ─── Entity Tests ─────────────────────────────────────────────────────────────


class TestEntityFromDict:
    def test_function_is_callable(self):
        e = entity_from_dict(fn("f"), LayoutConfig())
        assert e is not None
        assert e.kind is EntityKind.Callable
        assert e.width == 650.0
        assert e.height == 320.0

    def test_method_and_constructor_are_callable(self):
        for raw_type in ("method", "constructor"):
            e = entity_from_dict({"id": "m", "type": raw_type}, LayoutConfig())
            assert e.is_callable

    def test_declaration_types(self):
        for raw_type in ("class", "struct", "interface", "enum", "type", "alias"):
            e = entity_from_dict({"id": "T", "type": raw_type}, LayoutConfig())
            assert e.is_declaration
            assert (e.width, e.height) == (350.0, 200.0)

    def test_undrawn_type_skipped(self):
        assert entity_from_dict({"id": "pkg", "type": "package"}, LayoutConfig()) is None

    def test_missing_id_raises(self):
        with pytest.raises(ValueError):
            entity_from_dict({"type": "function"}, LayoutConfig())

    def test_non_mapping_raises(self):
        with pytest.raises(ValueError):
            entity_from_dict("f", LayoutConfig())  # type: ignore[arg-type]

    def test_label_defaults_to_id(self):
        e = entity_from_dict(fn("a.go:main"), LayoutConfig())
        assert e.label == "a.go:main"

    def test_used_by_parsed(self):
        e = entity_from_dict(decl("T", usedBy=["f", "g"]), LayoutConfig())
        assert e.used_by == ["f", "g"]


class TestCallableHeight:
    def test_no_source_uses_default(self):
        assert callable_height("", None, None, LayoutConfig()) == 320.0

    def test_short_body_hits_floor(self):
        assert callable_height("return 1", None, None, LayoutConfig()) == 206.0

    def test_long_body_capped(self):
        code = "\n".join(["x = 1"] * 100)
        assert callable_height(code, None, None, LayoutConfig()) == 320.0

    def test_line_range(self):
        # 86 + 8 * 18 = 230
        assert callable_height("", 10, 17, LayoutConfig()) == 230.0

    def test_inverted_line_range_uses_default(self):
        assert callable_height("", 20, 10, LayoutConfig()) == 320.0

    def test_explicit_height_honoured_above_floor(self):
        assert entity_from_dict(fn("f", height=400), LayoutConfig()).height == 400.0
        assert entity_from_dict(fn("f", height=50), LayoutConfig()).height == 206.0

    def test_non_finite_explicit_height_ignored(self):
        for bad in ("nan", float("nan"), float("inf"), "-Infinity", "tall"):
            e = entity_from_dict(fn("f", height=bad), LayoutConfig())
            assert e.height == 320.0, bad

    def test_non_finite_line_numbers_ignored(self):
        e = entity_from_dict(fn("f", line=float("inf"), endLine=float("nan")), LayoutConfig())
        assert e.line is None
        assert e.end_line is None
        assert e.height == 320.0


# ─── Relationship Tests ───────────────────────────────────────────────────────


class TestRelationshipFromDict:
    def test_basic(self):
        rel = relationship_from_dict({"source": "a", "target": "b", "type": "calls", "callOrder": 2})
        assert rel.kind == "calls"
        assert rel.extra == {"callOrder": 2}

    def test_kind_defaults_to_calls(self):
        rel = relationship_from_dict({"source": "a", "target": "b"})
        assert rel.kind == "calls"

    def test_missing_endpoint(self):
        assert relationship_from_dict({"source": "a"}) is None
        assert relationship_from_dict("a->b") is None  # type: ignore[arg-type]


# ─── GraphIR Tests ────────────────────────────────────────────────────────────


class TestGraphIR:
    def test_from_dict(self):
        gir = GraphIR.from_dict(
            {
                "nodes": [fn("f"), fn("g"), decl("T")],
                "edges": [{"source": "f", "target": "g"}, {"source": "g", "target": "T", "type": "uses"}],
            }
        )
        assert gir.node_count() == 3
        assert gir.edge_count() == 2
        assert [e.id for e in gir.callables()] == ["f", "g"]
        assert [e.id for e in gir.declarations()] == ["T"]
        assert gir.digraph.has_edge("f", "g")

    def test_edge_to_unknown_entity_dropped(self):
        gir = GraphIR.from_dict({"nodes": [fn("f")], "edges": [{"source": "f", "target": "ghost"}]})
        assert gir.edge_count() == 0
        assert gir.digraph.number_of_edges() == 0

    def test_malformed_edge_dropped(self):
        gir = GraphIR.from_dict({"nodes": [fn("f"), fn("g")], "edges": [{"source": "f"}, 42]})
        assert gir.edge_count() == 0

    def test_edge_to_undrawn_entity_dropped(self):
        gir = GraphIR.from_dict(
            {"nodes": [fn("f"), {"id": "pkg", "type": "package"}], "edges": [{"source": "f", "target": "pkg"}]}
        )
        assert gir.node_count() == 1
        assert gir.edge_count() == 0

    def test_first_definition_wins(self):
        gir = GraphIR.from_dict({"nodes": [fn("f", file="a.go"), fn("f", file="b.go")]})
        assert gir.node_count() == 1
        assert gir.entities[0].file == "a.go"
        assert gir.digraph.nodes["f"]["data"] is gir.entities[0]

    def test_parallel_edges_kept(self):
        gir = GraphIR.from_dict(
            {
                "nodes": [fn("f"), fn("g")],
                "edges": [
                    {"source": "f", "target": "g", "callOrder": 1},
                    {"source": "f", "target": "g", "callOrder": 2},
                ],
            }
        )
        assert gir.edge_count() == 2
        assert gir.digraph.number_of_edges() == 1

    def test_empty(self):
        assert GraphIR.from_dict({}).is_empty()
        assert GraphIR.from_dict({"nodes": [], "edges": []}).is_empty()

    def test_non_mapping_payload_raises(self):
        with pytest.raises(ValueError):
            GraphIR.from_dict([])  # type: ignore[arg-type]
