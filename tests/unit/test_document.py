"""Tests for ir/document.py — JSON graph documents."""

import pytest

from layered_layout.errors import DocumentError
from layered_layout.ir.document import graph_from_document, graph_to_document
from layered_layout.ir.graph import Edge


class TestGraphFromDocument:
    def test_labels_exclude_identifying_keys(self):
        g = graph_from_document(
            {
                "nodes": [{"id": "a", "width": 10}],
                "edges": [{"v": "a", "w": "b", "name": "x", "minlen": 2}],
            }
        )
        assert g.node("a") == {"width": 10}
        assert g.edges() == [Edge("a", "b", "x")]
        assert g.edge("a", "b", "x") == {"minlen": 2}

    def test_parent_listed_after_child(self):
        g = graph_from_document({"nodes": [{"id": "a", "parent": "sg"}, {"id": "sg"}]})
        assert g.parent("a") == "sg"
        assert g.node("sg") == {}

    def test_empty_document(self):
        g = graph_from_document({})
        assert g.node_count() == 0
        assert g.graph() == {}

    def test_not_a_mapping(self):
        with pytest.raises(DocumentError, match="must be an object"):
            graph_from_document([])

    def test_edge_without_head(self):
        with pytest.raises(DocumentError, match="edge #1"):
            graph_from_document({"edges": [{"v": "a", "w": "b"}, {"v": "b"}]})

    def test_parent_cycle(self):
        with pytest.raises(ValueError):
            graph_from_document({"nodes": [{"id": "a", "parent": "b"}, {"id": "b", "parent": "a"}]})


class TestGraphToDocument:
    def test_round_trip_keys(self):
        doc = {
            "graph": {"rankdir": "LR"},
            "nodes": [{"id": "sg"}, {"id": "a", "parent": "sg", "width": 5}],
            "edges": [{"v": "a", "w": "sg", "name": "n", "weight": 3}],
        }
        assert graph_to_document(graph_from_document(doc)) == doc

    def test_unnamed_edge_has_no_name_key(self):
        doc = graph_to_document(graph_from_document({"edges": [{"v": "a", "w": "b"}]}))
        assert doc["edges"] == [{"v": "a", "w": "b"}]
        assert [node["id"] for node in doc["nodes"]] == ["a", "b"]
