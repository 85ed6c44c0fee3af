from pathlib import Path
import sys

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from pipegraph.query.subgraph import induce, targets_only
from pipegraph.types import GraphEdge


class TestInduce:
    """Test induced subgraph reduction."""

    def test_keeps_only_edges_between_retained_nodes(self, chain_graph):
        reduced = induce(chain_graph, {"b", "c"})
        assert reduced.node_ids == ["b", "c"]
        assert reduced.edges == [GraphEdge("b", "c")]

    def test_identity(self, diamond_graph):
        assert induce(diamond_graph, diamond_graph.node_ids) == diamond_graph

    def test_empty_subset(self, diamond_graph):
        reduced = induce(diamond_graph, [])
        assert reduced.is_empty
        assert reduced.edges == []

    def test_unknown_identifiers_are_ignored(self, chain_graph):
        reduced = induce(chain_graph, ["a", "b", "ghost"])
        assert reduced.node_ids == ["a", "b"]
        assert reduced.edges == [GraphEdge("a", "b")]

    def test_skipped_intermediate_drops_edges(self, chain_graph):
        reduced = induce(chain_graph, ["a", "c"])
        assert reduced.node_ids == ["a", "c"]
        assert reduced.edges == []

    def test_edge_completeness(self, diamond_graph):
        subset = {"raw", "clean", "model", "report"}
        reduced = induce(diamond_graph, subset)
        expected = [
            edge for edge in diamond_graph.edges
            if edge.source_id in subset and edge.target_id in subset
        ]
        assert reduced.edges == expected
        for edge in reduced.edges:
            assert edge.source_id in subset and edge.target_id in subset

    def test_original_is_unchanged(self, chain_graph):
        induce(chain_graph, ["a"])
        assert len(chain_graph) == 4
        assert len(chain_graph.edges) == 3

    def test_targets_only(self, diamond_graph):
        reduced = targets_only(diamond_graph)
        assert reduced.node_ids == ["clean", "summary", "model", "report"]
        assert GraphEdge("raw", "clean") not in reduced.edges
        assert GraphEdge("clean", "model") in reduced.edges

    def test_editing_induced_node_leaves_source(self, chain_graph):
        reduced = induce(chain_graph, ["b", "c"])
        reduced.get_node("b").properties["stage"] = "changed"
        for node in reduced:
            node.properties["touched"] = True
        assert chain_graph.get_node("b").properties == {"stage": "prep"}
        assert reduced.get_node("b").properties == {"stage": "prep"}
