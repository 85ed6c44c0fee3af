import pytest
from pathlib import Path
import sys

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from pipegraph.exceptions import MalformedGraphError, UnknownNodeError
from pipegraph.graph.pipeline_graph import build_graph, empty_graph
from pipegraph.types import GraphEdge, GraphNode, NodeCategory


class TestBuildGraph:
    """Test graph construction and validation."""

    def test_enumeration_follows_insertion_order(self, chain_graph):
        assert chain_graph.node_ids == ["a", "b", "c", "x"]
        assert chain_graph.edges == [
            GraphEdge("a", "b"),
            GraphEdge("b", "c"),
            GraphEdge("x", "c"),
        ]

    def test_adjacency_lookups(self, chain_graph):
        assert chain_graph.predecessors("c") == ["b", "x"]
        assert chain_graph.successors("a") == ["b"]
        assert chain_graph.successors("c") == []
        assert chain_graph.get_node("b").category == NodeCategory.TARGET
        assert "x" in chain_graph
        assert "missing" not in chain_graph

    def test_lookup_of_unknown_node(self, chain_graph):
        with pytest.raises(UnknownNodeError) as exc_info:
            chain_graph.successors("nope")
        assert exc_info.value.names == ["nope"]

    def test_two_node_cycle_is_rejected(self):
        with pytest.raises(MalformedGraphError) as exc_info:
            build_graph(["a", "b"], [("a", "b"), ("b", "a")])
        cycle = exc_info.value.cycle
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {"a", "b"}

    def test_cycle_downstream_nodes_are_not_reported(self):
        with pytest.raises(MalformedGraphError) as exc_info:
            build_graph(["a", "b", "c", "d"], [("a", "b"), ("b", "c"), ("c", "b"), ("c", "d")])
        assert set(exc_info.value.cycle) == {"b", "c"}

    def test_self_loop_is_a_cycle(self):
        with pytest.raises(MalformedGraphError) as exc_info:
            build_graph(["a"], [("a", "a")])
        assert exc_info.value.cycle == ["a", "a"]

    def test_edge_to_unknown_node(self):
        with pytest.raises(MalformedGraphError) as exc_info:
            build_graph(["a"], [("a", "ghost")])
        assert exc_info.value.edge == ("a", "ghost")
        assert "ghost" in str(exc_info.value)

    def test_duplicate_node_identifier(self):
        with pytest.raises(MalformedGraphError):
            build_graph(["a", "a"], [])

    def test_duplicate_edges_collapse(self):
        graph = build_graph(["a", "b"], [("a", "b"), GraphEdge("a", "b")])
        assert len(graph.edges) == 1
        assert graph.predecessors("b") == ["a"]

    def test_node_input_forms(self):
        graph = build_graph(
            [
                "plain",
                {"id": "dict_target", "category": "target", "properties": {"stage": "x"}},
                GraphNode(id="obj"),
            ],
            [{"source_id": "plain", "target_id": "dict_target"}],
        )
        assert graph.get_node("plain").category == NodeCategory.IMPORT
        assert graph.get_node("dict_target").is_target
        assert graph.get_node("dict_target").properties == {"stage": "x"}

    def test_topological_order(self, diamond_graph):
        order = diamond_graph.topological_order()
        for edge in diamond_graph.edges:
            assert order.index(edge.source_id) < order.index(edge.target_id)

    def test_empty_graph(self):
        graph = empty_graph()
        assert graph.is_empty
        assert len(graph) == 0
        assert graph.edges == []
        assert graph == build_graph([], [])

    def test_with_nodes_keeps_structure(self, chain_graph):
        renamed = [GraphNode(id=node.id, properties={"tag": 1}) for node in chain_graph.nodes]
        copy = chain_graph.with_nodes(renamed)
        assert copy.edges == chain_graph.edges
        assert copy.get_node("a").properties == {"tag": 1}
        assert chain_graph.get_node("a").properties == {}

    def test_with_nodes_rejects_other_identifiers(self, chain_graph):
        with pytest.raises(ValueError):
            chain_graph.with_nodes([GraphNode(id="z")])

    def test_caller_nodes_are_not_shared(self):
        nodes = [GraphNode(id="a"), GraphNode(id="b")]
        graph = build_graph(nodes, [("a", "b")])
        nodes[1].properties["late"] = True
        graph.get_node("a").properties["edited"] = 1
        graph.nodes[0].properties["edited"] = 2
        assert graph.get_node("a").properties == {}
        assert graph.get_node("b").properties == {}

    def test_string_edge_is_rejected(self):
        with pytest.raises(MalformedGraphError):
            build_graph(["a", "b"], ["ab"])

    def test_edge_dict_without_endpoints(self):
        with pytest.raises(MalformedGraphError):
            build_graph(["a", "b"], [{"target_id": "b"}])

    def test_edge_with_wrong_arity(self):
        with pytest.raises(MalformedGraphError):
            build_graph(["a", "b", "c"], [("a", "b", "c")])
