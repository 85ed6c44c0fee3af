import pytest
from pathlib import Path
from typing import Dict
import sys

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from pipegraph.graph.json_graph_client import JsonGraphClient
from pipegraph.graph.pipeline_graph import PipelineGraph, build_graph
from pipegraph.types import GraphNode, NodeCategory


@pytest.fixture
def chain_graph() -> PipelineGraph:
    """a -> b -> c, with x as an independent dependency of c."""
    nodes = [
        GraphNode(id="a", category=NodeCategory.IMPORT),
        GraphNode(id="b", category=NodeCategory.TARGET, properties={"stage": "prep"}),
        GraphNode(id="c", category=NodeCategory.TARGET, properties={"stage": "report"}),
        GraphNode(id="x", category=NodeCategory.IMPORT),
    ]
    return build_graph(nodes, [("a", "b"), ("b", "c"), ("x", "c")])


@pytest.fixture
def diamond_graph() -> PipelineGraph:
    """
    raw -> clean -> model -> report
    raw -> summary --------> report
    helper -> model
    """
    nodes = [
        GraphNode(id="raw", category=NodeCategory.IMPORT),
        GraphNode(id="helper", category=NodeCategory.IMPORT),
        GraphNode(id="clean", category=NodeCategory.TARGET, properties={"large": True}),
        GraphNode(id="summary", category=NodeCategory.TARGET, properties={"large": False}),
        GraphNode(id="model", category=NodeCategory.TARGET, properties={"large": True}),
        GraphNode(id="report", category=NodeCategory.TARGET, properties={"large": False}),
    ]
    edges = [
        ("raw", "clean"),
        ("raw", "summary"),
        ("clean", "model"),
        ("helper", "model"),
        ("model", "report"),
        ("summary", "report"),
    ]
    return build_graph(nodes, edges)


@pytest.fixture
def status_table() -> Dict[str, str]:
    """Statuses as reported by the execution layer."""
    return {
        "clean": "up to date",
        "summary": "outdated",
        "model": "failed",
    }


@pytest.fixture
def graph_storage(tmp_path) -> JsonGraphClient:
    """Storage client seeded with the diamond pipeline."""
    client = JsonGraphClient(str(tmp_path / "graph_data.json"))
    client.create_import_node("raw")
    client.create_import_node("helper")
    client.create_target_node("clean", {"large": True})
    client.create_target_node("summary", {"large": False})
    client.create_target_node("model", {"large": True})
    client.create_target_node("report", {"large": False})
    for dependency, dependent in [
        ("raw", "clean"),
        ("raw", "summary"),
        ("clean", "model"),
        ("helper", "model"),
        ("model", "report"),
        ("summary", "report"),
    ]:
        client.create_dependency(dependency, dependent)
    client.set_status("clean", "up to date")
    client.set_status("model", "failed")
    client.set_build_time("clean", 1.23456, 1.0)
    return client
