from typing import List, Dict, Any, Optional
import datetime
import json
from pathlib import Path

from ..exceptions import GraphStorageError, UnknownNodeError
from ..types import BuildStatus, GraphNode, NodeCategory
from ..utils.logger import app_logger
from .pipeline_graph import PipelineGraph, build_graph


class JsonGraphClient:
    """JSON-backed storage for a pipeline definition and its build metadata."""

    def __init__(self, storage_path: str = "graph_data.json"):
        self.logger = app_logger.bind(component="json_graph_client")
        self.storage_path = Path(storage_path)
        self.data = self._initialize_data()

        # Load existing data if file exists
        self._load_data()

    def _load_data(self):
        """Load data from JSON file."""
        if not self.storage_path.exists():
            return
        try:
            with open(self.storage_path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Error loading graph data from {self.storage_path}: {e}")
            raise GraphStorageError(f"Cannot read {self.storage_path}: {e}") from e

        if not isinstance(loaded, dict):
            raise GraphStorageError(f"{self.storage_path} does not contain a JSON object")
        for key, default in self._initialize_data().items():
            loaded.setdefault(key, default)
        self.data = loaded
        self.logger.info(f"Loaded graph data from {self.storage_path}")

    def _initialize_data(self) -> Dict[str, Any]:
        """Initialize empty data structure."""
        return {
            "nodes": {},
            "edges": [],
            "status": {},
            "build_times": {},
            "metadata": {
                "version": "1.0",
                "created_at": None,
                "updated_at": None
            }
        }

    def _save_data(self):
        """Save data to JSON file."""
        self.data["metadata"]["updated_at"] = datetime.datetime.now().isoformat()
        if not self.data["metadata"]["created_at"]:
            self.data["metadata"]["created_at"] = self.data["metadata"]["updated_at"]

        try:
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.storage_path, 'w', encoding='utf-8') as f:
                json.dump(self.data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            self.logger.error(f"Error saving graph data: {e}")
            raise GraphStorageError(f"Cannot write {self.storage_path}: {e}") from e
        self.logger.debug(f"Saved graph data to {self.storage_path}")

    def _create_node(self, node_id: str, category: NodeCategory,
                     properties: Optional[Dict[str, Any]]) -> GraphNode:
        node = GraphNode(id=node_id, category=category, properties=dict(properties or {}))
        node_data = node.to_dict()
        del node_data["label"]
        self.data["nodes"][node_id] = node_data
        self._save_data()
        return node

    def create_target_node(self, name: str, properties: Dict[str, Any] = None) -> GraphNode:
        """Create or update a target node. ``properties`` may hold plan columns."""
        return self._create_node(name, NodeCategory.TARGET, properties)

    def create_import_node(self, name: str, properties: Dict[str, Any] = None) -> GraphNode:
        """Create or update an import node."""
        return self._create_node(name, NodeCategory.IMPORT, properties)

    def create_dependency(self, dependency: str, dependent: str) -> Dict[str, Any]:
        """Record that ``dependent`` needs ``dependency``. Cycles surface in build_graph()."""
        missing = [name for name in (dependency, dependent) if name not in self.data["nodes"]]
        if missing:
            raise UnknownNodeError(missing)

        for edge in self.data["edges"]:
            if edge["source_id"] == dependency and edge["target_id"] == dependent:
                return edge

        edge_data = {"source_id": dependency, "target_id": dependent}
        self.data["edges"].append(edge_data)
        self._save_data()
        return edge_data

    def set_status(self, name: str, status: str):
        """Store the build status reported for ``name``."""
        self.data["status"][name] = BuildStatus.parse(status).value
        self._save_data()

    def set_build_time(self, name: str, build: float, command: Optional[float] = None):
        """Store build and command runtimes in seconds."""
        self.data["build_times"][name] = {
            "build": build,
            "command": build if command is None else command,
        }
        self._save_data()

    def build_graph(self) -> PipelineGraph:
        """Validate the stored definition and return it as a graph."""
        return build_graph(self.data["nodes"].values(), self.data["edges"])

    def get_status_table(self) -> Dict[str, str]:
        return dict(self.data["status"])

    def get_build_times(self) -> Dict[str, Dict[str, float]]:
        return dict(self.data["build_times"])

    def clear_database(self):
        """Clear all data from the database."""
        self.data = self._initialize_data()
        self._save_data()
        self.logger.info("Cleared all data from JSON graph database")

    def get_database_stats(self) -> Dict[str, Any]:
        """Get database statistics."""
        node_counts = {}
        for node_data in self.data["nodes"].values():
            category = node_data.get("category", NodeCategory.IMPORT.value)
            node_counts[category] = node_counts.get(category, 0) + 1

        status_counts = {}
        for status in self.data["status"].values():
            status_counts[status] = status_counts.get(status, 0) + 1

        return {
            "nodes": node_counts,
            "edges": len(self.data["edges"]),
            "status": status_counts,
        }

    def get_node_details(self, node_id: str) -> Optional[Dict[str, Any]]:
        """Get a node with its direct dependencies and dependents."""
        if node_id not in self.data["nodes"]:
            return None

        dependencies: List[str] = []
        dependents: List[str] = []
        for edge in self.data["edges"]:
            if edge["target_id"] == node_id:
                dependencies.append(edge["source_id"])
            if edge["source_id"] == node_id:
                dependents.append(edge["target_id"])

        return {
            "node": self.data["nodes"][node_id],
            "status": self.data["status"].get(node_id),
            "build_times": self.data["build_times"].get(node_id),
            "dependencies": dependencies,
            "dependents": dependents,
        }
