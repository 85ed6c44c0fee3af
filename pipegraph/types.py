from typing import List, Dict, Any, Optional, Union
from dataclasses import dataclass, field
from enum import Enum


class NodeCategory(Enum):
    """Node category enumeration."""
    TARGET = "target"
    IMPORT = "import"
    CLUSTER = "cluster"

    @classmethod
    def parse(cls, value: Union["NodeCategory", str]) -> "NodeCategory":
        """Convert a category name into a member."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown node category: {value!r}") from None


class BuildStatus(Enum):
    """Build status reported by the execution layer."""
    IMPORTED = "imported"
    UP_TO_DATE = "up to date"
    OUTDATED = "outdated"
    MISSING = "missing"
    IN_PROGRESS = "in progress"
    FAILED = "failed"

    @classmethod
    def parse(cls, value: Union["BuildStatus", str]) -> "BuildStatus":
        """Convert a status string such as ``"up to date"`` into a member."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower().replace("_", " ")
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"Unknown build status: {value!r}") from None

    @property
    def severity(self) -> int:
        """Rank used when several statuses are merged into one."""
        return _STATUS_SEVERITY[self]


_STATUS_SEVERITY = {
    BuildStatus.IMPORTED: 0,
    BuildStatus.UP_TO_DATE: 1,
    BuildStatus.MISSING: 2,
    BuildStatus.OUTDATED: 3,
    BuildStatus.IN_PROGRESS: 4,
    BuildStatus.FAILED: 5,
}


@dataclass
class GraphNode:
    """Represents a target or import in the pipeline graph."""
    id: str
    category: NodeCategory = NodeCategory.IMPORT
    status: Optional[BuildStatus] = None
    cluster: Optional[str] = None
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_target(self) -> bool:
        return self.category == NodeCategory.TARGET

    def attribute(self, key: str) -> Any:
        """Look up a grouping attribute by name."""
        if key == "id":
            return self.id
        if key == "category":
            return self.category.value
        if key == "status":
            return self.status.value if self.status else None
        if key == "cluster":
            return self.cluster
        return self.properties.get(key)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "label": self.id,
            "category": self.category.value,
            "status": self.status.value if self.status else None,
            "cluster": self.cluster,
            "properties": self.properties,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphNode":
        status = data.get("status")
        return cls(
            id=data["id"],
            category=NodeCategory.parse(data.get("category", NodeCategory.IMPORT)),
            status=BuildStatus.parse(status) if status else None,
            cluster=data.get("cluster"),
            properties=dict(data.get("properties") or {}),
        )


@dataclass(frozen=True)
class GraphEdge:
    """A dependency edge: ``source_id`` must be built before ``target_id``."""
    source_id: str
    target_id: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source_id": self.source_id,
            "target_id": self.target_id,
            "arrows": "to",
        }


@dataclass
class GraphInfo:
    """Node and edge tables handed to a renderer."""
    nodes: List[GraphNode]
    edges: List[GraphEdge]
    default_title: str = "Dependency graph"
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "default_title": self.default_title,
            "metadata": self.metadata,
        }
