from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from typing import List, Dict, Any, Optional
import uvicorn

from pipegraph.config import settings
from pipegraph.exceptions import PipelineGraphError, UnknownNodeError
from pipegraph.graph.json_graph_client import JsonGraphClient
from pipegraph.processor.graph_info import graph_info
from pipegraph.query.traversal import dependencies
from pipegraph.utils.logger import app_logger


logger = app_logger.bind(component="api_server")

app = FastAPI(title="Pipeline Graph API", version="1.0.0")

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize components
graph_client = JsonGraphClient(settings.graph_storage_path)


class GraphDataResponse(BaseModel):
    nodes: List[Dict[str, Any]]
    edges: List[Dict[str, Any]]
    default_title: str
    metadata: Dict[str, Any]


class DependenciesResponse(BaseModel):
    targets: List[str]
    reverse: bool
    dependencies: List[str]


class NodeDetailsResponse(BaseModel):
    node: Dict[str, Any]
    status: Optional[str] = None
    build_times: Optional[Dict[str, float]] = None
    dependencies: List[str]
    dependents: List[str]


@app.get("/api/graph", response_model=GraphDataResponse)
async def get_graph_data(
    from_nodes: Optional[List[str]] = Query(default=None, alias="from"),
    mode: str = settings.default_mode,
    order: Optional[int] = None,
    subset: Optional[List[str]] = Query(default=None),
    targets_only: bool = False,
    from_scratch: bool = False,
    build_times: str = settings.build_times,
    digits: int = settings.digits,
    group: Optional[str] = None,
    clusters: Optional[List[str]] = Query(default=None),
):
    """Get node and edge tables for visualization."""
    try:
        info = graph_info(
            graph_client.build_graph(),
            status_table=graph_client.get_status_table(),
            from_nodes=from_nodes,
            mode=mode,
            order=order,
            subset=subset,
            build_times=graph_client.get_build_times(),
            build_times_kind=build_times,
            digits=digits,
            targets_only=targets_only,
            from_scratch=from_scratch,
            default_status=settings.default_status,
            group=group,
            clusters=clusters,
        )
    except (PipelineGraphError, ValueError) as e:
        logger.error(f"Error building graph data: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    return GraphDataResponse(**info.to_dict())


@app.get("/api/dependencies", response_model=DependenciesResponse)
async def get_dependencies(targets: List[str] = Query(...), reverse: bool = False):
    """List transitive dependencies, or dependents with ``reverse=true``."""
    try:
        names = dependencies(graph_client.build_graph(), targets, reverse=reverse)
    except UnknownNodeError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PipelineGraphError as e:
        logger.error(f"Error listing dependencies: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    return DependenciesResponse(targets=targets, reverse=reverse, dependencies=sorted(names))


@app.get("/api/node/{node_id}", response_model=NodeDetailsResponse)
async def get_node_details(node_id: str):
    """Get detailed information about a specific node."""
    details = graph_client.get_node_details(node_id)
    if not details:
        raise HTTPException(status_code=404, detail="Node not found")
    return NodeDetailsResponse(**details)


@app.get("/api/stats")
async def get_stats():
    """Get storage statistics."""
    return graph_client.get_database_stats()


if __name__ == "__main__":
    logger.info("Starting Pipeline Graph API server")

    uvicorn.run(
        "api_server:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level="info"
    )
