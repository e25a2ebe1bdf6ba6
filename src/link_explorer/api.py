from fastapi import FastAPI, HTTPException, Depends
from fastapi.responses import JSONResponse
import json
import logging

from .exceptions import InvalidUrlError
from .explorer import LinkExplorer, SessionState
from .types import ExploreRequest, NodeResponse, StatsResponse, TreeResponse

app = FastAPI(
    title="Link Explorer API",
    description="""
    API for progressively exploring the link hierarchy of a web page.

    ## Features
    * Start an exploration from a seed URL
    * Expand or collapse any discovered link, loading its own links on demand
    * Inspect the current tree and its statistics

    ## Usage
    All endpoints return JSON. Node ids come from the tree returned by `/explore` or `/tree`.
    """,
    version="1.0.0",
)

# Configure logging for api.py
logger = logging.getLogger(__name__)
logging.basicConfig(
    level=logging.INFO,  # Set to DEBUG for more detailed logs
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# One exploration session per process
explorer_instance = LinkExplorer()


# Dependency to get the explorer instance
def get_explorer():
    yield explorer_instance


class PrettyJSONResponse(JSONResponse):
    def render(self, content) -> bytes:
        return json.dumps(content, ensure_ascii=False, allow_nan=False, indent=2, separators=(", ", ": ")).encode(
            "utf-8"
        )


def _tree_response(explorer: LinkExplorer) -> TreeResponse:
    root = explorer.root
    return TreeResponse(
        state=explorer.state.value,
        error=explorer.last_error,
        root=NodeResponse.model_validate(root) if root is not None else None,
        expanded=sorted(explorer.expanded),
        stats=StatsResponse(**explorer.stats()),
    )


@app.get("/", tags=["General"])
async def root():
    """
    Welcome endpoint with basic API information.
    """
    return {"message": "Welcome to the Link Explorer API. Visit /docs for documentation."}


@app.post("/explore", response_model=TreeResponse, tags=["Session"])
async def explore(request: ExploreRequest, explorer: LinkExplorer = Depends(get_explorer)):
    """Start a new exploration from the given URL."""
    try:
        root_node = await explorer.explore(request.url)
    except InvalidUrlError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if root_node is None:
        if explorer.state == SessionState.ERROR:
            raise HTTPException(status_code=502, detail=explorer.last_error or "Failed to fetch the page")
        raise HTTPException(status_code=409, detail="Exploration was superseded")
    return _tree_response(explorer)


@app.get("/tree", response_model=TreeResponse, response_class=PrettyJSONResponse, tags=["Tree"])
def get_tree(explorer: LinkExplorer = Depends(get_explorer)):
    """Get the current tree, expansion state and statistics."""
    return _tree_response(explorer)


@app.get("/stats", response_model=StatsResponse, tags=["Tree"])
def get_stats(explorer: LinkExplorer = Depends(get_explorer)):
    """Get statistics for the current tree."""
    return StatsResponse(**explorer.stats())


@app.get("/nodes/{node_id}", response_model=NodeResponse, tags=["Nodes"])
def get_node(node_id: int, explorer: LinkExplorer = Depends(get_explorer)):
    """Get a single node and its loaded subtree."""
    node = explorer.find_node(node_id)
    if node is None:
        raise HTTPException(status_code=404, detail=f"Node {node_id} not found")
    return NodeResponse.model_validate(node)


@app.post("/nodes/{node_id}/toggle", response_model=TreeResponse, tags=["Nodes"])
async def toggle_node(node_id: int, explorer: LinkExplorer = Depends(get_explorer)):
    """Expand or collapse a node, loading its links the first time it is expanded."""
    if explorer.find_node(node_id) is None:
        raise HTTPException(status_code=404, detail=f"Node {node_id} not found")

    node = await explorer.toggle(node_id)
    if node is None:
        raise HTTPException(status_code=409, detail="Session was reset while the node was loading")
    return _tree_response(explorer)


@app.post("/collapse", response_model=TreeResponse, tags=["Session"])
def collapse_all(explorer: LinkExplorer = Depends(get_explorer)):
    """Collapse every node except the root."""
    explorer.collapse_all()
    return _tree_response(explorer)


@app.delete("/session", response_model=TreeResponse, tags=["Session"])
def clear_session(explorer: LinkExplorer = Depends(get_explorer)):
    """Discard the current exploration."""
    explorer.clear()
    return _tree_response(explorer)
