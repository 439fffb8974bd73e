# livegraph/models/view.py
from pydantic import BaseModel, Field
from livegraph.models.graph import VertexId

class ViewTransform(BaseModel):
    """Pan/zoom state owned by the renderer; k is the zoom factor."""
    x: float = 0.0
    y: float = 0.0
    k: float = Field(default=1.0, gt=0)

class RenderVertex(BaseModel):
    id: VertexId
    is_bootnode: bool = False
    x: float | None = None
    y: float | None = None

class RenderEdge(BaseModel):
    source: VertexId
    target: VertexId
    x1: float | None = None
    y1: float | None = None
    x2: float | None = None
    y2: float | None = None

class RenderFrame(BaseModel):
    version: int
    alpha: float
    tick: int
    vertices: list[RenderVertex]
    edges: list[RenderEdge]
    transform: ViewTransform
