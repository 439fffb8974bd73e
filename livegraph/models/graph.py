# livegraph/models/graph.py
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

VertexId = str | int
EdgeKey = tuple[VertexId, VertexId]

class Vertex(BaseModel):
    # Unknown attributes from the provider are kept so renderers can use them.
    model_config = ConfigDict(extra="allow", frozen=True)

    id: VertexId
    is_bootnode: bool = False

class Edge(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: VertexId
    target: VertexId

    @model_validator(mode="before")
    @classmethod
    def _flatten_endpoints(cls, data: Any) -> Any:
        # Renderers resolve endpoints to vertex objects; accept that shape too.
        if isinstance(data, dict):
            data = dict(data)
            for end in ("source", "target"):
                if isinstance(data.get(end), dict) and "id" in data[end]:
                    data[end] = data[end]["id"]
        return data

    @property
    def key(self) -> EdgeKey:
        return (self.source, self.target)

class GraphSnapshot(BaseModel):
    vertices: list[Vertex] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

class GraphDelta(BaseModel):
    added_vertices: list[Vertex] = Field(default_factory=list)
    removed_vertices: list[Vertex] = Field(default_factory=list)
    added_edges: list[Edge] = Field(default_factory=list)
    removed_edges: list[Edge] = Field(default_factory=list)

    @field_validator("removed_vertices", mode="before")
    @classmethod
    def _wrap_bare_ids(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [item if isinstance(item, (dict, Vertex)) else {"id": item} for item in value]
        return value

    @property
    def is_empty(self) -> bool:
        return not (
            self.added_vertices
            or self.removed_vertices
            or self.added_edges
            or self.removed_edges
        )

    def summary(self) -> str:
        return (
            f"vertices +{len(self.added_vertices)}/-{len(self.removed_vertices)}, "
            f"edges +{len(self.added_edges)}/-{len(self.removed_edges)}"
        )
