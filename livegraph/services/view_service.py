# livegraph/services/view_service.py
from livegraph.db.graph_store import GraphStore
from livegraph.models.graph import VertexId
from livegraph.models.view import RenderEdge, RenderFrame, RenderVertex, ViewTransform
from livegraph.services.layout_engine import LayoutEngine

def build_render_frame(store: GraphStore, layout: LayoutEngine, transform: ViewTransform) -> RenderFrame:
    """Joins the current graph with the latest layout positions for a renderer."""
    positions = layout.positions()

    def _at(vertex_id: VertexId) -> tuple[float | None, float | None]:
        return positions.get(vertex_id, (None, None))

    vertices = []
    for vertex in store.vertices:
        x, y = _at(vertex.id)
        vertices.append(RenderVertex(id=vertex.id, is_bootnode=vertex.is_bootnode, x=x, y=y))

    edges = []
    for edge in store.edges:
        x1, y1 = _at(edge.source)
        x2, y2 = _at(edge.target)
        edges.append(RenderEdge(source=edge.source, target=edge.target, x1=x1, y1=y1, x2=x2, y2=y2))

    return RenderFrame(
        version=store.version,
        alpha=layout.alpha,
        tick=layout.tick_count,
        vertices=vertices,
        edges=edges,
        transform=transform.model_copy(),
    )

def resolve_vertex_id(raw: str, store: GraphStore) -> VertexId:
    """Path parameters arrive as text; integer ids are matched when the text form is unknown."""
    if raw in store:
        return raw
    try:
        numeric = int(raw)
    except ValueError:
        return raw
    return numeric if numeric in store else raw
