# livegraph/api/router.py
import asyncio
import logging
from fastapi import APIRouter, Depends, Request, WebSocket, WebSocketDisconnect
from pydantic import BaseModel
from livegraph.db.graph_store import GraphStore
from livegraph.models.view import RenderFrame, ViewTransform
from livegraph.services.layout_engine import LayoutEngine, LayoutFrame
from livegraph.services.view_service import build_render_frame, resolve_vertex_id

logger = logging.getLogger(__name__)

router = APIRouter()

class PinRequest(BaseModel):
    x: float
    y: float

def get_store(request: Request) -> GraphStore:
    return request.app.state.store

def get_layout(request: Request) -> LayoutEngine:
    return request.app.state.layout

@router.get("/graph", response_model=RenderFrame, tags=["Graph"])
async def get_graph_frame(
    request: Request,
    store: GraphStore = Depends(get_store),
    layout: LayoutEngine = Depends(get_layout),
):
    """Current vertices and edges with their latest layout positions."""
    return build_render_frame(store, layout, request.app.state.view_transform)

@router.get("/view/transform", response_model=ViewTransform, tags=["View"])
async def get_view_transform(request: Request):
    return request.app.state.view_transform

@router.put("/view/transform", response_model=ViewTransform, tags=["View"])
async def put_view_transform(request: Request, transform: ViewTransform):
    """Renderers report their pan/zoom here so new elements can be placed in view coordinates."""
    request.app.state.view_transform = transform
    return transform

@router.put("/layout/pins/{vertex_id}", response_model=PinRequest, tags=["Layout"])
async def pin_vertex(
    vertex_id: str,
    pin: PinRequest,
    store: GraphStore = Depends(get_store),
    layout: LayoutEngine = Depends(get_layout),
):
    layout.pin(resolve_vertex_id(vertex_id, store), pin.x, pin.y)
    layout.restart()
    return pin

@router.delete("/layout/pins/{vertex_id}", status_code=204, tags=["Layout"])
async def unpin_vertex(
    vertex_id: str,
    store: GraphStore = Depends(get_store),
    layout: LayoutEngine = Depends(get_layout),
):
    layout.unpin(resolve_vertex_id(vertex_id, store))

@router.websocket("/ws/ticks")
async def stream_ticks(websocket: WebSocket):
    """Pushes one render frame per layout tick; slow clients only ever see the newest frame."""
    await websocket.accept()
    app_state = websocket.app.state
    loop = asyncio.get_running_loop()
    pending: asyncio.Queue[LayoutFrame | None] = asyncio.Queue(maxsize=1)

    def offer(frame: LayoutFrame) -> None:
        if pending.full():
            pending.get_nowait()
        pending.put_nowait(frame)

    def on_tick(frame: LayoutFrame) -> None:
        # step() may run outside this connection's loop
        loop.call_soon_threadsafe(offer, frame)

    unsubscribe = app_state.layout.subscribe(on_tick)
    pending.put_nowait(None)
    try:
        while True:
            await pending.get()
            frame = build_render_frame(app_state.store, app_state.layout, app_state.view_transform)
            await websocket.send_text(frame.model_dump_json())
    except WebSocketDisconnect:
        logger.debug("Tick stream client disconnected.")
    finally:
        unsubscribe()
