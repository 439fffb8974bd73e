# livegraph/main.py
import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from livegraph.api import router as api_router
from livegraph.core.config import settings
from livegraph.core.exceptions import NotFoundError
from livegraph.db.graph_store import GraphStore
from livegraph.models.view import ViewTransform
from livegraph.services.layout_engine import LayoutEngine
from livegraph.services.sync_service import SyncService
from livegraph.services.transport_client import TransportClient

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup Logic ---
    transport = TransportClient()
    app.state.sync_service = SyncService(transport, app.state.store, app.state.layout)
    tasks = [
        asyncio.create_task(app.state.sync_service.run(), name="sync-loop"),
        asyncio.create_task(app.state.layout.run(), name="layout-scheduler"),
    ]
    logger.info(
        "Polling %s (method=%s, mode=%s) every %d ms.",
        settings.ENDPOINT_URL, settings.RPC_METHOD, settings.SYNC_MODE, settings.POLL_INTERVAL_MS,
    )

    try:
        yield
    finally:
        # --- Shutdown Logic ---
        for task in tasks:
            task.cancel()
        for task in tasks:
            with suppress(asyncio.CancelledError):
                await task
        await transport.close()
        logger.info("Stopped sync loop and layout scheduler.")


app = FastAPI(
    title="Live Graph Sync",
    description="Polls a JSON-RPC graph provider and serves a continuously laid-out graph to renderers.",
    version="1.0.0",
    lifespan=lifespan
)

app.state.store = GraphStore(strict=settings.STRICT_RECONCILIATION)
app.state.layout = LayoutEngine()
app.state.view_transform = ViewTransform()
app.state.sync_service = None

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "PUT", "DELETE"],
    allow_headers=["Content-Type"],
)

@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"message": exc.message},
    )

app.include_router(api_router.router)

@app.get("/healthz", tags=["Health"], status_code=status.HTTP_200_OK)
async def health_check(request: Request):
    """
    Reports the sync loop status. The loop keeps running through provider outages,
    so a failing provider shows up as consecutive_failures rather than an error status.
    """
    sync_service: SyncService | None = request.app.state.sync_service
    if sync_service is None:
        return {"status": "starting", "sync": None}
    return {"status": "ok", "sync": sync_service.status().model_dump(mode="json")}
