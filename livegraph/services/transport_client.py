# livegraph/services/transport_client.py
import itertools
import logging
import httpx
from livegraph.core.config import settings
from livegraph.core.exceptions import TransportError
from livegraph.models.graph import GraphDelta, GraphSnapshot
from livegraph.models.rpc import RpcRequest
from livegraph.services.rpc_parser import parse_delta, parse_snapshot

logger = logging.getLogger(__name__)

class TransportClient:
    """
    Sends one JSON-RPC request per call to the graph provider and decodes the reply.
    No retries happen here; the sync loop owns recovery.
    """
    def __init__(
        self,
        endpoint_url: str | None = None,
        rpc_method: str | None = None,
        timeout: float | None = None,
        request_id_start: int | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.endpoint_url = endpoint_url or settings.ENDPOINT_URL
        self.rpc_method = rpc_method or settings.RPC_METHOD
        if timeout is None:
            timeout = settings.FETCH_TIMEOUT_SECONDS
        start = settings.RPC_REQUEST_ID_START if request_id_start is None else request_id_start
        self._ids = itertools.count(start)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def __aenter__(self) -> "TransportClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def build_request(self) -> RpcRequest:
        return RpcRequest(method=self.rpc_method, id=next(self._ids))

    async def fetch_snapshot(self, request: RpcRequest | None = None) -> GraphSnapshot:
        body = await self._post(request or self.build_request())
        return parse_snapshot(body)

    async def fetch_delta(self, request: RpcRequest | None = None) -> GraphDelta:
        body = await self._post(request or self.build_request())
        return parse_delta(body)

    async def _post(self, request: RpcRequest) -> bytes:
        logger.debug("POST %s method=%s id=%s", self.endpoint_url, request.method, request.id)
        try:
            response = await self._client.post(
                self.endpoint_url,
                json=request.model_dump(),
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"Graph provider answered HTTP {exc.response.status_code} for {self.endpoint_url}"
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as exc:
            raise TransportError(f"Could not reach graph provider at {self.endpoint_url}: {exc}") from exc
        return response.content
