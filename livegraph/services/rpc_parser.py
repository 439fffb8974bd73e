import json
import logging
from json import JSONDecodeError
from typing import Any

from pydantic import ValidationError

from livegraph.core.exceptions import DecodeError
from livegraph.models.graph import GraphDelta, GraphSnapshot
from livegraph.models.rpc import RpcResponse

logger = logging.getLogger(__name__)

_SNAPSHOT_KEYS = ("vertices", "edges")
_DELTA_KEYS = ("added_vertices", "removed_vertices", "added_edges", "removed_edges")


def _decode_text(raw: bytes | str) -> str:
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"RPC response is not valid UTF-8: {exc}") from exc
    return raw.lstrip("\ufeff").strip()


def parse_rpc_result(raw: bytes | str) -> dict[str, Any]:
    """
    Decode a raw JSON-RPC response body and return its ``result`` member.
    """
    text = _decode_text(raw)
    if not text:
        raise DecodeError("RPC response payload is empty")

    try:
        payload = json.loads(text)
    except JSONDecodeError as exc:
        logger.debug("Undecodable RPC body: %.200s", text)
        raise DecodeError(f"RPC response is not valid JSON: {exc}") from exc

    try:
        response = RpcResponse.model_validate(payload)
    except ValidationError as exc:
        raise DecodeError(f"RPC response envelope is malformed: {exc}") from exc

    if response.error is not None:
        raise DecodeError(
            f"RPC error {response.error.code} from graph provider: {response.error.message}"
        )
    if response.result is None:
        raise DecodeError("RPC response carries neither a result nor an error")
    return response.result


def _require_keys(result: dict[str, Any], keys: tuple[str, ...], kind: str) -> None:
    missing = [key for key in keys if key not in result]
    if missing:
        raise DecodeError(f"RPC result is not a {kind}: missing {', '.join(missing)}")


def parse_snapshot(raw: bytes | str) -> GraphSnapshot:
    result = parse_rpc_result(raw)
    _require_keys(result, _SNAPSHOT_KEYS, "graph snapshot")
    try:
        return GraphSnapshot.model_validate(result)
    except ValidationError as exc:
        raise DecodeError(f"Graph snapshot does not match the wire schema: {exc}") from exc


def parse_delta(raw: bytes | str) -> GraphDelta:
    result = parse_rpc_result(raw)
    _require_keys(result, _DELTA_KEYS, "graph delta")
    try:
        return GraphDelta.model_validate(result)
    except ValidationError as exc:
        raise DecodeError(f"Graph delta does not match the wire schema: {exc}") from exc
