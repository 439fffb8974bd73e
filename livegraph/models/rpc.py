from typing import Any, Literal

from pydantic import BaseModel


class RpcRequest(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    method: str
    id: int | str


class RpcError(BaseModel):
    code: int
    message: str
    data: Any = None


class RpcResponse(BaseModel):
    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: dict[str, Any] | None = None
    error: RpcError | None = None
