"""FastAPI application exposing the feed operations to tool-calling clients"""

from __future__ import annotations

from functools import lru_cache
import logging
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from postfeed.errors import UnknownOperationError
from postfeed.services.operations import build_default_registry
from postfeed.services.registry import OperationRegistry

app = FastAPI(title="PostFeed Aggregator")

logger = logging.getLogger(__name__)

SERVER_INFO = {"name": "postfeed", "version": "1.0.0"}

_INVALID_REQUEST = -32600
_METHOD_NOT_FOUND = -32601
_INVALID_PARAMS = -32602


class RpcRequest(BaseModel):
    """JSON-RPC 2.0 request envelope accepted by the ``/mcp`` endpoint."""

    jsonrpc: str = "2.0"
    method: str
    params: dict[str, Any] = Field(default_factory=dict)
    id: int | str | None = None


@lru_cache(maxsize=1)
def _cached_registry() -> OperationRegistry:
    return build_default_registry()


def get_registry() -> OperationRegistry:
    """FastAPI dependency returning the shared operation registry."""

    return _cached_registry()


def _rpc_result(request_id: int | str | None, result: dict[str, Any]) -> JSONResponse:
    return JSONResponse({"jsonrpc": "2.0", "id": request_id, "result": result})


def _rpc_error(request_id: int | str | None, code: int, message: str) -> JSONResponse:
    return JSONResponse({"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}})


@app.get("/healthz")
def healthz():
    return {"ok": True}


@app.get("/api/operations")
async def list_operations(registry: OperationRegistry = Depends(get_registry)) -> dict[str, Any]:
    """Return every registered operation with its input and output schemas."""

    return {"operations": registry.describe()}


@app.post("/mcp")
def mcp_endpoint(
    payload: dict[str, Any],
    registry: OperationRegistry = Depends(get_registry),
) -> Response:
    """Dispatch ``tools/list`` and ``tools/call`` requests to the registry."""

    try:
        request = RpcRequest.model_validate(payload)
    except ValueError:
        return _rpc_error(payload.get("id") if isinstance(payload, dict) else None, _INVALID_REQUEST, "Invalid request")

    if request.id is None and request.method.startswith("notifications/"):
        logger.debug("Notification received", extra={"event": "rpc.notification", "method": request.method})
        return Response(status_code=202)

    if request.method == "initialize":
        return _rpc_result(
            request.id,
            {"protocolVersion": "2025-06-18", "serverInfo": SERVER_INFO, "capabilities": {"tools": {}}},
        )

    if request.method == "tools/list":
        return _rpc_result(request.id, {"tools": registry.describe()})

    if request.method != "tools/call":
        return _rpc_error(request.id, _METHOD_NOT_FOUND, f"Method not found: {request.method}")

    name = request.params.get("name")
    arguments = request.params.get("arguments") or {}
    if not isinstance(name, str) or not isinstance(arguments, dict):
        return _rpc_error(request.id, _INVALID_PARAMS, "tools/call requires a tool name and an arguments object")

    logger.info(
        "Tool call received",
        extra={"event": "tool.call", "tool": name, "argument_count": len(arguments)},
    )

    try:
        result = registry.call(name, arguments)
    except UnknownOperationError as exc:
        logger.warning("Unknown tool requested", extra={"event": "tool.unknown", "tool": name})
        return _rpc_error(request.id, _INVALID_PARAMS, str(exc))

    if result.is_error:
        logger.warning("Tool call failed", extra={"event": "tool.error", "tool": name, "reason": result.error})
    return _rpc_result(request.id, result.to_tool_result())
