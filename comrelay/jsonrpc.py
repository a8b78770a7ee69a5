"""JSON-RPC messages and the JSON reply bodies the relay sends."""

from __future__ import annotations

import base64
import dataclasses
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Sequence

JSONRPC_VERSION = "2.0"
GENERIC_SERVER_ERROR = -32000
JSON_CONTENT_TYPE = "application/json"


class RPCError(Exception):
    """An error that carries its own JSON-RPC error code."""

    def __init__(self, message: str, code: int) -> None:
        super().__init__(message)
        self.code = code


@dataclass
class JsonRPCRequest:
    """An incoming JSON-RPC request; ``params`` is kept as received."""

    version: str
    id: Any
    method: str
    params: Any = None

    def is_valid(self) -> bool:
        """True for a 2.0 request that names a method."""
        return self.version == JSONRPC_VERSION and self.method != ""


@dataclass
class JSONRPCError:
    """The error member of a JSON-RPC response."""

    code: int
    message: str
    data: Any = None


@dataclass
class JsonRPCResponse:
    """A JSON-RPC response; ``error`` is left out of the wire form when absent."""

    id: Any
    result: Any = None
    error: Optional[JSONRPCError] = None
    version: str = JSONRPC_VERSION

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"jsonrpc": self.version, "id": self.id, "result": self.result}
        if self.error is not None:
            out["error"] = dataclasses.asdict(self.error)
        return out


class ResponseType(str, Enum):
    """Shape of the payload in a standard reply."""

    OBJECT = "object"
    ARRAY = "array"
    SECURE = "secure"


@dataclass
class Pagination:
    """Paging metadata for list replies."""

    limit: int
    offset: int
    total: int


@dataclass
class HttpReply:
    """A prepared HTTP reply: body bytes, headers and status."""

    body: bytes
    headers: dict[str, str] = field(default_factory=dict)
    status: int = 200


def _default(obj: Any) -> Any:
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (bytes, bytearray)):
        return base64.b64encode(bytes(obj)).decode("ascii")
    raise TypeError(f"object of type {type(obj).__name__} is not JSON serializable")


def _marshal(obj: Any) -> bytes:
    text = json.dumps(obj, default=_default, separators=(",", ":"), ensure_ascii=False)
    for raw, escaped in (
        ("<", "\\u003c"),
        (">", "\\u003e"),
        ("&", "\\u0026"),
        ("\u2028", "\\u2028"),
        ("\u2029", "\\u2029"),
    ):
        text = text.replace(raw, escaped)
    return text.encode("utf-8")


def _json_reply(obj: Any) -> HttpReply:
    return HttpReply(body=_marshal(obj), headers={"Content-Type": JSON_CONTENT_TYPE})


def _envelope(kind: ResponseType, key: str, payload: Any, meta: Any) -> dict[str, Any]:
    out: dict[str, Any] = {"response_type": kind.value}
    if payload is not None:
        out[key] = payload
    if meta is not None:
        out["meta"] = meta
    return out


def body(payload: Any, meta: Any = None) -> HttpReply:
    """Wrap a single object in the standard reply envelope."""
    return _json_reply(_envelope(ResponseType.OBJECT, "object", payload, meta))


def body_multiple(payload: Any, meta: Any = None) -> HttpReply:
    """Wrap a list in the standard reply envelope."""
    return _json_reply(_envelope(ResponseType.ARRAY, "array", payload, meta))


def streamed_body(payload: str) -> HttpReply:
    """Prepare one server-sent-events chunk."""
    return HttpReply(
        body=payload.encode("utf-8"),
        headers={
            "Content-Type": "text/event-stream",
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "Access-Control-Allow-Origin": "*",
        },
    )


def _rpc_error(error: Optional[BaseException]) -> Optional[JSONRPCError]:
    if error is None:
        return None
    if isinstance(error, RPCError):
        return JSONRPCError(code=error.code, message=str(error))
    return JSONRPCError(code=GENERIC_SERVER_ERROR, message=str(error))


def jsonrpc_body(
    request_id: Any, payload: Any, meta: Any = None, error: Optional[BaseException] = None
) -> HttpReply:
    """Prepare a single JSON-RPC response."""
    response = JsonRPCResponse(id=request_id, result=payload, error=_rpc_error(error))
    return _json_reply(response.to_dict())


def jsonrpc_multi_body(
    ids: Sequence[Any],
    bodies: Sequence[Any],
    meta: Any = None,
    errors: Sequence[Optional[BaseException]] = (),
) -> HttpReply:
    """Prepare a batch of JSON-RPC responses, one per id."""
    if len(ids) != len(bodies):
        raise ValueError("ids and bodies must have the same length")
    if len(ids) != len(errors):
        raise ValueError("ids and errors must have the same length")
    responses = [
        JsonRPCResponse(id=request_id, result=result, error=_rpc_error(error)).to_dict()
        for request_id, result, error in zip(ids, bodies, errors)
    ]
    return _json_reply(responses)