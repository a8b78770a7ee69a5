import json

import pytest

from comrelay.jsonrpc import (
    GENERIC_SERVER_ERROR,
    JSONRPCError,
    JsonRPCRequest,
    JsonRPCResponse,
    Pagination,
    ResponseType,
    RPCError,
    body,
    body_multiple,
    jsonrpc_body,
    jsonrpc_multi_body,
    streamed_body,
)


@pytest.mark.parametrize(
    "version, method, expected",
    [("2.0", "eth_call", True), ("1.0", "eth_call", False), ("2.0", "", False)],
)
def test_request_is_valid(version, method, expected):
    assert JsonRPCRequest(version=version, id=1, method=method).is_valid() is expected


def test_response_to_dict_omits_missing_error():
    response = JsonRPCResponse(id=3, result={"ok": True})
    assert response.to_dict() == {"jsonrpc": "2.0", "id": 3, "result": {"ok": True}}


def test_response_to_dict_keeps_error_data():
    response = JsonRPCResponse(id=3, error=JSONRPCError(code=5, message="bad"))
    assert response.to_dict()["error"] == {"code": 5, "message": "bad", "data": None}


def test_body_wraps_object():
    reply = body({"version": "0.0.0"})
    assert reply.headers["Content-Type"] == "application/json"
    assert json.loads(reply.body) == {"response_type": "object", "object": {"version": "0.0.0"}}


def test_body_includes_dataclass_meta():
    reply = body({"a": 1}, Pagination(limit=10, offset=0, total=42))
    decoded = json.loads(reply.body)
    assert decoded["meta"] == {"limit": 10, "offset": 0, "total": 42}


def test_body_multiple_wraps_array():
    reply = body_multiple([1, 2, 3])
    decoded = json.loads(reply.body)
    assert decoded == {"response_type": ResponseType.ARRAY.value, "array": [1, 2, 3]}


def test_body_escapes_html_characters():
    reply = body({"text": "<b>"})
    assert b"<" not in reply.body
    assert json.loads(reply.body)["object"]["text"] == "<b>"


def test_streamed_body_headers():
    reply = streamed_body("data: hi\n\n")
    assert reply.body == b"data: hi\n\n"
    assert reply.headers["Content-Type"] == "text/event-stream"
    assert reply.headers["Cache-Control"] == "no-cache"
    assert reply.headers["Access-Control-Allow-Origin"] == "*"


def test_jsonrpc_body_success():
    reply = jsonrpc_body(7, {"hash": "0xabc"})
    assert json.loads(reply.body) == {"jsonrpc": "2.0", "id": 7, "result": {"hash": "0xabc"}}


def test_jsonrpc_body_rpc_error_keeps_code():
    reply = jsonrpc_body("x", None, None, RPCError("method not found", -32601))
    decoded = json.loads(reply.body)
    assert decoded["error"] == {"code": -32601, "message": "method not found", "data": None}
    assert decoded["result"] is None


def test_jsonrpc_body_generic_error():
    reply = jsonrpc_body(1, None, None, ValueError("boom"))
    error = json.loads(reply.body)["error"]
    assert error["code"] == GENERIC_SERVER_ERROR == -32000
    assert error["message"] == "boom"


def test_jsonrpc_multi_body_keeps_order():
    reply = jsonrpc_multi_body([1, 2], ["a", "b"], None, [None, RuntimeError("fail")])
    decoded = json.loads(reply.body)
    assert [item["id"] for item in decoded] == [1, 2]
    assert [item["result"] for item in decoded] == ["a", "b"]
    assert "error" not in decoded[0]
    assert decoded[1]["error"]["message"] == "fail"


def test_jsonrpc_multi_body_length_checks():
    with pytest.raises(ValueError, match="ids and bodies must have the same length"):
        jsonrpc_multi_body([1, 2], ["a"], None, [None, None])
    with pytest.raises(ValueError, match="ids and errors must have the same length"):
        jsonrpc_multi_body([1], ["a"], None, [])


def test_body_rejects_unserialisable_payload():
    with pytest.raises(TypeError):
        body(object())