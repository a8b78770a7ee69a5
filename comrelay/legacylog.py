"""Legacy transaction logs and the websocket messages built from them."""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union

from comrelay.crypto import keccak256

TEMP_HASH_PREFIX = "TEMP_HASH"

RawJSON = Union[str, bytes, bytearray]

_HEX = frozenset("0123456789abcdefABCDEF")


class LegacyLogStatus(str, Enum):
    """Delivery status of a log."""

    UNKNOWN = ""
    SENDING = "sending"
    PENDING = "pending"
    SUCCESS = "success"
    FAIL = "fail"


def legacy_log_status_from_string(s: str) -> LegacyLogStatus:
    """Parse a known status name; raises ValueError otherwise."""
    if s in ("sending", "pending", "success", "fail"):
        return LegacyLogStatus(s)
    raise ValueError("unknown role: " + s)


class WSMessageType(str, Enum):
    """Kind of change announced over a websocket."""

    NEW = "new"
    UPDATE = "update"
    REMOVE = "remove"


class WSMessageDataType(str, Enum):
    """Kind of payload carried by a websocket message."""

    LOG = "log"


def _from_hex(text: str) -> bytes:
    if text[:2] in ("0x", "0X"):
        text = text[2:]
    if len(text) % 2:
        text = "0" + text
    out = bytearray()
    for pos in range(0, len(text), 2):
        pair = text[pos:pos + 2]
        if not set(pair) <= _HEX:
            break
        out.append(int(pair, 16))
    return bytes(out)


def _as_text(data: RawJSON) -> str:
    return bytes(data).decode("utf-8") if isinstance(data, (bytes, bytearray)) else data


def _loads(data: RawJSON) -> Any:
    """Decode JSON with every number as a float."""
    return json.loads(_as_text(data), parse_int=float, parse_float=float)


def _format_float(value: float, plain_low: float) -> str:
    if value == int(value) and abs(value) < 1e21:
        return str(int(value))
    magnitude = abs(value)
    if magnitude < plain_low or magnitude >= 1e21:
        return repr(value)
    text = repr(value)
    if "e" in text:
        text = format(Decimal(text), "f")
    return text


def _escape_html(text: str) -> str:
    for raw, escaped in (("<", "\\u003c"), (">", "\\u003e"), ("&", "\\u0026"),
                         ("\u2028", "\\u2028"), ("\u2029", "\\u2029")):
        text = text.replace(raw, escaped)
    return text


def _marshal(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _format_float(float(value), 1e-6)
    if isinstance(value, str):
        return _escape_html(json.dumps(value, ensure_ascii=False))
    if isinstance(value, list):
        return "[" + ",".join(_marshal(item) for item in value) + "]"
    if isinstance(value, dict):
        return "{" + ",".join(
            _marshal(key) + ":" + _marshal(value[key]) for key in sorted(value)
        ) + "}"
    raise TypeError(f"cannot encode {type(value).__name__}")


def _fmt(value: Any) -> str:
    """Render a decoded JSON value the way a %v verb would."""
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value, 1e-4)
    if isinstance(value, list):
        return "[" + " ".join(_fmt(item) for item in value) + "]"
    if isinstance(value, dict):
        return "map[" + " ".join(f"{key}:{_fmt(value[key])}" for key in sorted(value)) + "]"
    return str(value)


def sorted_json_bytes(data: Optional[RawJSON]) -> Optional[bytes]:
    """Concatenate JSON-encoded keys and values of an object in key order.

    Data that is not a JSON object is returned unchanged.
    """
    if data is None:
        return None
    try:
        parsed = _loads(data)
    except ValueError:
        parsed = None
    if not isinstance(parsed, dict):
        return bytes(data) if isinstance(data, (bytes, bytearray)) else data.encode("utf-8")
    return "".join(_marshal(key) + _marshal(parsed[key]) for key in sorted(parsed)).encode("utf-8")


def _time_json(moment: Optional[datetime]) -> str:
    if moment is None:
        return "0001-01-01T00:00:00Z"
    text = moment.isoformat()
    return text[:-6] + "Z" if text.endswith("+00:00") else text


@dataclass
class LegacyLog:
    """A token transfer log; ``data`` and ``extra_data`` hold raw JSON text."""

    hash: str = ""
    tx_hash: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    nonce: int = 0
    sender: str = ""
    to: str = ""
    value: int = 0
    data: Optional[RawJSON] = None
    extra_data: Optional[RawJSON] = None
    status: LegacyLogStatus = LegacyLogStatus.UNKNOWN

    def generate_unique_hash(self, chain_id: str) -> str:
        """Hash value, sorted data, tx hash and chain id into a 0x-prefixed id."""
        magnitude = abs(self.value or 0)
        value_bytes = magnitude.to_bytes((magnitude.bit_length() + 7) // 8, "big")
        buf = bytearray(value_bytes.rjust(32, b"\x00"))
        if self.data is not None:
            buf += sorted_json_bytes(self.data) or b""
        buf += _from_hex(self.tx_hash)
        buf += _from_hex(chain_id)
        return "0x" + keccak256(bytes(buf)).hex()

    def to_rounded(self, decimals: int) -> float:
        """Return the value divided by ``10 ** decimals`` as a float."""
        value = float(self.value or 0)
        if decimals == 0:
            return value
        return value / float(10 ** decimals)

    def update(self, other: LegacyLog) -> None:
        """Copy every field from ``other`` and stamp ``updated_at`` with now."""
        for item in dataclasses.fields(self):
            setattr(self, item.name, getattr(other, item.name))
        self.updated_at = datetime.now(timezone.utc)

    def _data_object(self) -> Optional[dict]:
        if self.data is None:
            return None
        try:
            parsed = _loads(self.data)
        except ValueError:
            return None
        return parsed if isinstance(parsed, dict) else None

    def get_pool_topic(self) -> Optional[str]:
        """Return ``<to>/<topic>`` in lower case, or None without a string topic."""
        data = self._data_object()
        if data is None:
            return None
        topic = data.get("topic")
        if not isinstance(topic, str):
            return None
        return f"{self.to}/{topic}".lower()

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form; raises ValueError if the raw JSON is invalid."""
        def raw(value: Optional[RawJSON]) -> Any:
            return None if value is None else json.loads(_as_text(value))

        return {
            "hash": self.hash,
            "tx_hash": self.tx_hash,
            "created_at": _time_json(self.created_at),
            "updated_at": _time_json(self.updated_at),
            "nonce": self.nonce,
            "sender": self.sender,
            "to": self.to,
            "value": self.value,
            "data": raw(self.data),
            "extra_data": raw(self.extra_data),
            "status": LegacyLogStatus(self.status).value,
        }

    def to_json(self) -> Optional[str]:
        """Serialise to JSON, or None when the log cannot be encoded."""
        try:
            return json.dumps(self.to_dict(), separators=(",", ":"))
        except (ValueError, TypeError):
            return None

    def to_ws_message(self, message_type: WSMessageType) -> Optional[WSMessageLog]:
        """Wrap the log for its pool, or None when it has no pool topic."""
        pool_topic = self.get_pool_topic()
        if pool_topic is None or self.to_json() is None:
            return None
        return WSMessageLog(
            pool_id=pool_topic,
            type=WSMessageType(message_type),
            id=self.hash,
            data_type=WSMessageDataType.LOG,
            data=dataclasses.replace(self),
        )

    def matches_query(self, query: str) -> bool:
        """True if any ``data.field=value`` parameter matches the log data."""
        if query == "":
            return True
        data = self._data_object()
        if data is None:
            return False
        for param in query.split("&"):
            key, sep, value = param.partition("=")
            if not sep or not key.startswith("data."):
                continue
            field = key[len("data."):]
            if field in data and _fmt(data[field]) == value:
                return True
        return False


@dataclass
class WSMessageLog:
    """A log announcement for one websocket pool."""

    pool_id: str
    type: WSMessageType
    id: str
    data_type: WSMessageDataType
    data: LegacyLog

    def to_dict(self) -> dict[str, Any]:
        return {
            "pool_id": self.pool_id,
            "type": self.type.value,
            "id": self.id,
            "data_type": self.data_type.value,
            "data": self.data.to_dict(),
        }