"""Decoded event topics and the JSONB query helpers built on them."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from comrelay.crypto import checksum_address
from comrelay.event import Event

HashLike = Union[bytes, bytearray, str]

_WORD = 32
_INT_TYPE = re.compile(r"(u?int)(\d+)")
_FIXED_BYTES = re.compile(r"bytes(\d+)")
_SIGNED_DECIMAL = re.compile(r"[+-]?\d+")


def _to_hash(value: HashLike) -> bytes:
    """Normalise a topic hash to 32 bytes, left-padding or keeping the trailing bytes."""
    if isinstance(value, str):
        text = value[2:] if value[:2] in ("0x", "0X") else value
        if len(text) % 2:
            text = "0" + text
        raw = bytes.fromhex(text)
    else:
        raw = bytes(value)
    if len(raw) > _WORD:
        raw = raw[-_WORD:]
    return raw.rjust(_WORD, b"\x00")


def _parse_decimal(text: str) -> Optional[int]:
    return int(text) if _SIGNED_DECIMAL.fullmatch(text) else None


@dataclass
class Topic:
    """One named, typed value of a decoded event."""

    name: str
    type: str
    value: Any = None

    def convert_hash_to_value(self, hash_bytes: HashLike) -> None:
        """Set ``value`` from an indexed topic hash according to ``type``.

        Raises ValueError for types that cannot be read from a topic.
        """
        raw = _to_hash(hash_bytes)
        kind = self.type

        if kind == "bool":
            self.value = raw[31] != 0
            return
        if kind == "address":
            self.value = checksum_address("0x" + raw.hex())
            return
        if kind in ("string", "bytes"):
            # Dynamic values are only present as their hash.
            self.value = "0x" + raw.hex()
            return

        if kind.startswith("uint") or kind.startswith("int"):
            suffix = kind[len("uint"):] if kind.startswith("uint") else kind
            suffix = suffix[len("int"):] if suffix.startswith("int") else suffix
            bit_size = _parse_decimal(suffix)
            if bit_size is None:
                bit_size = 256
            value = int.from_bytes(raw, "big")
            if kind.startswith("int") and bit_size < 256:
                if bit_size <= 0:
                    raise ValueError(f"invalid integer type: {kind}")
                if (value >> (bit_size - 1)) & 1:
                    value &= (1 << bit_size) - 1
                    value = -value
            self.value = value
            return

        if kind.startswith("bytes"):
            size = _parse_decimal(kind[len("bytes"):])
            if size is None or not 0 <= size <= _WORD:
                raise ValueError(f"invalid bytes type: {kind}")
            self.value = raw[:size]
            return

        raise ValueError(f"unsupported type: {kind}")

    def json_value(self) -> Any:
        """Return ``value`` in a form that serialises cleanly to JSON."""
        return _json_value(self.value)


def _json_value(value: Any) -> Any:
    if isinstance(value, (bool, str)) or value is None:
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [_json_value(item) for item in value]
    return value


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)


class Topics(list):
    """An ordered list of :class:`Topic` values."""

    def __str__(self) -> str:
        return ", ".join(f"{topic.name}: {_format_value(topic.value)}" for topic in self)

    def to_dict(self) -> dict[str, Any]:
        """Map each named topic to its JSON-friendly value."""
        return {topic.name: topic.json_value() for topic in self if topic.name}

    def to_json(self) -> str:
        """Serialise :meth:`to_dict` with sorted keys."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    def generate_topic_query(self, start: int) -> tuple[str, list[Any]]:
        """Build ``data->>'name' = $n AND`` clauses numbered from ``start``."""
        clauses = "".join(
            f"data->>'{topic.name}' = ${number} AND "
            for number, topic in enumerate(self, start=start)
        )
        return f"\n\t\t{clauses}\n\t\t", [topic.value for topic in self]


@dataclass(frozen=True)
class _AbiType:
    kind: str
    size: int = 0
    elem: Optional[_AbiType] = None

    @property
    def dynamic(self) -> bool:
        if self.kind in ("bytes", "string", "slice"):
            return True
        return self.kind == "array" and self.elem is not None and self.elem.dynamic

    @property
    def head_size(self) -> int:
        if self.kind == "array" and not self.dynamic and self.elem is not None:
            return self.size * self.elem.head_size
        return _WORD


def _parse_abi_type(text: str) -> _AbiType:
    if text.endswith("]"):
        open_at = text.rfind("[")
        if open_at <= 0:
            raise ValueError(f"unsupported arg type: {text}")
        inner = text[open_at + 1:-1]
        elem = _parse_abi_type(text[:open_at])
        if inner == "":
            return _AbiType("slice", elem=elem)
        if not inner.isdigit():
            raise ValueError(f"unsupported arg type: {text}")
        return _AbiType("array", size=int(inner), elem=elem)

    if text in ("address", "bool", "string", "bytes"):
        return _AbiType(text)

    match = _INT_TYPE.fullmatch(text)
    if match:
        size = int(match.group(2))
        if size == 0 or size > 256 or size % 8:
            raise ValueError(f"unsupported arg type: {text}")
        return _AbiType(match.group(1), size=size)

    match = _FIXED_BYTES.fullmatch(text)
    if match:
        size = int(match.group(1))
        if not 1 <= size <= _WORD:
            raise ValueError(f"unsupported arg type: {text}")
        return _AbiType("fixed_bytes", size=size)

    raise ValueError(f"unsupported arg type: {text}")


def _word(data: bytes, pos: int) -> bytes:
    if pos < 0 or pos + _WORD > len(data):
        raise ValueError("abi: data too short to decode value")
    return data[pos:pos + _WORD]


def _uint_at(data: bytes, pos: int) -> int:
    return int.from_bytes(_word(data, pos), "big")


def _decode_scalar(typ: _AbiType, word: bytes) -> Any:
    if typ.kind == "uint":
        value = int.from_bytes(word, "big")
        if value >> typ.size:
            raise ValueError("abi: improperly encoded uint value")
        return value
    if typ.kind == "int":
        value = int.from_bytes(word, "big", signed=True)
        bound = 1 << (typ.size - 1)
        if not -bound <= value < bound:
            raise ValueError("abi: improperly encoded int value")
        return value
    if typ.kind == "bool":
        value = int.from_bytes(word, "big")
        if value not in (0, 1):
            raise ValueError("abi: improperly encoded boolean value")
        return bool(value)
    if typ.kind == "address":
        return checksum_address("0x" + word[12:].hex())
    if typ.kind == "fixed_bytes":
        return bytes(word[:typ.size])
    raise ValueError(f"unsupported arg type: {typ.kind}")


def _decode_at(typ: _AbiType, data: bytes, pos: int) -> Any:
    if typ.kind in ("bytes", "string"):
        length = _uint_at(data, pos)
        start = pos + _WORD
        if start + length > len(data):
            raise ValueError("abi: data too short to decode value")
        raw = bytes(data[start:start + length])
        return raw if typ.kind == "bytes" else raw.decode("utf-8", errors="replace")
    if typ.kind == "slice":
        assert typ.elem is not None
        count = _uint_at(data, pos)
        if count * typ.elem.head_size > len(data):
            raise ValueError("abi: data too short to decode value")
        return _decode_sequence([typ.elem] * count, data, pos + _WORD)
    if typ.kind == "array":
        assert typ.elem is not None
        return _decode_sequence([typ.elem] * typ.size, data, pos)
    return _decode_scalar(typ, _word(data, pos))


def _decode_sequence(types: Sequence[_AbiType], data: bytes, base: int) -> list[Any]:
    values = []
    pos = base
    for typ in types:
        if typ.dynamic:
            values.append(_decode_at(typ, data, base + _uint_at(data, pos)))
        else:
            values.append(_decode_at(typ, data, pos))
        pos += typ.head_size
    return values


def parse_topics_from_hashes(
    event: Optional[Event], topic_hashes: Sequence[HashLike], data: bytes
) -> Topics:
    """Decode an emitted log into topics using the event's signature.

    ``topic_hashes[0]`` is the event hash; indexed arguments are read from the
    following hashes and the rest are ABI-decoded from ``data``.
    """
    if event is None:
        raise ValueError("event is required")
    if not topic_hashes:
        raise ValueError("no topic hashes provided")

    name, args, arg_types = event.parse_event_signature()
    if not name or not args or not arg_types:
        raise ValueError("event name is required")

    topics = Topics([Topic(name="topic", type="bytes32", value=_to_hash(topic_hashes[0]))])

    if not event.construct_abi_from_event_signature():
        raise ValueError("event signature is empty or invalid")

    try:
        abi_types = [_parse_abi_type(arg_type.name) for arg_type in arg_types]
    except ValueError as exc:
        raise ValueError(f"failed to parse ABI from event signature: {exc}") from exc

    non_indexed = [
        (arg, abi_type)
        for arg, arg_type, abi_type in zip(args, arg_types, abi_types)
        if not arg_type.indexed
    ]
    data = bytes(data)
    if not data:
        if non_indexed:
            raise ValueError(
                "abi: attempting to unmarshal an empty string while arguments are expected"
            )
        unpacked: dict[str, Any] = {}
    else:
        values = _decode_sequence([abi_type for _, abi_type in non_indexed], data, 0)
        unpacked = {arg: value for (arg, _), value in zip(non_indexed, values)}

    indexed_position = 1
    for arg, arg_type in zip(args, arg_types):
        topic = Topic(name=arg, type=arg_type.name)
        if arg_type.indexed:
            if indexed_position >= len(topic_hashes):
                raise ValueError("not enough topic hashes for indexed arguments")
            topic.convert_hash_to_value(topic_hashes[indexed_position])
            indexed_position += 1
        else:
            topic.value = unpacked.get(arg)
        topics.append(topic)

    return topics


def parse_jsonb_filters(query: Mapping[str, Iterable[str]], prefix: str) -> dict[str, Any]:
    """Collect ``prefix.field=value`` query parameters into ``{field: first value}``."""
    filters: dict[str, Any] = {}
    for key, values in query.items():
        values = list(values)
        if key.startswith(prefix + ".") and values:
            _, _, field = key.partition(".")
            filters[field] = values[0]
    return filters


def generate_jsonb_query(prefix: str, start: int, data: Mapping[str, Any]) -> tuple[str, list[Any]]:
    """Build ``<prefix>data->>'key' = $n`` clauses joined by AND, numbered from ``start``."""
    clauses = [
        f"{prefix}data->>'{key}' = ${number}"
        for number, key in enumerate(data, start=start)
    ]
    return " AND ".join(clauses), list(data.values())