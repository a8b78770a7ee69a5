"""Contract events described by a human-readable signature."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from comrelay.crypto import keccak256

_INDEX_TOPIC_PREFIX = "index_topic_"
_INDEXED = "indexed"
_ZERO_HASH = bytes(32)


@dataclass(frozen=True)
class ArgType:
    """The Solidity type of one event argument and whether it is indexed."""

    name: str
    indexed: bool = False


@dataclass
class Event:
    """An event a contract emits, keyed by its signature."""

    chain_id: str = ""
    contract: str = ""
    topic: str = ""
    alias: str = ""
    event_signature: str = ""
    name: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def parse_event_signature(self) -> tuple[str, list[str], list[ArgType]]:
        """Split the signature into the event name, argument names and argument types.

        Accepts ``Transfer(address from, address to, uint256 value)``,
        ``Transfer(address,address,uint256)``, ``indexed`` markers before or after
        the type, and ``index_topic_N`` prefixes. Unnamed arguments are named
        after their position.
        """
        if not self.event_signature:
            return "", [], []

        head, sep, rest = self.event_signature.partition("(")
        if not sep:
            return "", [], []

        event_name = head.strip()
        if not event_name:
            return "", [], []

        arg_names: list[str] = []
        arg_types: list[ArgType] = []

        raw_args = rest[:-1] if rest.endswith(")") else rest
        for position, arg in enumerate(raw_args.split(",")):
            fields = arg.split()
            if not fields:
                continue

            indexed = False
            if fields[0].startswith(_INDEX_TOPIC_PREFIX):
                indexed = True
                fields = fields[1:]

            if len(fields) >= 2 and _INDEXED in fields[:2]:
                indexed = True
                if fields[0] == _INDEXED:
                    fields = fields[1:]
                else:
                    fields = fields[:1] + fields[2:]

            if len(fields) == 2:
                arg_type, arg_name = fields
            elif len(fields) == 1:
                arg_type, arg_name = fields[0], str(position)
            else:
                continue

            if arg_type:
                arg_names.append(arg_name)
                arg_types.append(ArgType(name=arg_type, indexed=indexed))

        return event_name, arg_names, arg_types

    def get_topic0_from_event_signature(self) -> bytes:
        """Return the 32-byte topic 0 hash, or 32 zero bytes for an unusable signature."""
        name, _, arg_types = self.parse_event_signature()
        if not name or not arg_types:
            return _ZERO_HASH
        canonical = f"{name}({','.join(arg.name for arg in arg_types)})"
        return keccak256(canonical.encode("utf-8"))

    def construct_abi_from_event_signature(self) -> str:
        """Build a one-event JSON ABI from the signature.

        Raises ValueError when the signature has no name or no arguments.
        """
        name, args, arg_types = self.parse_event_signature()
        if not name or not args or not arg_types:
            raise ValueError("event name is required")

        for position, arg_type in enumerate(arg_types):
            if not arg_type.name:
                raise ValueError(f"argument type at index {position} is empty")

        inputs = ",".join(
            '{"name":"%s","type":"%s","indexed":%s}'
            % (arg, arg_type.name, "true" if arg_type.indexed else "false")
            for arg, arg_type in zip(args, arg_types)
        )
        return '[{"name":"%s","type":"event","inputs":[%s]}]' % (name, inputs)

    def is_valid_data(self, data: Mapping[str, Any]) -> bool:
        """True when ``data`` has exactly the argument names plus ``topic``."""
        _, arg_names, _ = self.parse_event_signature()
        if len(data) != len(arg_names) + 1:
            return False
        if "topic" not in data:
            return False
        return all(name in data for name in arg_names)