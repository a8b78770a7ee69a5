"""ERC-4337 user operations and related contract constants."""

from __future__ import annotations

import dataclasses
import json
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from comrelay.crypto import checksum_address, keccak256

FUNC_SIG_SINGLE = keccak256(b"execute(address,uint256,bytes)")[:4]
FUNC_SIG_BATCH = keccak256(b"executeBatch(address[],uint256[],bytes[])")[:4]
FUNC_SIG_SAFE_EXEC_FROM_MODULE = keccak256(
    b"execTransactionFromModule(address,uint256,bytes,uint8)"
)[:4]

IMPLEMENTATION_STORAGE_SLOT_KEY = (
    "0x360894a13ba1a3210667c828492db98dca3e2076cc3735a920a3ca505d382bbc"
)

_BIG = re.compile(r"0[xX](0|[1-9a-fA-F][0-9a-fA-F]*)")
_BYTES = re.compile(r"0[xX]([0-9a-fA-F]{2})*")

_BIG_FIELDS = (
    "nonce", "call_gas_limit", "verification_gas_limit", "pre_verification_gas",
    "max_fee_per_gas", "max_priority_fee_per_gas",
)
_BYTE_FIELDS = ("init_code", "call_data", "paymaster_and_data", "signature")
_KEYS = {
    "sender": "sender", "nonce": "nonce", "init_code": "initCode",
    "call_data": "callData", "call_gas_limit": "callGasLimit",
    "verification_gas_limit": "verificationGasLimit",
    "pre_verification_gas": "preVerificationGas", "max_fee_per_gas": "maxFeePerGas",
    "max_priority_fee_per_gas": "maxPriorityFeePerGas",
    "paymaster_and_data": "paymasterAndData", "signature": "signature",
}


def _encode_big(value: Optional[int]) -> str:
    value = value or 0
    return ("-0x" if value < 0 else "0x") + format(abs(value), "x")


def _decode_big(text: Any) -> Optional[int]:
    if not isinstance(text, str) or not _BIG.fullmatch(text):
        return None
    value = int(text[2:], 16)
    return value if value.bit_length() <= 256 else None


def _decode_bytes(text: Any) -> Optional[bytes]:
    if not isinstance(text, str) or not _BYTES.fullmatch(text):
        return None
    return bytes.fromhex(text[2:])


@dataclass
class UserOp:
    """A user operation; undecodable fields read from JSON are None."""

    sender: str = "0x" + "0" * 40
    nonce: Optional[int] = 0
    init_code: Optional[bytes] = b""
    call_data: Optional[bytes] = b""
    call_gas_limit: Optional[int] = 0
    verification_gas_limit: Optional[int] = 0
    pre_verification_gas: Optional[int] = 0
    max_fee_per_gas: Optional[int] = 0
    max_priority_fee_per_gas: Optional[int] = 0
    paymaster_and_data: Optional[bytes] = b""
    signature: Optional[bytes] = b""

    def to_dict(self) -> dict[str, str]:
        """Return the hex-encoded wire form."""
        out = {"sender": checksum_address(self.sender)}
        for name in _BIG_FIELDS:
            out[_KEYS[name]] = _encode_big(getattr(self, name))
        for name in _BYTE_FIELDS:
            out[_KEYS[name]] = "0x" + (getattr(self, name) or b"").hex()
        return {key: out[key] for key in _KEYS.values()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> UserOp:
        """Decode the wire form, leaving fields that fail to decode as None."""
        sender = data.get("sender", "")
        values: dict[str, Any] = {
            "sender": checksum_address(sender if isinstance(sender, str) else "")
        }
        for name in _BIG_FIELDS:
            values[name] = _decode_big(data.get(_KEYS[name], ""))
        for name in _BYTE_FIELDS:
            values[name] = _decode_bytes(data.get(_KEYS[name], ""))
        return cls(**values)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json(cls, text: str) -> UserOp:
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("user operation must be a JSON object")
        return cls.from_dict(data)

    def copy(self) -> UserOp:
        """Return an independent copy."""
        return dataclasses.replace(self)