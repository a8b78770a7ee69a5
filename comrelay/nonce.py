"""256-bit nonces made of a 64-bit sequence and a 192-bit key."""

from __future__ import annotations

import os
import time
from dataclasses import dataclass

_SEQ_MASK = (1 << 64) - 1
_KEY_RANDOM_MASK = (1 << 100) - 1


@dataclass
class Nonce:
    """A nonce split into its sequence and key parts."""

    seq: int
    key: int

    def to_int(self) -> int:
        """Combine key and sequence into one integer (key in the high bits)."""
        return (self.key << 64) | self.seq

    def to_hex(self) -> str:
        """Return the combined value as a 0x-prefixed hex quantity."""
        value = self.to_int()
        if value < 0:
            return "-0x" + format(-value, "x")
        return "0x" + format(value, "x")

    def __str__(self) -> str:
        return self.to_hex()


def new_nonce() -> Nonce:
    """Create a nonce with sequence 0 and a random key mixed with the current time."""
    key = int.from_bytes(os.urandom(24), "big")
    timestamp = int(time.time()) * 10**10
    key = (key & _KEY_RANDOM_MASK) | timestamp
    return Nonce(seq=0, key=key)


def parse_nonce(nonce: int) -> Nonce:
    """Split an integer nonce: the low 64 bits are the sequence, bits above 192 the key."""
    return Nonce(seq=nonce & _SEQ_MASK, key=nonce >> 192)