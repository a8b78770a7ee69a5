"""Ethereum-style hashing, address and secp256k1 key helpers."""

from __future__ import annotations

import binascii
import re

from Crypto.Hash import keccak as _keccak
from cryptography.hazmat.primitives.asymmetric import ec

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

ADDRESS_LENGTH = 20

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_BIG_HEX = re.compile(r"[+-]?[0-9a-fA-F]+")


def keccak256(data: bytes) -> bytes:
    """Return the Keccak-256 digest of ``data``."""
    digest = _keccak.new(digest_bits=256)
    digest.update(bytes(data))
    return digest.digest()


def _lenient_from_hex(text: str) -> bytes:
    """Decode hex leniently: optional 0x prefix, odd length padded, stop at the first bad pair."""
    if text[:2] in ("0x", "0X"):
        text = text[2:]
    if len(text) % 2:
        text = "0" + text
    out = bytearray()
    for pos in range(0, len(text), 2):
        pair = text[pos:pos + 2]
        if not set(pair) <= _HEX_DIGITS:
            break
        out.append(int(pair, 16))
    return bytes(out)


def hex_to_address(addr: str) -> bytes:
    """Turn a hex string into a 20-byte address, keeping the trailing bytes."""
    raw = _lenient_from_hex(addr)
    if len(raw) > ADDRESS_LENGTH:
        raw = raw[-ADDRESS_LENGTH:]
    return raw.rjust(ADDRESS_LENGTH, b"\x00")


def _checksum(address: bytes) -> str:
    lowered = address.hex()
    digest = keccak256(lowered.encode("ascii")).hex()
    chars = [
        ch.upper() if ch.isalpha() and int(digest[pos], 16) >= 8 else ch
        for pos, ch in enumerate(lowered)
    ]
    return "0x" + "".join(chars)


def is_same_hex_address(a: str, b: str) -> bool:
    """Compare two hex addresses case-insensitively."""
    return a.lower() == b.lower()


def checksum_address(addr: str) -> str:
    """Return the mixed-case checksummed form of ``addr``."""
    return _checksum(hex_to_address(addr))


def hex_to_big_int(hex_str: str) -> int:
    """Parse a base-16 integer; anything unparsable yields 0."""
    if not _BIG_HEX.fullmatch(hex_str):
        return 0
    return int(hex_str, 16)


def _decode_hex_strict(text: str) -> bytes:
    try:
        return binascii.unhexlify(text)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"invalid hex data: {exc}") from exc


def _to_private_key(raw: bytes) -> ec.EllipticCurvePrivateKey:
    if len(raw) * 8 != 256:
        raise ValueError("invalid length, need 256 bits")
    scalar = int.from_bytes(raw, "big")
    if scalar >= SECP256K1_N:
        raise ValueError("invalid private key, >=N")
    if scalar <= 0:
        raise ValueError("invalid private key, zero or negative")
    return ec.derive_private_key(scalar, ec.SECP256K1())


def hex_to_private_key(private_key_hex: str) -> ec.EllipticCurvePrivateKey:
    """Decode a hex-encoded 32-byte scalar into a secp256k1 private key."""
    return _to_private_key(_decode_hex_strict(private_key_hex))


def private_key_to_public_key(private_key_hex: str) -> str:
    """Return the decimal X coordinate of the public key for ``private_key_hex``."""
    key = hex_to_private_key(private_key_hex)
    return str(key.public_key().public_numbers().x)


def _address_from_public_key(public_key: ec.EllipticCurvePublicKey) -> str:
    numbers = public_key.public_numbers()
    raw = numbers.x.to_bytes(32, "big") + numbers.y.to_bytes(32, "big")
    return _checksum(keccak256(raw)[-ADDRESS_LENGTH:])


def generate_private_key() -> ec.EllipticCurvePrivateKey:
    """Generate a fresh secp256k1 private key."""
    return ec.generate_private_key(ec.SECP256K1())


def generate_hex_private_key() -> tuple[str, str]:
    """Generate a key and return its 64-char hex scalar and checksummed address."""
    key = generate_private_key()
    scalar = key.private_numbers().private_value
    return scalar.to_bytes(32, "big").hex(), _address_from_public_key(key.public_key())