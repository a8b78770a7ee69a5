"""AES-CFB encryption keyed by a secp256k1 private key scalar."""

from __future__ import annotations

import binascii
import os

from Crypto.Cipher import AES

from comrelay.crypto import hex_to_private_key

BLOCK_SIZE = 16


def generate_key() -> bytes:
    """Return 32 random bytes."""
    return os.urandom(32)


def _cipher_key(key: str) -> bytes:
    scalar = hex_to_private_key(key).private_numbers().private_value
    return scalar.to_bytes((scalar.bit_length() + 7) // 8, "big")


def _cipher(key_bytes: bytes, iv: bytes):
    return AES.new(key_bytes, AES.MODE_CFB, iv=iv, segment_size=128)


def encrypt(secret_value: str, key: str) -> str:
    """Encrypt ``secret_value`` and return hex of IV followed by ciphertext."""
    key_bytes = _cipher_key(key)
    iv = os.urandom(BLOCK_SIZE)
    ciphertext = _cipher(key_bytes, iv).encrypt(secret_value.encode("utf-8"))
    return (iv + ciphertext).hex()


def decrypt(encrypted_value: str, key: str) -> str:
    """Decrypt a value produced by :func:`encrypt`."""
    key_bytes = _cipher_key(key)
    try:
        raw = binascii.unhexlify(encrypted_value)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"invalid hex data: {exc}") from exc
    cipher_check = AES.new(key_bytes, AES.MODE_ECB)
    del cipher_check
    if len(raw) < BLOCK_SIZE:
        raise ValueError("ciphertext too short")
    iv, ciphertext = raw[:BLOCK_SIZE], raw[BLOCK_SIZE:]
    return _cipher(key_bytes, iv).decrypt(ciphertext).decode("utf-8", errors="replace")