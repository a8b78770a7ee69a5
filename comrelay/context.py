"""Per-request values taken from the signature and address headers."""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional

SIGNATURE_HEADER = "X-Signature"
ADDRESS_HEADER = "X-Address"
APP_VERSION_HEADER = "X-App-Version"


class ContextKey(str, Enum):
    """Keys under which request values are stored."""

    ADDRESS = ADDRESS_HEADER
    SIGNATURE = SIGNATURE_HEADER


_address: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    ContextKey.ADDRESS.value, default=None
)
_signature: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    ContextKey.SIGNATURE.value, default=None
)


@contextmanager
def request_context(address: Optional[str] = None, signature: Optional[str] = None) -> Iterator[None]:
    """Make ``address`` and ``signature`` current for the enclosed block."""
    address_token = _address.set(address)
    signature_token = _signature.set(signature)
    try:
        yield
    finally:
        _signature.reset(signature_token)
        _address.reset(address_token)


def get_context_address() -> Optional[str]:
    """Return the current request's address, or None if there is none."""
    return _address.get()