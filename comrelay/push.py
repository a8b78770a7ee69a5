"""Push notification messages about received transfers."""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

PUSH_MESSAGE_SENDING_ANONYMOUS_DESCRIPTION_TITLE = "Receiving %s %s (%s)..."
PUSH_MESSAGE_SENDING_ANONYMOUS_DESCRIPTION_BODY = "%s"
PUSH_MESSAGE_SENDING_ANONYMOUS_TITLE = "%s"
PUSH_MESSAGE_SENDING_ANONYMOUS_BODY = "Receiving %s %s..."

PUSH_MESSAGE_ANONYMOUS_DESCRIPTION_TITLE = "%s %s (%s) received"
PUSH_MESSAGE_ANONYMOUS_DESCRIPTION_BODY = "%s"
PUSH_MESSAGE_ANONYMOUS_TITLE = "%s"
PUSH_MESSAGE_ANONYMOUS_BODY = "%s %s received"

PUSH_MESSAGE_TITLE = "%s - %s"
PUSH_MESSAGE_BODY = "%s %s received from %s"


@dataclass
class PushToken:
    """A device push token belonging to an account."""

    token: str
    account: str


@dataclass
class PushMessage:
    """A notification addressed to a set of device tokens."""

    tokens: list[PushToken] = field(default_factory=list)
    title: str = ""
    body: str = ""
    data: Optional[bytes] = None
    silent: bool = False


def _encode_tx(tx: Any) -> Optional[bytes]:
    try:
        to_dict = getattr(tx, "to_dict", None)
        if callable(to_dict):
            payload = to_dict()
        elif dataclasses.is_dataclass(tx) and not isinstance(tx, type):
            payload = dataclasses.asdict(tx)
        else:
            payload = tx
        return json.dumps(payload, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError):
        return None


def new_anonymous_push_message(
    tokens: Sequence[PushToken], community: str, amount: str, symbol: str, tx: Any
) -> PushMessage:
    """Notify of a received amount without naming the sender."""
    return PushMessage(
        tokens=list(tokens),
        title=PUSH_MESSAGE_ANONYMOUS_TITLE % community,
        body=PUSH_MESSAGE_ANONYMOUS_BODY % (amount, symbol),
        data=_encode_tx(tx),
        silent=False,
    )


def new_silent_push_message(tokens: Sequence[PushToken], tx: Any) -> PushMessage:
    """A data-only notification carrying the encoded transaction."""
    return PushMessage(tokens=list(tokens), data=_encode_tx(tx), silent=True)


def new_push_message(
    tokens: Sequence[PushToken],
    community: str,
    name: str,
    amount: str,
    symbol: str,
    username: str,
) -> PushMessage:
    """Notify of a received amount, naming the sender."""
    return PushMessage(
        tokens=list(tokens),
        title=PUSH_MESSAGE_TITLE % (community, name),
        body=PUSH_MESSAGE_BODY % (amount, symbol, username),
    )