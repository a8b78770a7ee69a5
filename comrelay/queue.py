"""Queued work items that can hand a single response back to the requester."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

DEFAULT_RESPONSE_TIMEOUT = 14.0


@dataclass
class MessageResponse:
    """The outcome of processing a message: data or an error."""

    data: Any = None
    error: Optional[BaseException] = None


class ResponseChannel:
    """A thread-safe channel that carries responses until it is closed."""

    def __init__(self) -> None:
        self._items: deque[MessageResponse] = deque()
        self._cond = threading.Condition()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, item: MessageResponse) -> None:
        """Queue a response; raises RuntimeError once the channel is closed."""
        with self._cond:
            if self._closed:
                raise RuntimeError("send on closed channel")
            self._items.append(item)
            self._cond.notify_all()

    def receive(self, timeout: Optional[float] = None) -> tuple[Optional[MessageResponse], bool]:
        """Return ``(item, True)``, or ``(None, False)`` when closed and drained.

        Raises TimeoutError if nothing arrives within ``timeout`` seconds.
        """
        with self._cond:
            if not self._cond.wait_for(lambda: self._items or self._closed, timeout):
                raise TimeoutError("request timeout")
            if self._items:
                return self._items.popleft(), True
            return None, False

    def close(self) -> None:
        """Close the channel; closing twice is harmless."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()


@dataclass
class Message:
    """A unit of queued work with an optional response channel."""

    id: str
    message: Any
    retry_count: int = 0
    response: Optional[ResponseChannel] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def respond(self, data: Any, error: Optional[BaseException] = None) -> None:
        """Send a response if anyone can still receive it."""
        if self.response is None:
            return
        try:
            self.response.send(MessageResponse(data=data, error=error))
        except RuntimeError:
            # The requester has gone away; forget the channel.
            self.response = None

    def wait_for_response(self, timeout: float = DEFAULT_RESPONSE_TIMEOUT) -> Any:
        """Block until a response arrives and return its data, raising its error.

        Raises TimeoutError after ``timeout`` seconds and RuntimeError when the
        channel was closed without a response. The channel is closed afterwards.
        """
        if self.response is None:
            raise ValueError("message has no response channel")
        try:
            item, ok = self.response.receive(timeout)
            if not ok or item is None:
                raise RuntimeError("response channel is closed")
            if item.error is not None:
                raise item.error
            return item.data
        finally:
            self.close()

    def close(self) -> None:
        """Close the response channel, if any."""
        if self.response is None:
            return
        self.response.close()


@dataclass
class UserOpMessage:
    """A signed event carrying a user operation for a given chain."""

    chain_id: int
    event: Any
    extra_data: Any = None

    def message_id(self) -> str:
        """Return the queue id ``userop:<chain id><event id>``."""
        event_id = self.event["id"] if isinstance(self.event, Mapping) else self.event.id
        return f"userop:{self.chain_id}{event_id}"


def new_message(
    message_id: str,
    message: Any,
    retry_count: int = 0,
    response: Optional[ResponseChannel] = None,
) -> Message:
    """Create a message stamped with the current time."""
    return Message(id=message_id, message=message, retry_count=retry_count, response=response)


def new_tx_message(chain_id: int, event: Any, extra_data: Any = None) -> Message:
    """Wrap a user-operation event in a message with a fresh response channel."""
    op = UserOpMessage(chain_id=chain_id, event=event, extra_data=extra_data)
    return new_message(op.message_id(), op, 0, ResponseChannel())