"""Post short status messages to a chat webhook."""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from dataclasses import dataclass

_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


class WebhookError(Exception):
    """The webhook did not accept a message."""


def _encode(content: str) -> bytes:
    text = json.dumps({"content": content}, separators=(",", ":"), ensure_ascii=False)
    for raw, escaped in _ESCAPES:
        text = text.replace(raw, escaped)
    return text.encode("utf-8")


@dataclass
class Messager:
    """Sends messages tagged with the server name; does nothing when disabled."""

    base_url: str
    server_name: str
    enabled: bool = True
    timeout: float = 10.0

    def _post(self, content: str) -> None:
        if not self.enabled:
            return
        request = urllib.request.Request(
            self.base_url,
            data=_encode(content),
            method="POST",
            headers={"Content-Type": "application/json"},
        )
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                status = response.status
        except urllib.error.HTTPError as exc:
            status = exc.code
            exc.close()
        if status != 200:
            raise WebhookError("error sending message")

    def notify(self, message: str) -> None:
        """Post a plain message."""
        self._post(f"[{self.server_name}] {message}")

    def notify_warning(self, error: BaseException) -> None:
        """Post an error as a warning."""
        self._post(f"[{self.server_name}] warning: {error}")

    def notify_error(self, error: BaseException) -> None:
        """Post an error."""
        self._post(f"[{self.server_name}] error: {error}")