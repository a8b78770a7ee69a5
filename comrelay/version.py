"""The relay's version and the handler that reports it."""

from __future__ import annotations

from comrelay.jsonrpc import HttpReply, body

VERSION = "0.0.0"


class VersionService:
    """Answers version requests."""

    def current(self) -> HttpReply:
        """Return the standard reply envelope holding the current version."""
        try:
            return body({"version": VERSION})
        except (TypeError, ValueError):
            return HttpReply(body=b"", status=500)