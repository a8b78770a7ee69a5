"""Websocket connection pools grouped by topic and by client query."""

from __future__ import annotations

import json
import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

log = logging.getLogger(__name__)

SEND_BUFFER = 256
PING_INTERVAL = 54.0

_REGISTER = "register"
_UNREGISTER = "unregister"
_STOP = "stop"


class Connection(Protocol):
    """The transport a client talks over.

    ``receive`` blocks until a message arrives and returns None (or raises)
    once the peer is gone; ``ping`` is optional.
    """

    def send(self, data: bytes) -> None: ...

    def receive(self) -> Optional[bytes]: ...

    def close(self) -> None: ...


def _safe_close(conn: Any) -> None:
    try:
        conn.close()
    except Exception:  # noqa: BLE001 - the connection may already be gone
        log.debug("error closing connection", exc_info=True)


@dataclass(eq=False)
class Client:
    """One connected client, its query and its outgoing buffer."""

    query: str
    conn: Any
    send: queue.Queue = field(default_factory=lambda: queue.Queue(maxsize=SEND_BUFFER))
    closed: threading.Event = field(default_factory=threading.Event)


class ConnectionPool:
    """Clients of one topic, grouped by the query they connected with."""

    def __init__(self, topic: str, ping_interval: float = PING_INTERVAL) -> None:
        self.topic = topic
        self.ping_interval = ping_interval
        self._clients: dict[str, dict[Client, bool]] = {}
        self._events: queue.Queue = queue.Queue()
        self._lock = threading.RLock()
        self._open = True

    def connect(self, conn: Any, query: str = "") -> Client:
        """Register a connection and start its read and write loops."""
        client = Client(query=query, conn=conn)
        self._events.put((_REGISTER, client))
        threading.Thread(target=self._read_pump, args=(client,), daemon=True).start()
        threading.Thread(target=self._write_pump, args=(client,), daemon=True).start()
        return client

    def _read_pump(self, client: Client) -> None:
        try:
            while True:
                try:
                    message = client.conn.receive()
                except Exception as exc:  # noqa: BLE001 - any failure ends the client
                    log.debug("read error: %s", exc)
                    break
                if message is None:
                    break
                log.debug("received message %r", message)
        finally:
            self._events.put((_UNREGISTER, client))
            _safe_close(client.conn)

    def _write_pump(self, client: Client) -> None:
        while True:
            try:
                message = client.send.get(timeout=self.ping_interval)
            except queue.Empty:
                if client.closed.is_set():
                    return
                ping = getattr(client.conn, "ping", None)
                if ping is not None:
                    try:
                        ping()
                    except Exception:  # noqa: BLE001
                        return
                continue
            if message is None:
                return
            try:
                client.conn.send(message)
            except Exception:  # noqa: BLE001
                return

    def _drop(self, client: Client) -> None:
        if client.closed.is_set():
            return
        client.closed.set()
        _safe_close(client.conn)
        try:
            client.send.put_nowait(None)
        except queue.Full:
            pass

    def run(self) -> None:
        """Process registrations until the last client leaves or the pool closes."""
        try:
            while True:
                kind, client = self._events.get()
                if kind == _STOP:
                    return
                with self._lock:
                    if kind == _REGISTER:
                        self._clients.setdefault(client.query, {})[client] = True
                        continue
                    members = self._clients.get(client.query)
                    if members is not None:
                        members[client] = False
                        if self.open_clients(client.query) == 0:
                            del self._clients[client.query]
                    self._drop(client)
                    if not self._clients:
                        return
        finally:
            self.close()

    def close(self) -> None:
        """Close the pool and every client still in it."""
        with self._lock:
            was_open = self._open
            self._open = False
            for members in self._clients.values():
                for client in members:
                    self._drop(client)
            self._clients.clear()
        if was_open:
            self._events.put((_STOP, None))

    def is_open(self) -> bool:
        return self._open

    def open_clients(self, query: str) -> int:
        """Count the open clients connected with ``query``."""
        with self._lock:
            return sum(1 for is_open in self._clients.get(query, {}).values() if is_open)

    def queries(self) -> list[str]:
        """Return every query with clients in the pool."""
        with self._lock:
            return list(self._clients)

    def broadcast_message(self, query: str, message: bytes) -> None:
        """Queue ``message`` for each open client of ``query``; full clients are dropped."""
        with self._lock:
            targets = [c for c, is_open in self._clients.get(query, {}).items() if is_open]
        for client in targets:
            try:
                client.send.put_nowait(message)
            except queue.Full:
                self._events.put((_UNREGISTER, client))


class ConnectionPools:
    """Pools keyed by topic, created on first connection."""

    def __init__(self) -> None:
        self._pools: dict[str, ConnectionPool] = {}
        self._lock = threading.Lock()

    def get_pool(self, topic: str) -> Optional[ConnectionPool]:
        """Return the pool for ``topic``, if one has been created."""
        with self._lock:
            return self._pools.get(topic)

    def connect(self, conn: Any, query: str, topic: str) -> Client:
        """Connect to ``topic``, starting a new pool if there is no open one."""
        with self._lock:
            pool = self._pools.get(topic)
            if pool is None or not pool.is_open():
                pool = ConnectionPool(topic)
                self._pools[topic] = pool
                threading.Thread(target=pool.run, daemon=True).start()
            return pool.connect(conn, query)

    def broadcast_message(self, message_type: Any, creator: Any) -> None:
        """Send ``creator``'s message to every matching query of its pool."""
        wsm = creator.to_ws_message(message_type)
        if wsm is None:
            return
        try:
            payload = json.dumps(wsm.to_dict(), separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError):
            return
        with self._lock:
            pool = self._pools.get(wsm.pool_id)
            if pool is None or not pool.is_open():
                return
            for query in pool.queries():
                if creator.matches_query(query):
                    pool.broadcast_message(query, payload)