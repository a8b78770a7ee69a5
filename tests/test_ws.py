import json
import queue
import threading
import time

from comrelay.legacylog import LegacyLog, WSMessageType
from comrelay.ws import ConnectionPool, ConnectionPools


class FakeConn:
    def __init__(self):
        self.inbox = queue.Queue()
        self.sent = []
        self.closed = threading.Event()
        self._cond = threading.Condition()

    def receive(self):
        return self.inbox.get()

    def send(self, data):
        if self.closed.is_set():
            raise ConnectionError("closed")
        with self._cond:
            self.sent.append(data)
            self._cond.notify_all()

    def close(self):
        if not self.closed.is_set():
            self.closed.set()
            self.inbox.put(None)

    def disconnect(self):
        self.inbox.put(None)

    def wait_sent(self, count, timeout=2.0):
        with self._cond:
            self._cond.wait_for(lambda: len(self.sent) >= count, timeout)
            return list(self.sent)


class BlockingConn(FakeConn):
    def __init__(self):
        super().__init__()
        self.release = threading.Event()

    def send(self, data):
        self.release.wait(5)


def wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def _start(pool):
    runner = threading.Thread(target=pool.run, daemon=True)
    runner.start()
    return runner


def test_pool_delivers_to_clients_of_query():
    pool = ConnectionPool("room")
    runner = _start(pool)
    a, b, other = FakeConn(), FakeConn(), FakeConn()
    pool.connect(a, "q=1")
    pool.connect(b, "q=1")
    pool.connect(other, "q=2")
    assert wait_until(lambda: pool.open_clients("q=1") == 2 and pool.open_clients("q=2") == 1)
    assert sorted(pool.queries()) == ["q=1", "q=2"]

    pool.broadcast_message("q=1", b"hello")
    assert a.wait_sent(1) == [b"hello"]
    assert b.wait_sent(1) == [b"hello"]
    assert other.sent == []

    pool.close()
    runner.join(2)
    assert not runner.is_alive()
    assert not pool.is_open()
    assert a.closed.is_set() and other.closed.is_set()


def test_last_client_leaving_closes_pool():
    pool = ConnectionPool("room")
    runner = _start(pool)
    conn = FakeConn()
    pool.connect(conn, "")
    assert wait_until(lambda: pool.open_clients("") == 1)
    conn.disconnect()
    runner.join(2)
    assert not runner.is_alive()
    assert not pool.is_open()
    assert pool.queries() == []
    assert conn.closed.is_set()


def test_one_client_leaving_keeps_query():
    pool = ConnectionPool("room")
    runner = _start(pool)
    first, second = FakeConn(), FakeConn()
    pool.connect(first, "q")
    pool.connect(second, "q")
    assert wait_until(lambda: pool.open_clients("q") == 2)
    first.disconnect()
    assert wait_until(lambda: pool.open_clients("q") == 1)
    assert pool.is_open()
    assert pool.queries() == ["q"]
    pool.broadcast_message("q", b"x")
    assert second.wait_sent(1) == [b"x"]
    pool.close()
    runner.join(2)
    assert not runner.is_alive()


def test_full_buffer_drops_client():
    pool = ConnectionPool("room")
    runner = _start(pool)
    conn = BlockingConn()
    pool.connect(conn, "q")
    assert wait_until(lambda: pool.open_clients("q") == 1)
    for _ in range(300):
        pool.broadcast_message("q", b"m")
    runner.join(3)
    conn.release.set()
    assert not runner.is_alive()
    assert not pool.is_open()
    assert conn.closed.is_set()


def _log(sender="alice"):
    return LegacyLog(hash="h1", to="0xAbC", data=json.dumps({"topic": "chat", "from": sender}))


def test_pools_broadcast_to_matching_queries():
    pools = ConnectionPools()
    match, skip = FakeConn(), FakeConn()
    pools.connect(match, "data.from=alice", "0xabc/chat")
    pools.connect(skip, "data.from=bob", "0xabc/chat")
    pool = pools.get_pool("0xabc/chat")
    assert wait_until(lambda: len(pool.queries()) == 2)

    pools.broadcast_message(WSMessageType.NEW, _log())
    sent = match.wait_sent(1)
    assert len(sent) == 1
    message = json.loads(sent[0])
    assert message["pool_id"] == "0xabc/chat"
    assert message["type"] == "new"
    assert message["id"] == "h1"
    assert message["data_type"] == "log"
    assert skip.sent == []
    pool.close()


def test_log_without_topic_is_not_broadcast():
    pools = ConnectionPools()
    conn = FakeConn()
    pools.connect(conn, "", "0xabc/chat")
    pool = pools.get_pool("0xabc/chat")
    assert wait_until(lambda: pool.open_clients("") == 1)
    pools.broadcast_message(WSMessageType.NEW, LegacyLog(hash="h", to="0xabc", data="{}"))
    time.sleep(0.05)
    assert conn.sent == []
    pool.close()


def test_closed_topic_gets_a_new_pool():
    pools = ConnectionPools()
    conn = FakeConn()
    pools.connect(conn, "", "topic")
    old = pools.get_pool("topic")
    assert wait_until(lambda: old.open_clients("") == 1)
    conn.disconnect()
    assert wait_until(lambda: not old.is_open())

    pools.connect(FakeConn(), "", "topic")
    new = pools.get_pool("topic")
    assert new is not old
    assert new.is_open()
    new.close()